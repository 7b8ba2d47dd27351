"""Event listener Cog for RulesBot.

Handles the bot lifecycle (on_ready starts the rule-post scheduler and the
status server) and replies to messages that mention the bot.
"""

from __future__ import annotations

import re

import discord
from discord.ext import commands

from rulesbot.posting.rule_message import (
    ViewAllRulesView,
    build_all_rules_message,
    build_random_rule_message,
    send_rule_message,
)
from rulesbot.runtime import BotRuntime
from rulesbot.util.logger import get_logger

logger = get_logger("events_listener_cog")

HINT = "I didn't understand your message. Try \"Tell me a random rule\" or \"Tell me all rules\"."


def strip_mentions(content: str, user_id: int) -> str:
    """Remove ``<@id>`` and ``<@!id>`` mentions of ``user_id`` from message text."""
    return re.sub(rf"<@!?{user_id}>", "", content)


class EventsListenerCog(commands.Cog):
    """Cog containing bot lifecycle and mention handlers."""

    def __init__(self, discord_bot_instance, runtime: BotRuntime):
        self.bot = discord_bot_instance
        self.runtime = runtime
        self._started = False
        logger.info("Events listener cog loaded")

    @commands.Cog.listener(name="on_ready")
    async def on_ready(self):
        """Set the presence and start background work once per process.

        on_ready fires again after reconnects, so the scheduler, the status
        server and the persistent button view are only started the first time.
        """
        if self.bot.user:
            logger.info("Bot connected as %s (ID: %s)", self.bot.user, self.bot.user.id)
        else:
            logger.warning("Bot partially connected, but user information not yet available.")

        await self.runtime.update_presence()

        if self._started:
            return
        self._started = True

        self.bot.add_view(ViewAllRulesView(self.runtime.rules))
        await self.runtime.status_server.listen(int(self.runtime.config.get_value("listeningPort")))
        self.runtime.scheduler.start(self.bot)

    @commands.Cog.listener(name="on_message")
    async def on_message(self, message: discord.Message):
        """Reply to mentions with all rules, a random rule or a hint."""
        if message.author.bot or self.bot.user is None:
            return
        if self.bot.user not in message.mentions:
            return

        text = strip_mentions(message.content, self.bot.user.id).lower()
        if "rules" in text:
            reply = build_all_rules_message(self.runtime.rules)
            await send_rule_message(message.channel, reply, self.runtime.rules)
            title = reply.title
        elif "rule" in text:
            reply = build_random_rule_message(self.runtime.rules, self.runtime.config)
            await send_rule_message(message.channel, reply, self.runtime.rules)
            title = reply.title
        else:
            await message.channel.send(HINT)
            title = "hints"

        channel = getattr(message.channel, "name", message.channel.id)
        logger.info(
            'Posted %s to #%s in response to "%s" from @%s',
            title,
            channel,
            message.content,
            message.author.name,
        )


def setup(discord_bot_instance, runtime: BotRuntime):
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance, runtime))
