"""Scheduler that keeps a rule visible in every selected channel.

On each pass the scheduler walks the text channels of every guild the bot is
in and posts a random rule to each selected channel where none of the last
``rulePosts.postEveryMsgs`` messages came from the bot. The pause between
passes is re-read from ``rulePosts.checkEverySecs`` every time, so config
changes apply from the next pass.
"""

from __future__ import annotations

import asyncio
from typing import Any, Sequence, Union

import discord

from rulesbot.configuration.config_schema import ALL_CHANNELS
from rulesbot.configuration.config_store import ConfigStore
from rulesbot.posting.rule_message import build_random_rule_message, send_rule_message
from rulesbot.rules.rule_document import RuleDocument
from rulesbot.util.discord_utils import iter_postable_channels
from rulesbot.util.logger import get_logger

logger = get_logger("rule_post_scheduler")

DEFAULT_INTERVAL_SECONDS = 60.0


def is_channel_selected(channel_name: str, selection: Union[str, Sequence[str], None]) -> bool:
    """True when ``selection`` is the ``all`` sentinel or lists ``channel_name``."""
    if selection == ALL_CHANNELS:
        return True
    return isinstance(selection, (list, tuple)) and channel_name in selection


def describe_selection(selection: Union[str, Sequence[str], None]) -> str:
    if isinstance(selection, (list, tuple)):
        return ", ".join(f"#{name}" for name in selection)
    return f"{selection} channels"


class RulePostScheduler:
    """
    Background task that posts rules into quiet-on-rules channels.

    Args:
        config: Live configuration store.
        document: Live rules document.
        rng: Optional random source passed to rule selection.
    """

    def __init__(self, config: ConfigStore, document: RuleDocument, rng: Any = None) -> None:
        self._config = config
        self._document = document
        self._rng = rng
        self._task: asyncio.Task | None = None

    def get_interval(self) -> float:
        return float(self._config.get_value("rulePosts.checkEverySecs", DEFAULT_INTERVAL_SECONDS))

    async def _bot_posted_recently(self, channel: discord.TextChannel, bot_user_id: int) -> bool:
        limit = int(self._config.get_value("rulePosts.postEveryMsgs", 1))
        logger.debug("[RULE POSTS] Loading last %d messages from #%s", limit, channel.name)
        async for message in channel.history(limit=limit):
            if message.author.id == bot_user_id:
                return True
        return False

    async def check_channel(self, channel: discord.TextChannel, bot_user_id: int) -> bool:
        """Post a rule to ``channel`` if it qualifies. Returns True when a rule was posted."""
        if not is_channel_selected(channel.name, self._config.get_value("rulePosts.channels")):
            logger.debug("[RULE POSTS] Skipping unmatched channel #%s", channel.name)
            return False

        min_members = int(self._config.get_value("rulePosts.minMembers", 0))
        member_count = len(channel.members)
        if member_count < min_members:
            logger.debug("[RULE POSTS] Skipping channel #%s with only %d members", channel.name, member_count)
            return False

        if await self._bot_posted_recently(channel, bot_user_id):
            logger.debug("[RULE POSTS] Found recent rule message in #%s", channel.name)
            return False

        message = build_random_rule_message(self._document, self._config, self._rng)
        await send_rule_message(channel, message, self._document)
        logger.info("[RULE POSTS] Posted %s to #%s", message.title, channel.name)
        return True

    async def check_all_channels(self, bot: discord.Bot) -> int:
        """Run one pass over every guild. Returns the number of rules posted."""
        if bot.user is None:
            logger.debug("[RULE POSTS] Bot user not available yet; skipping check")
            return 0

        posted = 0
        for guild in bot.guilds:
            for channel in iter_postable_channels(guild):
                try:
                    if await self.check_channel(channel, bot.user.id):
                        posted += 1
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    logger.warning("[RULE POSTS] Failed to check channel #%s: %s", channel.name, exc)
        return posted

    async def _run_loop(self, bot: discord.Bot) -> None:
        logger.info(
            "[RULE POSTS] Checking if rule posts needed in %s every %.0f seconds",
            describe_selection(self._config.get_value("rulePosts.channels")),
            self.get_interval(),
        )
        try:
            while True:
                try:
                    await self.check_all_channels(bot)
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    logger.error("[RULE POSTS] Unexpected error during check: %s", exc)
                await asyncio.sleep(self.get_interval())
        except asyncio.CancelledError:
            logger.info("[RULE POSTS] Periodic check cancelled")
            raise

    def start(self, bot: discord.Bot) -> None:
        """Start the background task if not already running."""
        if self._task and not self._task.done():
            logger.warning("[RULE POSTS] Post task already running")
            return
        self._task = asyncio.create_task(self._run_loop(bot))

    async def shutdown(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("[RULE POSTS] Scheduler shutdown complete")
