"""
Admin cog: the ``/admin`` slash command.

The command text is dispatched through the runtime's command registry, e.g.
``/admin command:config set rulePosts.minMembers 5``. Only server
administrators may use it and replies are ephemeral so configuration does not
leak into public channels. ``/admin command:rules`` opens a modal holding the
whole rules document for editing.
"""

from __future__ import annotations

import io

import discord
from discord.ext import commands

from rulesbot.datatypes.errors import PersistenceError
from rulesbot.datatypes.result_datatypes import Err
from rulesbot.rules.rule_document import RuleDocument
from rulesbot.runtime import BotRuntime
from rulesbot.util.discord_utils import MESSAGE_LIMIT, has_permissions
from rulesbot.util.logger import get_logger

logger = get_logger("admin_cmds")

EDITOR_PLACEHOLDER = "Root rule\n  Rule 1\n  Rule 2\n    Rule a\n    Rule b"
EDITOR_MAX_LENGTH = 4000


class RulesEditorModal(discord.ui.Modal):
    """Multi-line editor that replaces the rules document on submit."""

    def __init__(self, document: RuleDocument, initial_text: str) -> None:
        super().__init__(title="Update Rules")
        self.document = document
        self.rules_input = discord.ui.InputText(
            label="Rules",
            style=discord.InputTextStyle.long,
            placeholder=EDITOR_PLACEHOLDER,
            value=initial_text,
            min_length=1,
            max_length=EDITOR_MAX_LENGTH,
        )
        self.add_item(self.rules_input)

    async def callback(self, interaction: discord.Interaction) -> None:
        user = getattr(interaction.user, "name", "unknown")
        try:
            result = await self.document.update(self.rules_input.value or "")
        except PersistenceError as exc:
            logger.error("Failed to save rules submitted by @%s: %s", user, exc)
            await interaction.response.send_message(f"Failed to save rules: {exc}", ephemeral=True)
            return

        if isinstance(result, Err):
            await interaction.response.send_message(result.message, ephemeral=True)
            return

        await interaction.response.send_message("Rules updated.", ephemeral=True)
        logger.info("Updated rules submitted by @%s", user)


class AdminCog(commands.Cog):
    """Administrative command surface backed by the command registry."""

    def __init__(self, discord_bot_instance, runtime: BotRuntime):
        self.discord_bot_instance = discord_bot_instance
        self.runtime = runtime
        logger.info("[ADMIN CMDS] Admin cog loaded")

    async def _check_permissions(self, ctx: discord.ApplicationContext) -> bool:
        if not ctx.guild_id:
            await ctx.respond("This command can only be used in a server.", ephemeral=True)
            return False
        if not has_permissions(ctx, administrator=True):
            await ctx.respond("Sorry, you must be a server admin to use this command", ephemeral=True)
            return False
        return True

    async def _send_reply(self, ctx: discord.ApplicationContext, reply: str) -> None:
        reply = reply or "(no output)"
        if len(reply) <= MESSAGE_LIMIT:
            await ctx.respond(reply, ephemeral=True)
            return

        file_buffer = io.BytesIO(reply.encode("utf-8"))
        file_buffer.seek(0)
        await ctx.respond(
            content="The reply is too long for a message; it is attached instead.",
            file=discord.File(fp=file_buffer, filename="reply.txt"),
            ephemeral=True,
        )

    @commands.slash_command(
        name="admin",
        description="Run a RulesBot admin command (run with no command for help).",
    )
    async def admin(self, ctx: discord.ApplicationContext, command: str = ""):
        """Dispatch ``command`` to the matching admin handler."""
        user = getattr(ctx.author, "name", "unknown")
        channel = getattr(ctx.channel, "name", "unknown")
        command_info = f'admin command "{command}" from @{user} in #{channel}'

        if not await self._check_permissions(ctx):
            logger.warning("Non-admin user tried to use %s", command_info)
            return

        editor_opened = False

        async def open_rules_editor(text: str) -> None:
            nonlocal editor_opened
            await ctx.send_modal(RulesEditorModal(self.runtime.rules, text))
            editor_opened = True

        # A modal must be the first response, so only other commands are deferred
        if command.split(" ")[0] != "rules":
            await ctx.defer(ephemeral=True)

        try:
            reply = await self.runtime.registry.dispatch(
                command, self.runtime.command_context(open_rules_editor, EDITOR_MAX_LENGTH)
            )
        except PersistenceError as exc:
            logger.error("Failed to handle %s: %s", command_info, exc)
            await ctx.respond(f"Failed to save: {exc}", ephemeral=True)
            return

        if not editor_opened:
            await self._send_reply(ctx, reply)
        logger.info("Handled %s", command_info)


def setup(discord_bot_instance, runtime: BotRuntime):
    discord_bot_instance.add_cog(AdminCog(discord_bot_instance, runtime))
