"""
Process-wide state of the running bot, built once at startup and handed to
the cogs, the console and the scheduler explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import discord

from rulesbot.command.command_registry import CommandContext, CommandRegistry
from rulesbot.command.config_cmds import ConfigHandler
from rulesbot.command.logs_cmds import LogsHandler
from rulesbot.command.post_cmds import PostHandler
from rulesbot.command.rules_cmds import RulesHandler
from rulesbot.configuration.config_store import ConfigStore
from rulesbot.rules.rule_document import RuleDocument
from rulesbot.scheduler.rule_post_scheduler import RulePostScheduler
from rulesbot.util.discord_utils import find_text_channel
from rulesbot.util.logger import get_logger
from rulesbot.web.status_server import StatusServer

logger = get_logger("runtime")


def build_registry() -> CommandRegistry:
    """Admin commands in the order their usage is listed."""
    return CommandRegistry([LogsHandler(), ConfigHandler(), RulesHandler(), PostHandler()])


@dataclass
class BotRuntime:
    """Everything the admin surface and the background tasks share."""

    config: ConfigStore
    rules: RuleDocument
    registry: CommandRegistry
    scheduler: RulePostScheduler
    status_server: StatusServer
    bot: Optional[discord.Bot] = None

    @classmethod
    def create(cls, config: ConfigStore, rules: RuleDocument) -> "BotRuntime":
        return cls(
            config=config,
            rules=rules,
            registry=build_registry(),
            scheduler=RulePostScheduler(config, rules),
            status_server=StatusServer(config),
        )

    async def find_channel(self, name: str) -> Any:
        if self.bot is None:
            return None
        return find_text_channel(self.bot.guilds, name)

    def command_context(
        self,
        open_rules_editor: Optional[Callable[[str], Awaitable[None]]] = None,
        editor_max_length: Optional[int] = None,
    ) -> CommandContext:
        return CommandContext(
            config=self.config,
            rules=self.rules,
            open_rules_editor=open_rules_editor,
            editor_max_length=editor_max_length,
            find_channel=self.find_channel if self.bot is not None else None,
        )

    async def update_presence(self, app_name: Any = None) -> None:
        if self.bot is None or self.bot.user is None:
            return
        name = app_name if app_name is not None else self.config.get_value("appName", "")
        await self.bot.change_presence(
            activity=discord.Activity(type=discord.ActivityType.watching, name=f"{name} | the rules")
        )

    def register_change_listeners(self) -> None:
        """React to config changes that need more than a re-read."""
        self.config.register_change_listener("appName", self.update_presence)
        self.config.register_change_listener("listeningPort", self.status_server.listen)
        self.config.register_change_listener(
            "token",
            lambda _token: logger.warning("[RUNTIME] Bot token changed; restart the bot for it to take effect"),
        )
