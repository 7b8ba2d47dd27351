"""``config`` admin command: inspect and change the persisted configuration."""

from __future__ import annotations

from typing import List

from rulesbot.command.command_registry import CommandContext, CommandHandler
from rulesbot.datatypes.config_datatypes import config_value_to_string
from rulesbot.datatypes.errors import NotFoundError
from rulesbot.datatypes.result_datatypes import Err
from rulesbot.util.logger import get_logger

logger = get_logger("config_cmds")

USAGE_ALL = (
    "config\n"
    "    Display all config items"
)
USAGE_GET = (
    "config get <name>\n"
    "    Get a config item\n"
    "    name - name of the config item"
)
USAGE_SET = (
    "config set <name> <value>\n"
    "    Set a config item\n"
    "    name - name of the config item\n"
    "    value - value to assign the config item; arrays should be specified in the form: [ item1; item2 ]"
)


def bad_name_message(name: str, usage: str) -> str:
    return f"Invalid config name specified: {name}\n\n{usage}"


class ConfigHandler(CommandHandler):
    """Dump, read or write config items by dotted name."""

    def __init__(self) -> None:
        super().__init__("config", "\n".join((USAGE_ALL, USAGE_GET, USAGE_SET)))

    async def handle(self, args: List[str], context: CommandContext) -> str:
        if not args:
            return context.config.format_all()

        cmd, *rest = args
        name = rest[0] if rest else ""
        values = rest[1:]

        if cmd == "get":
            return self._get(name, context)
        if cmd == "set":
            return await self._set(name, values, context)
        return f"Invalid config sub-command: {cmd}"

    def _get(self, name: str, context: CommandContext) -> str:
        if not name:
            return USAGE_GET

        result = context.config.get(name)
        if isinstance(result, Err):
            return bad_name_message(name, USAGE_GET)
        return f"{name} is {config_value_to_string(result.value)}"

    async def _set(self, name: str, values: List[str], context: CommandContext) -> str:
        if not name or not values:
            return USAGE_SET

        result = await context.config.set(name, " ".join(values))
        if isinstance(result, Err):
            if isinstance(result.error, NotFoundError):
                return bad_name_message(name, USAGE_SET)
            return result.message

        return f"Set {name} to {config_value_to_string(result.value)}"
