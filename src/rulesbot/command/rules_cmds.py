"""``rules`` admin command: edit the rules document."""

from __future__ import annotations

from typing import List

from rulesbot.command.command_registry import CommandContext, CommandHandler
from rulesbot.util.logger import get_logger

logger = get_logger("rules_cmds")

USAGE = (
    "rules\n"
    "    Update rules"
)

EDITOR_UNAVAILABLE = "Rules can only be edited from Discord; this session cannot open the editor."


def too_long_message(length: int, limit: int) -> str:
    return (
        f"The rules are {length} characters long but the editor holds at most {limit}, "
        "so they cannot be edited here without losing rules. Edit the rules file on the server instead."
    )


class RulesHandler(CommandHandler):
    """Open the rules editor pre-filled with the current document."""

    def __init__(self) -> None:
        super().__init__("rules", USAGE)

    async def handle(self, args: List[str], context: CommandContext) -> str:
        if args:
            return USAGE

        if context.open_rules_editor is None:
            return EDITOR_UNAVAILABLE

        text = context.rules.format()
        limit = context.editor_max_length
        if limit is not None and len(text) > limit:
            logger.warning("[RULES CMDS] Rules are %d characters, too long for the %d character editor", len(text), limit)
            return too_long_message(len(text), limit)

        await context.open_rules_editor(text)
        logger.debug("[RULES CMDS] Opened rules editor")
        return "Opening dialog to edit rules..."
