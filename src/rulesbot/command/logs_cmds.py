"""``logs`` admin command: tail the current session log."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, List

from rulesbot.command.command_registry import CommandContext, CommandHandler
from rulesbot.util.logger import get_log_filepath

USAGE = (
    "logs [count]\n"
    "    Displays the most recent logs\n"
    "    count (optional) - a positive integer of the number of logs to display"
)
DEFAULT_LOG_COUNT = 10


def tail_lines(path: Path, count: int) -> str:
    """Return the last ``count`` non-empty lines of ``path``."""
    lines = [line for line in path.read_text(encoding="utf-8").split("\n") if line]
    return "\n".join(lines[-count:])


class LogsHandler(CommandHandler):
    def __init__(self, log_path: Callable[[], Path] = get_log_filepath) -> None:
        super().__init__("logs", USAGE)
        self._log_path = log_path

    async def handle(self, args: List[str], context: CommandContext) -> str:
        count = DEFAULT_LOG_COUNT

        if args:
            if len(args) != 1 or not args[0].isdigit():
                return USAGE
            count = int(args[0])
            if count <= 0:
                return USAGE

        path = self._log_path()
        if not path.exists():
            return "No logs have been written yet."
        return await asyncio.to_thread(tail_lines, path, count)
