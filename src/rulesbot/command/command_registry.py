"""
Minimal command dispatch for the admin surface.

Callers split the incoming text into a command name and arguments, look the
name up in a :class:`CommandRegistry` and await the handler's reply. When no
handler matches, :meth:`CommandRegistry.usage` is the reply.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from rulesbot.configuration.config_store import ConfigStore
from rulesbot.rules.rule_document import RuleDocument
from rulesbot.util.logger import get_logger

logger = get_logger("command_registry")


@dataclass
class CommandContext:
    """State and transport hooks handed to every command handler.

    Attributes:
        config: The live configuration store.
        rules: The live rules document.
        open_rules_editor: Opens an editor pre-filled with the given document
            text. ``None`` when the transport cannot show one (e.g. the console).
        find_channel: Resolves a channel name to a sendable channel, or ``None``.
        editor_max_length: Most characters the editor can hold, ``None`` for no limit.
    """

    config: ConfigStore
    rules: RuleDocument
    open_rules_editor: Optional[Callable[[str], Awaitable[None]]] = None
    editor_max_length: Optional[int] = None
    find_channel: Optional[Callable[[str], Awaitable[Any]]] = None


class CommandHandler(ABC):
    """Base class for admin commands.

    Args:
        name: Word that selects this handler, matched case-sensitively.
        usage: Help text shown when the command is misused or not found.
    """

    def __init__(self, name: str, usage: str) -> None:
        self.name = name
        self.usage = usage

    @abstractmethod
    async def handle(self, args: List[str], context: CommandContext) -> str:
        """Run the command and return the plain-text reply."""


class CommandRegistry:
    """Ordered collection of command handlers."""

    def __init__(self, handlers: Sequence[CommandHandler] = ()) -> None:
        self.handlers: List[CommandHandler] = []
        for handler in handlers:
            self.add(handler)

    def add(self, handler: CommandHandler) -> None:
        """Append a handler. A second handler with the same name is never found."""
        if self.find(handler.name) is not None:
            logger.warning("[COMMANDS] Handler '%s' is already registered; the new one is unreachable", handler.name)
        self.handlers.append(handler)

    def find(self, name: str) -> Optional[CommandHandler]:
        return next((handler for handler in self.handlers if handler.name == name), None)

    def usage(self) -> str:
        return "".join(handler.usage + "\n\n" for handler in self.handlers)

    async def dispatch(self, text: str, context: CommandContext) -> str:
        """Split ``text`` on single spaces and run the matching handler.

        Falls back to the aggregated usage when no handler matches.
        """
        name, *args = text.split(" ")
        handler = self.find(name)
        if handler is None:
            return self.usage()
        return await handler.handle(args, context)
