"""
Error taxonomy shared by the rule document, the config store and the commands.

Validation and lookup failures are carried as values inside
:class:`~rulesbot.datatypes.result_datatypes.Err`; only startup parse failures
and storage write failures are raised.
"""

from __future__ import annotations


class RulesBotError(Exception):
    """Base class for all RulesBot errors. ``str(error)`` is user-facing text."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ParseError(RulesBotError):
    """The outline document is empty or malformed."""


class ValidationError(RulesBotError):
    """A config value failed its schema rule."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path


class NotFoundError(RulesBotError):
    """An unknown config path or command name was requested."""

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(message or f"Unknown name: {name}")
        self.name = name


class PersistenceError(RulesBotError):
    """Writing the rules or config file to disk failed."""
