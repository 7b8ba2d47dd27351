"""
Explicit success/failure values.

Operations that can fail for user-facing reasons (validation, unknown names,
rejected document updates) return ``Ok(value)`` or ``Err(error)`` instead of
raising, so command handlers can turn failures into replies without unwinding.

Example:
    >>> from rulesbot.configuration.config_schema import parse_int
    >>> result = parse_int("rulePosts.minMembers", "12")
    >>> if isinstance(result, Ok):
    ...     result.value
    12
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from rulesbot.datatypes.errors import RulesBotError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying ``value``."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err:
    """Failed outcome carrying a typed ``error``."""

    error: RulesBotError

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return str(self.error)


Result = Union[Ok[T], Err]
