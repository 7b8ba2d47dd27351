"""
Value and schema types for the persisted bot configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

ConfigValue = Union[str, int, List[str]]
"""Every leaf in the config tree is a string, an integer or a list of strings."""

NAME_DELIMITER = "."
STRING_ARRAY_DELIMITER = "; "


class ValueKind(Enum):
    """Validation rule applied to a config path."""

    PRESENCE = "presence"
    STRING_ARRAY = "stringArray"
    INT = "int"


@dataclass(frozen=True, slots=True)
class ValidatorEntry:
    """Schema rule for one dotted config path.

    Attributes:
        path: Dotted path the rule applies to, e.g. ``rulePosts.minMembers``.
        description: Human readable meaning, used in "is required" messages.
        kind: Which validation rule applies.
        required: Whether a missing or empty value is an error.
        minimum: Inclusive lower bound for ``INT`` values.
        maximum: Inclusive upper bound for ``INT`` values, ``None`` for unbounded.
        special_value: Plain string accepted in place of a ``STRING_ARRAY``.
    """

    path: str
    description: str
    kind: ValueKind
    required: bool = True
    minimum: int = 0
    maximum: Optional[int] = None
    special_value: Optional[str] = None


def config_value_to_string(value: ConfigValue) -> str:
    """Render a value the way it is typed in commands: arrays as ``[ a; b ]``."""
    if isinstance(value, list):
        return "[ " + STRING_ARRAY_DELIMITER.join(str(v) for v in value) + " ]"
    return str(value)
