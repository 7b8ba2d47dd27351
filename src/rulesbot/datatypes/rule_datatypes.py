"""
Tree node for the rules outline document.

A node is a titled heading; its children are the indented lines beneath it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple


@dataclass(frozen=True, slots=True)
class RuleNode:
    """A single rule (or rule heading) in the outline.

    Attributes:
        title: Trimmed single-line title, never empty.
        children: Nested rules in document order, or ``None`` for a leaf.
            An empty sequence is normalized to ``None`` so that a stored
            children tuple always holds at least one node.
    """

    title: str
    children: Optional[Tuple["RuleNode", ...]] = None

    def __post_init__(self) -> None:
        if self.children is not None:
            children = tuple(self.children)
            object.__setattr__(self, "children", children or None)

    @classmethod
    def branch(cls, title: str, children: Iterable["RuleNode"]) -> "RuleNode":
        return cls(title=title, children=tuple(children))

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    @property
    def child_count(self) -> int:
        return len(self.children) if self.children else 0
