"""Parsing, rendering and random selection for the rules outline document.

The outline is plain text with one rule per line and children indented
beneath their parent using spaces::

    Workplace Rules
      1. Be respectful
      2. No spam
      Conduct
        a. Don't shout
        b. Don't interrupt

Indentation is relative: a line is a child of the line above it whenever it is
indented further, so any consistent step width works. Blank lines are ignored.
"""

from __future__ import annotations

import asyncio
import random
from pathlib import Path
from typing import Protocol

from rulesbot.datatypes.errors import ParseError, PersistenceError
from rulesbot.datatypes.result_datatypes import Err, Ok, Result
from rulesbot.datatypes.rule_datatypes import RuleNode
from rulesbot.util.file_utils import read_text_locked, write_text_atomic
from rulesbot.util.logger import get_logger

logger = get_logger("rule_document")

INDENT_STEP = 2
"""Spaces added per nesting level when rendering a document."""

SECTION_MARKER = "."
"""Second character shared by numbered or lettered list items ("1.", "a.")."""

MIN_GRANDCHILDREN_TO_DESCEND = 3
"""A child needs at least this many children of its own for a pick to drill into its parent."""

EMPTY_DOCUMENT_MESSAGE = "At least one rule is required"


class RandomSource(Protocol):
    def randrange(self, stop: int) -> int: ...


def get_indent(line: str) -> int:
    """Count leading spaces. Tabs are not treated as indentation."""
    return len(line) - len(line.lstrip(" "))


class _LineCursor:
    """Shared read position over the non-blank lines of a document."""

    def __init__(self, lines: list[str]) -> None:
        self._lines = lines
        self._position = 0

    def peek_indent(self) -> int | None:
        if self._position >= len(self._lines):
            return None
        return get_indent(self._lines[self._position])

    def take(self) -> str | None:
        if self._position >= len(self._lines):
            return None
        line = self._lines[self._position]
        self._position += 1
        return line


def _parse_node(cursor: _LineCursor, parent_indent: int) -> RuleNode | None:
    line = cursor.take()
    if line is None:
        return None

    children: list[RuleNode] = []
    while True:
        next_indent = cursor.peek_indent()
        if next_indent is None or next_indent <= parent_indent:
            break

        child = _parse_node(cursor, next_indent)
        if child is None:
            break
        children.append(child)

    return RuleNode.branch(line.strip(), children)


def parse_rules(text: str) -> RuleNode | None:
    """Parse outline text into a rule tree.

    Parameters
    ----------
    text:
        Raw document text.

    Returns
    -------
    RuleNode | None
        The root rule (the first non-blank line and everything indented under
        it), or ``None`` when the text holds no non-blank lines.
    """
    lines = [line for line in text.split("\n") if line.strip()]
    return _parse_node(_LineCursor(lines), 0)


def is_section(children: tuple[RuleNode, ...]) -> bool:
    """True when every title looks like a list item ("1. ...", "b. ...")."""
    return all(len(child.title) >= 2 and child.title[1] == SECTION_MARKER for child in children)


def format_rule(rule: RuleNode, indent: int = 0) -> str:
    """Render a rule and its descendants back to outline text.

    Children that all look like list items are rendered back to back; any
    other group of children is separated from its parent and from each other
    by blank lines.
    """
    output = " " * indent + rule.title + "\n"

    if not rule.is_leaf:
        section = is_section(rule.children)
        if not section:
            output += "\n"

        last_index = len(rule.children) - 1
        for index, child in enumerate(rule.children):
            output += format_rule(child, indent + INDENT_STEP)
            if not section and index < last_index:
                output += "\n"

    return output


def pick_random_rule(rule: RuleNode, rng: RandomSource | None = None) -> RuleNode:
    """Pick a random, self-contained part of the document to show.

    Leaves are returned as-is. When none of a rule's children has at least
    ``MIN_GRANDCHILDREN_TO_DESCEND`` children of its own, the rule itself is
    returned so a short list is shown whole under its heading. Otherwise one
    child is drawn uniformly and the pick continues inside it.

    Parameters
    ----------
    rule:
        Node to pick from, usually the document root.
    rng:
        Source of randomness with a ``randrange`` method. Defaults to the
        ``random`` module; pass ``random.Random(seed)`` for repeatable picks.
    """
    rng = rng or random
    node = rule
    while not node.is_leaf:
        if all(child.child_count < MIN_GRANDCHILDREN_TO_DESCEND for child in node.children):
            return node
        node = node.children[rng.randrange(len(node.children))]
    return node


class RuleDocument:
    """The live rules document and the file it is stored in.

    The tree is only ever replaced whole: :meth:`update` validates the new
    text, writes it to disk and then swaps the root, so readers always see
    either the previous or the new document.
    """

    def __init__(self, root: RuleNode, path: Path) -> None:
        self._root = root
        self.path = path

    @classmethod
    def from_text(cls, text: str, path: Path) -> "RuleDocument":
        """Build a document from text, raising ParseError when it holds no rules."""
        root = parse_rules(text)
        if root is None:
            raise ParseError(EMPTY_DOCUMENT_MESSAGE)
        return cls(root, path)

    @classmethod
    def load(cls, path: Path) -> "RuleDocument":
        """Read and parse the rules file at startup.

        Raises
        ------
        ParseError
            If the file cannot be read or contains no rules.
        """
        try:
            text = read_text_locked(path)
        except OSError as exc:
            raise ParseError(f"Failed to read rules file {path}: {exc}") from exc

        document = cls.from_text(text, path)
        logger.info(
            "[RULE DOCUMENT] Loaded \"%s\" with %d top-level rules from %s",
            document.root.title,
            document.root.child_count,
            path,
        )
        return document

    @property
    def root(self) -> RuleNode:
        return self._root

    def format(self) -> str:
        return format_rule(self._root)

    def pick_random(self, rng: RandomSource | None = None) -> RuleNode:
        return pick_random_rule(self._root, rng)

    async def update(self, text: str) -> Result[RuleNode]:
        """Replace the document with ``text`` after validating and persisting it.

        Returns ``Err(ParseError)`` and keeps the current tree when the text
        holds no rules.

        Raises
        ------
        PersistenceError
            If the rules file could not be written; the current tree is kept.
        """
        new_root = parse_rules(text or "")
        if new_root is None:
            logger.warning("[RULE DOCUMENT] Rejected rules update without any rules")
            return Err(ParseError(EMPTY_DOCUMENT_MESSAGE))

        try:
            await asyncio.to_thread(write_text_atomic, self.path, text)
        except PersistenceError:
            logger.error("[RULE DOCUMENT] Failed to persist rules to %s", self.path)
            raise

        self._root = new_root
        logger.info("[RULE DOCUMENT] Rules updated; root \"%s\"", new_root.title)
        return Ok(new_root)
