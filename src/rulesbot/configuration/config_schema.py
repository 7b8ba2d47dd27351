"""
Fixed schema for the bot configuration.

Each recognised dotted path has a :class:`ValidatorEntry`. Paths whose values
are not plain strings also have a parser that turns the raw command-line text
into a typed value before validation. Both return explicit results so command
handlers can reply with the failure message directly.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Mapping

from rulesbot.datatypes.config_datatypes import (
    NAME_DELIMITER,
    ConfigValue,
    ValidatorEntry,
    ValueKind,
)
from rulesbot.datatypes.errors import NotFoundError, ValidationError
from rulesbot.datatypes.result_datatypes import Err, Ok, Result

ALL_CHANNELS = "all"
ONE_WEEK_SECONDS = 60 * 60 * 24 * 7

_INT_PATTERN = re.compile(r"^[+-]?\d+$")

_MISSING = object()


VALIDATORS: Dict[str, ValidatorEntry] = {
    entry.path: entry
    for entry in (
        ValidatorEntry(
            path="token",
            description="the Discord bot token",
            kind=ValueKind.PRESENCE,
        ),
        ValidatorEntry(
            path="appName",
            description="the Discord app/bot name",
            kind=ValueKind.PRESENCE,
        ),
        ValidatorEntry(
            path="rulePosts.channels",
            description="the channels in which to post",
            kind=ValueKind.STRING_ARRAY,
            special_value=ALL_CHANNELS,
        ),
        ValidatorEntry(
            path="rulePosts.minMembers",
            description="the minimum number of members required within a channel in order to post rules",
            kind=ValueKind.INT,
            minimum=0,
        ),
        ValidatorEntry(
            path="rulePosts.checkEverySecs",
            description="the frequency at which to check for the need to post a rule, in seconds",
            kind=ValueKind.INT,
            minimum=1,
            maximum=ONE_WEEK_SECONDS,
        ),
        ValidatorEntry(
            path="rulePosts.postEveryMsgs",
            description="the number of messages after which to post a rule",
            kind=ValueKind.INT,
            minimum=1,
            maximum=10000,
        ),
        ValidatorEntry(
            path="rulePosts.footers",
            description="the footers to select from to add to posted rules",
            kind=ValueKind.STRING_ARRAY,
            required=False,
        ),
        ValidatorEntry(
            path="listeningPort",
            description="the HTTP listening port of the status endpoint",
            kind=ValueKind.INT,
            minimum=1,
            maximum=65536,
        ),
    )
}


# -------------------- Parsers --------------------

def parse_int(path: str, raw: str) -> Result[ConfigValue]:
    """Parse a whole number such as ``"42"`` or ``"-3"``."""
    text = raw.strip()
    if not _INT_PATTERN.match(text):
        return Err(ValidationError(path, f'"{path}" must be an integer'))
    return Ok(int(text))


def parse_string_array(path: str, raw: str) -> Result[ConfigValue]:
    """Parse ``[ a; b; c ]`` into ``["a", "b", "c"]``.

    Text that is not wrapped in brackets passes through unchanged so that
    sentinel values such as ``all`` reach the validator as plain strings.
    """
    if raw.startswith("[") and raw.endswith("]"):
        return Ok([item.strip() for item in raw[1:-1].split(";")])
    return Ok(raw)


PARSERS: Dict[str, Callable[[str, str], Result[ConfigValue]]] = {
    "rulePosts.channels": parse_string_array,
    "rulePosts.minMembers": parse_int,
    "rulePosts.checkEverySecs": parse_int,
    "rulePosts.postEveryMsgs": parse_int,
    "rulePosts.footers": parse_string_array,
    "listeningPort": parse_int,
}


# -------------------- Validators --------------------

def _is_missing(value: Any) -> bool:
    return value is _MISSING or value is None


def _validate_present(entry: ValidatorEntry, value: Any) -> Result[ConfigValue]:
    # Falsy values ("", 0, []) count as absent, matching how the file is edited by hand
    if _is_missing(value) or not value:
        return Err(ValidationError(entry.path, f'"{entry.path}" ({entry.description}) is required'))
    return Ok(value)


def _validate_string_array(entry: ValidatorEntry, value: Any) -> Result[ConfigValue]:
    if entry.required:
        present = _validate_present(entry, value)
        if isinstance(present, Err):
            return present
    elif _is_missing(value):
        return Ok(value)

    if entry.special_value is not None and value == entry.special_value:
        return Ok(value)

    if not isinstance(value, list):
        if entry.special_value is not None:
            expected = f'either be "{entry.special_value}" or an array'
        else:
            expected = "be an array"
        return Err(ValidationError(entry.path, f'"{entry.path}" must {expected}'))

    for item in value:
        if not isinstance(item, str):
            return Err(
                ValidationError(
                    entry.path,
                    f'"{entry.path}" should be an array of strings, but encountered non-string value "{item}"',
                )
            )
    return Ok(value)


def _validate_int(entry: ValidatorEntry, value: Any) -> Result[ConfigValue]:
    if entry.required:
        # Zero is a legitimate bound for some paths, so only absence is checked here
        if _is_missing(value):
            return Err(ValidationError(entry.path, f'"{entry.path}" ({entry.description}) is required'))
    elif _is_missing(value):
        return Ok(value)

    if isinstance(value, bool) or not isinstance(value, int):
        return Err(ValidationError(entry.path, f'"{entry.path}" must be an integer'))

    maximum = entry.maximum
    if value < entry.minimum or (maximum is not None and value > maximum):
        upper = "Infinity" if maximum is None else str(maximum)
        return Err(ValidationError(entry.path, f'"{entry.path}" must be in the range {entry.minimum} - {upper}'))
    return Ok(value)


_VALIDATE_BY_KIND = {
    ValueKind.PRESENCE: _validate_present,
    ValueKind.STRING_ARRAY: _validate_string_array,
    ValueKind.INT: _validate_int,
}


def validate_value(path: str, value: Any) -> Result[ConfigValue]:
    """Check ``value`` against the schema rule for ``path``."""
    entry = VALIDATORS.get(path)
    if entry is None:
        return Err(NotFoundError(path, f"Invalid config name specified: {path}"))
    return _VALIDATE_BY_KIND[entry.kind](entry, value)


def parse_value(path: str, raw: str) -> Result[ConfigValue]:
    """Turn command-line text into the typed value for ``path`` and validate it."""
    if path not in VALIDATORS:
        return Err(NotFoundError(path, f"Invalid config name specified: {path}"))

    parser = PARSERS.get(path)
    if parser is not None:
        parsed = parser(path, raw)
        if isinstance(parsed, Err):
            return parsed
        value: ConfigValue = parsed.value
    else:
        value = raw

    return validate_value(path, value)


def lookup(data: Mapping[str, Any], path: str) -> Any:
    """Walk ``data`` along ``path``; returns a private sentinel when a step is missing."""
    node: Any = data
    for part in path.split(NAME_DELIMITER):
        if not isinstance(node, Mapping) or part not in node:
            return _MISSING
        node = node[part]
    return node


def validate_config(data: Mapping[str, Any]) -> list[ValidationError]:
    """Validate every schema path of a loaded config tree.

    Returns
    -------
    list[ValidationError]
        One error per failing path, empty when the tree is valid.
    """
    errors: list[ValidationError] = []
    for path in VALIDATORS:
        result = validate_value(path, lookup(data, path))
        if isinstance(result, Err) and isinstance(result.error, ValidationError):
            errors.append(result.error)
    return errors
