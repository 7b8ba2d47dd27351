from __future__ import annotations

import asyncio
import copy
import inspect
import random
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import yaml

from rulesbot.configuration import config_schema
from rulesbot.datatypes.config_datatypes import (
    NAME_DELIMITER,
    ConfigValue,
    config_value_to_string,
)
from rulesbot.datatypes.errors import NotFoundError, PersistenceError, ValidationError
from rulesbot.datatypes.result_datatypes import Err, Ok, Result
from rulesbot.util.file_utils import read_text_locked, write_text_atomic
from rulesbot.util.logger import get_logger

logger = get_logger("config_store")

ChangeListener = Callable[[ConfigValue], Union[None, Awaitable[None]]]


class ConfigStore:
    """YAML-backed nested configuration addressed by dotted paths.

    Values are read with :meth:`get` and written with :meth:`set`, which parses
    command-line text into a typed value, validates it against
    :mod:`rulesbot.configuration.config_schema`, persists the whole tree and
    notifies the change listener registered for the path.

    Writes are persisted before they are applied in memory, so a failed write
    leaves the in-memory tree and the file in agreement. Concurrent writes are
    not serialised; the last one to reach the disk wins there.
    """

    def __init__(self, config_path: Path, data: Optional[Dict[str, Any]] = None) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = data if data is not None else {}
        self._listeners: Dict[str, ChangeListener] = {}

    # --------------------------
    # Loading
    # --------------------------
    @classmethod
    def load(cls, config_path: Path) -> "ConfigStore":
        """Load and validate the config file.

        Raises
        ------
        PersistenceError
            If the file cannot be read or is not a YAML mapping.
        ValidationError
            If any schema path holds an invalid value; the first failure is raised
            after every failure has been logged.
        """
        try:
            data = yaml.safe_load(read_text_locked(config_path))
        except FileNotFoundError as exc:
            logger.error("[CONFIG STORE] Config file %s not found.", config_path)
            raise PersistenceError(f"Config file {config_path} not found") from exc
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[CONFIG STORE] Failed to load config %s: %s", config_path, exc)
            raise PersistenceError(f"Failed to load config {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise PersistenceError(f"Config file {config_path} must contain a mapping")

        errors = config_schema.validate_config(data)
        for error in errors:
            logger.error("[CONFIG STORE] %s", error)
        if errors:
            raise errors[0]

        logger.info("[CONFIG STORE] Loaded configuration from %s", config_path)
        return cls(config_path, data)

    # --------------------------
    # Read path
    # --------------------------
    @property
    def data(self) -> Dict[str, Any]:
        """The live configuration tree. Callers should not mutate it."""
        return self._data

    def get(self, path: str) -> Result[ConfigValue]:
        """Look up the leaf value at ``path``.

        A missing step, a scalar where a nested mapping is expected, or a
        mapping at the end of the path all yield ``Err(NotFoundError)``.
        """
        node: Any = self._data
        for part in path.split(NAME_DELIMITER):
            if not isinstance(node, dict) or part not in node or node[part] is None:
                return Err(NotFoundError(path, f"Invalid config name specified: {path}"))
            node = node[part]

        if isinstance(node, dict):
            return Err(NotFoundError(path, f"Invalid config name specified: {path}"))
        return Ok(node)

    def get_value(self, path: str, default: Any = None) -> Any:
        """Convenience accessor returning ``default`` instead of a result."""
        result = self.get(path)
        return result.value if isinstance(result, Ok) else default

    def format_all(self) -> str:
        """Render every leaf as ``full.dotted.path: value`` lines."""
        lines: list[str] = []

        def walk(node: Dict[str, Any], prefix: str) -> None:
            for key, value in node.items():
                if isinstance(value, dict):
                    walk(value, f"{prefix}{key}{NAME_DELIMITER}")
                else:
                    lines.append(f"{prefix}{key}: {config_value_to_string(value)}\n")

        walk(self._data, "")
        return "".join(lines)

    def pick_random_footer(self, rng: Any = None) -> str:
        """Return a random entry of ``rulePosts.footers``, or ``""`` when none are set."""
        footers = self.get_value("rulePosts.footers")
        if not isinstance(footers, list) or not footers:
            return ""
        rng = rng or random
        return footers[rng.randrange(len(footers))]

    # --------------------------
    # Change listeners
    # --------------------------
    def register_change_listener(self, path: str, listener: ChangeListener) -> None:
        """Call ``listener`` with the new value whenever ``path`` changes.

        Each path holds a single listener; registering another replaces it.
        """
        if path in self._listeners:
            logger.debug("[CONFIG STORE] Replacing change listener for %s", path)
        self._listeners[path] = listener

    async def _notify(self, path: str, value: ConfigValue) -> None:
        listener = self._listeners.get(path)
        if listener is None:
            return
        outcome = listener(value)
        if inspect.isawaitable(outcome):
            await outcome

    # --------------------------
    # Write path
    # --------------------------
    def _serialise(self, data: Dict[str, Any]) -> str:
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, indent=4)

    @staticmethod
    def _assign(data: Dict[str, Any], path: str, value: ConfigValue) -> Any:
        *parents, last = path.split(NAME_DELIMITER)
        node = data
        for part in parents:
            if not isinstance(node.get(part), dict):
                node[part] = {}
            node = node[part]
        previous = node.get(last)
        node[last] = value
        return previous

    async def set(self, path: str, raw: str) -> Result[ConfigValue]:
        """Parse, validate, persist and apply a new value for ``path``.

        Returns
        -------
        Result[ConfigValue]
            ``Ok`` with the typed value that was stored, ``Err(NotFoundError)``
            for an unknown path or ``Err(ValidationError)`` when the value is
            rejected. Nothing is changed on failure.

        Raises
        ------
        PersistenceError
            If the file could not be written. The in-memory tree is unchanged.
        """
        result = config_schema.parse_value(path, raw)
        if isinstance(result, Err):
            if isinstance(result.error, ValidationError):
                logger.info("[CONFIG STORE] Rejected value for %s: %s", path, result.error)
            return result
        value = result.value

        staged = copy.deepcopy(self._data)
        self._assign(staged, path, value)
        try:
            await asyncio.to_thread(write_text_atomic, self.config_path, self._serialise(staged))
        except PersistenceError:
            logger.error("[CONFIG STORE] Failed to persist %s to %s", path, self.config_path)
            raise

        # Re-applied to the live tree so writes that landed during the await are kept
        previous = self._assign(self._data, path, value)
        logger.info("[CONFIG STORE] Set %s to %s", path, config_value_to_string(value))

        if value != previous:
            try:
                await self._notify(path, value)
            except Exception:
                logger.exception("[CONFIG STORE] Change listener for %s failed", path)

        return Ok(value)
