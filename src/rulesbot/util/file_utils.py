"""Locked reads and atomic writes for the rules and config files."""

from __future__ import annotations

import fcntl
import os
import tempfile
from pathlib import Path

from rulesbot.datatypes.errors import PersistenceError


def read_text_locked(path: Path) -> str:
    """Read ``path`` as UTF-8 while holding a shared ``fcntl`` lock."""
    with path.open("r", encoding="utf-8") as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_SH)
        try:
            return f.read()
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)


def write_text_atomic(path: Path, contents: str) -> None:
    """Replace ``path`` with ``contents`` in a single rename.

    The text is written to a temporary file in the target directory and
    renamed into place, so readers never observe a half-written file.

    Raises
    ------
    PersistenceError
        If the directory, the temporary file or the rename fails.
    """
    temp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=str(path.parent), prefix=f".{path.name}.", delete=False
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(contents)
        os.replace(temp_path, path)
    except OSError as exc:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise PersistenceError(f"Failed to write {path.name}: {exc}") from exc
