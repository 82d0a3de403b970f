"""Persistence utilities for the earnings ledger."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .exceptions import PersistenceError


class JSONStorage:
    """Simple file-based key-value text storage with crash-safe writes.

    Each key maps to one file under ``base_path``. The store does not parse
    what it holds; callers decide how to treat malformed content.
    """

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        self._base_path.mkdir(parents=True, exist_ok=True)

    def load(self, key: str) -> Optional[str]:
        path = self._base_path / key
        if not path.exists():
            return None
        try:
            # Undecodable bytes surface as malformed text, not as an error.
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

    def save(self, key: str, text: str) -> None:
        path = self._base_path / key
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                handle.write(text)
                handle.flush()
            # Use replace for atomic move on POSIX; ensures crash-safe persistence.
            temp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write to {path}") from exc

    @property
    def base_path(self) -> Path:
        return self._base_path
