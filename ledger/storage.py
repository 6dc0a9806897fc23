"""Key-value persistence backends for the ledger."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Optional, Protocol

from .exceptions import PersistenceError

KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class KeyValueStore(Protocol):
    """String key to string value store, e.g. browser-style local storage."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """Dictionary-backed store, useful for tests and embedding."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class FileStore:
    """File-based store keeping one file per key under ``base_path`` with crash-safe writes."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Unable to create storage directory {self._base_path}") from exc

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        temp_path = path.with_name(path.name + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
            # Atomic on POSIX; readers never observe a half-written file.
            temp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write to {path}") from exc

    def _path_for(self, key: str) -> Path:
        if not KEY_PATTERN.fullmatch(key):
            raise PersistenceError(f"Invalid storage key: {key!r}")
        return self._base_path / key

    @property
    def base_path(self) -> Path:
        return self._base_path
