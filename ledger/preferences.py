"""Theme preference stored next to the ledger in the same key-value store."""

from __future__ import annotations

import logging
from enum import Enum

from .exceptions import PersistenceError
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

THEME_KEY = "theme"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class ThemePreference:
    def __init__(self, store: KeyValueStore, key: str = THEME_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> Theme:
        """Return the saved theme; missing or unknown values mean light."""
        try:
            raw = self._store.get(self._key)
        except PersistenceError as exc:
            logger.warning("Could not read theme preference: %s", exc)
            return Theme.LIGHT
        if raw == Theme.DARK.value:
            return Theme.DARK
        return Theme.LIGHT

    def save(self, theme: Theme) -> Theme:
        self._store.set(self._key, Theme(theme).value)
        return Theme(theme)

    def toggle(self) -> Theme:
        current = self.load()
        return self.save(Theme.LIGHT if current is Theme.DARK else Theme.DARK)
