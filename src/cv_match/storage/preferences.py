"""UI theme preference."""

from __future__ import annotations

import json
import logging

from cv_match.config import THEMES
from cv_match.errors import StorageCorruption
from cv_match.storage.kv_store import KeyValueStore, decode_json

logger = logging.getLogger(__name__)

THEME_KEY = "theme"


class PreferenceStore:
    def __init__(
        self,
        kv: KeyValueStore,
        *,
        theme_key: str = THEME_KEY,
        default_theme: str = "light",
    ):
        self.kv = kv
        self.theme_key = theme_key
        self.default_theme = default_theme

    def get_theme(self) -> str:
        raw = self.kv.get(self.theme_key)
        if raw is None:
            return self.default_theme
        try:
            value = decode_json(self.theme_key, raw)
        except StorageCorruption:
            logger.warning("Ignoring corrupt theme value under %s", self.theme_key)
            return self.default_theme
        return value if value in THEMES else self.default_theme

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"theme must be one of {THEMES}, got {theme!r}")
        self.kv.set(self.theme_key, json.dumps(theme))

    def toggle_theme(self) -> str:
        theme = "dark" if self.get_theme() == "light" else "light"
        self.set_theme(theme)
        return theme
