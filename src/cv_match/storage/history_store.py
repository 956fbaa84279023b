"""Per-user history of saved analyses, newest first."""

from __future__ import annotations

import json
import logging

from pydantic import TypeAdapter, ValidationError

from cv_match.errors import StorageCorruption
from cv_match.models.account import HistoryItem
from cv_match.storage.kv_store import KeyValueStore, decode_json

logger = logging.getLogger(__name__)

HISTORY_KEY_PREFIX = "cv_analyzer_history_"

_history_adapter = TypeAdapter(list[HistoryItem])


class HistoryStore:
    """History lists keyed by owner email. There is no cross-user listing."""

    def __init__(self, kv: KeyValueStore, *, history_prefix: str = HISTORY_KEY_PREFIX):
        self.kv = kv
        self.history_prefix = history_prefix

    def _key(self, email: str) -> str:
        return self.history_prefix + email

    def _write(self, email: str, items: list[HistoryItem]) -> None:
        payload = [item.model_dump(by_alias=True) for item in items]
        self.kv.set(self._key(email), json.dumps(payload, ensure_ascii=False))

    def get_history(self, email: str) -> list[HistoryItem]:
        """Return the user's saved analyses, newest first ([] if none or corrupt)."""
        key = self._key(email)
        raw = self.kv.get(key)
        if raw is None:
            return []
        try:
            return _history_adapter.validate_python(decode_json(key, raw))
        except (StorageCorruption, ValidationError):
            logger.warning("Ignoring corrupt history list under %s", key)
            return []

    def get_item(self, email: str, item_id: str) -> HistoryItem | None:
        for item in self.get_history(email):
            if item.id == item_id:
                return item
        return None

    def save_analysis(self, email: str, item: HistoryItem) -> None:
        """Prepend ``item`` to the user's history. Ids are not deduplicated."""
        self._write(email, [item, *self.get_history(email)])
        logger.debug("Saved analysis %s for %s", item.id, email)

    def delete_analysis(self, email: str, item_id: str) -> None:
        """Remove the entry with ``item_id``; absent ids are a no-op."""
        if self.kv.get(self._key(email)) is None:
            return
        remaining = [item for item in self.get_history(email) if item.id != item_id]
        self._write(email, remaining)
