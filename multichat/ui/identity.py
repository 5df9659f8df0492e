"""Persistence of the local display identity in per-browser storage."""

import logging
from collections.abc import MutableMapping
from typing import Any

from pydantic import ValidationError

from multichat.models.schemas import LocalIdentity

logger = logging.getLogger(__name__)

STORAGE_KEY = "chatUser"


class IdentityStore:
    """Reads and writes the LocalIdentity under a single storage key.

    Works on any mutable mapping: NiceGUI's ``app.storage.user`` in the
    page, a plain dict in tests. The record is stored as a JSON string.
    """

    def __init__(self, storage: MutableMapping[str, Any], key: str = STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key

    def load(self) -> LocalIdentity | None:
        raw = self._storage.get(self._key)
        if raw is None:
            return None
        try:
            return LocalIdentity.model_validate_json(raw)
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable stored identity: {e}")
            self.clear()
            return None

    def save(self, identity: LocalIdentity) -> None:
        self._storage[self._key] = identity.model_dump_json()

    def clear(self) -> None:
        self._storage.pop(self._key, None)
