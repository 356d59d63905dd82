from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from app.frtu.constants import (
    INITIAL_DEVICES,
    STORAGE_KEY_DEVICES,
    STORAGE_KEY_DIRECTORY,
    STORAGE_KEY_LOGS,
)
from app.frtu.errors import DeserializationError
from app.frtu.models import RecordBlob

logger = logging.getLogger(__name__)

KIND_KEYS = {
    "devices": STORAGE_KEY_DEVICES,
    "logs": STORAGE_KEY_LOGS,
}


class RecordStore:
    """
    Key/value persistence of whole JSON sequences.

    Writes go through the caller's session; nothing is committed here, so a
    device write and its audit entry land in the same transaction.
    """

    def __init__(self, session: Session):
        self.session = session

    def get(self, kind: str, *, for_update: bool = False) -> list[dict[str, Any]]:
        """
        Current sequence for `kind`. With `for_update`, the row stays locked
        until the session's transaction ends; read-modify-write paths use it.
        """
        key = _key_for(kind)
        data = self._load(key, for_update=for_update)
        if data is None:
            if kind == "devices":
                seed = [dict(d) for d in INITIAL_DEVICES]
                self._save(key, seed)
                logger.info("Seeded empty device store with %d sample devices", len(seed))
                return seed
            return []
        return data

    def put(self, kind: str, items: list[dict[str, Any]]) -> None:
        self._save(_key_for(kind), list(items))

    def get_directory(self) -> list[str] | None:
        return self._load(STORAGE_KEY_DIRECTORY)

    def put_directory(self, names: list[str]) -> None:
        self._save(STORAGE_KEY_DIRECTORY, list(names))

    def _load(self, key: str, *, for_update: bool = False) -> list | None:
        if for_update:
            row = self.session.get(RecordBlob, key, with_for_update=True, populate_existing=True)
        else:
            row = self.session.get(RecordBlob, key)
        if row is None:
            return None
        try:
            value = json.loads(row.value)
        except json.JSONDecodeError as e:
            raise DeserializationError(key, str(e)) from e
        if not isinstance(value, list):
            raise DeserializationError(key, f"expected a JSON array, got {type(value).__name__}")
        return value

    def _save(self, key: str, value: list) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        row = self.session.get(RecordBlob, key)
        if row is None:
            self.session.add(RecordBlob(key=key, value=payload, updated_at=datetime.utcnow()))
        else:
            row.value = payload
            row.updated_at = datetime.utcnow()
        self.session.flush()


def _key_for(kind: str) -> str:
    try:
        return KIND_KEYS[kind]
    except KeyError:
        raise ValueError(f"Unknown record kind: {kind!r}") from None
