"""Key-value storage backed by a single SQL table (SQLAlchemy)."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from biblioteca.db.models import StorageEntry
from biblioteca.db.session import create_tables, get_session
from biblioteca.domain.exceptions import LocalStorageError


class SQLKeyValueStorage:
    """Same contract as JsonFileStorage, one row per collection snapshot."""

    def __init__(self, url: str) -> None:
        self.url = url
        create_tables(url)

    def read(self, key: str) -> Optional[list]:
        try:
            with get_session(self.url) as session:
                entry = session.get(StorageEntry, key)
                if entry is None or not isinstance(entry.value, list):
                    return None
                return list(entry.value)
        except SQLAlchemyError as exc:
            raise LocalStorageError(f"read {key}: {exc}") from exc

    def write(self, key: str, value: list) -> None:
        now = datetime.now(timezone.utc)
        try:
            with get_session(self.url) as session:
                entry = session.get(StorageEntry, key)
                if not entry:
                    session.add(StorageEntry(key=key, value=list(value), updated_at=now))
                else:
                    entry.value = list(value)
                    entry.updated_at = now
                session.commit()
        except SQLAlchemyError as exc:
            raise LocalStorageError(f"write {key}: {exc}") from exc

    def clear(self, key: str) -> None:
        try:
            with get_session(self.url) as session:
                session.execute(delete(StorageEntry).where(StorageEntry.key == key))
                session.commit()
        except SQLAlchemyError as exc:
            raise LocalStorageError(f"clear {key}: {exc}") from exc
