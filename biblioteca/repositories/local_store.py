"""
Offline store used when the hosted backend is not configured or not reachable.

Collections live in a key-value storage as denormalized snapshots. Every
successful write overwrites the whole snapshot. Calls sleep for a short random
delay so the pages behave the same way they do against the network.
"""
from __future__ import annotations

import asyncio
import random
import time
from typing import Any, Callable, Mapping, Optional, Protocol

from loguru import logger

from biblioteca.domain.exceptions import LocalStorageError, NotFoundError
from biblioteca.domain.models import AUTHORS, BOOKS, BookView, record_from_row

STORAGE_KEYS = {
    AUTHORS: "demo_autores",
    BOOKS: "demo_libros",
}

SEED_AUTHORS = [
    {"id": "1", "nombre": "Gabriel García Márquez", "nacionalidad": "Colombiano"},
    {"id": "2", "nombre": "Isabel Allende", "nacionalidad": "Chilena"},
    {"id": "3", "nombre": "Jorge Luis Borges", "nacionalidad": "Argentino"},
]

SEED_BOOKS = [
    {"id": "1", "titulo": "Cien años de soledad", "anio_publicacion": 1967, "autor_id": "1"},
    {"id": "2", "titulo": "La casa de los espíritus", "anio_publicacion": 1982, "autor_id": "2"},
    {"id": "3", "titulo": "Ficciones", "anio_publicacion": 1944, "autor_id": "3"},
]

SEEDS = {
    AUTHORS: SEED_AUTHORS,
    BOOKS: SEED_BOOKS,
}


class KeyValueStorage(Protocol):
    def read(self, key: str) -> Optional[list]: ...

    def write(self, key: str, value: list) -> None: ...


def _sort_authors(rows: list[dict]) -> list[dict]:
    return sorted(rows, key=lambda row: (row.get("nombre") or "").casefold())


def _patch_fields(patch: Any) -> dict:
    fields = patch.to_row() if hasattr(patch, "to_row") else dict(patch or {})
    fields.pop("id", None)
    return fields


class LocalStore:
    """Snapshot-based store with the same async contract as RemoteStore."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        latency: tuple[float, float] = (0.3, 0.5),
        id_clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self.storage = storage
        self.latency = latency
        self._id_clock = id_clock
        self._last_id = 0

    async def _simulate_latency(self) -> None:
        low, high = self.latency
        if high <= 0:
            return
        await asyncio.sleep(random.uniform(low, high))

    def _key(self, collection: str) -> str:
        try:
            return STORAGE_KEYS[collection]
        except KeyError:
            raise ValueError(f"unknown collection: {collection}") from None

    def _snapshot(self, collection: str) -> list[dict]:
        key = self._key(collection)
        try:
            rows = self.storage.read(key)
        except OSError as exc:
            raise LocalStorageError(f"read {key}: {exc}") from exc
        if rows is None:
            return [dict(row) for row in SEEDS[collection]]
        return [dict(row) for row in rows]

    def _persist(self, collection: str, rows: list[dict]) -> None:
        key = self._key(collection)
        try:
            self.storage.write(key, rows)
        except OSError as exc:
            raise LocalStorageError(f"write {key}: {exc}") from exc

    def _next_id(self) -> str:
        candidate = self._id_clock()
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return str(candidate)

    def _to_record(self, collection: str, row: Mapping[str, Any], author_names: dict[str, str] | None = None):
        if collection == BOOKS:
            names = author_names if author_names is not None else self._author_names()
            return BookView.from_row(row, author_name=names.get(str(row.get("autor_id") or "")))
        return record_from_row(collection, row)

    def _author_names(self) -> dict[str, str]:
        return {str(row["id"]): row.get("nombre") or "" for row in self._snapshot(AUTHORS)}

    async def list_all(self, collection: str) -> list:
        await self._simulate_latency()
        rows = self._snapshot(collection)
        author_names = self._author_names() if collection == BOOKS else None
        return [self._to_record(collection, row, author_names) for row in rows]

    async def insert(self, collection: str, draft: Any):
        await self._simulate_latency()
        rows = self._snapshot(collection)
        row = {"id": self._next_id(), **_patch_fields(draft)}
        rows.append(row)
        if collection == AUTHORS:
            rows = _sort_authors(rows)
        self._persist(collection, rows)
        logger.debug("Local insert into {} (id={})", collection, row["id"])
        return self._to_record(collection, row)

    async def replace(self, collection: str, record_id: str, patch: Any):
        await self._simulate_latency()
        rows = self._snapshot(collection)
        fields = _patch_fields(patch)
        for index, row in enumerate(rows):
            if str(row.get("id")) == str(record_id):
                updated = {**row, **fields, "id": row["id"]}
                rows[index] = updated
                break
        else:
            raise NotFoundError(f"{collection}: registro {record_id} no encontrado")
        if collection == AUTHORS:
            rows = _sort_authors(rows)
        self._persist(collection, rows)
        return self._to_record(collection, updated)

    async def remove(self, collection: str, record_id: str) -> None:
        await self._simulate_latency()
        rows = self._snapshot(collection)
        remaining = [row for row in rows if str(row.get("id")) != str(record_id)]
        if len(remaining) == len(rows):
            logger.debug("Local remove on {}: id {} not present", collection, record_id)
            return
        self._persist(collection, remaining)
