"""
Persistence adapter routing record operations to the remote or local store.

The provider is built once at startup from Settings and injected into the
controllers. Reads degrade to the local store when the remote one fails;
writes never do, so both stores never diverge silently.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol

from loguru import logger

from biblioteca.core.config import Settings
from biblioteca.domain.exceptions import RemoteUnavailableError

from .json_storage import JsonFileStorage
from .local_store import LocalStore
from .remote_store import RemoteStore
from .sql_storage import SQLKeyValueStorage

REMOTE = "remote"
LOCAL = "local"

FALLBACK_WARNING = "No se pudo conectar con el servidor; mostrando datos locales"


class RecordStore(Protocol):
    async def list_all(self, collection: str) -> list: ...

    async def insert(self, collection: str, draft: Any) -> Any: ...

    async def replace(self, collection: str, record_id: str, patch: Any) -> Any: ...

    async def remove(self, collection: str, record_id: str) -> None: ...


@dataclass(frozen=True)
class ListResult:
    records: list
    source: str
    warning: Optional[str] = None


class StoreProvider:
    """Uniform list/create/update/delete contract over both stores."""

    def __init__(self, local: RecordStore, remote: Optional[RecordStore] = None) -> None:
        self.local = local
        self.remote = remote

    @property
    def mode(self) -> str:
        return REMOTE if self.remote is not None else LOCAL

    def _write_target(self) -> RecordStore:
        return self.remote if self.remote is not None else self.local

    async def list(self, collection: str) -> ListResult:
        if self.remote is not None:
            try:
                records = await self.remote.list_all(collection)
                return ListResult(records=records, source=REMOTE)
            except RemoteUnavailableError as exc:
                logger.warning("Remote read of {} failed, using local store: {}", collection, exc)
                records = await self.local.list_all(collection)
                return ListResult(records=records, source=LOCAL, warning=FALLBACK_WARNING)
        records = await self.local.list_all(collection)
        return ListResult(records=records, source=LOCAL)

    async def create(self, collection: str, draft: Any):
        return await self._write_target().insert(collection, draft)

    async def update(self, collection: str, record_id: str, patch: Any):
        return await self._write_target().replace(collection, record_id, patch)

    async def delete(self, collection: str, record_id: str) -> None:
        await self._write_target().remove(collection, record_id)

    async def aclose(self) -> None:
        closer = getattr(self.remote, "aclose", None)
        if closer is not None:
            await closer()


def build_local_storage(settings: Settings) -> JsonFileStorage | SQLKeyValueStorage:
    if settings.local_storage_url:
        return SQLKeyValueStorage(settings.local_storage_url)
    return JsonFileStorage(settings.local_storage_path)


def build_local_store(settings: Settings) -> LocalStore:
    storage = build_local_storage(settings)
    latency = (settings.local_latency_min_ms / 1000, settings.local_latency_max_ms / 1000)
    return LocalStore(storage, latency=latency)


def build_store_provider(settings: Settings) -> StoreProvider:
    """Select the store variants once, from configuration alone."""
    local = build_local_store(settings)
    remote = None
    if settings.remote_configured:
        remote = RemoteStore(
            settings.supabase_url,
            settings.supabase_anon_key,
            timeout=settings.remote_timeout_seconds,
        )
        logger.info("Using remote store at {}", settings.supabase_url)
    else:
        logger.info("Remote store not configured; running in local mode")
    return StoreProvider(local=local, remote=remote)
