from __future__ import annotations

import pytest

from biblioteca.domain.exceptions import RemoteUnavailableError
from biblioteca.domain.models import AUTHORS, Author, AuthorDraft
from biblioteca.repositories.json_storage import JsonFileStorage
from biblioteca.repositories.remote_store import RemoteStore
from biblioteca.repositories.sql_storage import SQLKeyValueStorage
from biblioteca.repositories.store_provider import (
    FALLBACK_WARNING,
    LOCAL,
    REMOTE,
    StoreProvider,
    build_store_provider,
)


class UnreachableRemote:
    def __init__(self) -> None:
        self.calls: list[str] = []

    async def list_all(self, collection):
        self.calls.append("list")
        raise RemoteUnavailableError("timeout")

    async def insert(self, collection, draft):
        self.calls.append("insert")
        raise RemoteUnavailableError("timeout")

    async def replace(self, collection, record_id, patch):
        self.calls.append("replace")
        raise RemoteUnavailableError("timeout")

    async def remove(self, collection, record_id):
        self.calls.append("remove")
        raise RemoteUnavailableError("timeout")


class HealthyRemote:
    async def list_all(self, collection):
        return [Author(id="r1", name="Remoto", nationality="Nube")]

    async def insert(self, collection, draft):
        return Author(id="r2", name=draft.name, nationality=draft.nationality)


@pytest.mark.asyncio
async def test_local_mode_reads_and_writes_locally(local_provider):
    assert local_provider.mode == LOCAL
    created = await local_provider.create(AUTHORS, AuthorDraft(name="Octavio Paz", nationality="Mexicano"))
    result = await local_provider.list(AUTHORS)
    assert result.source == LOCAL
    assert result.warning is None
    assert created in result.records


@pytest.mark.asyncio
async def test_remote_read_uses_remote(local_store):
    provider = StoreProvider(local=local_store, remote=HealthyRemote())
    result = await provider.list(AUTHORS)
    assert provider.mode == REMOTE
    assert result.source == REMOTE
    assert [a.name for a in result.records] == ["Remoto"]


@pytest.mark.asyncio
async def test_remote_read_failure_falls_back_with_warning(local_store):
    provider = StoreProvider(local=local_store, remote=UnreachableRemote())
    result = await provider.list(AUTHORS)
    assert result.source == LOCAL
    assert result.warning == FALLBACK_WARNING
    assert result.records[0].name == "Gabriel García Márquez"


@pytest.mark.asyncio
async def test_remote_write_failure_is_hard_and_local_untouched(local_store, storage):
    remote = UnreachableRemote()
    provider = StoreProvider(local=local_store, remote=remote)

    with pytest.raises(RemoteUnavailableError):
        await provider.create(AUTHORS, AuthorDraft(name="X", nationality="Y"))
    with pytest.raises(RemoteUnavailableError):
        await provider.update(AUTHORS, "1", AuthorDraft(name="X", nationality="Y"))
    with pytest.raises(RemoteUnavailableError):
        await provider.delete(AUTHORS, "1")

    assert remote.calls == ["insert", "replace", "remove"]
    assert not storage.path.exists()


@pytest.mark.asyncio
async def test_build_without_remote_parameters_is_local(settings_factory):
    provider = build_store_provider(settings_factory(supabase_url="https://demo.supabase.co"))
    assert provider.mode == LOCAL
    assert isinstance(provider.local.storage, JsonFileStorage)
    await provider.aclose()


@pytest.mark.asyncio
async def test_build_with_remote_parameters_is_remote(settings_factory):
    settings = settings_factory(supabase_url="https://demo.supabase.co", supabase_anon_key="anon")
    provider = build_store_provider(settings)
    assert provider.mode == REMOTE
    assert isinstance(provider.remote, RemoteStore)
    await provider.aclose()


def test_build_with_storage_url_uses_sql_backend(tmp_path, settings_factory):
    settings = settings_factory(local_storage_url=f"sqlite:///{tmp_path / 'kv.db'}")
    provider = build_store_provider(settings)
    assert isinstance(provider.local.storage, SQLKeyValueStorage)
