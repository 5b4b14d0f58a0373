from __future__ import annotations

import asyncio

import httpx
import pytest

from biblioteca.domain.exceptions import ConstraintViolationError, RemoteUnavailableError
from biblioteca.domain.models import AUTHORS, Author
from biblioteca.repositories.local_store import LocalStore
from biblioteca.repositories.remote_store import RemoteStore
from biblioteca.repositories.store_provider import FALLBACK_WARNING, ListResult, StoreProvider
from biblioteca.services.author_controller import AuthorController
from biblioteca.services.entity_controller import ControllerState
from biblioteca.services.notifications import Notifier


class SpyProvider:
    """In-memory stand-in for StoreProvider that records every call."""

    def __init__(self, records=None, write_error=None, read_error=None):
        self.records = list(records or [])
        self.write_error = write_error
        self.read_error = read_error
        self.calls: list[tuple] = []

    async def list(self, collection):
        self.calls.append(("list", collection))
        if self.read_error:
            raise self.read_error
        return ListResult(records=list(self.records), source="local")

    async def create(self, collection, draft):
        self.calls.append(("create", collection, draft))
        if self.write_error:
            raise self.write_error
        record = Author(id=str(len(self.records) + 100), name=draft.name, nationality=draft.nationality)
        self.records.append(record)
        return record

    async def update(self, collection, record_id, patch):
        self.calls.append(("update", collection, record_id, patch))
        if self.write_error:
            raise self.write_error

    async def delete(self, collection, record_id):
        self.calls.append(("delete", collection, record_id))
        if self.write_error:
            raise self.write_error
        self.records = [r for r in self.records if r.id != record_id]


BORGES = Author(id="3", name="Jorge Luis Borges", nationality="Argentino")


def writes(provider: SpyProvider) -> list[tuple]:
    return [call for call in provider.calls if call[0] != "list"]


@pytest.mark.asyncio
async def test_mount_loads_seeds_in_local_mode(local_provider):
    ctrl = AuthorController(local_provider)
    assert await ctrl.mount() is True
    assert ctrl.state is ControllerState.IDLE
    assert ctrl.records[0].name == "Gabriel García Márquez"
    assert ctrl.source == "local"
    assert ctrl.notification is None


@pytest.mark.asyncio
async def test_create_flow_against_local_store(local_provider):
    ctrl = AuthorController(local_provider)
    await ctrl.mount()
    ctrl.set_form(name=" Alejo Carpentier ", nationality="Cubano")

    assert await ctrl.submit() is True
    assert ctrl.state is ControllerState.CREATING
    assert ctrl.form == {"name": "", "nationality": ""}
    assert ctrl.notification.severity == "success"
    assert ctrl.notification.message == "Autor creado correctamente"
    assert [a.name for a in ctrl.records][0] == "Alejo Carpentier"


@pytest.mark.asyncio
async def test_edit_then_submit_updates_record(local_provider):
    ctrl = AuthorController(local_provider)
    await ctrl.mount()
    assert ctrl.edit("2") is True
    assert ctrl.state is ControllerState.EDITING
    assert ctrl.form == {"name": "Isabel Allende", "nationality": "Chilena"}

    ctrl.set_form(nationality="Chileno-estadounidense")
    assert await ctrl.submit() is True
    assert ctrl.editing is None
    assert ctrl.state is ControllerState.CREATING
    assert ctrl.find("2").nationality == "Chileno-estadounidense"
    assert ctrl.notification.message == "Autor actualizado correctamente"


@pytest.mark.asyncio
async def test_cancel_clears_form():
    ctrl = AuthorController(SpyProvider([BORGES]))
    await ctrl.mount()
    ctrl.edit("3")
    ctrl.cancel()
    assert ctrl.state is ControllerState.CREATING
    assert ctrl.editing is None
    assert ctrl.form == {"name": "", "nationality": ""}


@pytest.mark.asyncio
async def test_blank_fields_block_submission_without_store_call():
    provider = SpyProvider([BORGES])
    ctrl = AuthorController(provider)
    await ctrl.mount()
    ctrl.edit("3")
    ctrl.set_form(name="   ")

    assert await ctrl.submit() is False
    assert writes(provider) == []
    assert ctrl.state is ControllerState.EDITING
    assert ctrl.notification.severity == "error"


@pytest.mark.asyncio
async def test_write_failure_keeps_form_and_mode():
    provider = SpyProvider([BORGES], write_error=RemoteUnavailableError("offline"))
    ctrl = AuthorController(provider)
    await ctrl.mount()
    ctrl.edit("3")
    ctrl.set_form(name="J. L. Borges")

    assert await ctrl.submit() is False
    assert ctrl.state is ControllerState.EDITING
    assert ctrl.form["name"] == "J. L. Borges"
    assert ctrl.notification.message == "Error al guardar autor"
    assert ctrl.submitting is False


@pytest.mark.asyncio
async def test_delete_requires_confirmation():
    provider = SpyProvider([BORGES])
    ctrl = AuthorController(provider)
    await ctrl.mount()
    assert await ctrl.delete("3", confirmed=False) is False
    assert writes(provider) == []


@pytest.mark.asyncio
async def test_delete_success_refetches():
    provider = SpyProvider([BORGES])
    ctrl = AuthorController(provider)
    await ctrl.mount()
    assert await ctrl.delete("3") is True
    assert ctrl.records == []
    assert ctrl.notification.message == "Autor eliminado correctamente"
    assert provider.calls[-1] == ("list", AUTHORS)


@pytest.mark.asyncio
async def test_delete_of_referenced_author_shows_hint():
    provider = SpyProvider([BORGES], write_error=ConstraintViolationError("violates foreign key"))
    ctrl = AuthorController(provider)
    await ctrl.mount()
    assert await ctrl.delete("3") is False
    assert ctrl.records == [BORGES]
    assert ctrl.notification.severity == "error"
    assert "libros asociados" in ctrl.notification.message
    assert "violates foreign key" in ctrl.notification.message


@pytest.mark.asyncio
async def test_delete_missing_id_locally_is_harmless(local_provider):
    ctrl = AuthorController(local_provider)
    await ctrl.mount()
    before = list(ctrl.records)
    assert await ctrl.delete("nope") is True
    assert ctrl.records == before


@pytest.mark.asyncio
async def test_update_of_vanished_record_is_reported(local_provider):
    ctrl = AuthorController(local_provider)
    await ctrl.mount()
    ctrl.edit("1")
    await local_provider.delete(AUTHORS, "1")
    assert await ctrl.submit() is False
    assert ctrl.notification.severity == "error"
    assert ctrl.state is ControllerState.EDITING


@pytest.mark.asyncio
async def test_remote_fetch_failure_falls_back_with_info(local_store):
    class DownRemote:
        async def list_all(self, collection):
            raise RemoteUnavailableError("boom")

    ctrl = AuthorController(StoreProvider(local=local_store, remote=DownRemote()))
    assert await ctrl.mount() is True
    assert ctrl.records[0].name == "Gabriel García Márquez"
    assert ctrl.notification.severity == "info"
    assert ctrl.notification.message == FALLBACK_WARNING


@pytest.mark.asyncio
async def test_fetch_error_keeps_previous_list():
    provider = SpyProvider([BORGES])
    ctrl = AuthorController(provider)
    await ctrl.mount()
    provider.read_error = RemoteUnavailableError("local disk gone")
    assert await ctrl.refresh() is False
    assert ctrl.records == [BORGES]
    assert ctrl.notification.message == "Error al obtener autores"


def test_edit_unknown_record_notifies():
    ctrl = AuthorController(SpyProvider())
    assert ctrl.edit("x") is False
    assert ctrl.notification.severity == "error"


def test_notification_auto_dismisses_after_timeout():
    now = [100.0]
    ctrl = AuthorController(SpyProvider(), Notifier(timeout_ms=3000, clock=lambda: now[0]))
    ctrl.notifier.success("hecho")
    now[0] += 2.9
    assert ctrl.notification is not None
    now[0] += 0.2
    assert ctrl.notification is None


def test_manual_dismiss_and_single_visible_notification():
    ctrl = AuthorController(SpyProvider())
    ctrl.notifier.success("uno")
    ctrl.notifier.error("dos")
    assert ctrl.notification.message == "dos"
    ctrl.dismiss_notification()
    assert ctrl.notification is None


class BrokenStorage:
    """Key-value storage whose disk refuses reads or writes."""

    def __init__(self, read_error=None, write_error=None):
        self.read_error = read_error
        self.write_error = write_error

    def read(self, key):
        if self.read_error:
            raise self.read_error
        return None

    def write(self, key, value):
        if self.write_error:
            raise self.write_error

    def clear(self, key):
        pass


@pytest.mark.asyncio
async def test_local_write_failure_is_notified_and_keeps_form():
    store = LocalStore(BrokenStorage(write_error=PermissionError("read-only disk")), latency=(0, 0))
    ctrl = AuthorController(StoreProvider(local=store))
    await ctrl.mount()
    ctrl.set_form(name="Alejo Carpentier", nationality="Cubano")

    assert await ctrl.submit() is False
    assert ctrl.notification.severity == "error"
    assert ctrl.notification.message == "Error al guardar autor"
    assert ctrl.form == {"name": "Alejo Carpentier", "nationality": "Cubano"}
    assert ctrl.submitting is False

    assert await ctrl.delete("1") is False
    assert ctrl.notification.message.startswith("Error al eliminar autor")


@pytest.mark.asyncio
async def test_local_read_failure_is_a_fetch_error():
    store = LocalStore(BrokenStorage(read_error=OSError("I/O error")), latency=(0, 0))
    ctrl = AuthorController(StoreProvider(local=store))
    assert await ctrl.mount() is False
    assert ctrl.records == []
    assert ctrl.notification.message == "Error al obtener autores"
    assert ctrl.state is ControllerState.IDLE


@pytest.mark.asyncio
async def test_unparseable_remote_answer_falls_back_to_local(local_store):
    remote = RemoteStore(
        "https://demo.supabase.co",
        "anon-key",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>captive portal</html>")),
    )
    ctrl = AuthorController(StoreProvider(local=local_store, remote=remote))
    assert await ctrl.mount() is True
    await remote.aclose()
    assert ctrl.source == "local"
    assert ctrl.records[0].name == "Gabriel García Márquez"
    assert ctrl.notification.message == FALLBACK_WARNING


@pytest.mark.asyncio
async def test_edit_and_cancel_are_ignored_while_submitting():
    release = asyncio.Event()

    class SlowProvider(SpyProvider):
        async def update(self, collection, record_id, patch):
            await release.wait()
            await super().update(collection, record_id, patch)

    other = Author(id="4", name="Isabel Allende", nationality="Chilena")
    ctrl = AuthorController(SlowProvider([BORGES, other]))
    await ctrl.mount()
    ctrl.edit("3")
    ctrl.set_form(name="J. L. Borges")

    pending = asyncio.create_task(ctrl.submit())
    await asyncio.sleep(0)
    assert ctrl.state is ControllerState.SUBMITTING
    assert ctrl.edit("4") is False
    ctrl.cancel()
    assert ctrl.editing is BORGES
    assert ctrl.form["name"] == "J. L. Borges"

    release.set()
    assert await pending is True
    assert ctrl.state is ControllerState.CREATING


class GatedProvider:
    """Each list() call waits for its own gate so tests control arrival order."""

    def __init__(self, responses):
        self.responses = list(responses)

    async def list(self, collection):
        gate, result = self.responses.pop(0)
        await gate.wait()
        return result


@pytest.mark.asyncio
async def test_duplicate_fetch_from_same_trigger_is_ignored():
    gate = asyncio.Event()
    ctrl = AuthorController(GatedProvider([(gate, ListResult([BORGES], "local"))]))
    first = asyncio.create_task(ctrl.mount())
    await asyncio.sleep(0)
    assert ctrl.state is ControllerState.LOADING

    assert await ctrl.mount() is False

    gate.set()
    assert await first is True
    assert ctrl.state is ControllerState.IDLE


@pytest.mark.asyncio
async def test_overlapping_fetches_last_arrival_wins():
    # No ordering guard: a stale response that arrives late overwrites fresher state.
    old_gate, new_gate = asyncio.Event(), asyncio.Event()
    stale = ListResult([Author(id="1", name="Viejo", nationality="X")], "local")
    fresh = ListResult([Author(id="2", name="Nuevo", nationality="Y")], "local")
    ctrl = AuthorController(GatedProvider([(old_gate, stale), (new_gate, fresh)]))

    first = asyncio.create_task(ctrl.refresh(trigger="mount"))
    second = asyncio.create_task(ctrl.refresh(trigger="submit"))
    await asyncio.sleep(0)

    new_gate.set()
    await second
    assert [a.name for a in ctrl.records] == ["Nuevo"]
    assert ctrl.loading is True

    old_gate.set()
    await first
    assert [a.name for a in ctrl.records] == ["Viejo"]
    assert ctrl.loading is False
