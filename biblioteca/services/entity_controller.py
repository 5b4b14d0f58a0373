"""
List/form state for one entity page.

A controller owns the in-memory list, the form draft and the edit/create mode,
and drives the store provider. Every failure is turned into a notification at
this boundary; nothing raised by a store leaves the controller.

Known gap: fetches carry no sequence number, so when two fetches overlap the
response that arrives last wins even if it was issued first.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from loguru import logger

from biblioteca.domain.exceptions import (
    ConstraintViolationError,
    StoreError,
    ValidationError,
)
from biblioteca.repositories.store_provider import ListResult, StoreProvider

from .notifications import Notification, Notifier


class ControllerState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    EDITING = "editing"
    CREATING = "creating"
    SUBMITTING = "submitting"


class EntityController:
    collection: str = ""
    fetch_error_message = "Error al obtener registros"
    created_message = "Registro creado correctamente"
    updated_message = "Registro actualizado correctamente"
    save_error_message = "Error al guardar registro"
    deleted_message = "Registro eliminado correctamente"
    delete_error_message = "Error al eliminar registro"
    not_found_message = "Registro no encontrado"

    def __init__(self, provider: StoreProvider, notifier: Optional[Notifier] = None) -> None:
        self.provider = provider
        self.notifier = notifier or Notifier()
        self.records: list = []
        self.form: dict[str, str] = self.empty_form()
        self.editing: Optional[Any] = None
        self.loading = False
        self.submitting = False
        self.source: Optional[str] = None
        self._mode = ControllerState.IDLE
        self._inflight: set[str] = set()

    # ------------------------------------------------------------------ hooks
    def empty_form(self) -> dict[str, str]:
        raise NotImplementedError

    def form_from_record(self, record: Any) -> dict[str, str]:
        raise NotImplementedError

    def build_draft(self) -> Any:
        """Validate the form and return the draft to persist (raises ValidationError)."""
        raise NotImplementedError

    @property
    def can_submit(self) -> bool:
        return not self.submitting

    async def _load(self) -> None:
        result = await self.provider.list(self.collection)
        self._apply(result)

    # ------------------------------------------------------------------ state
    @property
    def state(self) -> ControllerState:
        if self.submitting:
            return ControllerState.SUBMITTING
        if self.loading and self._mode is not ControllerState.EDITING:
            return ControllerState.LOADING
        return self._mode

    @property
    def notification(self) -> Optional[Notification]:
        return self.notifier.current

    def dismiss_notification(self) -> None:
        self.notifier.dismiss()

    def find(self, record_id: str) -> Optional[Any]:
        for record in self.records:
            if str(record.id) == str(record_id):
                return record
        return None

    def _apply(self, result: ListResult) -> None:
        self.records = list(result.records)
        self.source = result.source
        if result.warning:
            self.notifier.info(result.warning)

    def _reset_form(self) -> None:
        self.form = self.empty_form()
        self.editing = None

    # ------------------------------------------------------------------ operations
    async def mount(self) -> bool:
        return await self.refresh(trigger="mount")

    async def refresh(self, trigger: str = "refresh") -> bool:
        """Fetch the list. A second fetch from the same trigger is ignored while one is in flight."""
        if trigger in self._inflight:
            return False
        self._inflight.add(trigger)
        self.loading = True
        try:
            await self._load()
        except StoreError as exc:
            logger.error("Fetching {} failed: {}", self.collection, exc)
            self.notifier.error(self.fetch_error_message)
            return False
        finally:
            self._inflight.discard(trigger)
            self.loading = bool(self._inflight)
        return True

    def set_form(self, **fields: Any) -> None:
        if self.submitting:
            return
        for name, value in fields.items():
            if name in self.form:
                self.form[name] = "" if value is None else str(value)

    def edit(self, record_id: str) -> bool:
        if self.submitting:
            return False
        record = self.find(record_id)
        if record is None:
            self.notifier.error(self.not_found_message)
            return False
        self.form = self.form_from_record(record)
        self.editing = record
        self._mode = ControllerState.EDITING
        return True

    def cancel(self) -> None:
        if self.submitting:
            return
        self._reset_form()
        self._mode = ControllerState.CREATING

    async def submit(self) -> bool:
        if self.submitting:
            return False
        try:
            draft = self.build_draft()
        except ValidationError as exc:
            self.notifier.error(str(exc))
            return False

        editing = self.editing
        self.submitting = True
        try:
            if editing is not None:
                await self.provider.update(self.collection, editing.id, draft)
            else:
                await self.provider.create(self.collection, draft)
        except StoreError as exc:
            logger.error("Saving {} failed: {}", self.collection, exc)
            self.notifier.error(self.save_error_message)
            return False
        finally:
            self.submitting = False

        self._reset_form()
        self._mode = ControllerState.CREATING
        self.notifier.success(self.updated_message if editing is not None else self.created_message)
        await self.refresh(trigger="submit")
        return True

    async def delete(self, record_id: str, confirmed: bool = True) -> bool:
        if not confirmed:
            return False
        try:
            await self.provider.delete(self.collection, record_id)
        except ConstraintViolationError as exc:
            logger.warning("Delete of {} {} rejected: {}", self.collection, record_id, exc)
            self.notifier.error(f"{self.delete_error_message} ({exc})")
            return False
        except StoreError as exc:
            logger.error("Delete of {} {} failed: {}", self.collection, record_id, exc)
            self.notifier.error(self.delete_error_message)
            return False
        self.notifier.success(self.deleted_message)
        await self.refresh(trigger="delete")
        return True
