"""
Client for the hosted relational backend (PostgREST interface).

Only the query shapes the admin needs are implemented: ordered selects, the
one-level join from books to the author's name, and id-scoped writes.
"""
from __future__ import annotations

from typing import Any, Optional

import httpx
from loguru import logger

from biblioteca.domain.exceptions import (
    ConstraintViolationError,
    NotFoundError,
    RemoteUnavailableError,
)
from biblioteca.domain.models import AUTHORS, BOOKS, record_from_row

FOREIGN_KEY_VIOLATION = "23503"

LIST_QUERIES = {
    AUTHORS: {"select": "*", "order": "nombre.asc"},
    BOOKS: {"select": "*,autores(nombre)", "order": "titulo.asc"},
}


def _row_fields(payload: Any) -> dict:
    fields = payload.to_row() if hasattr(payload, "to_row") else dict(payload or {})
    fields.pop("id", None)
    return fields


class RemoteStore:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, collection: str, **kwargs) -> httpx.Response:
        if collection not in LIST_QUERIES:
            raise ValueError(f"unknown collection: {collection}")
        try:
            response = await self._client.request(method, f"/{collection}", **kwargs)
        except httpx.HTTPError as exc:
            raise RemoteUnavailableError(f"{method} {collection}: {exc}") from exc
        if response.is_success:
            return response
        detail = self._error_detail(response)
        if response.status_code == 409 or detail.get("code") == FOREIGN_KEY_VIOLATION:
            raise ConstraintViolationError(detail.get("message") or response.text)
        logger.warning("Remote {} {} answered {}: {}", method, collection, response.status_code, detail)
        raise RemoteUnavailableError(
            f"{method} {collection}: HTTP {response.status_code} {detail.get('message') or ''}".strip()
        )

    @staticmethod
    def _error_detail(response: httpx.Response) -> dict:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _rows(response: httpx.Response, label: str) -> list:
        try:
            body = response.json()
        except ValueError as exc:
            raise RemoteUnavailableError(f"{label}: response is not JSON") from exc
        if body is None:
            return []
        if not isinstance(body, list):
            raise RemoteUnavailableError(f"{label}: expected a list of rows, got {type(body).__name__}")
        return body

    @staticmethod
    def _record(collection: str, row: Any, label: str):
        try:
            return record_from_row(collection, row)
        except (KeyError, TypeError, ValueError) as exc:
            raise RemoteUnavailableError(f"{label}: malformed row {row!r}") from exc

    async def list_all(self, collection: str) -> list:
        response = await self._request("GET", collection, params=LIST_QUERIES.get(collection, {}))
        rows = self._rows(response, f"GET {collection}")
        return [self._record(collection, row, f"GET {collection}") for row in rows]

    async def insert(self, collection: str, draft: Any):
        response = await self._request(
            "POST",
            collection,
            json=[_row_fields(draft)],
            headers={"Prefer": "return=representation"},
        )
        rows = self._rows(response, f"POST {collection}")
        if not rows:
            raise RemoteUnavailableError(f"POST {collection}: empty representation")
        return self._record(collection, rows[0], f"POST {collection}")

    async def replace(self, collection: str, record_id: str, patch: Any):
        response = await self._request(
            "PATCH",
            collection,
            params={"id": f"eq.{record_id}"},
            json=_row_fields(patch),
            headers={"Prefer": "return=representation"},
        )
        rows = self._rows(response, f"PATCH {collection}")
        if not rows:
            raise NotFoundError(f"{collection}: registro {record_id} no encontrado")
        return self._record(collection, rows[0], f"PATCH {collection}")

    async def remove(self, collection: str, record_id: str) -> None:
        await self._request("DELETE", collection, params={"id": f"eq.{record_id}"})
