"""Books page state: the book list plus the authors offered in the form."""
from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from loguru import logger

from biblioteca.domain.exceptions import StoreError
from biblioteca.domain.models import AUTHORS, BOOKS, Author, BookDraft, BookView
from biblioteca.domain.validation import validate_book
from biblioteca.repositories.store_provider import StoreProvider

from .entity_controller import EntityController
from .notifications import Notifier


class BookController(EntityController):
    collection = BOOKS
    fetch_error_message = "Error al obtener libros"
    authors_error_message = "Error al obtener autores"
    created_message = "Libro creado correctamente"
    updated_message = "Libro actualizado correctamente"
    save_error_message = "Error al guardar libro"
    deleted_message = "Libro eliminado correctamente"
    delete_error_message = "Error al eliminar libro"
    not_found_message = "Libro no encontrado"

    def __init__(
        self,
        provider: StoreProvider,
        notifier: Optional[Notifier] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._today = today
        self.authors: list[Author] = []
        super().__init__(provider, notifier)

    def empty_form(self) -> dict[str, str]:
        return {"title": "", "publication_year": str(self._today().year), "author_id": ""}

    def form_from_record(self, record: BookView) -> dict[str, str]:
        return {
            "title": record.title,
            "publication_year": str(record.publication_year),
            "author_id": record.author_id,
        }

    @property
    def can_submit(self) -> bool:
        return super().can_submit and bool(self.authors)

    def build_draft(self) -> BookDraft:
        return validate_book(
            self.form.get("title"),
            self.form.get("publication_year"),
            self.form.get("author_id"),
            authors_available=bool(self.authors),
            today=self._today(),
        )

    async def _load(self) -> None:
        try:
            authors = await self.provider.list(AUTHORS)
        except StoreError as exc:
            logger.error("Fetching authors for the book form failed: {}", exc)
            self.notifier.error(self.authors_error_message)
        else:
            self.authors = list(authors.records)
            if authors.warning:
                self.notifier.info(authors.warning)
        await super()._load()
