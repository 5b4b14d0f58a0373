"""Authors page state."""
from __future__ import annotations

from biblioteca.domain.models import AUTHORS, Author, AuthorDraft
from biblioteca.domain.validation import validate_author

from .entity_controller import EntityController


class AuthorController(EntityController):
    collection = AUTHORS
    fetch_error_message = "Error al obtener autores"
    created_message = "Autor creado correctamente"
    updated_message = "Autor actualizado correctamente"
    save_error_message = "Error al guardar autor"
    deleted_message = "Autor eliminado correctamente"
    delete_error_message = "Error al eliminar autor. Verifica que no tenga libros asociados."
    not_found_message = "Autor no encontrado"

    def empty_form(self) -> dict[str, str]:
        return {"name": "", "nationality": ""}

    def form_from_record(self, record: Author) -> dict[str, str]:
        return {"name": record.name, "nationality": record.nationality}

    def build_draft(self) -> AuthorDraft:
        return validate_author(self.form.get("name"), self.form.get("nationality"))
