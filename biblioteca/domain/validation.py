"""Form rules checked before any write reaches a store."""
from __future__ import annotations

from datetime import date
from typing import Optional

from .exceptions import ValidationError
from .models import AuthorDraft, BookDraft

MIN_PUBLICATION_YEAR = 1000
REQUIRED_FIELDS_MESSAGE = "Por favor completa todos los campos"


def max_publication_year(today: Optional[date] = None) -> int:
    return (today or date.today()).year + 1


def _text(value: object) -> str:
    return str(value or "").strip()


def parse_year(value: object) -> Optional[int]:
    """Return the year as int, or None when the value is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = _text(value)
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def is_valid_year(year: Optional[int], today: Optional[date] = None) -> bool:
    if year is None:
        return False
    return MIN_PUBLICATION_YEAR <= year <= max_publication_year(today)


def validate_author(name: object, nationality: object) -> AuthorDraft:
    name_value = _text(name)
    nationality_value = _text(nationality)
    if not name_value or not nationality_value:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)
    return AuthorDraft(name=name_value, nationality=nationality_value)


def validate_book(
    title: object,
    publication_year: object,
    author_id: object,
    *,
    authors_available: bool = True,
    today: Optional[date] = None,
) -> BookDraft:
    if not authors_available:
        raise ValidationError("Primero debes crear al menos un autor")
    title_value = _text(title)
    author_value = _text(author_id)
    year = parse_year(publication_year)
    if not title_value or not author_value or year is None:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)
    if not is_valid_year(year, today):
        raise ValidationError(
            f"El año de publicación debe estar entre {MIN_PUBLICATION_YEAR} y {max_publication_year(today)}"
        )
    return BookDraft(title=title_value, publication_year=year, author_id=author_value)
