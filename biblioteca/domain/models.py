"""
Entity types and their mapping to storage rows.

Rows use the column names of the hosted tables (`autores`, `libros`), so the
same dictionaries travel over the wire and into the local snapshots.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

AUTHORS = "autores"
BOOKS = "libros"
COLLECTIONS = (AUTHORS, BOOKS)


@dataclass(frozen=True)
class AuthorDraft:
    name: str
    nationality: str

    def to_row(self) -> dict:
        return {"nombre": self.name, "nacionalidad": self.nationality}


@dataclass(frozen=True)
class Author:
    id: str
    name: str
    nationality: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Author":
        return cls(
            id=str(row["id"]),
            name=row.get("nombre") or "",
            nationality=row.get("nacionalidad") or "",
        )

    def to_row(self) -> dict:
        return {"id": self.id, "nombre": self.name, "nacionalidad": self.nationality}


@dataclass(frozen=True)
class BookDraft:
    title: str
    publication_year: int
    author_id: str

    def to_row(self) -> dict:
        return {
            "titulo": self.title,
            "anio_publicacion": self.publication_year,
            "autor_id": self.author_id,
        }


@dataclass(frozen=True)
class Book:
    id: str
    title: str
    publication_year: int
    author_id: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Book":
        return cls(
            id=str(row["id"]),
            title=row.get("titulo") or "",
            publication_year=int(row.get("anio_publicacion") or 0),
            author_id=str(row.get("autor_id") or ""),
        )

    def to_row(self) -> dict:
        return {
            "id": self.id,
            "titulo": self.title,
            "anio_publicacion": self.publication_year,
            "autor_id": self.author_id,
        }


@dataclass(frozen=True)
class BookView:
    """Book as read for display, carrying the referenced author's name.

    The name is never persisted; it is recomputed on every fetch.
    """

    id: str
    title: str
    publication_year: int
    author_id: str
    author_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any], author_name: Optional[str] = None) -> "BookView":
        book = Book.from_row(row)
        if author_name is None:
            embedded = row.get("autores")
            if isinstance(embedded, Mapping):
                author_name = embedded.get("nombre")
        return cls(
            id=book.id,
            title=book.title,
            publication_year=book.publication_year,
            author_id=book.author_id,
            author_name=author_name,
        )

    def to_book(self) -> Book:
        return Book(
            id=self.id,
            title=self.title,
            publication_year=self.publication_year,
            author_id=self.author_id,
        )


def record_from_row(collection: str, row: Mapping[str, Any]):
    if collection == AUTHORS:
        return Author.from_row(row)
    if collection == BOOKS:
        return BookView.from_row(row)
    raise ValueError(f"unknown collection: {collection}")
