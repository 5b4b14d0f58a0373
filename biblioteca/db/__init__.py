"""Database helpers (engine/session export)."""

from .session import Base, create_tables, get_engine, get_session

__all__ = ["Base", "create_tables", "get_engine", "get_session"]
