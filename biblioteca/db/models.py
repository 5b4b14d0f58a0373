"""SQLAlchemy model for the local key-value snapshots."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, String, JSON, func

from .session import Base


class StorageEntry(Base):
    __tablename__ = "local_storage"

    key = Column(String(128), primary_key=True)
    value = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
