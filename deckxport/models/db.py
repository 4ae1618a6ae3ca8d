"""
SQLAlchemy ORM models for the persistent cache.

All namespaces share one table; the namespace column keeps their keyspaces
apart so equal keys in different namespaces never collide.
"""

from typing import Any

from sqlalchemy import JSON, Float, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CacheEntryDB(Base):
    """
    One cached payload.

    Rows are overwritten in place on refetch and removed only by an expiry
    sweep or an explicit clear.
    """

    __tablename__ = "cache_entries"
    __table_args__ = (Index("ix_cache_entries_namespace_captured", "namespace", "captured_at"),)

    namespace: Mapped[str] = mapped_column(String(64), primary_key=True)
    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    payload: Mapped[Any] = mapped_column(JSON)

    # Epoch seconds
    captured_at: Mapped[float] = mapped_column(Float)

    def __repr__(self) -> str:
        return f"<CacheEntryDB(namespace={self.namespace}, key={self.key})>"
