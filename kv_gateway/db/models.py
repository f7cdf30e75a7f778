"""
SQLAlchemy ORM Model Definitions

Defines the database table backing the "database" KV store backend:
- kv_entries: Key-Value Entries Table
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, LargeBinary, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from kv_gateway.common.time import utc_now_naive


class Base(DeclarativeBase):
    """SQLAlchemy ORM Base Class"""
    pass


class KeyValueEntry(Base):
    """
    Key-Value Entries Table

    One row per key. Rows written by the unstructured endpoints carry a
    metadata record; rows written by the structured endpoints may carry an
    expiration instead.
    """
    __tablename__ = "kv_entries"

    # Key, primary key
    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    # Raw value bytes
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    # Metadata record (JSON); "metadata" is reserved on declarative classes
    entry_metadata: Mapped[Optional[Any]] = mapped_column(
        "metadata", JSON(none_as_null=True), nullable=True
    )
    # Expiration Time (UTC, naive), NULL means never expires
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    # Creation Time
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now_naive, nullable=False
    )
    # Update Time
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now_naive, onupdate=utc_now_naive, nullable=False
    )

    __table_args__ = (
        Index("idx_kv_entries_expires_at", "expires_at"),
    )
