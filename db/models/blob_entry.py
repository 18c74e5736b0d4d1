"""
db/models/blob_entry.py

Key/value blob rows backing the snapshot store and settings.
"""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class BlobEntry(Base, TimestampMixin):
    __tablename__ = "blob_entries"

    key: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Fixed store key, e.g. adprofit_snapshots_v3",
    )
    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Opaque serialized payload",
    )
