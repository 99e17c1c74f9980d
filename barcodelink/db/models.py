"""
==============================================================================
SQLAlchemy ORM Models Module
==============================================================================

The persistence adapter is a plain key-value blob store.

Database Schema:
---------------

    ┌─────────────────────────────────────────────────────────────────┐
    │                           kv_store                               │
    ├─────────────────────────────────────────────────────────────────┤
    │ key (VARCHAR, PK)                                               │
    │ value (TEXT, NOT NULL)                                          │
    │ updated_at (DATETIME, AUTO UPDATE)                              │
    └─────────────────────────────────────────────────────────────────┘

Known Keys:
----------
- barcodelink_items:    JSON list of ledger entries, ledger order
- barcodelink_settings: JSON object with the user configuration

=============================================================================
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from barcodelink.db.database import Base


ITEMS_KEY = "barcodelink_items"
SETTINGS_KEY = "barcodelink_settings"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredBlob(Base):
    """A single persisted value."""

    __tablename__ = "kv_store"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"StoredBlob(key={self.key!r}, size={len(self.value or '')})"
