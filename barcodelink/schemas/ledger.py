"""
==============================================================================
Ledger Schemas Module
==============================================================================

Persistence record and API response shapes for ledger entries.

Stored Record:
-------------
    {"id": "...", "code": "123", "timestamp": 1718000000000,
     "quantity": 2, "synced": false, "revision": 2}

timestamp is milliseconds since the epoch (UTC).

==============================================================================
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List

from pydantic import BaseModel, Field

from barcodelink.ledger.models import LedgerEntry


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MS = timedelta(milliseconds=1)


class StoredLedgerEntry(BaseModel):
    """Ledger entry as persisted in the blob store."""

    id: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    timestamp: int = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    synced: bool = False
    revision: int = Field(default=1, ge=1)

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "StoredLedgerEntry":
        return cls(
            id=entry.id,
            code=entry.code,
            timestamp=(entry.last_seen_at - EPOCH) // ONE_MS,
            quantity=entry.quantity,
            synced=entry.synced,
            revision=entry.revision,
        )

    def to_entry(self) -> LedgerEntry:
        return LedgerEntry(
            id=self.id,
            code=self.code,
            quantity=self.quantity,
            last_seen_at=EPOCH + self.timestamp * ONE_MS,
            synced=self.synced,
            revision=self.revision,
        )


class LedgerEntryResponse(BaseModel):
    """Ledger entry response."""

    id: str
    code: str
    quantity: int
    last_seen_at: datetime
    synced: bool

    class Config:
        from_attributes = True


class LedgerResponse(BaseModel):
    """Full ledger listing."""

    success: bool = True
    total: int = Field(ge=0)
    unsynced: int = Field(ge=0)
    entries: List[LedgerEntryResponse]
