"""
==============================================================================
Ledger Models Module
==============================================================================

Pydantic models for scan events and ledger entries.

Entries are immutable values: every mutation produces a replacement entry
via model_copy, so a snapshot can be handed to export, display or sync
without copying.

==============================================================================
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CaptureMode(str, enum.Enum):
    """
    Aggregation policy for a capture session.

    - SINGLE: every accepted scan creates a new entry
    - SERIES: repeated scans of a code increment its quantity
    """

    SINGLE = "single"
    SERIES = "series"

    def __str__(self) -> str:
        """Return the enum value as string."""
        return self.value


class ScanSource(str, enum.Enum):
    """Where a scan event came from. Informational only."""

    CAMERA = "camera"
    FRAME = "frame"
    IMAGE = "image"
    MANUAL = "manual"

    def __str__(self) -> str:
        return self.value


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_entry_id() -> str:
    """Generate a fresh ledger entry id."""
    return str(uuid.uuid4())


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ScanEvent(BaseModel):
    """
    A single decoded or typed barcode, consumed immediately by the session.

    Attributes:
        code: Trimmed, non-empty barcode content
        observed_at: When the code was observed
        source: Input channel the code arrived on
    """

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=1)
    observed_at: datetime = Field(default_factory=utc_now)
    source: ScanSource = ScanSource.MANUAL

    @field_validator("observed_at")
    @classmethod
    def ensure_aware(cls, value: datetime) -> datetime:
        return as_utc(value)


class LedgerEntry(BaseModel):
    """
    One line of the scan ledger.

    Attributes:
        id: Unique id assigned at creation, never reused
        code: Barcode content
        quantity: Number of accepted scans aggregated into this entry
        last_seen_at: Time of the most recent accepted scan
        synced: True only after a sync that observed this exact revision
        revision: Incremented on every scan mutation
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_entry_id)
    code: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)
    last_seen_at: datetime = Field(default_factory=utc_now)
    synced: bool = False
    revision: int = Field(default=1, ge=1)

    @field_validator("last_seen_at")
    @classmethod
    def ensure_aware(cls, value: datetime) -> datetime:
        """Treat naive datetimes as UTC."""
        return as_utc(value)

    @classmethod
    def create(cls, event: ScanEvent) -> "LedgerEntry":
        """Create a fresh entry for an accepted event."""
        return cls(code=event.code, last_seen_at=event.observed_at)

    def touched(self, observed_at: datetime) -> "LedgerEntry":
        """Return the entry after one more accepted scan of its code."""
        return self.model_copy(update={
            "quantity": self.quantity + 1,
            "last_seen_at": observed_at,
            "synced": False,
            "revision": self.revision + 1,
        })

    def as_synced(self) -> "LedgerEntry":
        """Return the entry with its synced flag set."""
        return self.model_copy(update={"synced": True})

    def matches_revision(self, other: Optional["LedgerEntry"]) -> bool:
        """Check that other is the same entry at the same revision."""
        return (
            other is not None
            and other.id == self.id
            and other.revision == self.revision
        )
