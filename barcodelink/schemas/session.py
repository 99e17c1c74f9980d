"""
==============================================================================
Session Schemas Module
==============================================================================

Request and response schemas for the capture session endpoints.

==============================================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field

from barcodelink.ledger.models import CaptureMode
from barcodelink.schemas.ledger import LedgerEntryResponse

if TYPE_CHECKING:
    from barcodelink.session.controller import ScanResult, SessionState


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class StartSessionRequest(BaseModel):
    """Start a capture session."""
    mode: CaptureMode
    live: bool = Field(default=False, description="Also decode from the camera")


class ManualScanRequest(BaseModel):
    """Manually entered code. Surrounding whitespace is ignored."""
    code: str = Field(..., max_length=512)


class DecodeImageRequest(BaseModel):
    """Still image to decode, base64 encoded (data URLs accepted)."""
    image: str = Field(..., min_length=1)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class SessionStateResponse(BaseModel):
    """Current session state."""
    success: bool = True
    status: str
    mode: Optional[CaptureMode] = None
    started_at: Optional[datetime] = None
    live: bool = False
    entries: int = Field(ge=0)
    unsynced: int = Field(ge=0)
    durability_degraded: bool = False

    @classmethod
    def from_state(cls, state: SessionState) -> "SessionStateResponse":
        return cls(
            status=state.status.value,
            mode=state.mode,
            started_at=state.started_at,
            live=state.live,
            entries=state.entries,
            unsynced=state.unsynced,
            durability_degraded=state.durability_degraded,
        )


class ScanResultResponse(BaseModel):
    """Outcome of one submitted code."""
    success: bool = True
    outcome: str
    accepted: bool
    code: str
    entry: Optional[LedgerEntryResponse] = None

    @classmethod
    def from_result(cls, result: ScanResult) -> "ScanResultResponse":
        return cls(
            outcome=result.outcome.value,
            accepted=result.accepted,
            code=result.code,
            entry=LedgerEntryResponse.model_validate(result.entry) if result.entry else None,
        )
