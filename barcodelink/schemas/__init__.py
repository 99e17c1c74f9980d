"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Common: Shared response schemas
- Config: Persisted user configuration
- Ledger: Stored records and ledger responses
- Session: Capture session requests and responses
- Sync: Sync and connectivity responses

==============================================================================
"""

from .common import MessageResponse
from .config import AppConfig, AppConfigUpdate, generate_device_id
from .ledger import StoredLedgerEntry, LedgerEntryResponse, LedgerResponse
from .session import (
    StartSessionRequest,
    ManualScanRequest,
    DecodeImageRequest,
    SessionStateResponse,
    ScanResultResponse,
)
from .sync import (
    SyncResponse,
    SyncStatusResponse,
    ConnectivityUpdate,
    ConnectivityResponse,
)

__all__ = [
    # Common
    "MessageResponse",
    # Config
    "AppConfig",
    "AppConfigUpdate",
    "generate_device_id",
    # Ledger
    "StoredLedgerEntry",
    "LedgerEntryResponse",
    "LedgerResponse",
    # Session
    "StartSessionRequest",
    "ManualScanRequest",
    "DecodeImageRequest",
    "SessionStateResponse",
    "ScanResultResponse",
    # Sync
    "SyncResponse",
    "SyncStatusResponse",
    "ConnectivityUpdate",
    "ConnectivityResponse",
]
