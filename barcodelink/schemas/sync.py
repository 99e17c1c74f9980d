"""
==============================================================================
Sync Schemas Module
==============================================================================

Response schemas for sync and connectivity endpoints.

==============================================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SyncResponse(BaseModel):
    """Result of a successful manual sync."""
    success: bool = True
    target: str
    sent: int = Field(ge=0)
    marked: int = Field(ge=0)
    unsynced: int = Field(ge=0)
    completed_at: datetime


class SyncStatusResponse(BaseModel):
    """Sync coordinator status."""
    success: bool = True
    in_flight: bool
    online: bool
    last_success_at: Optional[datetime] = None
    last_outcome: Optional[str] = None
    last_error: Optional[str] = None
    unsynced: int = Field(ge=0)
    auto_sync: bool
    remote_target: str


class ConnectivityUpdate(BaseModel):
    """Connectivity report from the client."""
    online: bool


class ConnectivityResponse(BaseModel):
    """Current connectivity flag."""
    success: bool = True
    online: bool
    changed_at: Optional[datetime] = None
