"""
==============================================================================
Services Package - Business Logic Layer
==============================================================================

Service classes wiring the core components together.

This package provides:
- ConfigService: Active user configuration
- SyncService: Manual and automatic ledger sync
- ScanRuntime: Composition root for a running instance

Architecture Pattern: Service Layer
----------------------------------
    ┌─────────────────┐
    │   API Router    │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │    Service      │  ← Orchestration
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │ Session / Sync  │  ← Core state machines
    └─────────────────┘

==============================================================================
"""

from .config_service import ConfigService
from .sync_service import SyncService
from .runtime import ScanRuntime

__all__ = [
    "ConfigService",
    "SyncService",
    "ScanRuntime",
]
