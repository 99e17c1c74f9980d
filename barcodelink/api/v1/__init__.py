"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- session: Capture session lifecycle and scan input
- ledger: Ledger listing, clearing and export
- sync: Manual sync and sync status
- settings: User configuration
- connectivity: Online/offline reporting

==============================================================================
"""

from . import health, session, ledger, sync, settings, connectivity

__all__ = ["health", "session", "ledger", "sync", "settings", "connectivity"]
