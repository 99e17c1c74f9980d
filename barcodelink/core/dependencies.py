"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection for the running ScanRuntime.

The runtime is created in the application lifespan and stored on
app.state.runtime. Route handlers and the WebSocket endpoint reach it
through the dependencies below instead of module globals, so each
Application instance (including the ones built in tests) has its own
ledger, session and sync state.

Usage Examples:
--------------
    @router.get("/ledger")
    async def get_ledger(runtime: ScanRuntime = Depends(get_runtime)):
        return runtime.controller.snapshot()

    @app.websocket("/ws/scan")
    async def websocket_scan(
        websocket: WebSocket,
        runtime: ScanRuntime = Depends(get_runtime_ws)
    ):
        ...

==============================================================================
"""

from __future__ import annotations

import logging

from fastapi import Request, WebSocket

from barcodelink.core import exceptions
from barcodelink.services.runtime import ScanRuntime


# Module logger
logger = logging.getLogger(__name__)


def _runtime_from_state(state) -> ScanRuntime:
    runtime = getattr(state, "runtime", None)
    if runtime is None:
        logger.error("Runtime requested before application startup")
        raise exceptions.internal_error("Application is not ready")
    return runtime


def get_runtime(request: Request) -> ScanRuntime:
    """
    FastAPI dependency that provides the application runtime.

    Raises:
        AppException: If the application has not finished starting
    """
    return _runtime_from_state(request.app.state)


def get_runtime_ws(websocket: WebSocket) -> ScanRuntime:
    """FastAPI dependency providing the runtime to WebSocket endpoints."""
    return _runtime_from_state(websocket.app.state)
