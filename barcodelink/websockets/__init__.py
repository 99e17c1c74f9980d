"""
==============================================================================
WebSocket Package
==============================================================================

Real-time WebSocket handlers for barcode capture.

Handlers:
---------
- scanner: Capture session driven by client frames and typed codes

==============================================================================
"""

from .scanner import router as scanner_router

__all__ = ["scanner_router"]
