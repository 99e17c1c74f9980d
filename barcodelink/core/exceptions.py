"""
Application Exception Handling

Single AppException class for all application errors with FastAPI integration.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Unified application exception for all error scenarios.

    Provides consistent error response format across the entire API.

    Usage:
        raise AppException("Capture session already active", "SESSION_ALREADY_ACTIVE", 409)
        raise AppException("Remote write failed", "SYNC_TRANSPORT_ERROR", 502, {"detail": "timeout"})

    Error Codes:
        Session:
            - SESSION_ALREADY_ACTIVE (409)
            - SESSION_NOT_ACTIVE (409)

        Decoder:
            - DECODE_NOT_FOUND (404)
            - INVALID_IMAGE (400)
            - CAMERA_UNAVAILABLE (503)

        Sync:
            - SYNC_ALREADY_IN_FLIGHT (409)
            - SYNC_EMPTY_LEDGER (400)
            - SYNC_OFFLINE (503)
            - SYNC_TRANSPORT_ERROR (502)

        General:
            - INTERNAL_ERROR (500)

    Empty or duplicate scans are not errors: the session controller reports
    them as silent scan outcomes.
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "SYNC_OFFLINE")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    FastAPI exception handler for AppException.

    Converts AppException to consistent JSON error response.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def session_already_active(mode: str) -> AppException:
    """Create session already active exception."""
    return AppException(
        "A capture session is already active",
        "SESSION_ALREADY_ACTIVE",
        409,
        {"mode": mode}
    )


def session_not_active() -> AppException:
    """Create session not active exception."""
    return AppException("No capture session is active", "SESSION_NOT_ACTIVE", 409)


def decode_not_found() -> AppException:
    """Create no barcode found exception."""
    return AppException("No barcode found in image", "DECODE_NOT_FOUND", 404)


def invalid_image(reason: str = "Could not read image data") -> AppException:
    """Create invalid image exception."""
    return AppException(reason, "INVALID_IMAGE", 400)


def camera_unavailable(camera_index: int) -> AppException:
    """Create camera unavailable exception."""
    return AppException(
        f"Cannot open camera {camera_index}",
        "CAMERA_UNAVAILABLE",
        503,
        {"camera_index": camera_index}
    )


def sync_already_in_flight() -> AppException:
    """Create sync already in flight exception."""
    return AppException(
        "A sync is already in progress",
        "SYNC_ALREADY_IN_FLIGHT",
        409
    )


def sync_empty_ledger() -> AppException:
    """Create empty ledger exception."""
    return AppException("Ledger is empty, nothing to sync", "SYNC_EMPTY_LEDGER", 400)


def sync_offline() -> AppException:
    """Create offline exception."""
    return AppException("No network connection", "SYNC_OFFLINE", 503)


def sync_transport_error(detail: str, target: Optional[str] = None) -> AppException:
    """Create remote write failure exception."""
    details = {"detail": detail}
    if target:
        details["target"] = target
    return AppException(
        f"Remote write failed: {detail}",
        "SYNC_TRANSPORT_ERROR",
        502,
        details
    )


def internal_error(message: str = "Internal server error") -> AppException:
    """Create internal server error exception."""
    return AppException(message, "INTERNAL_ERROR", 500)
