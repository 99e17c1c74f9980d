"""
==============================================================================
Capture Session Endpoints
==============================================================================

Start and stop capture sessions and submit codes.

Every input channel (manual entry, uploaded image, live camera) ends up in
SessionController.submit(). Empty and duplicate codes are acknowledged with
their outcome, never rejected with an error.

==============================================================================
"""

import asyncio
import logging

from fastapi import APIRouter, Depends

from barcodelink.core.dependencies import get_runtime
from barcodelink.ledger.models import ScanSource
from barcodelink.services.runtime import ScanRuntime
from barcodelink.schemas.session import (
    StartSessionRequest,
    ManualScanRequest,
    DecodeImageRequest,
    SessionStateResponse,
    ScanResultResponse,
)


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["Session"])


class CaptureSessionController:
    """Controller for capture session operations."""

    def __init__(self, runtime: ScanRuntime):
        self._session = runtime.controller
        self._decoder = runtime.decoder

    def get_state(self) -> SessionStateResponse:
        """Get current session state."""
        return SessionStateResponse.from_state(self._session.state())

    def start(self, data: StartSessionRequest) -> SessionStateResponse:
        """Start a capture session."""
        return SessionStateResponse.from_state(self._session.start(data.mode, live=data.live))

    def stop(self) -> SessionStateResponse:
        """Stop the capture session."""
        return SessionStateResponse.from_state(self._session.stop())

    def scan(self, data: ManualScanRequest) -> ScanResultResponse:
        """Submit a manually entered code."""
        result = self._session.submit(data.code, source=ScanSource.MANUAL)
        return ScanResultResponse.from_result(result)

    async def decode(self, data: DecodeImageRequest) -> ScanResultResponse:
        """Decode a still image and submit the first barcode found."""
        image_bytes = self._decoder.bytes_from_base64(data.image)
        code = await asyncio.to_thread(self._decoder.decode_static, image_bytes)

        logger.info(f"📷 Decoded {code} from uploaded image")
        result = self._session.submit(code, source=ScanSource.IMAGE)
        return ScanResultResponse.from_result(result)


@router.get("", response_model=SessionStateResponse)
async def get_session(runtime: ScanRuntime = Depends(get_runtime)):
    """Get the capture session state."""
    controller = CaptureSessionController(runtime)
    return controller.get_state()


@router.post("/start", response_model=SessionStateResponse)
async def start_session(
    data: StartSessionRequest,
    runtime: ScanRuntime = Depends(get_runtime)
):
    """
    Start a capture session in SINGLE or SERIES mode.

    With live=true the server camera is opened and decoded continuously.
    """
    controller = CaptureSessionController(runtime)
    return controller.start(data)


@router.post("/stop", response_model=SessionStateResponse)
async def stop_session(runtime: ScanRuntime = Depends(get_runtime)):
    """Stop the capture session. Live capture is cancelled first."""
    controller = CaptureSessionController(runtime)
    return controller.stop()


@router.post("/scan", response_model=ScanResultResponse)
async def submit_scan(
    data: ManualScanRequest,
    runtime: ScanRuntime = Depends(get_runtime)
):
    """Submit a manually entered code."""
    controller = CaptureSessionController(runtime)
    return controller.scan(data)


@router.post("/decode", response_model=ScanResultResponse)
async def decode_image(
    data: DecodeImageRequest,
    runtime: ScanRuntime = Depends(get_runtime)
):
    """Decode a base64 still image and submit its barcode."""
    controller = CaptureSessionController(runtime)
    return await controller.decode(data)
