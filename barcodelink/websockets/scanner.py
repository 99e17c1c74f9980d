"""
==============================================================================
Scanner WebSocket Module
==============================================================================

Real-time barcode capture via WebSocket connection.

Protocol:
---------
1. Client connects
2. Client sends {"type": "init", "mode": "single" | "series"}
   Server starts a capture session and replies {"type": "init", ...}
3. Client sends frames {"type": "frame", "frame": "<base64>"}
   and/or typed codes {"type": "manual", "code": "..."}
   Server replies {"type": "scan", ...} for every code it sees
4. Client sends {"type": "stop"} or disconnects; the session is stopped

Errors are reported as {"type": "error", "code": ..., "message": ...}.

==============================================================================
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from barcodelink.core.dependencies import get_runtime_ws
from barcodelink.core.exceptions import AppException
from barcodelink.ledger.models import CaptureMode, ScanSource
from barcodelink.schemas.session import ScanResultResponse, SessionStateResponse
from barcodelink.services.runtime import ScanRuntime
from barcodelink.session.controller import ScanResult


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter()


class ScannerWebSocketHandler:
    """
    Handler for barcode capture WebSocket connections.

    Manages the lifecycle of a capture session including:
    - Session start on init
    - Frame decoding and manual entry
    - Scan outcome reporting
    - Session stop on stop or disconnect
    """

    def __init__(self, websocket: WebSocket, runtime: ScanRuntime):
        self._websocket = websocket
        self._session = runtime.controller
        self._decoder = runtime.decoder
        self._session_id: Optional[int] = None

    async def send_error(self, message: str, code: str = "ERROR") -> None:
        """Send error message to client."""
        await self._websocket.send_json({
            "type": "error",
            "code": code,
            "message": message
        })

    async def send_results(self, results: List[ScanResult]) -> None:
        """Send one scan message per submitted code."""
        for result in results:
            payload = ScanResultResponse.from_result(result).model_dump(mode="json")
            payload["type"] = "scan"
            await self._websocket.send_json(payload)

    async def handle_init(self, data: dict) -> bool:
        """Handle init message from client."""
        if data.get("type") != "init":
            await self.send_error("Expected init message", "INIT_REQUIRED")
            return False

        try:
            mode = CaptureMode(data.get("mode", CaptureMode.SINGLE.value))
        except ValueError:
            await self.send_error(f"Unknown mode: {data.get('mode')}", "INVALID_MODE")
            return False

        try:
            state = self._session.start(mode)
        except AppException as e:
            await self.send_error(e.message, e.code)
            return False

        self._session_id = self._session.session_id
        logger.info(f"Init: mode={mode}")

        payload = SessionStateResponse.from_state(state).model_dump(mode="json")
        payload["type"] = "init"
        await self._websocket.send_json(payload)
        return True

    async def handle_frame(self, data: dict) -> None:
        """Handle frame message from client."""
        try:
            image_bytes = self._decoder.bytes_from_base64(data.get("frame") or "")
        except AppException as e:
            await self.send_error(e.message, e.code)
            return

        frame = self._decoder.image_from_bytes(image_bytes)
        if frame is None:
            return

        codes = await asyncio.to_thread(self._decoder.decode_frame, frame)
        results = [self._session.submit(code, source=ScanSource.FRAME) for code in codes]
        await self.send_results(results)

    async def handle_manual(self, data: dict) -> None:
        """Handle manually typed code from client."""
        result = self._session.submit(str(data.get("code") or ""), source=ScanSource.MANUAL)
        await self.send_results([result])

    def _stop_session(self) -> None:
        # Leave sessions started elsewhere after ours was stopped
        if self._session_id == self._session.session_id and self._session.is_capturing:
            self._session.stop()
        self._session_id = None

    async def run(self) -> None:
        """Main handler loop."""
        await self._websocket.accept()
        logger.info("📱 Scanner WebSocket connected")

        try:
            # Wait for init message
            init_data = await self._websocket.receive_json()
            if not await self.handle_init(init_data):
                await self._websocket.close()
                return

            while True:
                data = await self._websocket.receive_json()
                message_type = data.get("type")

                if message_type == "frame":
                    await self.handle_frame(data)

                elif message_type == "manual":
                    await self.handle_manual(data)

                elif message_type == "stop":
                    logger.info("🛑 Client requested stop")
                    self._stop_session()
                    await self._websocket.close()
                    break

                else:
                    await self.send_error(f"Unknown message type: {message_type}", "UNKNOWN_MESSAGE")

        except WebSocketDisconnect:
            logger.info("📱 Client disconnected")
        finally:
            self._stop_session()
            logger.info("✅ Scanner WebSocket closed")


@router.websocket("/ws/scan")
async def websocket_scan(
    websocket: WebSocket,
    runtime: ScanRuntime = Depends(get_runtime_ws)
):
    """Real-time barcode capture via WebSocket."""
    handler = ScannerWebSocketHandler(websocket, runtime)
    await handler.run()
