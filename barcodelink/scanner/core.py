"""
==============================================================================
Barcode Decoder Module
==============================================================================

Decoder adapter over OpenCV and pyzbar.

Features:
---------
- Per-frame decode of every barcode visible in an image
- Single decode from a static image (upload or file)
- Live camera decode as a cancellable asyncio task

Live Decode Contract:
--------------------
Each frame is read and decoded in a worker thread; the next frame is not
requested until the previous decode has completed. Results are delivered
on the event loop thread, in frame order. Cancelling the handle stops the
loop at its next suspension point, so no result is delivered afterwards,
and releases the camera.

==============================================================================
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from pathlib import Path
from typing import Callable, List, Optional

import cv2
import numpy as np
from pyzbar.pyzbar import decode

from barcodelink.core import exceptions


# Module logger
logger = logging.getLogger(__name__)


ResultCallback = Callable[[str], None]


class LiveDecodeHandle:
    """
    Cancel handle for a running live decode.

    Args:
        task: The asyncio task driving the capture loop
    """

    def __init__(self, task: "asyncio.Task[None]") -> None:
        self._task = task
        self._cancel_requested = False

    @property
    def active(self) -> bool:
        return not self._task.done()

    def cancel(self) -> None:
        """Stop the capture loop. Safe to call more than once."""
        # A second cancel would interrupt the loop while it waits for the camera
        if not self._cancel_requested and not self._task.done():
            self._cancel_requested = True
            self._task.cancel()
            logger.debug("Live decode cancelled")

    async def wait_closed(self) -> None:
        """Wait until the capture loop has exited and the camera is released."""
        try:
            await self._task
        except asyncio.CancelledError:
            pass


class BarcodeDecoder:
    """
    Barcode decoder for frames, static images and a live camera.

    Attributes:
        camera_index: Camera device index used for live decode

    Example:
        >>> decoder = BarcodeDecoder()
        >>> decoder.decode_static(Path("label.jpg").read_bytes())
        '4006381333931'
        >>> handle = decoder.start_live_decode(print)
        >>> handle.cancel()
    """

    def __init__(self, camera_index: int = 0) -> None:
        self._camera_index = camera_index

        logger.debug(f"Decoder created (camera {camera_index})")

    @property
    def camera_index(self) -> int:
        return self._camera_index

    # =========================================================================
    # FRAME DECODING
    # =========================================================================

    def decode_frame(self, frame: Optional[np.ndarray]) -> List[str]:
        """
        Decode every barcode in a frame.

        Args:
            frame: OpenCV image (numpy array)

        Returns:
            Decoded strings in detection order (possibly empty)
        """
        if frame is None or frame.size == 0:
            return []

        try:
            barcodes = decode(frame)
        except Exception as e:
            logger.error(f"Decode error: {e}")
            return []

        codes = []
        for barcode in barcodes:
            try:
                codes.append(barcode.data.decode("utf-8"))
            except UnicodeDecodeError:
                logger.warning(f"Skipping non UTF-8 {barcode.type} barcode")

        return codes

    @staticmethod
    def bytes_from_base64(data: str) -> bytes:
        """
        Decode a base64 image payload.

        Data URLs ("data:image/png;base64,....") are accepted.

        Raises:
            AppException: INVALID_IMAGE if the payload is not valid base64
        """
        if "," in data and data.startswith("data:"):
            data = data.split(",", 1)[1]
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise exceptions.invalid_image(f"Invalid base64 image: {e}") from e

    @staticmethod
    def image_from_bytes(image_bytes: bytes) -> Optional[np.ndarray]:
        """Decode encoded image bytes (JPEG, PNG, ...) to a frame."""
        if not image_bytes:
            return None
        nparr = np.frombuffer(image_bytes, np.uint8)
        return cv2.imdecode(nparr, cv2.IMREAD_COLOR)

    def decode_static(self, image_bytes: bytes) -> str:
        """
        Decode a single barcode from a static image.

        Args:
            image_bytes: Encoded image data

        Returns:
            The first decoded barcode

        Raises:
            AppException: INVALID_IMAGE if the bytes are not an image
            AppException: DECODE_NOT_FOUND if no barcode is present
        """
        frame = self.image_from_bytes(image_bytes)
        if frame is None:
            raise exceptions.invalid_image()

        codes = self.decode_frame(frame)
        if not codes:
            raise exceptions.decode_not_found()

        return codes[0]

    def decode_file(self, image_path: Path) -> str:
        """Decode a single barcode from an image file."""
        if not image_path.exists():
            raise exceptions.invalid_image(f"Image not found: {image_path}")
        return self.decode_static(image_path.read_bytes())

    # =========================================================================
    # LIVE CAMERA
    # =========================================================================

    def start_live_decode(self, on_result: ResultCallback) -> LiveDecodeHandle:
        """
        Start decoding from the camera.

        Must be called from a running event loop.

        Args:
            on_result: Called on the loop thread with every decoded string

        Returns:
            Handle that cancels the capture

        Raises:
            AppException: CAMERA_UNAVAILABLE if the camera cannot be opened
        """
        cap = cv2.VideoCapture(self._camera_index)

        if not cap.isOpened():
            cap.release()
            logger.error(f"Cannot open camera {self._camera_index}")
            raise exceptions.camera_unavailable(self._camera_index)

        logger.info(f"📷 Starting live decode on camera {self._camera_index}")
        task = asyncio.get_running_loop().create_task(self._live_loop(cap, on_result))
        return LiveDecodeHandle(task)

    def _read_and_decode(self, cap) -> Optional[List[str]]:
        ret, frame = cap.read()
        if not ret:
            return None
        return self.decode_frame(frame)

    async def _live_loop(self, cap, on_result: ResultCallback) -> None:
        frame_count = 0
        read: Optional["asyncio.Future[Optional[List[str]]]"] = None

        try:
            while True:
                read = asyncio.ensure_future(asyncio.to_thread(self._read_and_decode, cap))
                codes = await asyncio.shield(read)
                if codes is None:
                    logger.warning("Failed to read frame, stopping live decode")
                    break

                frame_count += 1
                for code in codes:
                    on_result(code)

        finally:
            if read is not None and not read.done():
                # cap.read() is still running in the worker thread
                await asyncio.wait({read})
            cap.release()
            logger.info(f"📷 Live decode stopped after {frame_count} frames")
