"""
==============================================================================
Scanner Package - Barcode Decoding
==============================================================================

Barcode decoding with OpenCV and pyzbar.

Classes:
--------
- BarcodeDecoder: Frame, static image and live camera decoding
- LiveDecodeHandle: Cancel handle for a live decode

==============================================================================
"""

from .core import BarcodeDecoder, LiveDecodeHandle

__all__ = ["BarcodeDecoder", "LiveDecodeHandle"]
