"""
==============================================================================
Ledger Package
==============================================================================

Scan events, ledger entries, the ledger itself and the scan debouncer.

Classes:
--------
- ScanLedger: Ordered ledger with single/series insertion policies
- ScanDebouncer: Drops repeated identical scans inside a time window
- LedgerEntry, ScanEvent, CaptureMode, ScanSource: Value types

==============================================================================
"""

from .models import CaptureMode, LedgerEntry, ScanEvent, ScanSource, utc_now
from .debouncer import ScanDebouncer
from .ledger import ScanLedger

__all__ = [
    "CaptureMode",
    "LedgerEntry",
    "ScanEvent",
    "ScanSource",
    "utc_now",
    "ScanDebouncer",
    "ScanLedger",
]
