"""
==============================================================================
Session Package
==============================================================================

Capture session state machine.

Classes:
--------
- SessionController: Routes scan input into the ledger
- ScanResult, ScanOutcome: Per-submission outcome
- SessionState, SessionStatus: Read-only projection

==============================================================================
"""

from .controller import (
    ScanOutcome,
    ScanResult,
    SessionController,
    SessionState,
    SessionStatus,
)

__all__ = [
    "ScanOutcome",
    "ScanResult",
    "SessionController",
    "SessionState",
    "SessionStatus",
]
