"""
==============================================================================
Scan Debouncer Module
==============================================================================

Suppresses repeated identical decode events that arrive faster than a
person could have presented the item again.

Only the last accepted code is remembered: scanning A, then B, then A
accepts all three, because the second A no longer matches the last code.

==============================================================================
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from .models import as_utc


# Module logger
logger = logging.getLogger(__name__)


DEFAULT_SUPPRESSION_WINDOW_MS = 2000


class ScanDebouncer:
    """
    Accept/drop decision for incoming scan codes.

    Attributes:
        window: Suppression window for repeats of the last accepted code

    Example:
        >>> debouncer = ScanDebouncer(window_ms=2000)
        >>> debouncer.accept("123", t0)
        True
        >>> debouncer.accept("123", t0 + timedelta(milliseconds=500))
        False
    """

    def __init__(self, window_ms: int = DEFAULT_SUPPRESSION_WINDOW_MS) -> None:
        self._window = timedelta(milliseconds=window_ms)
        self._last_code: Optional[str] = None
        self._last_at: Optional[datetime] = None

    @property
    def window(self) -> timedelta:
        return self._window

    @property
    def last_accepted_code(self) -> Optional[str]:
        return self._last_code

    def accept(self, code: str, now: datetime) -> bool:
        """
        Decide whether a code should reach the ledger.

        Args:
            code: Trimmed barcode content
            now: Observation time of the event

        Returns:
            True if accepted (memory updated), False if it must be dropped
        """
        now = as_utc(now)

        if (
            code == self._last_code
            and self._last_at is not None
            and now - self._last_at < self._window
        ):
            logger.debug(f"Debounced repeat of {code}")
            return False

        self._last_code = code
        self._last_at = now
        return True

    def reset(self) -> None:
        """Forget the last accepted code."""
        self._last_code = None
        self._last_at = None
