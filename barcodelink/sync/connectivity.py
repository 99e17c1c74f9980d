"""
==============================================================================
Connectivity Monitor Module
==============================================================================

Tracks whether the device currently has a network path.

The scanning client reports its own online/offline transitions (the same
signal a browser exposes as online/offline events). The sync coordinator
reads the flag synchronously before every remote write.

==============================================================================
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from barcodelink.ledger.models import utc_now


# Module logger
logger = logging.getLogger(__name__)


class ConnectivityMonitor:
    """
    Online/offline flag with change tracking.

    Example:
        >>> monitor = ConnectivityMonitor()
        >>> monitor.set_online(False)
        >>> monitor.is_online()
        False
    """

    def __init__(self, online: bool = True) -> None:
        self._online = online
        self._changed_at: Optional[datetime] = None

    def is_online(self) -> bool:
        return self._online

    @property
    def changed_at(self) -> Optional[datetime]:
        return self._changed_at

    def set_online(self, online: bool) -> None:
        if online == self._online:
            return

        self._online = online
        self._changed_at = utc_now()
        logger.info("🌐 Network online" if online else "📴 Network offline")
