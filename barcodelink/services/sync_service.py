"""
==============================================================================
Sync Service Module
==============================================================================

Connects the session controller, the sync coordinator and the user
configuration.

Manual Sync:
-----------
sync_now() takes a snapshot from the controller, hands it to the
coordinator with the configured target, and on success passes the same
snapshot back to controller.mark_synced(). Errors propagate to the caller.

Auto Sync:
---------
When auto_sync is enabled, every accepted scan schedules a background sync,
unless one is already queued and will pick the scan up in its snapshot.
A scan that arrives while a sync is in flight sets a pending flag and the
sync is repeated once the current one finishes. Background failures are
logged, never raised.

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Set

from barcodelink.core.exceptions import AppException
from barcodelink.ledger.models import LedgerEntry
from barcodelink.services.config_service import ConfigService
from barcodelink.session.controller import SessionController
from barcodelink.sync.coordinator import SyncAttempt, SyncCoordinator


# Module logger
logger = logging.getLogger(__name__)


class SyncService:
    """
    Service for manual and automatic ledger sync.

    Example:
        >>> service = SyncService(controller, coordinator, config_service)
        >>> attempt = await service.sync_now()
    """

    def __init__(
        self,
        controller: SessionController,
        coordinator: SyncCoordinator,
        config_service: ConfigService,
    ) -> None:
        self._controller = controller
        self._coordinator = coordinator
        self._config_service = config_service
        self._tasks: Set["asyncio.Task[None]"] = set()
        self._pending = False

    @property
    def coordinator(self) -> SyncCoordinator:
        return self._coordinator

    # =========================================================================
    # MANUAL SYNC
    # =========================================================================

    async def sync_now(self) -> SyncAttempt:
        """
        Sync the current ledger to the configured target.

        Raises:
            AppException: Any sync error from the coordinator
        """
        config = self._config_service.config
        snapshot = self._controller.snapshot()

        try:
            attempt = await self._coordinator.sync(
                snapshot, config.remote_target, config.device_id
            )
        finally:
            self._schedule_pending()

        self._controller.mark_synced(attempt.snapshot)
        return attempt

    # =========================================================================
    # AUTO SYNC
    # =========================================================================

    def on_entry(self, entry: LedgerEntry) -> None:
        """Session listener: schedule an auto-sync after an accepted scan."""
        if not self._config_service.config.auto_sync:
            return

        if self._coordinator.in_flight:
            self._pending = True
            return

        if any(not task.done() for task in self._tasks):
            # A queued sync has not taken its snapshot yet
            return

        self._spawn()

    def _schedule_pending(self) -> None:
        if self._pending and self._config_service.config.auto_sync:
            self._pending = False
            self._spawn()

    def _spawn(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop, auto-sync skipped")
            return

        task = loop.create_task(self._auto_sync())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _auto_sync(self) -> None:
        try:
            await self.sync_now()
        except AppException as e:
            logger.warning(f"Auto-sync skipped: {e.code} {e.message}")

    # =========================================================================
    # STATUS / SHUTDOWN
    # =========================================================================

    def status(self) -> dict:
        attempt: Optional[SyncAttempt] = self._coordinator.last_attempt
        return {
            "in_flight": self._coordinator.in_flight,
            "last_success_at": self._coordinator.last_success_at,
            "last_outcome": attempt.outcome.value if attempt else None,
            "last_error": attempt.reason if attempt else None,
            "unsynced": self._controller.state().unsynced,
            "auto_sync": self._config_service.config.auto_sync,
            "remote_target": self._config_service.config.remote_target,
        }

    async def aclose(self) -> None:
        """Wait for background syncs to finish, then close transports."""
        # A finishing sync may schedule a pending follow-up
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        await self._coordinator.aclose()
