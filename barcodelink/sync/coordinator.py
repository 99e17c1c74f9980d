"""
==============================================================================
Sync Coordinator Module
==============================================================================

Single-flight reconciliation of the ledger with a remote target.

Sync Flow:
---------
    sync(snapshot, target)
        │
        ├── in flight?          ─▶ SYNC_ALREADY_IN_FLIGHT
        ├── snapshot empty?     ─▶ SYNC_EMPTY_LEDGER
        ├── offline?            ─▶ SYNC_OFFLINE
        ├── no target?          ─▶ SYNC_TRANSPORT_ERROR
        │
        ▼  (in-flight flag held)
    writer.write(full snapshot)   ── one attempt, bounded by timeout
        │
        ├── failure ─▶ SYNC_TRANSPORT_ERROR   (ledger untouched)
        └── success ─▶ SyncAttempt(snapshot)  (caller applies mark_synced)

The precondition checks run before the first suspension point, so two
calls issued back to back on the loop can never both pass the in-flight
check. The flag is released in a finally block, except after a timeout:
then the abandoned write is cancelled and the flag stays held until it has
actually stopped, so a late write can never land after a newer one.

==============================================================================
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import FrozenSet, Optional, Sequence, Tuple

from barcodelink.core import exceptions
from barcodelink.core.exceptions import AppException
from barcodelink.ledger.models import LedgerEntry, utc_now
from barcodelink.sync.connectivity import ConnectivityMonitor
from barcodelink.sync.writers import RemoteWriter, RemoteWriterFactory


# Module logger
logger = logging.getLogger(__name__)


class SyncOutcome(str, enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SyncAttempt:
    """
    One completed remote write.

    Attributes:
        snapshot: Ledger snapshot the write was issued against
        target: Remote target address
        outcome: SUCCESS or FAILURE
        completed_at: When the attempt finished
        reason: Failure detail (None on success)
    """

    snapshot: Tuple[LedgerEntry, ...]
    target: str
    outcome: SyncOutcome
    completed_at: datetime
    reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == SyncOutcome.SUCCESS

    @property
    def entry_ids(self) -> FrozenSet[str]:
        return frozenset(entry.id for entry in self.snapshot)


class SyncCoordinator:
    """
    Issues remote writes with at-most-one in flight.

    Attributes:
        _connectivity: Network availability source
        _writers: Picks a writer for a target
        _timeout: Upper bound for one write

    Example:
        >>> coordinator = SyncCoordinator(ConnectivityMonitor())
        >>> attempt = await coordinator.sync(ledger.snapshot(), "/mnt/share/scans.txt")
        >>> ledger.mark_synced(attempt.snapshot)
    """

    def __init__(
        self,
        connectivity: ConnectivityMonitor,
        writers: Optional[RemoteWriterFactory] = None,
        timeout: float = 15.0,
        writer: Optional[RemoteWriter] = None,
    ) -> None:
        self._connectivity = connectivity
        self._writers = writers or RemoteWriterFactory(timeout=timeout)
        self._writer = writer
        self._timeout = timeout
        self._in_flight = False
        self._last_attempt: Optional[SyncAttempt] = None
        self._last_success_at: Optional[datetime] = None
        self._abandoned: Optional["asyncio.Task[None]"] = None

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def last_attempt(self) -> Optional[SyncAttempt]:
        return self._last_attempt

    @property
    def last_success_at(self) -> Optional[datetime]:
        return self._last_success_at

    # =========================================================================
    # SYNC
    # =========================================================================

    async def sync(
        self,
        snapshot: Sequence[LedgerEntry],
        target: str,
        device_id: str = "",
    ) -> SyncAttempt:
        """
        Write the full snapshot to target once.

        Args:
            snapshot: Ledger snapshot to transmit
            target: Remote target address
            device_id: Device identifier sent with the write

        Returns:
            The successful SyncAttempt; pass its snapshot to mark_synced

        Raises:
            AppException: SYNC_ALREADY_IN_FLIGHT, SYNC_EMPTY_LEDGER,
                SYNC_OFFLINE or SYNC_TRANSPORT_ERROR
        """
        if self._in_flight:
            raise exceptions.sync_already_in_flight()

        snapshot = tuple(snapshot)
        if not snapshot:
            raise exceptions.sync_empty_ledger()

        if not self._connectivity.is_online():
            raise exceptions.sync_offline()

        if not target:
            raise exceptions.sync_transport_error("No remote target configured")

        self._in_flight = True
        logger.info(f"🔄 Syncing {len(snapshot)} entries to {target}")

        write_task: Optional["asyncio.Task[None]"] = None

        try:
            writer = self._writer or self._writers.for_target(target)
            write_task = asyncio.ensure_future(writer.write(snapshot, target, device_id))
            done, _ = await asyncio.wait({write_task}, timeout=self._timeout)
            if not done:
                raise exceptions.sync_transport_error(
                    f"Timed out after {self._timeout:g}s", target
                )
            write_task.result()

        except AppException as e:
            self._last_attempt = SyncAttempt(
                snapshot=snapshot,
                target=target,
                outcome=SyncOutcome.FAILURE,
                completed_at=utc_now(),
                reason=e.message,
            )
            logger.warning(f"❌ Sync failed: {e.message}")
            raise

        finally:
            if write_task is not None and not write_task.done():
                # The flag stays held until the abandoned write stops touching the target
                write_task.cancel()
                self._abandoned = write_task
                write_task.add_done_callback(self._on_abandoned_done)
            else:
                self._in_flight = False

        attempt = SyncAttempt(
            snapshot=snapshot,
            target=target,
            outcome=SyncOutcome.SUCCESS,
            completed_at=utc_now(),
        )
        self._last_attempt = attempt
        self._last_success_at = attempt.completed_at

        logger.info(f"✅ Sync complete: {len(snapshot)} entries")
        return attempt

    def _on_abandoned_done(self, task: "asyncio.Task[None]") -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Abandoned write ended with: {task.exception()}")
        self._abandoned = None
        self._in_flight = False
        logger.info("Abandoned write finished, sync available again")

    async def aclose(self) -> None:
        if self._abandoned is not None:
            await asyncio.wait({self._abandoned})
        await self._writers.aclose()
