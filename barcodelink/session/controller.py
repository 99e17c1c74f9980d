"""
==============================================================================
Capture Session Controller Module
==============================================================================

State machine that routes scan input into the ledger.

State Machine:
-------------

┌──────┐   start(mode)   ┌────────────────────┐
│ IDLE │ ──────────────▶ │ CAPTURING(mode)    │ ──┐ submit(code)
└──────┘ ◀────────────── └────────────────────┘ ◀─┘
              stop()

Event Flow (CAPTURING):
----------------------
    raw code ─▶ trim ─▶ empty? ─────────────▶ REJECTED_EMPTY
                          │
                          ▼
                     debouncer.accept ─ no ──▶ DEBOUNCED
                          │ yes
                          ▼
                     ledger.apply(event, mode) ─▶ persist ─▶ listeners
                          │
                          ▼
                       ACCEPTED

Events are handled one at a time on the event loop thread, so an event
accepted by the debouncer is applied before any other event is looked at.
Stopping a session cancels the live decode before entering IDLE.

Ownership:
---------
The controller is the only writer of the ledger. Sync results come back in
through mark_synced(); everything else reads snapshots.

==============================================================================
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from barcodelink.core import exceptions
from barcodelink.db.store import LedgerRepository
from barcodelink.ledger import (
    CaptureMode,
    LedgerEntry,
    ScanDebouncer,
    ScanEvent,
    ScanLedger,
    ScanSource,
    utc_now,
)
from barcodelink.scanner import BarcodeDecoder, LiveDecodeHandle


# Module logger
logger = logging.getLogger(__name__)


EntryListener = Callable[[LedgerEntry], None]


class SessionStatus(str, enum.Enum):
    """Capture session status."""

    IDLE = "idle"
    CAPTURING = "capturing"

    def __str__(self) -> str:
        return self.value


class ScanOutcome(str, enum.Enum):
    """
    What happened to a submitted code.

    Only ACCEPTED changes the ledger. The other outcomes are silent drops,
    reported for logging and acknowledgement but never raised.
    """

    ACCEPTED = "accepted"
    REJECTED_EMPTY = "rejected_empty"
    DEBOUNCED = "debounced"
    IGNORED_IDLE = "ignored_idle"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ScanResult:
    """Result of submitting one raw code."""

    outcome: ScanOutcome
    code: str
    entry: Optional[LedgerEntry] = None

    @property
    def accepted(self) -> bool:
        return self.outcome == ScanOutcome.ACCEPTED


@dataclass(frozen=True)
class SessionState:
    """Read-only projection of the controller."""

    status: SessionStatus
    mode: Optional[CaptureMode]
    started_at: Optional[datetime]
    live: bool
    entries: int
    unsynced: int
    durability_degraded: bool


class SessionController:
    """
    Capture session state machine and ledger owner.

    Attributes:
        _ledger: The scan ledger (exclusively owned)
        _debouncer: Duplicate suppression
        _repository: Ledger persistence (optional)
        _decoder: Decoder adapter for live capture (optional)

    Example:
        >>> controller = SessionController()
        >>> controller.start(CaptureMode.SERIES)
        >>> controller.submit("123").outcome
        <ScanOutcome.ACCEPTED: 'accepted'>
        >>> controller.stop()
    """

    def __init__(
        self,
        ledger: Optional[ScanLedger] = None,
        debouncer: Optional[ScanDebouncer] = None,
        repository: Optional[LedgerRepository] = None,
        decoder: Optional[BarcodeDecoder] = None,
    ) -> None:
        self._repository = repository
        self._decoder = decoder
        self._debouncer = debouncer or ScanDebouncer()

        if ledger is None:
            entries = repository.load_entries() if repository else []
            ledger = ScanLedger.from_entries(entries)
        self._ledger = ledger

        self._status = SessionStatus.IDLE
        self._mode: Optional[CaptureMode] = None
        self._started_at: Optional[datetime] = None
        self._session_id = 0
        self._live_handle: Optional[LiveDecodeHandle] = None
        self._listeners: List[EntryListener] = []
        self._durability_degraded = False

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def mode(self) -> Optional[CaptureMode]:
        return self._mode

    @property
    def is_capturing(self) -> bool:
        return self._status == SessionStatus.CAPTURING

    @property
    def session_id(self) -> int:
        """Number of the current or most recent session, bumped on every start."""
        return self._session_id

    @property
    def durability_degraded(self) -> bool:
        """True while the last ledger save failed."""
        return self._durability_degraded

    def add_listener(self, listener: EntryListener) -> None:
        """Register a callback for every accepted entry."""
        self._listeners.append(listener)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self, mode: CaptureMode, live: bool = False) -> SessionState:
        """
        Start a capture session.

        Args:
            mode: Aggregation policy, fixed for the session
            live: Also start decoding from the camera

        Raises:
            AppException: SESSION_ALREADY_ACTIVE if capturing
            AppException: CAMERA_UNAVAILABLE if live capture cannot start
        """
        if self.is_capturing:
            raise exceptions.session_already_active(str(self._mode))

        mode = CaptureMode(mode)

        if live:
            if self._decoder is None:
                raise exceptions.AppException(
                    "Live capture is not configured", "CAMERA_UNAVAILABLE", 503
                )
            self._live_handle = self._decoder.start_live_decode(self._on_live_result)

        self._debouncer.reset()
        self._status = SessionStatus.CAPTURING
        self._mode = mode
        self._started_at = utc_now()
        self._session_id += 1

        logger.info(f"▶️ Capture session started ({mode}{', live' if live else ''})")
        return self.state()

    def stop(self) -> SessionState:
        """
        Stop the capture session.

        Raises:
            AppException: SESSION_NOT_ACTIVE if idle
        """
        if not self.is_capturing:
            raise exceptions.session_not_active()

        if self._live_handle is not None:
            self._live_handle.cancel()
            self._live_handle = None

        logger.info(f"⏹️ Capture session stopped ({self._mode}, {len(self._ledger)} entries)")

        self._status = SessionStatus.IDLE
        self._mode = None
        self._started_at = None
        return self.state()

    @property
    def live_handle(self) -> Optional[LiveDecodeHandle]:
        return self._live_handle

    # =========================================================================
    # EVENT HANDLING
    # =========================================================================

    def submit(
        self,
        code: str,
        observed_at: Optional[datetime] = None,
        source: ScanSource = ScanSource.MANUAL,
    ) -> ScanResult:
        """
        Route one raw code through rejection, debounce and the ledger.

        Camera, frame, image and manual input all take this same path.

        Args:
            code: Raw decoded or typed code
            observed_at: Observation time (now if None)
            source: Input channel

        Returns:
            ScanResult describing the outcome
        """
        code = (code or "").strip()

        if not code:
            logger.debug(f"Dropped empty {source} input")
            return ScanResult(ScanOutcome.REJECTED_EMPTY, code)

        if not self.is_capturing:
            logger.debug(f"Dropped {code} from {source}: no active session")
            return ScanResult(ScanOutcome.IGNORED_IDLE, code)

        event = ScanEvent(code=code, observed_at=observed_at or utc_now(), source=source)

        if not self._debouncer.accept(event.code, event.observed_at):
            return ScanResult(ScanOutcome.DEBOUNCED, code)

        entry = self._ledger.apply(event, self._mode)
        logger.info(f"✓ Scanned {code} ({source}) qty={entry.quantity}")

        self._persist()
        self._notify(entry)

        return ScanResult(ScanOutcome.ACCEPTED, code, entry)

    def _on_live_result(self, code: str) -> None:
        self.submit(code, source=ScanSource.CAMERA)

    def _notify(self, entry: LedgerEntry) -> None:
        for listener in self._listeners:
            try:
                listener(entry)
            except Exception as e:
                logger.error(f"Scan listener failed: {e}")

    # =========================================================================
    # LEDGER ACCESS
    # =========================================================================

    def snapshot(self) -> Tuple[LedgerEntry, ...]:
        return self._ledger.snapshot()

    def mark_synced(self, snapshot: Tuple[LedgerEntry, ...]) -> int:
        """
        Apply a successful sync to the ledger.

        Args:
            snapshot: The snapshot the sync transmitted

        Returns:
            Number of entries marked synced
        """
        marked = self._ledger.mark_synced(snapshot)
        if marked:
            self._persist()
        logger.info(f"☁️ Marked {marked}/{len(snapshot)} entries synced")
        return marked

    def clear(self) -> int:
        """Empty the ledger. Irreversible."""
        removed = self._ledger.clear()
        self._persist()
        logger.info(f"🗑️ Cleared {removed} ledger entries")
        return removed

    def state(self) -> SessionState:
        return SessionState(
            status=self._status,
            mode=self._mode,
            started_at=self._started_at,
            live=self._live_handle is not None and self._live_handle.active,
            entries=len(self._ledger),
            unsynced=self._ledger.unsynced_count,
            durability_degraded=self._durability_degraded,
        )

    def _persist(self) -> None:
        if self._repository is None:
            return

        saved = self._repository.save_entries(self._ledger.snapshot())
        if not saved and not self._durability_degraded:
            logger.warning("⚠️ Ledger is no longer being persisted; changes live in memory only")
        self._durability_degraded = not saved
