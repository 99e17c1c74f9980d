"""
==============================================================================
Scan Ledger Module
==============================================================================

Ordered collection of scanned items, most recently touched first.

Insertion Policies:
------------------
- SINGLE: every accepted event becomes a new entry at the front
- SERIES: an existing entry for the code is removed, incremented and
          reinserted at the front; otherwise a new entry is created

Sync Reconciliation:
-------------------
mark_synced() only flips entries whose id AND revision match the snapshot
a sync was issued against. Any scan after the snapshot bumps the revision
and clears the synced flag, so a late success never marks a changed entry.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .models import CaptureMode, LedgerEntry, ScanEvent


# Module logger
logger = logging.getLogger(__name__)


class ScanLedger:
    """
    In-memory scan ledger.

    The ledger itself performs no I/O and never fails on well-formed
    input. Empty codes are rejected before they get here.

    Example:
        >>> ledger = ScanLedger()
        >>> ledger.apply(ScanEvent(code="123"), CaptureMode.SERIES)
        >>> ledger.apply(ScanEvent(code="123"), CaptureMode.SERIES).quantity
        2
    """

    def __init__(self, entries: Optional[Iterable[LedgerEntry]] = None) -> None:
        self._entries: List[LedgerEntry] = list(entries or [])

    @classmethod
    def from_entries(cls, entries: Iterable[LedgerEntry]) -> "ScanLedger":
        """Hydrate a ledger from persisted entries (already in ledger order)."""
        return cls(entries)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def apply(self, event: ScanEvent, mode: CaptureMode) -> LedgerEntry:
        """
        Apply an accepted scan event.

        Args:
            event: Accepted scan event
            mode: Capture mode of the active session

        Returns:
            The created or updated entry
        """
        if mode == CaptureMode.SERIES:
            index = self._find_code(event.code)
            if index is not None:
                existing = self._entries.pop(index)
                entry = existing.touched(event.observed_at)
                self._entries.insert(0, entry)
                return entry

        entry = LedgerEntry.create(event)
        self._entries.insert(0, entry)
        return entry

    def mark_synced(self, snapshot: Iterable[LedgerEntry]) -> int:
        """
        Mark entries captured by a successful sync.

        Args:
            snapshot: The entries the sync transmitted

        Returns:
            Number of entries whose synced flag was set
        """
        sent: Dict[str, LedgerEntry] = {entry.id: entry for entry in snapshot}
        marked = 0

        for index, entry in enumerate(self._entries):
            if entry.synced or not entry.matches_revision(sent.get(entry.id)):
                continue
            self._entries[index] = entry.as_synced()
            marked += 1

        return marked

    def clear(self) -> int:
        """Remove every entry. Returns the number removed."""
        count = len(self._entries)
        self._entries.clear()
        return count

    # =========================================================================
    # READS
    # =========================================================================

    def snapshot(self) -> Tuple[LedgerEntry, ...]:
        """Read-only copy of the ledger in current order."""
        return tuple(self._entries)

    def get(self, entry_id: str) -> Optional[LedgerEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    @property
    def unsynced_count(self) -> int:
        return sum(1 for entry in self._entries if not entry.synced)

    @property
    def total_quantity(self) -> int:
        return sum(entry.quantity for entry in self._entries)

    def _find_code(self, code: str) -> Optional[int]:
        # Linear scan; ledgers are session-sized
        for index, entry in enumerate(self._entries):
            if entry.code == code:
                return index
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LedgerEntry]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return f"ScanLedger(entries={len(self._entries)}, unsynced={self.unsynced_count})"
