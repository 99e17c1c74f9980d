"""
==============================================================================
Scan Ledger Tests
==============================================================================

Tests for the two aggregation policies and sync reconciliation.

==============================================================================
"""

from collections import Counter

import pytest

from barcodelink.ledger import CaptureMode, LedgerEntry, ScanEvent, ScanLedger


def scan(ledger: ScanLedger, code: str, mode: CaptureMode, when) -> LedgerEntry:
    return ledger.apply(ScanEvent(code=code, observed_at=when), mode)


class TestSeriesMode:
    """Tests for SERIES aggregation."""

    def test_repeat_increments_and_moves_to_front(self, ts):
        ledger = ScanLedger()
        scan(ledger, "123", CaptureMode.SERIES, ts(0))
        scan(ledger, "456", CaptureMode.SERIES, ts(1))
        scan(ledger, "123", CaptureMode.SERIES, ts(2))

        entries = ledger.snapshot()
        assert [e.code for e in entries] == ["123", "456"]
        assert [e.quantity for e in entries] == [2, 1]
        assert entries[0].last_seen_at == ts(2)

    def test_repeat_keeps_id_and_bumps_revision(self, ts):
        ledger = ScanLedger()
        first = scan(ledger, "123", CaptureMode.SERIES, ts(0))
        second = scan(ledger, "123", CaptureMode.SERIES, ts(5))

        assert second.id == first.id
        assert second.revision == first.revision + 1

    def test_quantity_matches_accepted_scans(self, ts):
        codes = ["A", "B", "A", "C", "A", "B", "D", "C", "A"]
        ledger = ScanLedger()
        for i, code in enumerate(codes):
            scan(ledger, code, CaptureMode.SERIES, ts(i))

        quantities = {e.code: e.quantity for e in ledger}
        assert quantities == dict(Counter(codes))
        assert len(ledger) == len(set(codes))
        assert ledger.total_quantity == len(codes)

    def test_rescan_clears_synced(self, ts):
        ledger = ScanLedger()
        scan(ledger, "123", CaptureMode.SERIES, ts(0))
        ledger.mark_synced(ledger.snapshot())
        assert ledger.snapshot()[0].synced is True

        entry = scan(ledger, "123", CaptureMode.SERIES, ts(3))
        assert entry.synced is False
        assert ledger.unsynced_count == 1


class TestSingleMode:
    """Tests for SINGLE aggregation."""

    def test_every_scan_creates_entry(self, ts):
        ledger = ScanLedger()
        first = scan(ledger, "123", CaptureMode.SINGLE, ts(0))
        second = scan(ledger, "123", CaptureMode.SINGLE, ts(3))

        assert len(ledger) == 2
        assert first.id != second.id
        assert all(e.quantity == 1 for e in ledger)
        assert ledger.snapshot()[0].id == second.id

    def test_length_matches_accepted_scans(self, ts):
        ledger = ScanLedger()
        for i, code in enumerate(["A", "B", "A", "A"]):
            scan(ledger, code, CaptureMode.SINGLE, ts(i))
        assert len(ledger) == 4


class TestMarkSynced:
    """Tests for sync reconciliation."""

    def test_marks_every_snapshot_entry(self, ts):
        ledger = ScanLedger()
        scan(ledger, "A", CaptureMode.SERIES, ts(0))
        scan(ledger, "B", CaptureMode.SERIES, ts(1))

        marked = ledger.mark_synced(ledger.snapshot())

        assert marked == 2
        assert ledger.unsynced_count == 0

    def test_entry_mutated_after_snapshot_stays_unsynced(self, ts):
        ledger = ScanLedger()
        scan(ledger, "A", CaptureMode.SERIES, ts(0))
        scan(ledger, "B", CaptureMode.SERIES, ts(1))
        snapshot = ledger.snapshot()

        scan(ledger, "A", CaptureMode.SERIES, ts(5))
        marked = ledger.mark_synced(snapshot)

        assert marked == 1
        by_code = {e.code: e for e in ledger}
        assert by_code["A"].synced is False
        assert by_code["A"].quantity == 2
        assert by_code["B"].synced is True

    def test_entry_added_after_snapshot_stays_unsynced(self, ts):
        ledger = ScanLedger()
        scan(ledger, "A", CaptureMode.SINGLE, ts(0))
        snapshot = ledger.snapshot()
        late = scan(ledger, "B", CaptureMode.SINGLE, ts(1))

        ledger.mark_synced(snapshot)

        assert ledger.get(late.id).synced is False

    def test_already_synced_not_counted(self, ts):
        ledger = ScanLedger()
        scan(ledger, "A", CaptureMode.SERIES, ts(0))
        ledger.mark_synced(ledger.snapshot())
        assert ledger.mark_synced(ledger.snapshot()) == 0

    def test_empty_snapshot_marks_nothing(self, ts):
        ledger = ScanLedger()
        scan(ledger, "A", CaptureMode.SERIES, ts(0))
        assert ledger.mark_synced(()) == 0


class TestLedgerBasics:
    """Tests for clear, hydrate and snapshot semantics."""

    def test_clear_returns_count(self, ts):
        ledger = ScanLedger()
        scan(ledger, "A", CaptureMode.SINGLE, ts(0))
        scan(ledger, "B", CaptureMode.SINGLE, ts(1))

        assert ledger.clear() == 2
        assert len(ledger) == 0

    def test_snapshot_is_detached(self, ts):
        ledger = ScanLedger()
        scan(ledger, "A", CaptureMode.SINGLE, ts(0))
        snapshot = ledger.snapshot()
        scan(ledger, "B", CaptureMode.SINGLE, ts(1))

        assert len(snapshot) == 1

    def test_from_entries_preserves_order(self, ts):
        entries = [
            LedgerEntry(code="B", last_seen_at=ts(1)),
            LedgerEntry(code="A", last_seen_at=ts(0)),
        ]
        ledger = ScanLedger.from_entries(entries)
        assert [e.code for e in ledger] == ["B", "A"]

    def test_entries_are_immutable(self, ts):
        entry = LedgerEntry(code="A", last_seen_at=ts(0))
        with pytest.raises(Exception):
            entry.quantity = 5

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValueError):
            LedgerEntry(code="A", quantity=0)
