"""
==============================================================================
Scan Debouncer Tests
==============================================================================
"""

from datetime import datetime

from barcodelink.ledger import ScanDebouncer


class TestScanDebouncer:
    """Tests for duplicate suppression."""

    def test_first_code_accepted(self, ts):
        debouncer = ScanDebouncer()
        assert debouncer.accept("123", ts(0)) is True
        assert debouncer.last_accepted_code == "123"

    def test_repeat_inside_window_dropped(self, ts):
        debouncer = ScanDebouncer(window_ms=2000)
        assert debouncer.accept("123", ts(0)) is True
        assert debouncer.accept("123", ts(1.999)) is False

    def test_repeat_at_window_boundary_accepted(self, ts):
        debouncer = ScanDebouncer(window_ms=2000)
        assert debouncer.accept("123", ts(0)) is True
        assert debouncer.accept("123", ts(2.0)) is True

    def test_interleaved_codes_all_accepted(self, ts):
        """A, B, A inside the window accepts all three."""
        debouncer = ScanDebouncer(window_ms=2000)
        assert debouncer.accept("A", ts(0)) is True
        assert debouncer.accept("B", ts(0.1)) is True
        assert debouncer.accept("A", ts(0.2)) is True

    def test_dropped_event_does_not_extend_window(self, ts):
        debouncer = ScanDebouncer(window_ms=2000)
        debouncer.accept("123", ts(0))
        assert debouncer.accept("123", ts(1.5)) is False
        assert debouncer.accept("123", ts(2.0)) is True

    def test_reset_forgets_last_code(self, ts):
        debouncer = ScanDebouncer()
        debouncer.accept("123", ts(0))
        debouncer.reset()
        assert debouncer.last_accepted_code is None
        assert debouncer.accept("123", ts(0.1)) is True

    def test_zero_window_accepts_everything(self, ts):
        debouncer = ScanDebouncer(window_ms=0)
        assert debouncer.accept("123", ts(0)) is True
        assert debouncer.accept("123", ts(0)) is True

    def test_naive_timestamps_treated_as_utc(self, ts):
        debouncer = ScanDebouncer(window_ms=2000)
        debouncer.accept("123", ts(0))
        naive = datetime(2024, 6, 10, 12, 0, 1)
        assert debouncer.accept("123", naive) is False
