"""
==============================================================================
Ledger Exporter Tests
==============================================================================
"""

from datetime import datetime, timedelta, timezone

import pytest

from barcodelink.ledger import LedgerEntry
from barcodelink.utils import LedgerExporter, parse_export


@pytest.fixture
def exporter() -> LedgerExporter:
    return LedgerExporter()


class TestRender:
    """Tests for export text rendering."""

    def test_line_format(self, exporter):
        entry = LedgerEntry(
            code="123",
            quantity=2,
            last_seen_at=datetime(2024, 6, 10, 12, 34, 56, 789000, tzinfo=timezone.utc),
        )
        assert exporter.render([entry]) == "123\t2\t2024-06-10T12:34:56.789Z"

    def test_non_utc_timestamps_converted(self, exporter):
        plus_two = timezone(timedelta(hours=2))
        entry = LedgerEntry(code="1", last_seen_at=datetime(2024, 6, 10, 14, 0, tzinfo=plus_two))
        assert exporter.render([entry]).endswith("2024-06-10T12:00:00.000Z")

    def test_ledger_order_no_header_no_trailing_newline(self, exporter, ts):
        entries = [
            LedgerEntry(code="B", last_seen_at=ts(1)),
            LedgerEntry(code="A", last_seen_at=ts(0)),
        ]
        text = exporter.render(entries)

        assert text.split("\n")[0].startswith("B\t")
        assert text.split("\n")[1].startswith("A\t")
        assert not text.endswith("\n")

    def test_empty_ledger_renders_empty(self, exporter):
        assert exporter.render([]) == ""

    def test_filename_for_day(self, exporter):
        assert exporter.filename_for(datetime(2024, 6, 10)) == "scan_export_2024-06-10.txt"


class TestParse:
    """Tests for reading export text back."""

    def test_round_trip(self, exporter, ts):
        entries = [
            LedgerEntry(code="456", quantity=1, last_seen_at=ts(7.25)),
            LedgerEntry(code="123", quantity=3, last_seen_at=ts(0)),
        ]

        rows = parse_export(exporter.render(entries))

        assert [(r.code, r.quantity) for r in rows] == [("456", 1), ("123", 3)]
        assert [r.timestamp.replace(microsecond=0) for r in rows] == [
            e.last_seen_at.replace(microsecond=0) for e in entries
        ]

    def test_gs1_separator_survives_round_trip(self, exporter, ts):
        entries = [
            LedgerEntry(code="0100012345678905\x1d10ABC", quantity=2, last_seen_at=ts(1)),
            LedgerEntry(code="456", quantity=1, last_seen_at=ts(0)),
        ]

        rows = parse_export(exporter.render(entries))

        assert [(r.code, r.quantity) for r in rows] == [
            ("0100012345678905\x1d10ABC", 2),
            ("456", 1),
        ]

    def test_crlf_line_endings_accepted(self, exporter):
        rows = exporter.parse(
            "123\t1\t2024-06-10T12:00:00.000Z\r\n456\t2\t2024-06-10T12:00:01.000Z\r\n"
        )
        assert [(r.code, r.quantity) for r in rows] == [("123", 1), ("456", 2)]

    def test_malformed_line_rejected(self, exporter):
        with pytest.raises(ValueError):
            exporter.parse("123\t2")

    def test_blank_lines_skipped(self, exporter):
        rows = exporter.parse("123\t1\t2024-06-10T12:00:00.000Z\n\n")
        assert len(rows) == 1


class TestWrite:
    """Tests for export file output."""

    def test_write_to_directory(self, tmp_path, ts):
        exporter = LedgerExporter(tmp_path / "exports")
        entry = LedgerEntry(code="123", last_seen_at=ts(0))

        path = exporter.write([entry])

        assert path.parent == tmp_path / "exports"
        assert path.name.startswith("scan_export_")
        assert path.read_text(encoding="utf-8") == exporter.render([entry])

    def test_write_without_directory_fails(self, ts):
        with pytest.raises(ValueError):
            LedgerExporter().write([LedgerEntry(code="1", last_seen_at=ts(0))])
