"""
==============================================================================
Ledger Exporter Module
==============================================================================

Flat text rendering of the scan ledger.

This module implements:
- LedgerExporter: Renders, parses and writes ledger export files

File Format:
-----------
One line per entry, in ledger order (most recent first), no header:

    <code>\\t<quantity>\\t<ISO-8601 UTC timestamp>

    4006381333931	3	2025-01-15T10:30:45.120Z
    29456086	1	2025-01-15T10:29:02.004Z

File Name:
---------
scan_export_{YYYY-MM-DD}.txt

==============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from barcodelink.ledger.models import LedgerEntry, utc_now


# Module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportRow:
    """One parsed line of an export file."""

    code: str
    quantity: int
    timestamp: datetime


class LedgerExporter:
    """
    Generator for ledger export files.

    Attributes:
        _export_dir: Directory for written export files

    Example:
        >>> exporter = LedgerExporter(Path("storage/exports"))
        >>> text = exporter.render(ledger.snapshot())
        >>> path = exporter.write(ledger.snapshot())
    """

    SEPARATOR = "\t"

    def __init__(self, export_dir: Optional[Path] = None) -> None:
        self._export_dir = export_dir

    # =========================================================================
    # RENDERING
    # =========================================================================

    def render(self, entries: Iterable[LedgerEntry]) -> str:
        """Render entries as export text."""
        return "\n".join(self.render_line(entry) for entry in entries)

    def render_line(self, entry: LedgerEntry) -> str:
        return self.SEPARATOR.join([
            entry.code,
            str(entry.quantity),
            self.format_timestamp(entry.last_seen_at),
        ])

    @staticmethod
    def format_timestamp(dt: datetime) -> str:
        """Format as ISO-8601 UTC with millisecond precision and a Z suffix."""
        dt = dt.astimezone(timezone.utc)
        return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"

    @staticmethod
    def filename_for(day: Optional[datetime] = None) -> str:
        """Export file name for the given day (today by default)."""
        day = day or utc_now()
        return f"scan_export_{day.strftime('%Y-%m-%d')}.txt"

    # =========================================================================
    # PARSING
    # =========================================================================

    def parse(self, text: str) -> List[ExportRow]:
        """
        Parse export text back into rows.

        Raises:
            ValueError: If a line does not have three valid fields
        """
        rows = []

        # Codes may carry control characters such as the GS1 separator
        for line_number, line in enumerate(text.split("\n"), start=1):
            line = line.rstrip("\r")
            if not line.strip():
                continue

            fields = line.split(self.SEPARATOR)
            if len(fields) != 3:
                raise ValueError(f"Line {line_number}: expected 3 fields, got {len(fields)}")

            code, quantity, timestamp = fields
            rows.append(ExportRow(
                code=code,
                quantity=int(quantity),
                timestamp=datetime.fromisoformat(timestamp.replace("Z", "+00:00")),
            ))

        return rows

    # =========================================================================
    # FILE OUTPUT
    # =========================================================================

    def write(self, entries: Iterable[LedgerEntry], export_dir: Optional[Path] = None) -> Path:
        """
        Write an export file.

        Args:
            entries: Ledger snapshot to export
            export_dir: Target directory (constructor default if None)

        Returns:
            Path to the written file
        """
        directory = export_dir or self._export_dir
        if directory is None:
            raise ValueError("No export directory configured")

        directory.mkdir(parents=True, exist_ok=True)
        filepath = directory / self.filename_for()
        filepath.write_text(self.render(entries), encoding="utf-8")

        logger.info(f"✅ Generated export file: {filepath}")
        return filepath


def parse_export(text: str) -> List[ExportRow]:
    """Parse export text with a default exporter."""
    return LedgerExporter().parse(text)
