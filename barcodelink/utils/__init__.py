"""
==============================================================================
Utilities Package
==============================================================================

Modules:
--------
- exporter: Tab-separated ledger export rendering and parsing

==============================================================================
"""

from .exporter import ExportRow, LedgerExporter, parse_export

__all__ = [
    "ExportRow",
    "LedgerExporter",
    "parse_export",
]
