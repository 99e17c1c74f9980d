"""BarcodeLink: barcode scan ledger with remote sync."""

__version__ = "1.0.0"
