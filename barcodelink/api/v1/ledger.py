"""
==============================================================================
Ledger Endpoints
==============================================================================

Read, clear and export the scan ledger.

==============================================================================
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from barcodelink.core import exceptions
from barcodelink.core.dependencies import get_runtime
from barcodelink.services.runtime import ScanRuntime
from barcodelink.schemas.common import MessageResponse
from barcodelink.schemas.ledger import LedgerEntryResponse, LedgerResponse


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ledger", tags=["Ledger"])


class LedgerController:
    """Controller for ledger operations."""

    def __init__(self, runtime: ScanRuntime):
        self._session = runtime.controller
        self._exporter = runtime.exporter

    def list_entries(self) -> LedgerResponse:
        """List entries, most recent first."""
        snapshot = self._session.snapshot()
        return LedgerResponse(
            total=len(snapshot),
            unsynced=sum(1 for entry in snapshot if not entry.synced),
            entries=[LedgerEntryResponse.model_validate(entry) for entry in snapshot]
        )

    def clear(self) -> MessageResponse:
        """Remove every entry."""
        removed = self._session.clear()
        return MessageResponse(message=f"Cleared {removed} entries")

    def export(self) -> PlainTextResponse:
        """Render the ledger as a tab-separated download."""
        snapshot = self._session.snapshot()
        filename = self._exporter.filename_for()

        logger.info(f"📤 Exporting {len(snapshot)} entries as {filename}")
        return PlainTextResponse(
            self._exporter.render(snapshot),
            headers={"Content-Disposition": f'attachment; filename="{filename}"'}
        )

    def save_export(self) -> dict:
        """Write the export file into the export directory."""
        snapshot = self._session.snapshot()
        try:
            path = self._exporter.write(snapshot)
        except OSError as e:
            logger.error(f"❌ Export failed: {e}")
            raise exceptions.internal_error(f"Could not write export file: {e}")

        return {
            "success": True,
            "path": str(path),
            "entries": len(snapshot)
        }


@router.get("", response_model=LedgerResponse)
async def get_ledger(runtime: ScanRuntime = Depends(get_runtime)):
    """Get all ledger entries, most recent first."""
    controller = LedgerController(runtime)
    return controller.list_entries()


@router.delete("", response_model=MessageResponse)
async def clear_ledger(runtime: ScanRuntime = Depends(get_runtime)):
    """Clear the ledger. This cannot be undone."""
    controller = LedgerController(runtime)
    return controller.clear()


@router.get("/export")
async def export_ledger(runtime: ScanRuntime = Depends(get_runtime)):
    """
    Download the ledger as text.

    One line per entry: code, quantity and ISO-8601 timestamp separated by
    tabs. No header row.
    """
    controller = LedgerController(runtime)
    return controller.export()


@router.post("/export")
async def save_export(runtime: ScanRuntime = Depends(get_runtime)):
    """Write the export file to the server's export directory."""
    controller = LedgerController(runtime)
    return controller.save_export()
