"""
==============================================================================
Sync Endpoints
==============================================================================

Manual sync trigger and sync status.

==============================================================================
"""

from fastapi import APIRouter, Depends

from barcodelink.core.dependencies import get_runtime
from barcodelink.services.runtime import ScanRuntime
from barcodelink.schemas.sync import SyncResponse, SyncStatusResponse


router = APIRouter(prefix="/sync", tags=["Sync"])


class SyncController:
    """Controller for sync operations."""

    def __init__(self, runtime: ScanRuntime):
        self._service = runtime.sync_service
        self._session = runtime.controller
        self._connectivity = runtime.connectivity

    async def sync_now(self) -> SyncResponse:
        """Send the full ledger to the configured target."""
        before = self._session.state().unsynced
        attempt = await self._service.sync_now()
        after = self._session.state().unsynced

        return SyncResponse(
            target=attempt.target,
            sent=len(attempt.snapshot),
            marked=max(before - after, 0),
            unsynced=after,
            completed_at=attempt.completed_at
        )

    def get_status(self) -> SyncStatusResponse:
        """Get sync status."""
        return SyncStatusResponse(
            online=self._connectivity.is_online(),
            **self._service.status()
        )


@router.post("", response_model=SyncResponse)
async def sync_now(runtime: ScanRuntime = Depends(get_runtime)):
    """
    Sync the ledger to the remote target.

    Fails with SYNC_ALREADY_IN_FLIGHT, SYNC_EMPTY_LEDGER, SYNC_OFFLINE or
    SYNC_TRANSPORT_ERROR. On failure no entry is marked synced.
    """
    controller = SyncController(runtime)
    return await controller.sync_now()


@router.get("/status", response_model=SyncStatusResponse)
async def sync_status(runtime: ScanRuntime = Depends(get_runtime)):
    """Get the sync status."""
    controller = SyncController(runtime)
    return controller.get_status()
