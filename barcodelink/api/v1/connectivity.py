"""
==============================================================================
Connectivity Endpoints
==============================================================================

The client reports whether the device has network access. While offline,
sync requests fail with SYNC_OFFLINE without touching the network.

==============================================================================
"""

from fastapi import APIRouter, Depends

from barcodelink.core.dependencies import get_runtime
from barcodelink.services.runtime import ScanRuntime
from barcodelink.schemas.sync import ConnectivityResponse, ConnectivityUpdate


router = APIRouter(prefix="/connectivity", tags=["Connectivity"])


def _response(runtime: ScanRuntime) -> ConnectivityResponse:
    return ConnectivityResponse(
        online=runtime.connectivity.is_online(),
        changed_at=runtime.connectivity.changed_at
    )


@router.get("", response_model=ConnectivityResponse)
async def get_connectivity(runtime: ScanRuntime = Depends(get_runtime)):
    """Get the current connectivity flag."""
    return _response(runtime)


@router.put("", response_model=ConnectivityResponse)
async def set_connectivity(
    data: ConnectivityUpdate,
    runtime: ScanRuntime = Depends(get_runtime)
):
    """Report a connectivity change."""
    runtime.connectivity.set_online(data.online)
    return _response(runtime)
