"""
==============================================================================
Settings Endpoints
==============================================================================

Read and update the persisted user configuration.

==============================================================================
"""

from fastapi import APIRouter, Depends

from barcodelink.core.dependencies import get_runtime
from barcodelink.services.runtime import ScanRuntime
from barcodelink.schemas.config import AppConfig, AppConfigUpdate


router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=AppConfig)
async def get_config(runtime: ScanRuntime = Depends(get_runtime)):
    """Get the active configuration."""
    return runtime.config_service.config


@router.put("", response_model=AppConfig)
async def update_config(
    data: AppConfigUpdate,
    runtime: ScanRuntime = Depends(get_runtime)
):
    """Update the configuration. Omitted fields are left unchanged."""
    return runtime.config_service.update(data)
