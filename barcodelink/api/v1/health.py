"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

from fastapi import APIRouter, Depends

from barcodelink.core.dependencies import get_runtime
from barcodelink.services.runtime import ScanRuntime


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, runtime: ScanRuntime):
        self._runtime = runtime

    def check_database(self) -> str:
        """Check database connectivity."""
        if self._runtime.db_manager.verify_connection():
            return "healthy"
        return "unhealthy"

    def get_health(self) -> dict:
        """Get full health status."""
        db_status = self.check_database()
        degraded = self._runtime.durability_degraded
        state = self._runtime.controller.state()

        overall = "healthy" if db_status == "healthy" and not degraded else "degraded"

        return {
            "status": overall,
            "components": {
                "api": "healthy",
                "database": db_status,
                "persistence": "degraded" if degraded else "healthy",
                "network": "online" if self._runtime.connectivity.is_online() else "offline",
            },
            "details": {
                "session": state.status.value,
                "entries": state.entries,
                "unsynced": state.unsynced,
                "sync_in_flight": self._runtime.coordinator.in_flight,
            }
        }


@router.get("")
async def health_check(runtime: ScanRuntime = Depends(get_runtime)):
    """
    Health check endpoint.

    Returns system status including database, persistence and network.
    """
    controller = HealthController(runtime)
    return controller.get_health()


@router.get("/ready")
async def readiness_check(runtime: ScanRuntime = Depends(get_runtime)):
    """Readiness probe for container orchestration."""
    return {"ready": runtime.database_ready}


@router.get("/live")
async def liveness_check():
    """Liveness probe for container orchestration."""
    return {"alive": True}
