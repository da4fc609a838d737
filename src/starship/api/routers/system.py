"""Health endpoint."""

from fastapi import APIRouter, Depends

from ..container import Services
from ..dependencies import get_services

router = APIRouter(tags=["System"])


@router.get("/health")
async def health(services: Services = Depends(get_services)):
    """Report store health and the active transports."""
    store_ok = await services.store.health_check()
    return {
        "status": "ok" if store_ok else "degraded",
        "version": services.settings.app_version,
        "store": type(services.store).__name__,
        "events": type(services.transport).__name__,
    }
