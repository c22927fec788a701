"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_distance_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.distance.matrix_client import check_health as distance_health_check
    return distance_health_check


@router.get("/health/distance", status_code=status.HTTP_200_OK)
async def health_distance() -> dict:
    """Check the configured distance provider."""
    provider = settings.distance_provider
    if provider == "predefined":
        return {"service": "distance", "provider": provider, "healthy": True}
    distance_health_check = _get_distance_health_check()
    return {"service": "distance", "provider": provider, "healthy": await distance_health_check()}
