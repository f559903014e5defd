"""Health check endpoint for load balancers and monitoring."""

from datetime import datetime, timezone

from fastapi import APIRouter

from agrolink import __version__
from agrolink.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Lightweight liveness check; does not call the AgroLink backend."""
    return {
        "status": "ok",
        "service": "AgroLink",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
    }
