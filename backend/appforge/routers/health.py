"""Health check endpoint for load balancers and monitoring."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request):
    """Lightweight liveness check; reports the configured storage backend."""
    settings = request.app.state.settings
    return {
        "status": "ok",
        "service": "AppForge",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "storage": settings.storage_backend,
    }
