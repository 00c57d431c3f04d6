"""Health check endpoints."""

from fastapi import APIRouter, Request, Response, status

from anonboard.config import get_settings


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - the process is up."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request, response: Response) -> dict[str, str | bool]:
    """Readiness probe - the board store is connected.

    Redis is reported but optional; only a missing board service makes the
    probe fail.
    """
    app_state = request.app.state
    store_ready = bool(getattr(app_state, "board_service", None))
    cache_ready = bool(getattr(app_state, "redis", None))

    if not store_ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "status": "ready" if store_ready else "not_ready",
        "store": store_ready,
        "cache": cache_ready,
        "environment": get_settings().environment,
    }


@router.get("")
async def health() -> dict[str, str]:
    """General health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
