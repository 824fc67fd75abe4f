"""
Health Check Routes

- GET /api/health        liveness: the process is up
- GET /api/health/ready  readiness: the upstream provider answers its health check
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from spanlens.application.api.dependencies import SettingsDep, StreamRelayDep

router = APIRouter(prefix="/health", tags=["Health"])


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str | None = None
    details: dict | None = None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("", response_model=HealthResponse)
async def health(settings: SettingsDep, relay: StreamRelayDep) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        version=settings.app.APP_VERSION,
        details=relay.get_stats(),
    )


@router.get("/ready", response_model=HealthResponse)
async def readiness(relay: StreamRelayDep):
    """503 when the provider reports itself unhealthy."""
    provider_health = await relay.provider.health_check()
    body = HealthResponse(
        status=provider_health.get("status", "unhealthy"),
        timestamp=_now(),
        details=provider_health,
    )
    if body.status != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
