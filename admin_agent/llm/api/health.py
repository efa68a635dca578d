"""Liveness and readiness endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...core.config import get_settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check() -> dict[str, str]:
    return {
        "status": "ok",
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
    }


@router.get("/ready")
async def readiness() -> JSONResponse:
    """Report whether every external credential is configured."""

    presence = get_settings().credential_presence()
    ready = all(value == "set" for value in presence.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "degraded", "credentials": presence},
    )
