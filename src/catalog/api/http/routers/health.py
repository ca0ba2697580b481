"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.catalog.api.http.deps import get_db_service
from src.catalog.core.services import DbSessionService

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe; does not touch the database."""
    return {"status": "healthy", "service": "catalog"}


@router.get("/ready", response_model=None)
def readiness(db: DbSessionService = Depends(get_db_service)) -> dict[str, Any] | JSONResponse:
    """Readiness probe: 200 when the database answers, 503 otherwise."""
    db_healthy = db.health_check()
    body = {
        "status": "ready" if db_healthy else "not_ready",
        "checks": {
            "database": {
                "status": "healthy" if db_healthy else "unhealthy",
                "type": db.engine.dialect.name,
                "pool": db.get_pool_status(),
            }
        },
    }
    if not db_healthy:
        return JSONResponse(status_code=503, content=body)
    return body
