"""Health Probes: liveness and database readiness.

Invariants:
    - GET /api/v1/health/ answers 200 whenever the process serves requests
    - GET /api/v1/health/ready answers 503 until db_manager exists and SELECT 1 succeeds
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from subscription_service import SERVICE_NAME, __version__
from subscription_service.infrastructure import database

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/")
async def liveness():
    return {"status": "healthy", "service": SERVICE_NAME, "version": __version__}


@router.get("/ready")
async def readiness():
    # db_manager is read at call time: it is None until the lifespan runs
    manager = database.db_manager
    if manager is not None and await manager.health_check():
        return {"status": "ready", "checks": {"database": "healthy"}}
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "checks": {"database": "unavailable"}},
    )
