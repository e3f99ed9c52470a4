"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ returns 200 whenever the process is up; it touches nothing else
    - GET /health/ready returns 503 while the database is unreachable
    - Readiness reports open session streams (per-process broker)
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from skillsharp.infrastructure import database
from skillsharp.infrastructure.realtime import session_events

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "skillsharp-api"
SERVICE_VERSION = "1.0.0"


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@router.get("/ready")
async def readiness_check():
    """Database ping plus the number of open session-event streams."""
    manager = database.db_manager
    if not (manager and await manager.health_check()):
        logger.warning("Readiness failed: database unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {
        "status": "ready",
        "checks": {"database": "healthy"},
        "session_streams": session_events.total_subscribers(),
    }
