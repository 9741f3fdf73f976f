"""
SocialConnect Backend — Health Check Routes
=============================================

What:  Liveness/readiness probes for Docker, load balancers and monitoring.
How:   /health runs `SELECT 1` against the database; /api/test answers
       without touching any dependency.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app import __version__
from app.database import engine
from app.schemas.common import ApiResponse, ApiStatus, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check():
    """
    Probe the database with a trivial query.

    Returns:
        HealthResponse with database status and uptime; 503 when the
        database cannot be reached.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body


@router.get(
    "/api/test",
    response_model=ApiResponse[ApiStatus],
    summary="API smoke test",
)
async def api_test() -> ApiResponse[ApiStatus]:
    return ApiResponse[ApiStatus](
        data=ApiStatus(
            version=__version__,
            status="ok",
            timestamp=datetime.now(timezone.utc),
        ),
        message="SocialConnect API is running!",
    )
