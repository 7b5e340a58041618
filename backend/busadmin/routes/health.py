"""
Bus Admin Backend — Health Check Route
========================================

What:  GET /health for container health checks and load balancer probes.
How:   Runs `SELECT 1` against the database and checks that the upload
       directory is writable.

Status levels:
    - healthy:   database reachable and upload directory writable
    - unhealthy: either dependency failing
"""

import logging
import os
import time

from fastapi import APIRouter, Depends
from sqlalchemy import text

from busadmin import __version__
from busadmin.context import AppContext
from busadmin.dependencies import get_context
from busadmin.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(context: AppContext = Depends(get_context)) -> HealthResponse:
    db_status = "connected"
    uploads_status = "writable"
    overall = "healthy"

    try:
        async with context.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    upload_dir = context.uploads.upload_dir
    if not (upload_dir.is_dir() and os.access(upload_dir, os.W_OK)):
        uploads_status = "unavailable"
        overall = "unhealthy"
        logger.warning("Health check: upload directory not writable: %s", upload_dir)

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uploads=uploads_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
