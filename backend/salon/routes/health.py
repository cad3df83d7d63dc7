"""
Salon Booking Backend — Health Check Route
=============================================

What:  GET /health for Docker health checks and load balancer health checks.
How:   Runs SELECT 1 against the application's database.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from salon import __version__
from salon.database import Database
from salon.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

_start_time = time.time()


def create_router() -> APIRouter:
    router = APIRouter(tags=["Health"])

    @router.get(
        "/health",
        response_model=HealthResponse,
        responses={503: {"description": "Database unreachable", "model": HealthResponse}},
        summary="Service health check",
    )
    async def health_check(request: Request):
        database: Database = request.app.state.database
        db_status = "connected"
        overall = "healthy"

        try:
            await database.ping()
        except (SQLAlchemyError, OSError) as e:
            db_status = "disconnected"
            overall = "unhealthy"
            logger.warning("Health check: database unreachable: %s", str(e))

        payload = HealthResponse(
            status=overall,
            version=__version__,
            database=db_status,
            uptime_seconds=round(time.time() - _start_time, 2),
        )
        if overall != "healthy":
            return JSONResponse(status_code=503, content=payload.model_dump())
        return payload

    return router
