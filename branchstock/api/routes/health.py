"""
Health check endpoints.
"""

import time

from fastapi import APIRouter

from branchstock import __version__
from branchstock.application.dto.responses import ComponentHealthResponse, HealthResponse

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


async def probe_database() -> ComponentHealthResponse:
    """Run ``SELECT 1`` against the pool and time it."""
    from branchstock.infrastructure.storage.sqlite import get_connection_pool

    try:
        pool = await get_connection_pool()
        latency = await pool.ping()

        return ComponentHealthResponse(
            name="sqlite",
            available=True,
            latency_ms=latency,
        )

    except Exception as e:
        return ComponentHealthResponse(
            name="sqlite",
            available=False,
            error=str(e),
        )


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Service health check.

    Returns service status, uptime and database reachability.
    """
    db_status = await probe_database()
    return HealthResponse(
        status="healthy" if db_status.available else "unhealthy",
        version=__version__,
        uptime_seconds=time.time() - _start_time,
        database=db_status,
    )
