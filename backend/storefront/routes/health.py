"""
Storefront Edge API — Health Check Route
=========================================

What:  Health check endpoint for monitoring and load balancer probes.
Why:   Deployments need to know whether the remote store is reachable.
How:   Runs one tiny bounded read against the anon reader.
Who:   Called by container health checks and uptime monitors.

Status levels:
    - healthy:   remote store answered
    - degraded:  remote store unreachable; storefront reads still answer
                 with fallback data, admin writes will fail

Both levels answer 200: the process itself can serve traffic either way.
"""

import logging
import time

from fastapi import APIRouter, Depends

from storefront import __version__
from storefront.config import settings
from storefront.dependencies import ServiceContainer, get_services
from storefront.exceptions import RemoteError
from storefront.schemas.common import HealthResponse
from storefront.services.edge_service import bounded_read

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Returns the health status of the service and remote store connectivity. "
        "Never cached."
    ),
)
async def health_check(services: ServiceContainer = Depends(get_services)) -> HealthResponse:
    remote_status = "connected"
    overall = "healthy"

    try:
        await bounded_read(
            services.reader.query("products", select="id", limit=1),
            settings.edge_timeout_seconds,
        )
    except RemoteError as e:
        remote_status = "unreachable"
        overall = "degraded"
        logger.warning("Health check: remote store unreachable: %s", e.message)

    return HealthResponse(
        status=overall,
        version=__version__,
        remote_store=remote_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
