"""
Order Sheet Backend: Health Check Route
========================================

What:  Health check endpoint for the front-end and local process supervisors.
How:   Reads the workbook through the shared store and reports whether it
       is readable and how many order rows it holds.

    Status levels:
    - healthy:   workbook readable (HTTP 200)
    - unhealthy: workbook missing or malformed (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response, status

from ordersheet import __version__
from ordersheet.dependencies import get_workbook_store
from ordersheet.exceptions import StorageError
from ordersheet.schemas.order import HealthResponse
from ordersheet.services.workbook_store import WorkbookStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Module-level: set once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    response: Response,
    store: WorkbookStore = Depends(get_workbook_store),
) -> HealthResponse:
    workbook_status = "readable"
    overall = "healthy"
    order_count = None

    try:
        order_count = len(await store.read_all())
    except StorageError as e:
        workbook_status = "unreadable"
        overall = "unhealthy"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning("Health check: workbook unreadable: %s", e.message)

    return HealthResponse(
        status=overall,
        version=__version__,
        workbook=workbook_status,
        order_count=order_count,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
