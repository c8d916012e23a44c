"""API v1 router.

Mounts the watchlist endpoints under ``/api/v1`` and exposes system
information.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, status

from dailyb3.server.api.v1 import scheduler, stocks
from dailyb3.server.config import settings
from dailyb3.server.database.session import check_database_connection
from dailyb3.server.models.common import InfoResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1",
    tags=["v1"],
)

router.include_router(stocks.router)
router.include_router(scheduler.router)


@router.get(
    "/info",
    response_model=InfoResponse,
    status_code=status.HTTP_200_OK,
    summary="Get system information",
    description="Returns system information including version and database status",
)
async def get_info() -> InfoResponse:
    """Get system information endpoint.

    Returns:
        System information including database connection status

    Example:
        >>> GET /api/v1/info
        >>> {
        >>>     "app_name": "dailyb3 Watchlist API",
        >>>     "version": "1.0.0",
        >>>     "status": "running",
        >>>     "database_connected": true,
        >>>     "timestamp": "2026-10-18T10:00:00"
        >>> }
    """
    return InfoResponse(
        app_name=settings.app_name,
        version=settings.version,
        status="running",
        database_connected=check_database_connection(),
        timestamp=datetime.utcnow(),
    )
