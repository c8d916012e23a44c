"""Scheduled refresh status endpoint."""

from fastapi import APIRouter, Depends, status

from dailyb3.server.models.common import SchedulerStatusResponse
from dailyb3.server.services.scheduler_service import (
    SchedulerService,
    get_scheduler_service,
)

router = APIRouter(
    prefix="/scheduler",
    tags=["scheduler"],
)


@router.get(
    "/status",
    response_model=SchedulerStatusResponse,
    status_code=status.HTTP_200_OK,
    summary="Get scheduled refresh status",
    description="Returns whether the bulk price refresh is scheduled and when it runs next",
)
async def get_status(
    scheduler: SchedulerService = Depends(get_scheduler_service),
) -> SchedulerStatusResponse:
    return SchedulerStatusResponse(**scheduler.get_status())
