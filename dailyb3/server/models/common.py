"""Common Pydantic models for API requests and responses."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(default="healthy", description="Service health status")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow, description="Current server timestamp"
    )
    database_connected: Optional[bool] = Field(
        default=None, description="Whether the document store is reachable"
    )
    scheduler_running: Optional[bool] = Field(
        default=None, description="Whether the scheduled refresh is running"
    )


class InfoResponse(BaseModel):
    """System information response model."""

    app_name: str = Field(..., description="Application name")
    version: str = Field(..., description="Application version")
    status: str = Field(default="running", description="Service status")
    database_connected: bool = Field(..., description="Database connection status")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow, description="Current server timestamp"
    )


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str = Field(..., description="Error type or code")
    message: str = Field(..., description="Human-readable error message")
    detail: Optional[Any] = Field(default=None, description="Additional error details")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow, description="Error timestamp"
    )


class SchedulerStatusResponse(BaseModel):
    """Scheduled refresh status."""

    initialized: bool = Field(..., description="Whether the scheduler was created")
    enabled: bool = Field(..., description="Whether a refresh interval is configured")
    running: bool = Field(..., description="Whether the scheduler is running")
    interval_minutes: int = Field(..., description="Minutes between refreshes (0 disables)")
    state: str = Field(..., description="Scheduler state")
    timezone: Optional[str] = Field(default=None, description="Scheduler timezone")
    next_refresh: Optional[datetime] = Field(
        default=None, description="Next scheduled refresh, if any"
    )
