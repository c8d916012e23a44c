"""Pydantic request and response models."""

from dailyb3.server.models.common import ErrorResponse, HealthResponse, InfoResponse
from dailyb3.server.models.stock import (
    AnnotationCreate,
    ChecklistUpdate,
    CPFValidationResponse,
    RefreshReportResponse,
    StockCreate,
    StockEdit,
    StockResponse,
)

__all__ = [
    # Common models
    "HealthResponse",
    "InfoResponse",
    "ErrorResponse",
    # Stock models
    "AnnotationCreate",
    "ChecklistUpdate",
    "CPFValidationResponse",
    "RefreshReportResponse",
    "StockCreate",
    "StockEdit",
    "StockResponse",
]
