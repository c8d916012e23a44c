"""Pydantic models for watchlist API requests and responses.

JSON bodies use the stored camelCase keys (``targetPrice``, ``rentUrl``);
snake_case names are accepted as well.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from dailyb3.watchlist.controller import RefreshReport
from dailyb3.watchlist.metrics import average_signal, reference_links, upside_signal
from dailyb3.watchlist.models import Annotation, AnnotationType, Stock


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StockCreate(_CamelModel):
    """Request schema for adding a stock."""

    symbol: str = Field(..., description="Ticker symbol")
    target_price: Optional[float] = Field(None, description="Optional target price")

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        v = v.upper().strip()
        if not v or not v.isalnum():
            raise ValueError(f"Invalid symbol: {v}. Must be alphanumeric")
        return v


class StockEdit(_CamelModel):
    """Edit-form save. Omitted fields keep their values; a blank rentUrl removes it."""

    current_price: Optional[float] = None
    target_price: Optional[float] = None
    distance_negative: Optional[float] = None
    distance_positive: Optional[float] = None
    rent_url: Optional[str] = None
    annotations: Optional[List[Annotation]] = None


class ChecklistUpdate(_CamelModel):
    """Set a checklist flag; omit value to flip it."""

    value: Optional[bool] = None


class AnnotationCreate(_CamelModel):
    """Request schema for adding a note."""

    text: str = Field(..., min_length=1)
    type: AnnotationType = "info"


class StockResponse(Stock):
    """A stock with its display signals and research links."""

    average_signal: bool = False
    upside_signal: bool = False
    links: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_stock(cls, stock: Stock) -> "StockResponse":
        return cls(
            **stock.model_dump(),
            average_signal=average_signal(stock),
            upside_signal=upside_signal(stock),
            links=reference_links(stock),
        )


class RefreshReportResponse(_CamelModel):
    """Response schema for a bulk refresh."""

    symbols_refreshed: int
    quote_errors: Dict[str, str] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_report(cls, report: RefreshReport) -> "RefreshReportResponse":
        return cls(
            symbols_refreshed=report.symbols_refreshed,
            quote_errors=report.quote_errors,
            errors=report.errors,
        )


class CPFValidationResponse(BaseModel):
    """Response schema for a CPF check."""

    cpf: str
    valid: bool
