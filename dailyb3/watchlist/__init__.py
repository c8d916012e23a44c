"""
Watchlist domain: stock model, derived metrics, filter/sort views and the
controller that ties them to the document store and quote source.
"""

from .controller import UNCHANGED, RefreshReport, WatchlistController
from .metrics import (
    LiveDerived,
    average_signal,
    compute_live_derived,
    compute_score,
    compute_upside,
    reference_links,
    upside_signal,
)
from .models import CHECKLIST_ITEMS, Annotation, Checklist, Stock
from .session import SessionConfig, WatchlistSession
from .views import apply_filters, sort_stocks

__all__ = [
    "CHECKLIST_ITEMS",
    "UNCHANGED",
    "Annotation",
    "Checklist",
    "LiveDerived",
    "RefreshReport",
    "SessionConfig",
    "Stock",
    "WatchlistController",
    "WatchlistSession",
    "apply_filters",
    "average_signal",
    "compute_live_derived",
    "compute_score",
    "compute_upside",
    "reference_links",
    "sort_stocks",
    "upside_signal",
]
