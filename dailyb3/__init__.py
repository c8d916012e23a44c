"""
dailyb3 - Personal B3 stock watchlist.

Keeps a per-CPF list of ticker symbols with target prices and a qualitative
checklist, refreshing live prices from an external quote source.

Exports the error hierarchy and validate_cpf. The controller, session and
stock model live in dailyb3.watchlist; the HTTP API in dailyb3.server and
the command line in dailyb3.cli.
"""

__version__ = "1.0.0"

from .exceptions import (
    DocumentNotFoundError,
    DuplicateSymbolError,
    InvalidCPFError,
    QuoteFetchError,
    StockNotFoundError,
    WatchlistError,
)
from .utils.cpf import validate_cpf

__all__ = [
    "__version__",
    "DocumentNotFoundError",
    "DuplicateSymbolError",
    "InvalidCPFError",
    "QuoteFetchError",
    "StockNotFoundError",
    "WatchlistError",
    "validate_cpf",
]
