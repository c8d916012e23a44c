"""Custom exceptions for watchlist operations."""


class WatchlistError(Exception):
    """Base exception for watchlist operations."""

    pass


class InvalidCPFError(WatchlistError):
    """CPF failed check-digit validation."""

    pass


class DuplicateSymbolError(WatchlistError):
    """Symbol is already on the CPF's watchlist."""

    pass


class StockNotFoundError(WatchlistError):
    """Stock not found on the CPF's watchlist."""

    pass


class QuoteFetchError(WatchlistError):
    """Error fetching a live quote."""

    pass


class DocumentNotFoundError(WatchlistError):
    """Document not found in the store."""

    pass


class ConfigurationError(WatchlistError):
    """Exception raised for configuration errors."""

    pass
