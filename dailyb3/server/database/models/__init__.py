"""Database models for the backend server.

Models:
    StockDocument: One stored stock document, keyed by uppercase symbol
"""

from .document import StockDocument

__all__ = [
    "StockDocument",
]
