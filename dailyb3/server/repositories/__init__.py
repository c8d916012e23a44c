"""Data access layer repositories."""

from dailyb3.server.repositories.document_store import (
    DELETE_FIELD,
    DocumentSnapshot,
    DocumentStore,
)

__all__ = [
    "DELETE_FIELD",
    "DocumentSnapshot",
    "DocumentStore",
]
