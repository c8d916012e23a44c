"""Document store for stock documents.

Create-or-replace, partial update with an explicit field-deletion
sentinel, and live subscriptions that receive the full document set
after every write.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from dailyb3.exceptions import DocumentNotFoundError
from dailyb3.server.database.models.document import StockDocument

logger = logging.getLogger(__name__)


class _DeleteField:
    """Sentinel: remove this field on update."""

    def __repr__(self) -> str:
        return "DELETE_FIELD"


DELETE_FIELD = _DeleteField()


@dataclass
class DocumentSnapshot:
    """A document as delivered to readers and subscribers."""

    id: str
    data: Dict[str, Any] = field(default_factory=dict)


SnapshotListener = Callable[[List[DocumentSnapshot]], None]


class DocumentStore:
    """Store for stock documents keyed by uppercase symbol.

    Subscriptions are per store instance: writes through this instance
    notify its listeners synchronously, in the writing thread.
    """

    collection = StockDocument.__tablename__

    def __init__(self, db: Session):
        self.db = db
        self._listeners: List[tuple] = []

    # --- Reads ---

    def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document body by id, or None."""
        row = self._get_row(doc_id)
        return dict(row.data) if row else None

    def list_documents(self, cpf: Optional[str] = None) -> List[DocumentSnapshot]:
        """List documents ordered by id, optionally scoped to one CPF."""
        query = self.db.query(StockDocument)
        if cpf is not None:
            query = query.filter(StockDocument.cpf == cpf)
        return [
            DocumentSnapshot(id=row.id, data=dict(row.data))
            for row in query.order_by(StockDocument.id).all()
        ]

    def list_cpfs(self) -> List[str]:
        """Distinct CPFs that own at least one document."""
        rows = (
            self.db.query(StockDocument.cpf)
            .filter(StockDocument.cpf.isnot(None))
            .distinct()
            .order_by(StockDocument.cpf)
            .all()
        )
        return [row[0] for row in rows]

    def _get_row(self, doc_id: str) -> Optional[StockDocument]:
        return self.db.query(StockDocument).filter(StockDocument.id == doc_id).first()

    # --- Writes ---

    def set(self, doc_id: str, data: Mapping[str, Any]) -> None:
        """Create or replace a document.

        Raises:
            ValueError: If data contains DELETE_FIELD
        """
        if any(value is DELETE_FIELD for value in data.values()):
            raise ValueError("DELETE_FIELD is only valid in update()")

        body = dict(data)
        row = self._get_row(doc_id)
        if row is None:
            row = StockDocument(id=doc_id)
            self.db.add(row)
        row.data = body
        row.cpf = body.get("cpf")
        row.updated_at = datetime.utcnow()
        self.db.commit()
        logger.info(f"Set document {self.collection}/{doc_id}")
        self._notify()

    def update(self, doc_id: str, fields: Mapping[str, Any]) -> None:
        """Merge fields into an existing document.

        Fields set to DELETE_FIELD are removed from the document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        row = self._get_row(doc_id)
        if row is None:
            raise DocumentNotFoundError(f"No document {self.collection}/{doc_id}")

        body = dict(row.data)
        for key, value in fields.items():
            if value is DELETE_FIELD:
                body.pop(key, None)
            else:
                body[key] = value

        row.data = body
        row.cpf = body.get("cpf")
        row.updated_at = datetime.utcnow()
        self.db.commit()
        logger.info(f"Updated document {self.collection}/{doc_id} ({len(fields)} fields)")
        self._notify()

    # --- Subscriptions ---

    def subscribe(
        self, listener: SnapshotListener, cpf: Optional[str] = None
    ) -> Callable[[], None]:
        """Subscribe to the document set.

        The listener is called immediately with the current documents and
        again after every write through this store.

        Args:
            listener: Callable receiving the full list of DocumentSnapshot
            cpf: Only deliver documents owned by this CPF

        Returns:
            Callable that removes the subscription
        """
        entry = (listener, cpf)
        self._listeners.append(entry)
        logger.debug(f"Subscribed to {self.collection} (cpf={cpf})")
        listener(self.list_documents(cpf))

        def unsubscribe() -> None:
            if entry in self._listeners:
                self._listeners.remove(entry)
                logger.debug(f"Unsubscribed from {self.collection} (cpf={cpf})")

        return unsubscribe

    def _notify(self) -> None:
        for listener, cpf in list(self._listeners):
            try:
                listener(self.list_documents(cpf))
            except Exception as e:
                logger.error(f"Snapshot listener failed: {e}", exc_info=True)
