"""Stock document database model.

Stocks are stored as schemaless JSON documents, one row per document.
"""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String

from dailyb3.server.database.session import Base


class StockDocument(Base):
    """Stored stock document.

    Attributes:
        id: Document id (uppercase ticker symbol)
        cpf: Owner's CPF, copied from the document for partition queries
        data: The document body (camelCase stock fields)
        updated_at: Timestamp of the last write
    """

    __tablename__ = "daily_stocks"

    id = Column(String, primary_key=True)
    cpf = Column(String, nullable=True, index=True)
    data = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<StockDocument(id={self.id}, cpf={self.cpf})>"
