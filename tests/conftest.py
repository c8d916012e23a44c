"""Shared pytest fixtures.

Settings are read from the environment at import time, so the server is
pointed at a throwaway database before any dailyb3 module loads.
"""

import os
import tempfile

_TEST_HOME = tempfile.mkdtemp(prefix="dailyb3-tests-")
os.environ.setdefault("DAILYB3_DATABASE_PATH", os.path.join(_TEST_HOME, "watchlist.db"))
os.environ.setdefault("DAILYB3_REFRESH_INTERVAL_MINUTES", "0")

from typing import Generator  # noqa: E402
from unittest.mock import Mock  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from dailyb3.market_data.quote_client import LiveQuote, QuoteClient  # noqa: E402
from dailyb3.server.database import models  # noqa: E402,F401
from dailyb3.server.database.session import Base  # noqa: E402
from dailyb3.server.repositories.document_store import DocumentStore  # noqa: E402


@pytest.fixture
def valid_cpf() -> str:
    """A CPF with correct check digits."""
    return "11144477735"


@pytest.fixture
def other_cpf() -> str:
    """A second valid CPF."""
    return "52998224725"


@pytest.fixture(scope="function")
def session_factory() -> sessionmaker:
    """Session factory bound to a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # Keep connection alive for in-memory database
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Create a test database session."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def store(test_db: Session) -> DocumentStore:
    """Document store over the test database."""
    return DocumentStore(test_db)


@pytest.fixture
def quote_client() -> Mock:
    """Quote client returning a fixed quote for any symbol."""
    client = Mock(spec=QuoteClient)
    client.get_quote.side_effect = lambda symbol: LiveQuote(
        symbol=symbol.upper(), price=40.0, media200=36.0
    )
    return client
