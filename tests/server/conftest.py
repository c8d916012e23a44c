"""Pytest fixtures for FastAPI server tests."""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from dailyb3.server.api.v1.stocks import get_quote_client
from dailyb3.server.database.session import get_db
from dailyb3.server.main import app


@pytest.fixture(scope="function")
def client(test_db: Session, quote_client: Mock) -> TestClient:
    """Create a test client with the test database and a mocked quote source.

    Example:
        >>> def test_endpoint(client):
        >>>     response = client.get("/health")
        >>>     assert response.status_code == 200
    """

    def override_get_db():
        # Return the same session for all requests in a test
        yield test_db

    def override_get_quote_client():
        yield quote_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_quote_client] = override_get_quote_client

    with TestClient(app) as test_client:
        yield test_client

    test_db.rollback()
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client_no_db() -> TestClient:
    """Create a test client without database mocking."""
    with TestClient(app) as test_client:
        yield test_client
