"""Tests for the stock document store."""

from unittest.mock import Mock

import pytest

from dailyb3.exceptions import DocumentNotFoundError
from dailyb3.server.repositories.document_store import DELETE_FIELD, DocumentStore


class TestDocumentStoreWrites:
    """Tests for set and update."""

    def test_set_creates(self, store: DocumentStore):
        store.set("ABC3", {"symbol": "ABC3", "cpf": "11144477735"})
        assert store.get("ABC3") == {"symbol": "ABC3", "cpf": "11144477735"}

    def test_set_replaces(self, store: DocumentStore):
        store.set("ABC3", {"symbol": "ABC3", "cpf": "1", "rentUrl": "x"})
        store.set("ABC3", {"symbol": "ABC3", "cpf": "1"})
        assert "rentUrl" not in store.get("ABC3")

    def test_set_rejects_delete_sentinel(self, store: DocumentStore):
        with pytest.raises(ValueError):
            store.set("ABC3", {"rentUrl": DELETE_FIELD})

    def test_update_merges(self, store: DocumentStore):
        store.set("ABC3", {"symbol": "ABC3", "cpf": "1", "currentPrice": 10})
        store.update("ABC3", {"currentPrice": 12, "upside": 5.0})
        assert store.get("ABC3") == {
            "symbol": "ABC3", "cpf": "1", "currentPrice": 12, "upside": 5.0
        }

    def test_update_deletes_field(self, store: DocumentStore):
        store.set("ABC3", {"symbol": "ABC3", "cpf": "1", "rentUrl": "https://x"})
        store.update("ABC3", {"rentUrl": DELETE_FIELD})
        assert "rentUrl" not in store.get("ABC3")

    def test_update_missing_document(self, store: DocumentStore):
        with pytest.raises(DocumentNotFoundError):
            store.update("NOPE3", {"currentPrice": 1})

    def test_get_missing(self, store: DocumentStore):
        assert store.get("NOPE3") is None


class TestDocumentStoreReads:
    """Tests for queries."""

    def test_list_scoped_by_cpf(self, store: DocumentStore):
        store.set("ABC3", {"symbol": "ABC3", "cpf": "1"})
        store.set("XYZ4", {"symbol": "XYZ4", "cpf": "2"})

        assert [d.id for d in store.list_documents()] == ["ABC3", "XYZ4"]
        assert [d.id for d in store.list_documents(cpf="2")] == ["XYZ4"]

    def test_list_cpfs(self, store: DocumentStore):
        store.set("ABC3", {"symbol": "ABC3", "cpf": "2"})
        store.set("XYZ4", {"symbol": "XYZ4", "cpf": "1"})
        store.set("DEF3", {"symbol": "DEF3", "cpf": "1"})
        assert store.list_cpfs() == ["1", "2"]


class TestDocumentStoreSubscriptions:
    """Tests for subscribe."""

    def test_initial_snapshot(self, store: DocumentStore):
        store.set("ABC3", {"symbol": "ABC3", "cpf": "1"})
        listener = Mock()

        store.subscribe(listener)

        snapshot = listener.call_args.args[0]
        assert [d.id for d in snapshot] == ["ABC3"]

    def test_notified_after_every_write(self, store: DocumentStore):
        listener = Mock()
        store.subscribe(listener)

        store.set("ABC3", {"symbol": "ABC3", "cpf": "1"})
        store.update("ABC3", {"score": 1})

        assert listener.call_count == 3
        assert listener.call_args.args[0][0].data["score"] == 1

    def test_scoped_subscription(self, store: DocumentStore):
        listener = Mock()
        store.subscribe(listener, cpf="1")

        store.set("XYZ4", {"symbol": "XYZ4", "cpf": "2"})

        assert listener.call_args.args[0] == []

    def test_unsubscribe(self, store: DocumentStore):
        listener = Mock()
        unsubscribe = store.subscribe(listener)
        unsubscribe()

        store.set("ABC3", {"symbol": "ABC3", "cpf": "1"})

        assert listener.call_count == 1

    def test_failing_listener_does_not_break_writes(self, store: DocumentStore):
        listener = Mock()
        store.subscribe(listener)
        listener.side_effect = RuntimeError("boom")

        store.set("ABC3", {"symbol": "ABC3", "cpf": "1"})

        assert store.get("ABC3") is not None
