"""Tests for the record store collaborator and its query handles."""

from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from selector_kernel.store import QueryHandle, RecordStore, bind_ids, id_statement

QUERY = "SELECT Id,Name FROM Account WHERE id in :ids ORDER BY Name"


class TestBindIds:
    def test_uuids_bound_as_strings(self):
        uid = uuid4()
        assert bind_ids([uid, "plain", 7]) == [str(uid), "plain", 7]

    def test_ids_are_bound_not_interpolated(self):
        statement = id_statement(QUERY)
        assert ":ids" in statement.text
        assert "ids" in statement._bindparams
        assert statement._bindparams["ids"].expanding


class TestRecordStore:
    def test_query_materialises_dicts(self, session, accounts):
        rows = RecordStore(session).query(QUERY, [accounts[0].id, accounts[1].id])
        assert rows == [
            {"Id": str(accounts[1].id), "Name": "Acme"},
            {"Id": str(accounts[0].id), "Name": "Globex"},
        ]

    def test_quote_in_id_is_data_not_sql(self, session, accounts):
        assert RecordStore(session).query(QUERY, ["x') OR ('1'='1"]) == []

    def test_execution_error_propagates(self, session, accounts):
        with pytest.raises(OperationalError):
            RecordStore(session).query("SELECT Id FROM Nowhere WHERE id in :ids ORDER BY Id", ["a"])

    def test_query_logged(self, session, accounts, captured_logs):
        RecordStore(session).query(QUERY, [accounts[0].id])
        records = [r for r in captured_logs() if r["message"] == "record_store_query"]
        assert records[0]["query"] == QUERY
        assert records[0]["id_count"] == 1


class TestQueryHandle:
    def test_no_execution_on_creation(self, session, captured_logs):
        handle = RecordStore(session).query_handle(
            "SELECT Id FROM Nowhere WHERE id in :ids ORDER BY Id", ["a"]
        )
        assert isinstance(handle, QueryHandle)
        assert not any(r["message"] == "record_store_query" for r in captured_logs())
        with pytest.raises(OperationalError):
            handle.all()

    def test_batches_use_explicit_size(self, session, accounts):
        handle = RecordStore(session).query_handle(QUERY, [a.id for a in accounts])
        assert [len(b) for b in handle.batches(1)] == [1, 1, 1]

    def test_batches_require_size(self, session, accounts):
        handle = RecordStore(session).query_handle(QUERY, [a.id for a in accounts])
        with pytest.raises(ValueError, match="positive integer"):
            handle.batches()

    @pytest.mark.parametrize("size", [0, -3])
    def test_invalid_batch_size_rejected_on_call(self, session, accounts, size, captured_logs):
        handle = RecordStore(session).query_handle(
            QUERY, [a.id for a in accounts], batch_size=2
        )
        with pytest.raises(ValueError, match="positive integer"):
            handle.batches(size)
        assert not any(r["message"] == "record_store_query" for r in captured_logs())

    def test_batches_execute_lazily(self, session, captured_logs):
        handle = RecordStore(session).query_handle(
            "SELECT Id FROM Nowhere WHERE id in :ids ORDER BY Id", ["a"]
        )
        batches = handle.batches(5)
        assert not any(r["message"] == "record_store_query" for r in captured_logs())
        with pytest.raises(OperationalError):
            next(batches)

    def test_repr(self, session):
        handle = QueryHandle(session, QUERY, ["a", "b"])
        assert repr(handle) == f"QueryHandle({QUERY!r}, ids=2)"
