"""
Pytest fixtures for the selector kernel test suite.

Provides:
- Structured logging setup and log capture
- An in-memory SQLite database with the sample entity types
- Schema describe, seeded records and sample selectors
"""

import json
import logging
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from selector_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from selector_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from selector_kernel.schema.describe import AccessPolicy, SchemaDescribe
from selector_kernel.selectors.base import BaseSelector
from selector_kernel.store import RecordStore
from tests.sample_models import FIELD_SETS, Account, AsyncApexJob, Contact


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture selector_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, account_selector):
            account_selector.select_by_ids(ids)
            logs = captured_logs()
            assert any(r["message"] == "selector_query_executed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("selector_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """Session on a fresh in-memory SQLite database with all sample tables."""
    init_engine_from_url("sqlite://")
    create_tables()
    session = get_session()
    yield session
    session.close()
    drop_tables()
    reset_engine()


@pytest.fixture
def accounts(session) -> list[Account]:
    """Three accounts, inserted out of name order."""
    rows = [
        Account(Name="Globex", CurrencyIsoCode="EUR", BillingCity="Berlin", BillingCountry="DE"),
        Account(Name="Acme", CurrencyIsoCode="USD", BillingCity="Denver", BillingCountry="US"),
        Account(Name="Initech", CurrencyIsoCode="GBP", BillingCity="Leeds", BillingCountry="UK"),
    ]
    session.add_all(rows)
    session.flush()
    return rows


@pytest.fixture
def jobs(session) -> list[AsyncApexJob]:
    rows = [
        AsyncApexJob(Name="nightly-rollup", Status="Completed"),
        AsyncApexJob(Name="email-digest", Status="Queued"),
    ]
    session.add_all(rows)
    session.flush()
    return rows


# =============================================================================
# Schema and selector fixtures
# =============================================================================


@pytest.fixture
def schema() -> SchemaDescribe:
    """Describe service granting read access to every entity."""
    return SchemaDescribe(field_sets=FIELD_SETS)


@pytest.fixture
def restricted_schema() -> SchemaDescribe:
    """Describe service denying read access to Account."""
    return SchemaDescribe(
        access_policy=AccessPolicy(denied=frozenset({"Account"})),
        field_sets=FIELD_SETS,
    )


class AccountSelector(BaseSelector):
    def entity_type(self):
        return Account

    def field_list(self):
        return [Account.id, Account.Name]

    def field_set_list(self):
        return ["Billing"]


class ContactSelector(BaseSelector):
    def entity_type(self):
        return Contact

    def field_list(self):
        return ["Id", "Name", "Email"]

    def order_by_clause(self):
        return "Name DESC"


class AsyncApexJobSelector(BaseSelector):
    def entity_type(self):
        return AsyncApexJob

    def field_list(self):
        return ["Id", "Status"]


class SpyRecordStore(RecordStore):
    """RecordStore that records every call before delegating."""

    def __init__(self, session):
        super().__init__(session)
        self.calls: list[tuple[str, str, list]] = []

    def query(self, query_text, ids):
        self.calls.append(("query", query_text, list(ids)))
        return super().query(query_text, ids)

    def query_handle(self, query_text, ids, batch_size=None):
        self.calls.append(("query_handle", query_text, list(ids)))
        return super().query_handle(query_text, ids, batch_size=batch_size)


@pytest.fixture
def spy_store(session) -> SpyRecordStore:
    return SpyRecordStore(session)


@pytest.fixture
def account_selector(session, schema) -> AccountSelector:
    return AccountSelector(session, schema)


@pytest.fixture
def job_selector(session, schema) -> AsyncApexJobSelector:
    return AsyncApexJobSelector(session, schema)
