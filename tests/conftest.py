import sys
import os
import sqlite3

# Ensure pact root is on the path for all tests
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import pytest
from starlette.testclient import TestClient

from server.app import create_app
from server.store import ContractStore
from server.lifecycle import ContractLifecycle


SAMPLE_TITLE = "Our Deal"
SAMPLE_TERMS = ["Be kind", "Be honest"]


class FailingStore(ContractStore):
    """In-memory store that raises a storage error on chosen operations.

    fail_on: set of "insert", "select", "update". fail_table limits failures
    to one table.
    """

    def __init__(self, fail_on=(), fail_table=None):
        super().__init__(":memory:")
        self.fail_on = set(fail_on)
        self.fail_table = fail_table
        self.calls = []

    def _maybe_fail(self, op, table):
        self.calls.append((op, table))
        if op in self.fail_on and (self.fail_table is None or self.fail_table == table):
            raise sqlite3.OperationalError(f"simulated {op} failure on {table}")

    def insert_many(self, table, rows):
        self._maybe_fail("insert", table)
        return super().insert_many(table, rows)

    def select(self, table, order_by=None, **filters):
        self._maybe_fail("select", table)
        return super().select(table, order_by=order_by, **filters)

    def update(self, table, values, **filters):
        self._maybe_fail("update", table)
        return super().update(table, values, **filters)


@pytest.fixture
def store():
    s = ContractStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def lifecycle(store):
    return ContractLifecycle(store)


@pytest.fixture
def app(store):
    """Fresh app with an in-memory store for each test."""
    return create_app(store=store)


@pytest.fixture
def client(app):
    return TestClient(app)


def create_contract(client, title=SAMPLE_TITLE, terms=None):
    """Helper: create a contract over HTTP, return its id."""
    resp = client.post("/contracts", json={
        "title": title,
        "terms": SAMPLE_TERMS if terms is None else terms,
    })
    assert resp.status_code == 200
    return resp.json()["contract_id"]


def sign(client, contract_id, role, name, message=None):
    return client.post(f"/contracts/{contract_id}/sign", json={
        "role": role, "name": name, "message": message,
    })
