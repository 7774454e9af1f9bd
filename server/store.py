# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (c) 2026 Karan Sharma
"""Contract storage for pact.

SQLite-backed generic CRUD over three flat tables: contracts, their ordered
terms, and signatures. Callers get exactly three query shapes: insert
returning the created row, equality-filtered select (optionally ordered),
and equality-filtered update.
"""

import sqlite3
import threading
import time
import uuid
from contextlib import contextmanager

from protocol import CONTRACTS_TABLE, TERMS_TABLE, SIGNATURES_TABLE, ContractStatus


# Column order per table. Also the whitelist for filters and order_by.
SCHEMA = {
    CONTRACTS_TABLE: ("id", "title", "status", "created_at", "completed_at"),
    TERMS_TABLE: ("id", "contract_id", "term_text", "term_order"),
    SIGNATURES_TABLE: ("id", "contract_id", "name", "role", "message", "signed_at"),
}


def new_id() -> str:
    return uuid.uuid4().hex[:16]


class ContractStore:
    """SQLite-backed record store with generated ids and insert-time defaults."""

    def __init__(self, db_path: str = ":memory:"):
        self.db = sqlite3.connect(db_path, check_same_thread=False)
        self.db.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._depth = 0
        self._init_db()

    def _init_db(self):
        # Enable WAL mode for safe concurrent reads during writes
        self.db.execute("PRAGMA journal_mode=WAL")
        self.db.execute("PRAGMA foreign_keys=ON")
        self.db.execute("""
            CREATE TABLE IF NOT EXISTS contracts (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'pending',
                created_at REAL NOT NULL,
                completed_at REAL
            )
        """)
        self.db.execute("""
            CREATE TABLE IF NOT EXISTS contract_terms (
                id TEXT PRIMARY KEY,
                contract_id TEXT NOT NULL REFERENCES contracts(id) ON DELETE CASCADE,
                term_text TEXT NOT NULL,
                term_order INTEGER NOT NULL,
                UNIQUE (contract_id, term_order)
            )
        """)
        # One signature per role per contract
        self.db.execute("""
            CREATE TABLE IF NOT EXISTS signatures (
                id TEXT PRIMARY KEY,
                contract_id TEXT NOT NULL REFERENCES contracts(id) ON DELETE CASCADE,
                name TEXT NOT NULL,
                role TEXT NOT NULL CHECK (role IN ('boyfriend', 'girlfriend')),
                message TEXT,
                signed_at REAL NOT NULL,
                UNIQUE (contract_id, role)
            )
        """)
        self.db.execute("CREATE INDEX IF NOT EXISTS idx_terms_contract ON contract_terms(contract_id)")
        self.db.execute("CREATE INDEX IF NOT EXISTS idx_signatures_contract ON signatures(contract_id)")
        self.db.commit()

    # --- Transactions ---

    @contextmanager
    def transaction(self):
        """Group several calls into one atomic unit.

        Commits when the outermost block exits cleanly, rolls back on error.
        """
        with self._lock:
            self._depth += 1
            try:
                yield self
            except BaseException:
                if self._depth == 1:
                    self.db.rollback()
                raise
            else:
                if self._depth == 1:
                    self.db.commit()
            finally:
                self._depth -= 1

    def _commit(self):
        if self._depth == 0:
            self.db.commit()

    # --- CRUD ---

    def insert(self, table: str, row: dict) -> dict:
        """Insert one record. Returns the created row, id and defaults included."""
        return self.insert_many(table, [row])[0]

    def insert_many(self, table: str, rows: list[dict]) -> list[dict]:
        """Insert several records with a single commit. Returns the created rows."""
        columns = self._columns(table)
        records = [self._with_defaults(table, row) for row in rows]
        for record in records:
            self._check_columns(table, record)

        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"
        with self._lock:
            try:
                self.db.executemany(sql, [tuple(r.get(c) for c in columns) for r in records])
                self._commit()
            except sqlite3.Error:
                if self._depth == 0:
                    self.db.rollback()
                raise
        return [{c: r.get(c) for c in columns} for r in records]

    def select(self, table: str, order_by: str | None = None, **filters) -> list[dict]:
        """Select records matching every filter, optionally ordered ascending by a column."""
        columns = self._columns(table)
        self._check_columns(table, filters)
        where, params = self._where(filters)

        sql = f"SELECT {', '.join(columns)} FROM {table}{where}"
        if order_by is not None:
            if order_by not in columns:
                raise ValueError(f"Unknown column for {table}: {order_by}")
            sql += f" ORDER BY {order_by} ASC"
        with self._lock:
            rows = self.db.execute(sql, params).fetchall()
        return [self._row_to_dict(r) for r in rows]

    def update(self, table: str, values: dict, **filters) -> int:
        """Update records matching every filter. Returns the affected row count."""
        self._columns(table)
        if not values:
            raise ValueError("Nothing to update")
        if not filters:
            raise ValueError("Refusing to update without a filter")
        self._check_columns(table, values)
        self._check_columns(table, filters)
        if "id" in values:
            raise ValueError("Record ids are immutable")

        assignments = ", ".join(f"{c} = ?" for c in values)
        where, params = self._where(filters)
        with self._lock:
            try:
                cursor = self.db.execute(
                    f"UPDATE {table} SET {assignments}{where}",
                    tuple(values.values()) + params,
                )
                self._commit()
            except sqlite3.Error:
                if self._depth == 0:
                    self.db.rollback()
                raise
        return cursor.rowcount

    # --- Helpers ---

    def _columns(self, table: str) -> tuple:
        try:
            return SCHEMA[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}")

    def _check_columns(self, table: str, fields: dict):
        unknown = set(fields) - set(SCHEMA[table])
        if unknown:
            raise ValueError(f"Unknown column(s) for {table}: {', '.join(sorted(unknown))}")

    def _with_defaults(self, table: str, row: dict) -> dict:
        now = time.time()
        record = dict(row)
        record.setdefault("id", new_id())
        if table == CONTRACTS_TABLE:
            record.setdefault("status", ContractStatus.PENDING.value)
            record.setdefault("created_at", now)
            record.setdefault("completed_at", None)
        elif table == SIGNATURES_TABLE:
            record.setdefault("signed_at", now)
            record.setdefault("message", None)
        return record

    def _where(self, filters: dict) -> tuple[str, tuple]:
        if not filters:
            return "", ()
        clauses = []
        params = []
        for column, value in filters.items():
            if value is None:
                clauses.append(f"{column} IS NULL")
            else:
                clauses.append(f"{column} = ?")
                params.append(value)
        return " WHERE " + " AND ".join(clauses), tuple(params)

    def _row_to_dict(self, row) -> dict:
        return {key: row[key] for key in row.keys()}

    def close(self):
        self.db.close()
