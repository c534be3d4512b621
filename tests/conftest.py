"""
Shared test fixtures for the admin console.

Provides an in-memory stand-in for the Supabase async query builder that
evaluates the handful of PostgREST operators the console uses and records
every executed query for inspection.
"""

import asyncio
from datetime import datetime, timezone

import pytest
from postgrest.exceptions import APIError


NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.action = None
        self.columns = ()
        self.count = None
        self.head = False
        self.payload = None
        self.filters = []
        self.order_by = None
        self.desc = False
        self.range_ = None
        self.limit_ = None

    # --- builders ---

    def select(self, *columns, count=None, head=None):
        self.action = "select"
        self.columns = columns
        self.count = count
        self.head = bool(head)
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.action = "update"
        self.payload = payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def gte(self, column, value):
        self.filters.append(("gte", column, value))
        return self

    def lte(self, column, value):
        self.filters.append(("lte", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    def ilike(self, column, pattern):
        self.filters.append(("ilike", column, pattern))
        return self

    def order(self, column, desc=False):
        self.order_by = column
        self.desc = desc
        return self

    def range(self, start, end):
        self.range_ = (start, end)
        return self

    def limit(self, n):
        self.limit_ = n
        return self

    # --- evaluation ---

    def filter_columns(self):
        return [column for _, column, _ in self.filters]

    def _matches(self, row):
        for op, column, value in self.filters:
            actual = row.get(column)
            if op == "eq" and actual != value:
                return False
            if op == "gte" and (actual is None or actual < value):
                return False
            if op == "lte" and (actual is None or actual > value):
                return False
            if op == "in" and actual not in value:
                return False
            if op == "ilike" and value.strip("%").lower() not in (actual or "").lower():
                return False
        return True

    async def execute(self):
        self.db.queries.append(self)
        await asyncio.sleep(0)
        if self.table in self.db.failing:
            raise APIError({"message": f"{self.table} unavailable", "code": "500", "hint": None, "details": None})

        rows = self.db.tables.setdefault(self.table, [])

        if self.action == "insert":
            rows.append(dict(self.payload))
            return FakeResponse([dict(self.payload)])

        matched = [r for r in rows if self._matches(r)]

        if self.action == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(r) for r in matched])

        if self.action == "delete":
            self.db.tables[self.table] = [r for r in rows if r not in matched]
            return FakeResponse([dict(r) for r in matched])

        if self.order_by:
            matched = sorted(matched, key=lambda r: r.get(self.order_by) or "", reverse=self.desc)
        total = len(matched)
        if self.range_:
            start, end = self.range_
            matched = matched[start:end + 1]
        if self.limit_ is not None:
            matched = matched[: self.limit_]
        data = [] if self.head else [dict(r) for r in matched]
        return FakeResponse(data, total if self.count else None)


class FakePostgrest:
    def __init__(self):
        self.closed = False

    async def aclose(self):
        self.closed = True


class FakeAuth:
    def __init__(self):
        self.closed = False

    async def close(self):
        self.closed = True


class FakeSupabase:
    def __init__(self, tables=None):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.queries = []
        self.failing = set()
        self.postgrest = FakePostgrest()
        self.auth = FakeAuth()

    def table(self, name):
        return FakeQuery(self, name)

    def executed(self, table=None, action=None):
        return [
            q for q in self.queries
            if (table is None or q.table == table) and (action is None or q.action == action)
        ]


# --- Fixtures ---


@pytest.fixture
def make_client():
    """Factory: make_client({"table": [rows...]}) -> FakeSupabase."""
    return FakeSupabase


@pytest.fixture
def fake_client():
    return FakeSupabase()


@pytest.fixture
def now():
    return NOW


def ts(year, month, day, hour=12):
    """ISO timestamp in the format PostgREST returns."""
    return datetime(year, month, day, hour, tzinfo=timezone.utc).isoformat()


@pytest.fixture
def stamp():
    return ts
