"""
Shared fixtures and mocking helpers for crud/ module tests.

Key fixtures:
- recording_connection: fake DatabaseConnection recording SQL and parameters.
- recording_helper: QueryHelper wired to the recording connection.
- sqlite_helper: QueryHelper on a real in-memory SQLite 'users' table.
"""

import pytest

from sql.query_builder import QueryBuilder


class FakeMappings:
    """Mock of Result.mappings()."""
    def __init__(self, rows):
        self.rows = rows

    def __iter__(self):
        return iter(self.rows)

    def first(self):
        return self.rows[0] if self.rows else None


class FakeResult:
    """Mock SQLAlchemy Result."""
    def __init__(self, rows=None, scalar=None):
        self.rows = rows or []
        self.scalar = scalar

    def mappings(self):
        return FakeMappings(self.rows)

    def scalar_one(self):
        return self.scalar


class RecordingConnection:
    """
    Stand-in for DatabaseConnection.

    Records every (sql, params) pair and answers queries with the configured
    FakeResult and statements with the configured row count.
    """
    def __init__(self):
        self.queries = []
        self.statements = []
        self.result = FakeResult()
        self.rowcount = 1
        self.last_id = None
        self.tables = []

    def respond(self, rows=None, scalar=None):
        """Answer the next queries with these rows / this scalar."""
        self.result = FakeResult(rows=rows, scalar=scalar)

    def create_query_builder(self):
        return QueryBuilder(self)

    def create_schema_manager(self):
        connection = self

        class _Manager:
            def tables_exist(self, names):
                return all(name in connection.tables for name in names)

        return _Manager()

    def execute_query(self, sql, params=None):
        self.queries.append((sql, params))
        return self.result

    def execute_statement(self, sql, params=None):
        self.statements.append((sql, params))
        return self.rowcount

    def last_insert_id(self, name=None):
        return self.last_id if name is None else f"{name}:{self.last_id}"


@pytest.fixture
def recording_connection():
    return RecordingConnection()


@pytest.fixture
def recording_helper(recording_connection):
    from crud.query_helper import QueryHelper

    return QueryHelper(connection=recording_connection)


@pytest.fixture
def sqlite_helper(sqlite_connection):
    from crud.query_helper import QueryHelper

    return QueryHelper(connection=sqlite_connection)
