"""
==================================================
Database connectivity utilities for the helper.
==================================================

Provides the connection collaborator used by the CRUD helper: engine
creation from a DatabaseConfig, a connection wrapper that executes
positional-parameter SQL, schema introspection and last-insert-id lookup.

This module keeps all SQLAlchemy specifics away from the helper logic, so
any backend SQLAlchemy supports can be substituted by configuration.

Key Features:
    - Connection URL building from DatabaseConfig
    - One lazily opened, auto-committing connection per wrapper
    - ``?`` placeholder translation to SQLAlchemy named binds
    - Case-insensitive table existence checks
    - Session-level last inserted id per dialect

Example:
    >>> from core.config import DatabaseConfig
    >>> from utils.database_utils import DatabaseConnection
    >>>
    >>> conn = DatabaseConnection.from_config(DatabaseConfig(
    ...     name=':memory:', user='', password='', host='', driver='sqlite'
    ... ))
    >>> conn.create_schema_manager().tables_exist(['users'])
    False
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import URL, Connection, Engine, Result
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from core.config import DatabaseConfig
from core.logger import SQLALCHEMY_LOGGER
from sql.query_builder import QueryBuilder, positional_to_named

logger = logging.getLogger(__name__)

# Any failure raised by SQLAlchemy or the underlying DBAPI driver
DriverError = SQLAlchemyError

LAST_INSERT_ID_SQL = {
    'sqlite': "SELECT last_insert_rowid()",
    'mysql': "SELECT LAST_INSERT_ID()",
    'mariadb': "SELECT LAST_INSERT_ID()",
    'postgresql': "SELECT lastval()",
}

SEQUENCE_LAST_VALUE_SQL = {
    'postgresql': "SELECT currval(:sequence_name)",
}


def build_connection_url(db_config: DatabaseConfig) -> URL:
    """
    Build a SQLAlchemy URL from the connection settings.

    Empty strings are passed as None so drivers without credentials or host
    (SQLite) receive a valid URL.

    Args:
        db_config: Connection settings

    Returns:
        SQLAlchemy URL

    Example:
        >>> build_connection_url(DatabaseConfig(
        ...     name='shop', user='app', password='p@ss', host='db', driver='postgresql'
        ... )).render_as_string(hide_password=False)
        'postgresql://app:p%40ss@db/shop'
    """
    return URL.create(
        drivername=db_config.driver,
        username=db_config.user or None,
        password=db_config.password or None,
        host=db_config.host or None,
        port=db_config.port,
        database=db_config.name or None
    )


def create_sqlalchemy_engine(db_config: DatabaseConfig) -> Engine:
    """
    Create an auto-committing SQLAlchemy engine.

    Every statement is committed as it executes; there is no transaction
    management at this layer.

    Args:
        db_config: Connection settings

    Returns:
        Configured SQLAlchemy Engine
    """
    if db_config.echo:
        logging.getLogger(SQLALCHEMY_LOGGER).setLevel(logging.INFO)

    return create_engine(
        build_connection_url(db_config),
        isolation_level="AUTOCOMMIT"
    )


class SchemaManager:
    """Schema introspection over a live connection.

    A fresh Inspector is created per call, so tables created after the
    manager was obtained are seen.
    """

    def __init__(self, connection: Connection):
        self.connection = connection

    def list_table_names(self, schema: Optional[str] = None) -> List[str]:
        return inspect(self.connection).get_table_names(schema=schema)

    def tables_exist(self, names: Iterable[str], schema: Optional[str] = None) -> bool:
        """
        Check that every given table exists, ignoring case.

        Args:
            names: Table names to look for
            schema: Optional schema; the connection default when None

        Returns:
            True if all tables exist (also for an empty list), False otherwise
        """
        wanted = {name.lower() for name in names}
        existing = {name.lower() for name in self.list_table_names(schema=schema)}
        return wanted <= existing


class DatabaseConnection:
    """Connection wrapper executing positional-parameter SQL.

    Holds one SQLAlchemy Connection, opened on first use and kept for the
    lifetime of the wrapper. Not thread safe; callers sharing an instance
    must serialize access.

    Attributes:
        engine: SQLAlchemy Engine the connection is drawn from

    Example:
        >>> conn = DatabaseConnection.from_config(db_config)
        >>> conn.execute_statement("DELETE FROM users WHERE id = ?", {0: 5})
        1
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._connection: Optional[Connection] = None
        self._last_row_id: Any = None

    @classmethod
    def from_config(cls, db_config: DatabaseConfig) -> 'DatabaseConnection':
        return cls(create_sqlalchemy_engine(db_config))

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            self._connection = self.engine.connect()
            logger.debug(f"Opened {self.dialect_name} connection")
        return self._connection

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def create_query_builder(self) -> QueryBuilder:
        return QueryBuilder(self)

    def create_schema_manager(self) -> SchemaManager:
        return SchemaManager(self.connection)

    def execute_query(self, sql: str, params=None) -> Result:
        """Execute a SELECT and return the SQLAlchemy Result."""
        return self._execute(sql, params)

    def execute_statement(self, sql: str, params=None) -> int:
        """
        Execute a data-modifying statement.

        Args:
            sql: Statement with ``?`` placeholders
            params: Mapping of positional index to value, or a sequence

        Returns:
            Number of affected rows as reported by the driver
        """
        result = self._execute(sql, params)
        if self.dialect_name not in LAST_INSERT_ID_SQL:
            self._last_row_id = result.lastrowid
        return result.rowcount

    def last_insert_id(self, name: Optional[str] = None) -> Any:
        """
        Last auto-generated id of this connection's session.

        Args:
            name: Sequence name; used by dialects with sequences (PostgreSQL)

        Returns:
            Identifier reported by the database, or the cursor lastrowid of
            the last statement for dialects without a session-level query
        """
        dialect = self.dialect_name

        if name is not None and dialect in SEQUENCE_LAST_VALUE_SQL:
            return self.connection.execute(
                text(SEQUENCE_LAST_VALUE_SQL[dialect]), {'sequence_name': name}
            ).scalar()

        sql = LAST_INSERT_ID_SQL.get(dialect)
        if sql is None:
            return self._last_row_id
        return self.connection.execute(text(sql)).scalar()

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        self.engine.dispose()

    def _execute(self, sql: str, params=None) -> Result:
        if params is None:
            params = {}
        elif not isinstance(params, Mapping):
            params = dict(enumerate(params))

        named_sql, names = positional_to_named(sql)
        surplus = sorted(index for index in params if not 0 <= index < len(names))
        if surplus:
            raise ArgumentError(
                f"Invalid parameter number: statement has {len(names)} placeholder(s) "
                f"but {len(params)} parameter(s) are bound (no placeholder for "
                f"index {', '.join(str(index) for index in surplus)})"
            )

        # Unbound placeholders are left out so SQLAlchemy reports them
        bound = {
            name: params[index]
            for index, name in enumerate(names)
            if index in params
        }

        logger.debug(f"Executing: {sql} ({len(bound)} parameter(s))")
        return self.connection.execute(text(named_sql), bound)
