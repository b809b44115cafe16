"""
============================
SQL Query Builder Utilities.
============================

This module provides the fluent query builder used by the CRUD helper and the
WHERE-clause building block that attaches equality conditions to it.

Statements are written with positional ``?`` placeholders. Parameters are
bound by zero-based index with ``set_parameter`` and the builder hands SQL and
parameters to its connection, which rewrites the placeholders into named
binds (``:p0``, ``:p1``, ...) for SQLAlchemy.

Query Builders:
- QueryBuilder: fluent SELECT/INSERT/UPDATE/DELETE builder bound to a connection
- where_conditions_builder: attach ordered ``{predicate: value}`` conditions
- positional_to_named: rewrite ``?`` placeholders outside quoted literals

Usage:
    from sql.query_builder import QueryBuilder, where_conditions_builder

    qb = QueryBuilder().update('users', 't').set('name', '?').set_parameter(0, 'Ada')
    where_conditions_builder(qb, {'id = ?': 5}, base_offset=1)

    qb.get_sql()
    # UPDATE users AS t SET name = ? WHERE t.id = ?
    qb.get_parameters()
    # {0: 'Ada', 1: 5}
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

TABLE_ALIAS = 't'
POSITIONAL_PLACEHOLDER = '?'
BIND_PREFIX = 'p'

SELECT = 'SELECT'
INSERT = 'INSERT'
UPDATE = 'UPDATE'
DELETE = 'DELETE'


class QueryBuilderError(Exception):
    """Exception raised when a statement cannot be built or has no connection."""
    pass


def bind_name(index: int) -> str:
    """Name of the SQLAlchemy bind parameter for a positional index."""
    return f"{BIND_PREFIX}{index}"


def positional_to_named(sql: str) -> Tuple[str, List[str]]:
    """
    Rewrite positional placeholders into named binds.

    Every ``?`` outside single- or double-quoted text becomes ``:p<n>`` where
    ``n`` counts placeholders from zero, left to right. A bind directly
    followed by ``:`` or an identifier character is parenthesized, so a
    PostgreSQL cast ``?::int`` becomes ``(:p0)::int`` and stays a bind.

    Args:
        sql: Statement using ``?`` placeholders

    Returns:
        Tuple of (rewritten SQL, bind names in placeholder order)

    Example:
        >>> positional_to_named("SELECT * FROM t WHERE a = ? AND b = '?'")
        ("SELECT * FROM t WHERE a = :p0 AND b = '?'", ['p0'])
    """
    parts = []
    names = []
    quote = None

    for position, char in enumerate(sql):
        if quote:
            if char == quote:
                quote = None
            parts.append(char)
        elif char in ("'", '"'):
            quote = char
            parts.append(char)
        elif char == POSITIONAL_PLACEHOLDER:
            name = bind_name(len(names))
            names.append(name)
            following = sql[position + 1:position + 2]
            if following == ":" or following == "_" or following.isalnum():
                parts.append(f"(:{name})")
            else:
                parts.append(f":{name}")
        else:
            parts.append(char)

    return "".join(parts), names


class QueryBuilder:
    """Fluent builder for a single SQL statement with positional parameters.

    The statement type is chosen by the last call to select(), insert(),
    update() or delete(). Execution is delegated to the connection passed at
    construction (see utils.database_utils.DatabaseConnection).

    Attributes:
        connection: Object providing execute_query(sql, params) and
            execute_statement(sql, params), or None for SQL-only use
    """

    def __init__(self, connection=None):
        self.connection = connection
        self._type = SELECT
        self._select: List[str] = []
        self._table: Optional[str] = None
        self._alias: Optional[str] = None
        self._values: Dict[str, str] = {}
        self._set: List[str] = []
        self._where: List[str] = []
        self._parameters: Dict[int, Any] = {}

    # ----- statement type -----

    def select(self, *expressions: str) -> 'QueryBuilder':
        self._type = SELECT
        self._select = list(expressions)
        return self

    def from_(self, table: str, alias: Optional[str] = None) -> 'QueryBuilder':
        self._table = table
        self._alias = alias
        return self

    def insert(self, table: str) -> 'QueryBuilder':
        self._type = INSERT
        self._table = table
        self._alias = None
        return self

    def update(self, table: str, alias: Optional[str] = None) -> 'QueryBuilder':
        self._type = UPDATE
        self._table = table
        self._alias = alias
        return self

    def delete(self, table: str, alias: Optional[str] = None) -> 'QueryBuilder':
        self._type = DELETE
        self._table = table
        self._alias = alias
        return self

    # ----- clauses -----

    def set_value(self, column: str, expression: str) -> 'QueryBuilder':
        self._values[column] = expression
        return self

    def set(self, column: str, expression: str) -> 'QueryBuilder':
        """Add an UPDATE assignment ``column = expression``."""
        self._set.append(f"{column} = {expression}")
        return self

    def where(self, predicate: str) -> 'QueryBuilder':
        """Replace any existing WHERE predicates with ``predicate``."""
        self._where = [predicate]
        return self

    def and_where(self, predicate: str) -> 'QueryBuilder':
        """AND another predicate onto the WHERE clause."""
        self._where.append(predicate)
        return self

    # ----- parameters -----

    def set_parameter(self, key: int, value: Any) -> 'QueryBuilder':
        self._parameters[key] = value
        return self

    def get_parameters(self) -> Dict[int, Any]:
        """Bound parameters ordered by positional index."""
        return dict(sorted(self._parameters.items()))

    @property
    def parameter_count(self) -> int:
        """Number of positional parameters bound so far."""
        return len(self._parameters)

    # ----- rendering -----

    def get_sql(self) -> str:
        """
        Render the statement with positional placeholders.

        Returns:
            SQL string

        Raises:
            QueryBuilderError: If no table has been set
        """
        if not self._table:
            raise QueryBuilderError(f"{self._type} statement has no table")

        if self._type == INSERT:
            return self._get_sql_for_insert()

        table_ref = f"{self._table} AS {self._alias}" if self._alias else self._table

        if self._type == UPDATE:
            sql = f"UPDATE {table_ref} SET {', '.join(self._set)}"
        elif self._type == DELETE:
            sql = f"DELETE FROM {table_ref}"
        else:
            columns = ", ".join(self._select) if self._select else "*"
            sql = f"SELECT {columns} FROM {table_ref}"

        return sql + self._get_where_clause()

    def _get_sql_for_insert(self) -> str:
        if not self._values:
            return f"INSERT INTO {self._table} DEFAULT VALUES"

        columns = ", ".join(self._values.keys())
        expressions = ", ".join(self._values.values())
        return f"INSERT INTO {self._table} ({columns}) VALUES ({expressions})"

    def _get_where_clause(self) -> str:
        if not self._where:
            return ""
        if len(self._where) == 1:
            return f" WHERE {self._where[0]}"
        return " WHERE " + " AND ".join(f"({predicate})" for predicate in self._where)

    def __str__(self) -> str:
        return self.get_sql()

    # ----- execution -----

    def execute_query(self):
        """Run a SELECT and return the SQLAlchemy Result."""
        return self._require_connection().execute_query(self.get_sql(), self.get_parameters())

    def execute_statement(self) -> int:
        """Run an INSERT/UPDATE/DELETE and return the affected row count."""
        return self._require_connection().execute_statement(self.get_sql(), self.get_parameters())

    def _require_connection(self):
        if self.connection is None:
            raise QueryBuilderError("QueryBuilder has no connection to execute on")
        return self.connection


def where_conditions_builder(
    qb: QueryBuilder,
    where: Optional[Mapping[str, Any]] = None,
    base_offset: int = 0
) -> QueryBuilder:
    """
    Attach ordered equality conditions to a builder.

    The first condition becomes the WHERE predicate, every further one is
    AND-ed on. Predicates are prefixed with the table alias ``t.``; the value
    of the i-th condition is bound at index ``base_offset + i``.

    Args:
        qb: Builder to extend
        where: Mapping of predicate expression (e.g. ``'id = ?'``) to value
        base_offset: First parameter index, i.e. the number of parameters
            already consumed by earlier clauses (UPDATE ... SET)

    Returns:
        The same builder, for chaining

    Example:
        >>> qb = QueryBuilder().select('t.*').from_('users', 't')
        >>> where_conditions_builder(qb, {'name = ?': 'Ada', 'age > ?': 30}).get_sql()
        'SELECT t.* FROM users AS t WHERE (t.name = ?) AND (t.age > ?)'
    """
    for i, (expression, value) in enumerate((where or {}).items()):
        predicate = f"{TABLE_ALIAS}.{expression}"
        if i == 0:
            qb.where(predicate)
        else:
            qb.and_where(predicate)
        qb.set_parameter(base_offset + i, value)

    return qb
