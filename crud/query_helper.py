"""
==========================================
Generic CRUD helper over a SQL connection.
==========================================

Provides parameterized existence checks, counting, selecting, inserting,
updating and deleting against any named table, without schema knowledge.
Query construction goes through sql.query_builder; execution, binding and
introspection are delegated to utils.database_utils.DatabaseConnection.

Conditions are ordered mappings of predicate expression to value. Every
predicate is written against the table alias ``t`` and uses one ``?``
placeholder:

    {'id = ?': 5, 'status = ?': 'active'}
    # WHERE (t.id = ?) AND (t.status = ?)

Errors from the driver (connectivity, syntax, constraints) propagate
unchanged as DriverError; nothing is retried or wrapped in a transaction.

Example:
    >>> from core.config import DatabaseConfig
    >>> from crud.query_helper import QueryHelper
    >>>
    >>> helper = QueryHelper(DatabaseConfig(
    ...     name='shop', user='app', password='secret',
    ...     host='localhost', driver='postgresql'
    ... ))
    >>> helper.insert_entry('customers', {'name': 'Ada', 'email': 'ada@example.com'})
    1
    >>> customer_id = helper.get_last_inserted_id()
    >>> helper.find_by('customers', {'id = ?': customer_id})
    [{'id': 1, 'name': 'Ada', 'email': 'ada@example.com'}]
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from core.config import DatabaseConfig, config
from sql.query_builder import TABLE_ALIAS, QueryBuilder, where_conditions_builder
from utils.database_utils import DatabaseConnection

logger = logging.getLogger(__name__)


class QueryHelper:
    """Generic CRUD primitives over one held database connection.

    Stateless apart from the connection, which is kept for the lifetime of
    the helper. Not thread safe.

    Attributes:
        connection: DatabaseConnection all statements run on

    Example:
        >>> helper = QueryHelper(db_config)
        >>> helper.table_exists('customers')
        True
        >>> helper.count_entries('customers', {'status = ?': 'active'})
        42
    """

    def __init__(
        self,
        db_config: Optional[DatabaseConfig] = None,
        connection: Optional[DatabaseConnection] = None
    ):
        """Initialize the helper.

        Args:
            db_config: Connection settings; read from DB_* environment
                variables when omitted. Ignored if connection is given.
            connection: Ready connection to use instead of opening one

        Raises:
            ConfigurationError: If a required connection setting is missing
        """
        if connection is None:
            db_config = db_config if db_config is not None else config.reload()
            db_config.validate()
            connection = DatabaseConnection.from_config(db_config)
            logger.info(f"Query helper configured for {db_config.describe()}")

        self.connection = connection

    def get_query_builder(self) -> QueryBuilder:
        """Fresh query builder bound to the helper's connection."""
        return self.connection.create_query_builder()

    def table_exists(self, table_name: str) -> bool:
        return self.connection.create_schema_manager().tables_exist([table_name])

    def count_entries(self, table: str, where: Optional[Mapping[str, Any]] = None) -> int:
        """
        Count the rows matching the conditions.

        Args:
            table: Table name
            where: Ordered mapping of predicate to value; all rows when empty

        Returns:
            Number of matching rows
        """
        qb = self.get_query_builder().select("COUNT(*)").from_(table, TABLE_ALIAS)
        return where_conditions_builder(qb, where).execute_query().scalar_one()

    def find_by(self, table: str, where: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Select all columns of the matching rows.

        Args:
            table: Table name
            where: Ordered mapping of predicate to value; all rows when empty

        Returns:
            List of row dictionaries in result order
        """
        qb = self.get_query_builder().select(f"{TABLE_ALIAS}.*").from_(table, TABLE_ALIAS)
        result = where_conditions_builder(qb, where).execute_query()
        return [dict(row) for row in result.mappings()]

    def get_column_value_by(
        self,
        table: str,
        column: str,
        where: Optional[Mapping[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Select one column of the first matching row.

        Args:
            table: Table name
            column: Column to select
            where: Ordered mapping of predicate to value

        Returns:
            ``{column: value}`` for the first row, or None when nothing matches
        """
        qb = self.get_query_builder().select(f"{TABLE_ALIAS}.{column}").from_(table, TABLE_ALIAS)
        row = where_conditions_builder(qb, where).execute_query().mappings().first()
        return dict(row) if row is not None else None

    def insert_entry(self, table: str, values: Mapping[str, Any]) -> int:
        """
        Insert one row.

        Args:
            table: Table name
            values: Ordered mapping of column to value; bound from index 0.
                An empty mapping inserts a row of column defaults.

        Returns:
            Number of affected rows
        """
        qb = self.get_query_builder().insert(table)
        for i, (column, value) in enumerate(values.items()):
            qb.set_value(column, "?").set_parameter(i, value)
        return qb.execute_statement()

    def get_last_inserted_id(self, sequence_name: Optional[str] = None) -> Any:
        return self.connection.last_insert_id(sequence_name)

    def update_entry(
        self,
        table: str,
        values: Mapping[str, Any],
        where: Mapping[str, Any]
    ) -> int:
        """
        Update the matching rows.

        SET values are bound at indices ``0..len(values)-1``; condition
        values continue from the builder's ``parameter_count``.

        Args:
            table: Table name
            values: Ordered mapping of column to new value
            where: Ordered mapping of predicate to value

        Returns:
            Number of affected rows
        """
        qb = self.get_query_builder().update(table, TABLE_ALIAS)
        for i, (column, value) in enumerate(values.items()):
            qb.set(column, "?").set_parameter(i, value)
        return where_conditions_builder(qb, where, base_offset=qb.parameter_count).execute_statement()

    def delete_entry(self, table: str, where: Mapping[str, Any]) -> int:
        """
        Delete the matching rows.

        Args:
            table: Table name
            where: Ordered mapping of predicate to value

        Returns:
            Number of affected rows
        """
        qb = self.get_query_builder().delete(table, TABLE_ALIAS)
        return where_conditions_builder(qb, where).execute_statement()
