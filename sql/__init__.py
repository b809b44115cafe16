"""
================================================
SQL utilities package for generic CRUD queries.
================================================

This package provides the fluent query builder used by the CRUD helper.
Statements use positional ``?`` placeholders bound by index; execution is
delegated to a connection object from utils.database_utils.

Example:
    >>> from sql.query_builder import QueryBuilder, where_conditions_builder
    >>>
    >>> qb = QueryBuilder().select('t.*').from_('customers', 't')
    >>> where_conditions_builder(qb, {'status = ?': 'active'}).get_sql()
    'SELECT t.* FROM customers AS t WHERE t.status = ?'
"""

__version__ = "1.0.0"
__all__ = [
    'QueryBuilder', 'QueryBuilderError', 'where_conditions_builder',
    'positional_to_named', 'TABLE_ALIAS'
]

from .query_builder import (
    TABLE_ALIAS,
    QueryBuilder,
    QueryBuilderError,
    positional_to_named,
    where_conditions_builder,
)
