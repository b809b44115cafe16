"""
==========================
Utility Functions Package.
==========================

Connection collaborator for the CRUD helper: engine creation, statement
execution with positional parameters and schema introspection.

Modules:
    database_utils: SQLAlchemy connection wrapper and schema manager
"""

__version__ = "1.0.0"
__all__ = [
    'DatabaseConnection',
    'SchemaManager',
    'DriverError',
    'build_connection_url',
    'create_sqlalchemy_engine'
]

from .database_utils import (
    DatabaseConnection,
    DriverError,
    SchemaManager,
    build_connection_url,
    create_sqlalchemy_engine,
)
