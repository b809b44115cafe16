"""
Shared pytest configuration and fixtures for all tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path so tests import 'core', 'sql', 'utils', 'crud'
# without installation
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests - isolated function-level tests")
    config.addinivalue_line("markers", "integration: Integration tests - real SQLite database")
    config.addinivalue_line("markers", "smoke: Smoke tests - basic functionality checks")
    config.addinivalue_line("markers", "edge_case: Edge case tests - boundary conditions")


@pytest.fixture
def sqlite_config():
    """Connection settings for a private in-memory SQLite database."""
    from core.config import DatabaseConfig

    return DatabaseConfig(name=':memory:', user='', password='', host='', driver='sqlite')


@pytest.fixture
def sqlite_connection(sqlite_config):
    """
    Real DatabaseConnection on in-memory SQLite with a 'users' table.

    Columns: id (autoincrement), name (NOT NULL), age, status (default 'active').
    """
    from utils.database_utils import DatabaseConnection

    connection = DatabaseConnection.from_config(sqlite_config)
    connection.execute_statement(
        "CREATE TABLE users ("
        "id INTEGER PRIMARY KEY AUTOINCREMENT, "
        "name TEXT NOT NULL, "
        "age INTEGER, "
        "status TEXT DEFAULT 'active')"
    )
    yield connection
    connection.close()
