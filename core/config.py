"""
===============================================
Configuration management for the query helper.
===============================================

Loads database connection settings from environment variables (.env file)
and exposes them as an explicit DatabaseConfig struct that is handed to the
QueryHelper at construction time.

The configuration system ensures:
- Settings are passed explicitly instead of read from process-wide globals
- All required connection parameters are validated before connecting
- Optional settings (port, SQL echo) have safe defaults

Environment variables:
    DB_NAME, DB_USER, DB_PASSWORD, DB_HOST, DB_DRIVER (required)
    DB_PORT, DB_ECHO (optional)

Example:
    >>> from core.config import DatabaseConfig
    >>>
    >>> db_config = DatabaseConfig.from_env()
    >>> db_config.validate()
    >>> print(f"Driver: {db_config.driver}, Host: {db_config.host}")
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

REQUIRED_FIELDS = ('name', 'user', 'password', 'host', 'driver')

ENV_VARS = {
    'name': 'DB_NAME',
    'user': 'DB_USER',
    'password': 'DB_PASSWORD',
    'host': 'DB_HOST',
    'driver': 'DB_DRIVER',
    'port': 'DB_PORT',
    'echo': 'DB_ECHO',
}


class ConfigurationError(Exception):
    """Exception raised when the database configuration is incomplete.

    Raised before any connection attempt is made.
    """
    pass


@dataclass
class DatabaseConfig:
    """Database connection settings.

    A field set to None counts as missing. Empty strings are accepted, so
    drivers that ignore credentials (e.g. SQLite) can leave them blank.

    Attributes:
        name: Database name (file path or ':memory:' for SQLite)
        user: Database username
        password: Database password
        host: Database server hostname or IP address
        driver: SQLAlchemy drivername (postgresql, mysql+pymysql, sqlite, ...)
        port: Optional server port; driver default when None
        echo: Log every SQL statement through SQLAlchemy
    """

    name: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None
    host: Optional[str] = None
    driver: Optional[str] = None
    port: Optional[int] = None
    echo: bool = False

    @classmethod
    def from_env(cls) -> 'DatabaseConfig':
        """Build configuration from DB_* environment variables.

        Missing variables stay None so validate() can report them.

        Returns:
            DatabaseConfig populated from the environment
        """
        port = os.getenv(ENV_VARS['port'])
        echo = os.getenv(ENV_VARS['echo'], 'false')
        return cls(
            name=os.getenv(ENV_VARS['name']),
            user=os.getenv(ENV_VARS['user']),
            password=os.getenv(ENV_VARS['password']),
            host=os.getenv(ENV_VARS['host']),
            driver=os.getenv(ENV_VARS['driver']),
            port=int(port) if port else None,
            echo=echo.strip().lower() in ('1', 'true', 'yes', 'on')
        )

    def missing_fields(self) -> List[str]:
        """Return the names of required fields that are not set."""
        return [name for name in REQUIRED_FIELDS if getattr(self, name) is None]

    def validate(self) -> None:
        """Fail fast when any required connection parameter is missing.

        Raises:
            ConfigurationError: If name, user, password, host or driver is None
        """
        missing = self.missing_fields()
        if missing:
            env_names = ", ".join(ENV_VARS[name] for name in missing)
            raise ConfigurationError(f"config for db invalid! missing: {env_names}")

    def describe(self) -> str:
        """Human readable target without credentials, for log messages."""
        location = self.host or 'local'
        if self.port:
            location = f"{location}:{self.port}"
        return f"{self.driver}://{location}/{self.name}"


class Config:
    """Centralized configuration manager.

    Holds the DatabaseConfig read from the environment at import time. No
    validation happens here; QueryHelper validates on construction.

    Attributes:
        db: DatabaseConfig instance with database connection settings

    Example:
        >>> config = Config()
        >>> print(f"Connecting to {config.db_host} with {config.db_driver}")
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.db = DatabaseConfig.from_env()

    @property
    def db_name(self) -> Optional[str]:
        """Get database name."""
        return self.db.name

    @property
    def db_user(self) -> Optional[str]:
        """Get database username."""
        return self.db.user

    @property
    def db_password(self) -> Optional[str]:
        """Get database password."""
        return self.db.password

    @property
    def db_host(self) -> Optional[str]:
        """Get database server hostname."""
        return self.db.host

    @property
    def db_driver(self) -> Optional[str]:
        """Get SQLAlchemy drivername."""
        return self.db.driver

    @property
    def db_port(self) -> Optional[int]:
        """Get database server port number."""
        return self.db.port

    def reload(self) -> DatabaseConfig:
        """Re-read the environment, e.g. after tests patch os.environ."""
        self.db = DatabaseConfig.from_env()
        return self.db


# Global configuration instance
config = Config()
