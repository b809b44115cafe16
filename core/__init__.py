"""
=============================================
Core infrastructure package for the helper.
=============================================

This package provides explicit configuration and logging infrastructure used
by the query builder, the connection layer and the CRUD helper.

Modules:
    config: DatabaseConfig loaded from environment variables
    logger: Centralized logging configuration

Example:
    >>> from core.config import DatabaseConfig
    >>> from core.logger import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info(f"Connecting to {DatabaseConfig.from_env().describe()}")
"""

__version__ = "0.1.0"
__all__ = [
    'get_logger', 'setup_logging',
    'config', 'Config', 'DatabaseConfig', 'ConfigurationError'
]

from core.config import Config, ConfigurationError, DatabaseConfig, config
from core.logger import get_logger, setup_logging
