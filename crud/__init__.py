"""
=====================
Generic CRUD package.
=====================

Modules:
    query_helper: QueryHelper with parameterized CRUD primitives for any table
"""

__all__ = ['QueryHelper']

from .query_helper import QueryHelper
