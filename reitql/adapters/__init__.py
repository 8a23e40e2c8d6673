"""Dialect adapters for the SQL the search layer cannot express portably.

Only two things vary per backend: great-circle distance and null placement in ORDER BY.
"""
from __future__ import annotations

import logging

from .base import BaseAdapter
from .sqlite import SQLiteAdapter
from .postgres import PostgresAdapter
from .mysql import MySQLAdapter

logger = logging.getLogger(__name__)

_BY_DIALECT_PREFIX = (
    ('postgres', PostgresAdapter),
    ('mysql', MySQLAdapter),
    ('mariadb', MySQLAdapter),
    ('sqlite', SQLiteAdapter),
)


def get_adapter(dialect_name: str) -> BaseAdapter:
    dn = (dialect_name or '').lower()
    for prefix, adapter_cls in _BY_DIALECT_PREFIX:
        if dn.startswith(prefix):
            return adapter_cls()
    logger.warning(f"No adapter for dialect {dialect_name!r}; using SQLite semantics")
    return SQLiteAdapter()


__all__ = [
    'BaseAdapter',
    'SQLiteAdapter',
    'PostgresAdapter',
    'MySQLAdapter',
    'get_adapter',
]
