# persistence/__init__.py
"""
Persistence layer.

Provides the SQLite-backed relational store shared by the auth core
and the content services.
"""

from persistence.db import Database, from_db_time, to_db_time, utcnow

__all__ = [
    "Database",
    "from_db_time",
    "to_db_time",
    "utcnow",
]
