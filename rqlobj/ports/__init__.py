"""Public port exports for concrete store adapter implementations."""

from .db_api import Database, QueryResult, WriteResult, open_sqlite

__all__ = [
    "Database",
    "QueryResult",
    "WriteResult",
    "open_sqlite",
]
