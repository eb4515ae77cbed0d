"""DB-API store adapter exports."""

from .database import Database, QueryResult, WriteResult, open_sqlite

__all__ = [
    "Database",
    "QueryResult",
    "WriteResult",
    "open_sqlite",
]
