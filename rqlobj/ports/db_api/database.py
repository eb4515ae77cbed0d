"""DB-API adapter implementing the store client port."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional

from ...core.contracts import Receiver
from ...core.errors import StoreError
from ...core.types import MaybeRow, Row, RowMapping
from ...utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class WriteResult:
    """Outcome of one write statement; ignore the counters when `error` is set."""

    statement: str
    error: Optional[BaseException] = None
    rows_affected: int = 0
    last_insert_id: int = 0


@dataclass
class QueryResult:
    """Rows of one query with a cursor-style `next`/`scan` interface."""

    statement: str
    columns: List[str] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)
    error: Optional[BaseException] = None
    _index: int = field(default=-1, repr=False)

    def next(self) -> bool:
        """Advance to the next row; False once rows are exhausted."""

        if self._index + 1 >= len(self.rows):
            self._index = len(self.rows)
            return False
        self._index += 1
        return True

    def current(self) -> MaybeRow:
        if 0 <= self._index < len(self.rows):
            return self.rows[self._index]
        return None

    def scan(self, *targets: Receiver) -> None:
        """Assign the current row's values to `targets` in column order.

        Raises:
            ValueError: If there is no current row or the target count
                differs from the row width.
        """

        row = self.current()
        if row is None:
            raise ValueError("scan called without a current row")
        if len(targets) != len(row):
            raise ValueError(
                f"expected {len(row)} destination arguments in scan, not {len(targets)}"
            )
        for target, value in zip(targets, row):
            target.assign(value)

    def map(self) -> RowMapping:
        """Return the current row keyed by column name."""

        row = self.current()
        if row is None:
            raise ValueError("map called without a current row")
        return dict(zip(self.columns, row))

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)


class Database:
    """Thin DB-API wrapper exposing batch `write` and `query` calls."""

    def __init__(self, conn: Any):
        """Create database adapter.

        Args:
            conn: DB-API connection object, e.g. `sqlite3.connect(...)`.
        """

        self._closed = False
        self.conn: Any | None = conn

    def _require_open_connection(self) -> Any:
        if self._closed or self.conn is None:
            raise RuntimeError("connection is closed")
        return self.conn

    def write(self, *statements: str) -> List[WriteResult]:
        """Execute and commit each statement, collecting per-statement results.

        Raises:
            StoreError: If any statement failed; `results` holds every outcome.
        """

        conn = self._require_open_connection()
        results = []
        failed: Optional[BaseException] = None
        for statement in statements:
            cur = conn.cursor()
            try:
                cur.execute(statement)
            except Exception as exc:
                conn.rollback()
                failed = failed or exc
                results.append(WriteResult(statement=statement, error=exc))
                continue
            results.append(
                WriteResult(
                    statement=statement,
                    rows_affected=max(cur.rowcount or 0, 0),
                    last_insert_id=getattr(cur, "lastrowid", None) or 0,
                )
            )
            conn.commit()
        if failed is not None:
            raise StoreError(str(failed), results) from failed
        return results

    def query(self, *statements: str) -> List[QueryResult]:
        """Run each statement and return its rows.

        Raises:
            StoreError: If any statement failed; `results` holds every outcome.
        """

        conn = self._require_open_connection()
        results = []
        failed: Optional[BaseException] = None
        for statement in statements:
            cur = conn.cursor()
            try:
                cur.execute(statement)
                rows = [list(row) for row in cur.fetchall()]
            except Exception as exc:
                failed = failed or exc
                results.append(QueryResult(statement=statement, error=exc))
                continue
            columns = [d[0] for d in (cur.description or ())]
            results.append(QueryResult(statement=statement, columns=columns, rows=rows))
        if failed is not None:
            raise StoreError(str(failed), results) from failed
        return results

    def query_one(self, statement: str) -> QueryResult:
        return self.query(statement)[0]

    def close(self) -> None:
        """Close the underlying connection."""

        if self._closed:
            return
        conn = self.conn
        self._closed = True
        self.conn = None
        close = getattr(conn, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()


def open_sqlite(path: str = ":memory:") -> Database:
    """Open a `Database` on a SQLite file (the engine under rqlite)."""

    log.debug("opening sqlite store at %s", path)
    return Database(sqlite3.connect(path))


__all__ = ["Database", "QueryResult", "WriteResult", "open_sqlite"]
