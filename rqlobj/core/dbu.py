"""Runtime facade: executes synthesized statements against a store client."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from ..utils.logging import get_logger
from .contracts import (
    DBList,
    DBObject,
    QueryResultPort,
    Receiver,
    ScanFunc,
    StorePort,
    WriteResultPort,
)
from .errors import KeyMissingError, NoKeyFieldError, NoRowsError, ScanError, StoreError
from .queries import (
    ON_CONFLICT_NOTHING,
    ON_CONFLICT_UPDATE,
    delete_all_query,
    delete_by_id_query,
    delete_query,
    is_unset,
    select_by_query,
    select_query,
    update_query,
    upsert_query,
)
from .types import KeyMap


def typeinfo(*items: Any) -> str:
    """Describe receivers as `index:type:value` entries for diagnostics."""

    parts = []
    for i, item in enumerate(items):
        value = item.value if isinstance(item, Receiver) else item
        label = type(value).__name__
        if isinstance(item, Receiver):
            label = f"{item.attr}:{label}"
        parts.append(f"{i}:{label}:{value!r}")
    return ",".join(parts)


class DBU:
    """Object persistence against a `StorePort`.

    Every call builds one literal statement, hands it to the store and
    returns or raises; nothing is retried.
    """

    def __init__(
        self,
        store: StorePort,
        *,
        debug: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """Create the facade.

        Args:
            store: Store client executing SQL text.
            debug: Log every statement before it is executed.
            logger: Logger to use; defaults to this module's logger.
        """

        self.store = store
        self.debug = debug
        self.log = logger or get_logger(__name__)

    @classmethod
    def from_settings(cls, store: StorePort, settings: Any) -> DBU:
        return cls(store, debug=bool(getattr(settings, "debug", False)))

    def _debugf(self, msg: str, *args: Any) -> None:
        if self.debug:
            self.log.debug(msg, *args)

    def write(self, *statements: str) -> Sequence[WriteResultPort]:
        """Execute write statements, logging failing statements before re-raising."""

        for statement in statements:
            self._debugf("Write: %s", statement)
        try:
            return self.store.write(*statements)
        except StoreError as exc:
            for result in exc.results:
                if getattr(result, "error", None) is not None:
                    self.log.error(
                        "write error: %s :: %s",
                        getattr(result, "statement", "?"),
                        result.error,
                    )
            raise

    def _write_one(self, statement: str) -> WriteResultPort:
        return self.write(statement)[0]

    def _upsert(self, o: DBObject, on_conflict: str) -> None:
        identity, valid = o.primary()
        result = self._write_one(upsert_query(o, on_conflict=on_conflict))
        # last_insert_id is connection wide
        if valid and is_unset(identity) and result.rows_affected and result.last_insert_id:
            o.set_primary(result.last_insert_id)

    def add(self, o: DBObject) -> None:
        """Insert a new object; an existing row with the same keys is left as is."""

        self._upsert(o, ON_CONFLICT_NOTHING)

    def save(self, o: DBObject) -> None:
        """Insert an object, or overwrite the row that has the same keys."""

        self._upsert(o, ON_CONFLICT_UPDATE)

    def update(self, o: DBObject) -> int:
        """Update the row identified by the object's keys; returns rows affected."""

        return self._write_one(update_query(o)).rows_affected

    def delete(self, o: DBObject) -> None:
        """Delete the row identified by the object's keys.

        Raises:
            NoKeyFieldError: If the object has no key field.
            KeyMissingError: If the key is not set.
            NoRowsError: If no row was deleted.
        """

        identity, valid = o.primary()
        if valid:
            self.delete_by_id(o, identity)
            return
        self._delete(delete_query(o))

    def delete_by_id(self, o: DBObject, identity: int) -> None:
        """Delete by integer identity; an identity of 0 is rejected."""

        self._delete(delete_by_id_query(o, identity))

    def _delete(self, statement: str) -> None:
        if self._write_one(statement).rows_affected == 0:
            raise NoRowsError("no rows deleted")

    def delete_all(self, o: DBObject) -> int:
        """Delete every row of the object's table; returns rows affected."""

        return self._write_one(delete_all_query(o)).rows_affected

    def load(self, o: DBObject, keys: KeyMap) -> None:
        """Load the object from the first row matching every key/value."""

        self._get(o.receivers(), select_query(o, keys))

    def load_by(self, o: DBObject, key: str, value: Any) -> None:
        """Load the object from the first row where `key` equals `value`."""

        self._get(o.receivers(), select_by_query(o, key, value))

    def load_by_id(self, o: DBObject, identity: int) -> None:
        """Load the object by integer identity."""

        _, valid = o.primary()
        if not valid:
            raise NoKeyFieldError(f"{o.table_name()} does not have an int primary id")
        self.load_by(o, o.key_fields()[0], identity)

    def load_self(self, o: DBObject) -> None:
        """Reload the object using its current key value(s).

        Raises:
            NoKeyFieldError: If the object has no key field.
            KeyMissingError: If a key value is not set.
            NoRowsError: If no row matches.
        """

        keys = o.key_fields()
        if not keys:
            raise NoKeyFieldError()
        identity, valid = o.primary()
        if valid:
            if is_unset(identity):
                raise KeyMissingError()
            self.load_by(o, keys[0], identity)
            return

        values = o.key_values()
        if any(is_unset(value) for value in values):
            raise KeyMissingError()
        if len(keys) == 1:
            self.load_by(o, keys[0], values[0])
            return
        self.load(o, dict(zip(keys, values)))

    def list(self, lst: DBList) -> None:
        """Fill a list with every row of its table."""

        self.list_query(lst, "")

    def list_query(self, lst: DBList, extra: str) -> None:
        """Fill a list with the rows selected by `extra` (e.g. a where clause)."""

        query = lst.sql_get(extra)
        self._debugf("list query: %s", query)
        for result in self._query(query):
            while result.next():
                try:
                    lst.sql_results(_scanner(result))
                except ScanError as exc:
                    self._debugf("scan error: %s", exc)
                    raise

    def _query(self, query: str) -> List[QueryResultPort]:
        try:
            return list(self.store.query(query))
        except StoreError as exc:
            self._debugf("error on query: %r :: %s", query, exc)
            raise

    def _get(self, receivers: List[Receiver], query: str) -> None:
        self._debugf("get query: %s", query)
        result = self._query(query)[0]
        if not result.next():
            raise NoRowsError()
        _scanner(result)(*receivers)


def _scanner(result: QueryResultPort) -> ScanFunc:
    def scan(*receivers: Receiver) -> None:
        try:
            result.scan(*receivers)
        except (TypeError, ValueError) as exc:
            raise ScanError(f"{exc}: with receivers: {typeinfo(*receivers)}") from exc

    return scan
