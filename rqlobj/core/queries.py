"""Literal SQL statement builders over the `DBObject` accessors.

No statement uses placeholders; every value is inlined through
`codecs.formatted`, which owns quoting and escaping.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence, Tuple

from .codecs import formatted, is_zero_time
from .contracts import DBObject
from .errors import ConfigurationError, KeyMissingError, NoKeyFieldError

ON_CONFLICT_NOTHING = "nothing"
ON_CONFLICT_UPDATE = "update"


def split_fields(fields: str) -> List[str]:
    """Split a comma-joined field list, ignoring empty entries."""

    return [name.strip() for name in fields.split(",") if name.strip()]


def is_unset(value: Any) -> bool:
    """Return whether a key value counts as not set (None, 0 or empty)."""

    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, str, bytes)):
        return not value
    return False


def insert_pairs(o: DBObject) -> List[Tuple[str, Any]]:
    """Pair insert fields with their values, keys and zero timestamps removed."""

    fields = split_fields(o.insert_fields())
    values = list(o.insert_values())
    if len(fields) != len(values):
        raise ConfigurationError(
            f"{o.table_name()}: {len(fields)} insert fields but {len(values)} values"
        )
    keys = set(o.key_fields())
    return [
        (name, value)
        for name, value in zip(fields, values)
        if name not in keys and not is_zero_time(value)
    ]


def key_pairs(o: DBObject) -> List[Tuple[str, Any]]:
    """Pair key fields with current key values.

    Raises:
        NoKeyFieldError: If the record has no key field.
        KeyMissingError: If any key value is not set.
    """

    keys = o.key_fields()
    if not keys:
        raise NoKeyFieldError()
    values = list(o.key_values())
    if len(values) != len(keys) or any(is_unset(value) for value in values):
        raise KeyMissingError()
    return list(zip(keys, values))


def where_clause(pairs: Sequence[Tuple[str, Any]]) -> str:
    """Render equality terms joined with `and`; `None` matches with `is null`."""

    return " and ".join(
        f"{name} is null" if value is None else f"{name}={formatted(value)}"
        for name, value in pairs
    )


def upsert_query(o: DBObject, *, on_conflict: str = ON_CONFLICT_NOTHING) -> str:
    """Build `insert ... on conflict(keys) do nothing|do update set ...`.

    An unset integer identity is left for the store to assign; every other
    key must be set.

    Raises:
        KeyMissingError: If a key other than the integer identity is unset.
    """

    if on_conflict not in (ON_CONFLICT_NOTHING, ON_CONFLICT_UPDATE):
        raise ValueError(f"Unsupported on_conflict: {on_conflict!r}")

    table = o.table_name()
    keys = o.key_fields()
    key_values = list(o.key_values())
    _, identity = o.primary()
    if identity:
        set_keys = [(keys[0], key_values[0])] if not is_unset(key_values[0]) else []
    elif any(is_unset(value) for value in key_values):
        raise KeyMissingError(f"{table}: key is not set")
    else:
        set_keys = list(zip(keys, key_values))
    values = insert_pairs(o)
    pairs = set_keys + values

    if not pairs:
        return f"insert into {table} default values"

    sql = (
        f"insert into {table} ({','.join(name for name, _ in pairs)}) "
        f"values ({', '.join(formatted(value) for _, value in pairs)})"
    )
    if not keys:
        return sql

    conflict = ",".join(keys)
    if on_conflict == ON_CONFLICT_UPDATE and values:
        assignments = ", ".join(f"{name}=excluded.{name}" for name, _ in values)
        return f"{sql} on conflict({conflict}) do update set {assignments}"
    return f"{sql} on conflict({conflict}) do nothing"


def update_query(o: DBObject) -> str:
    """Build `update <table> set ... where <key predicate>`."""

    assignments = ", ".join(f"{name}={formatted(value)}" for name, value in insert_pairs(o))
    if not assignments:
        raise ConfigurationError(f"{o.table_name()}: no fields to update")
    return f"update {o.table_name()} set {assignments} where {where_clause(key_pairs(o))}"


def delete_query(o: DBObject) -> str:
    """Build a keyed delete; refuses unset keys rather than deleting all rows."""

    return f"delete from {o.table_name()} where {where_clause(key_pairs(o))}"


def delete_by_id_query(o: DBObject, identity: int) -> str:
    keys = o.key_fields()
    _, valid = o.primary()
    if not valid:
        raise NoKeyFieldError(f"{o.table_name()} does not have an int primary id")
    if is_unset(identity):
        raise KeyMissingError()
    return f"delete from {o.table_name()} where {keys[0]}={int(identity)}"


def delete_all_query(o: DBObject) -> str:
    return f"delete from {o.table_name()}"


def select_query(o: DBObject, keys: Mapping[str, Any]) -> str:
    """Build a select of all fields matching every `column=value` in `keys`."""

    if not keys:
        raise ConfigurationError("select predicate must not be empty")
    return (
        f"select {o.select_fields()} from {o.table_name()} "
        f"where {where_clause(list(keys.items()))}"
    )


def select_by_query(o: DBObject, key: str, value: Any) -> str:
    """Build a select by one column; text quoted, numbers left bare."""

    return select_query(o, {key: value})
