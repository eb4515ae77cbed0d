"""Schema helpers for deriving `create table` SQL from a `Schema`."""

from __future__ import annotations

from typing import Mapping, Sequence

from ..utils.logging import get_logger
from .errors import SynthesisError
from .schema import Schema

log = get_logger(__name__)


def create_table_sql(schema: Schema) -> str:
    """Build the `create table if not exists` statement for a schema."""

    columns = schema.select_columns
    body = row_string(
        [c.sql_name for c in columns],
        [c.type_class.value for c in columns],
        keys=schema.key_fields(),
        foreign_keys=schema.foreign_keys,
        primary=schema.single_integer_primary,
    )
    return f"create table if not exists {schema.table} (\n{body}\n);"


def row_string(
    fields: Sequence[str],
    types: Sequence[str],
    *,
    keys: Sequence[str] = (),
    foreign_keys: Mapping[str, str] | None = None,
    primary: bool = False,
) -> str:
    """Render column definitions, key columns expected first.

    Raises:
        SynthesisError: If `fields` and `types` differ in length.
    """

    if len(fields) != len(types):
        raise SynthesisError(
            f"slice sizes don't match for fields:{len(fields)} -- types:{len(types)}"
        )
    foreign_keys = foreign_keys or {}
    lines = []
    for name, sql_type in zip(fields, types):
        parts = [name, sql_type]
        if primary and keys and name == keys[0]:
            parts.append("primary key")
        ref = foreign_keys.get(name)
        if ref:
            log.debug("field: %s applying fk: %s", name, ref)
            parts.append(f"references {ref} on update cascade")
        lines.append("  " + " ".join(parts))
    if keys and not primary:
        lines.append(f"  primary key ({', '.join(keys)})")
    return ",\n".join(lines)
