"""Normalized persistence description of one record type."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Tuple

from .codecs import decoder_for
from .types import Decoder


class ColumnType(str, Enum):
    """SQL type class of a mapped column."""

    TEXT = "text"
    INTEGER = "integer"
    DATETIME = "datetime"


@dataclass(frozen=True)
class Column:
    """One annotated field and its SQL column.

    `nullable` is set for `Optional` declarations and `utc` for timestamp
    fields holding aware UTC values; both only steer decoding.
    """

    name: str
    sql_name: str
    type_class: ColumnType = ColumnType.TEXT
    type_name: str = "str"
    key: bool = False
    no_update: bool = False
    nullable: bool = False
    utc: bool = False

    @property
    def decoder(self) -> Decoder:
        return decoder_for(self.type_name, nullable=self.nullable, utc=self.utc)


@dataclass(frozen=True)
class Schema:
    """Immutable mapping of a record type onto one SQL table.

    `columns` holds the non-key columns and `key_columns` the key columns,
    both in declaration order. Every accessor that returns names, fields or
    values is derived from `select_columns`, so positions always line up.
    """

    name: str
    table: str
    columns: Tuple[Column, ...] = ()
    key_columns: Tuple[Column, ...] = ()
    no_update: FrozenSet[str] = frozenset()
    foreign_keys: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        overlap = {c.sql_name for c in self.columns} & {
            c.sql_name for c in self.key_columns
        }
        if overlap:
            raise ValueError(
                f"{self.name}: columns {sorted(overlap)} are both key and non-key."
            )

    @property
    def single_integer_primary(self) -> bool:
        """True iff there is exactly one key and it is an `int` identity."""

        return (
            len(self.key_columns) == 1
            and self.key_columns[0].type_class is ColumnType.INTEGER
            and self.key_columns[0].type_name == "int"
        )

    @property
    def select_columns(self) -> List[Column]:
        return [*self.key_columns, *self.columns]

    @property
    def insert_columns(self) -> List[Column]:
        return [c for c in self.select_columns if c.sql_name not in self.no_update]

    @property
    def update_columns(self) -> List[Column]:
        """Non-key columns that may appear in a `set` clause."""

        return [c for c in self.insert_columns if not c.key]

    def key_fields(self) -> List[str]:
        return [c.sql_name for c in self.key_columns]

    def key_names(self) -> List[str]:
        return [c.name for c in self.key_columns]

    def names(self) -> List[str]:
        return [c.name for c in self.columns]

    def select_fields(self) -> str:
        return ",".join(c.sql_name for c in self.select_columns)

    def insert_fields(self) -> str:
        return ",".join(c.sql_name for c in self.insert_columns)
