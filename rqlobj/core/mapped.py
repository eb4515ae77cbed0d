"""Schema-driven `DBObject` accessors for dataclass records.

`MappedObject` and `MappedList` satisfy the same contract as generated
accessors, reading the per-class `Schema` built once by `schema_for`.
"""

from __future__ import annotations

from typing import Any, Generic, List, Optional, Tuple, Type, TypeVar

from .annotations import DEFAULT_TAG, schema_for
from .contracts import Receiver, ScanFunc
from .ddl import create_table_sql
from .schema import Schema

T = TypeVar("T")


class MappedObject(Generic[T]):
    """Accessor view over one record instance."""

    __slots__ = ("obj", "schema")

    def __init__(self, obj: T, schema: Optional[Schema] = None, *, tag: str = DEFAULT_TAG):
        self.obj = obj
        self.schema = schema if schema is not None else schema_for(type(obj), tag)

    def _values(self, columns: Any) -> List[Any]:
        return [getattr(self.obj, c.name) for c in columns]

    def table_name(self) -> str:
        return self.schema.table

    def primary(self) -> Tuple[int, bool]:
        if not self.schema.single_integer_primary:
            return 0, False
        return getattr(self.obj, self.schema.key_columns[0].name) or 0, True

    def set_primary(self, value: int) -> None:
        if self.schema.single_integer_primary:
            setattr(self.obj, self.schema.key_columns[0].name, value)

    def key_names(self) -> List[str]:
        return self.schema.key_names()

    def key_fields(self) -> List[str]:
        return self.schema.key_fields()

    def key_values(self) -> List[Any]:
        return self._values(self.schema.key_columns)

    def names(self) -> List[str]:
        return self.schema.names()

    def select_fields(self) -> str:
        return self.schema.select_fields()

    def insert_fields(self) -> str:
        return self.schema.insert_fields()

    def insert_values(self) -> List[Any]:
        return self._values(self.schema.insert_columns)

    def update_values(self) -> List[Any]:
        return self.insert_values() + self.key_values()

    def receivers(self) -> List[Receiver]:
        return [
            Receiver(self.obj, c.name, c.decoder)
            for c in self.schema.select_columns
        ]

    def sql_create(self) -> str:
        return create_table_sql(self.schema)


class MappedList(List[T]):
    """List of records of one class, filled row by row by `DBU.list`."""

    def __init__(self, model: Type[T], schema: Optional[Schema] = None, *, tag: str = DEFAULT_TAG):
        super().__init__()
        self.model = model
        self.schema = schema if schema is not None else schema_for(model, tag)

    def sql_get(self, extra: str = "") -> str:
        return f"select {self.schema.select_fields()} from {self.schema.table} {extra};"

    def sql_results(self, scan: ScanFunc) -> None:
        add = self.model()
        scan(*MappedObject(add, self.schema).receivers())
        self.append(add)
