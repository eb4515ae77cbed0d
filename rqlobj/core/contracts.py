"""Core contracts shared by generated accessors, the runtime and store adapters."""

from __future__ import annotations

from typing import Any, Callable, Iterator, List, Optional, Protocol, Sequence, Tuple

from .codecs import as_is
from .types import Decoder, Values


class Receiver:
    """Write-target for one column of a fetched row."""

    __slots__ = ("target", "attr", "decode")

    def __init__(self, target: Any, attr: str, decode: Decoder = as_is):
        self.target = target
        self.attr = attr
        self.decode = decode

    def assign(self, value: Any) -> None:
        setattr(self.target, self.attr, self.decode(value))

    @property
    def value(self) -> Any:
        return getattr(self.target, self.attr, None)

    def __repr__(self) -> str:
        return f"Receiver({type(self.target).__name__}.{self.attr})"


class DBObject(Protocol):
    """Accessors a record type exposes to take part in SQL operations."""

    def table_name(self) -> str: ...

    def primary(self) -> Tuple[int, bool]: ...

    def set_primary(self, value: int) -> None: ...

    def key_names(self) -> List[str]: ...

    def key_values(self) -> Values: ...

    def key_fields(self) -> List[str]: ...

    def names(self) -> List[str]: ...

    def select_fields(self) -> str: ...

    def insert_fields(self) -> str: ...

    def insert_values(self) -> Values: ...

    def update_values(self) -> Values: ...

    def receivers(self) -> List[Receiver]: ...

    def sql_create(self) -> str: ...


ScanFunc = Callable[..., None]


class DBList(Protocol):
    """Growable collection filled by list queries."""

    def sql_get(self, extra: str = "") -> str: ...

    def sql_results(self, scan: ScanFunc) -> None: ...


class WriteResultPort(Protocol):
    error: Optional[BaseException]
    rows_affected: int
    last_insert_id: int


class QueryResultPort(Protocol):
    columns: List[str]

    def next(self) -> bool: ...

    def scan(self, *targets: Receiver) -> None: ...

    def __iter__(self) -> Iterator[Sequence[Any]]: ...


class StorePort(Protocol):
    """Store client behavior required by `DBU`."""

    def write(self, *statements: str) -> Sequence[WriteResultPort]: ...

    def query(self, *statements: str) -> Sequence[QueryResultPort]: ...

    def query_one(self, statement: str) -> QueryResultPort: ...
