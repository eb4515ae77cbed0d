"""rqlobj: annotation-driven table schemas and SQL for dataclass records."""

from .core import (
    DBU,
    ZERO_TIME,
    Column,
    ColumnType,
    ConfigurationError,
    GeneratorOptions,
    KeyMissingError,
    MappedList,
    MappedObject,
    NoKeyFieldError,
    NoRowsError,
    Receiver,
    RqlobjError,
    ScanError,
    Schema,
    StoreError,
    SynthesisError,
    create_table_sql,
    formatted,
    generate_source,
    parse_record,
    parse_source,
    schema_for,
)
from .ports import Database, QueryResult, WriteResult, open_sqlite
from .utils.logging import configure_logging, get_logger

__all__ = [
    "DBU",
    "Column",
    "ColumnType",
    "ConfigurationError",
    "Database",
    "GeneratorOptions",
    "KeyMissingError",
    "MappedList",
    "MappedObject",
    "NoKeyFieldError",
    "NoRowsError",
    "QueryResult",
    "Receiver",
    "RqlobjError",
    "ScanError",
    "Schema",
    "StoreError",
    "SynthesisError",
    "WriteResult",
    "ZERO_TIME",
    "configure_logging",
    "create_table_sql",
    "formatted",
    "generate_source",
    "get_logger",
    "open_sqlite",
    "parse_record",
    "parse_source",
    "schema_for",
]
