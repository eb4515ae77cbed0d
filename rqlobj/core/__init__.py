"""Public core API for schema derivation, SQL synthesis and persistence."""

from .annotations import (
    DEFAULT_TAG,
    FieldDecl,
    GeneratorOptions,
    RecordDecl,
    declaration_from_dataclass,
    parse_record,
    parse_records,
    schema_for,
)
from .codecs import ZERO_TIME, formatted
from .codegen import generate_source
from .contracts import DBList, DBObject, Receiver, StorePort
from .dbu import DBU, typeinfo
from .ddl import create_table_sql
from .errors import (
    ConfigurationError,
    KeyMissingError,
    NoKeyFieldError,
    NoRowsError,
    RqlobjError,
    ScanError,
    StoreError,
    SynthesisError,
)
from .mapped import MappedList, MappedObject
from .schema import Column, ColumnType, Schema
from .source import parse_files, parse_source

__all__ = [
    "DEFAULT_TAG",
    "DBU",
    "DBList",
    "DBObject",
    "Column",
    "ColumnType",
    "ConfigurationError",
    "FieldDecl",
    "GeneratorOptions",
    "KeyMissingError",
    "MappedList",
    "MappedObject",
    "NoKeyFieldError",
    "NoRowsError",
    "Receiver",
    "RecordDecl",
    "RqlobjError",
    "ScanError",
    "Schema",
    "StoreError",
    "StorePort",
    "SynthesisError",
    "ZERO_TIME",
    "create_table_sql",
    "declaration_from_dataclass",
    "formatted",
    "generate_source",
    "parse_files",
    "parse_record",
    "parse_records",
    "parse_source",
    "schema_for",
    "typeinfo",
]
