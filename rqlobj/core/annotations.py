"""Field annotation parsing: record declarations to `Schema` objects.

A record declaration is a list of fields, each with a declared type and a
metadata mapping. Declarations come either from Python source (see
`rqlobj.core.source`) or from a dataclass via `declaration_from_dataclass`;
both go through `parse_record`, the single classification algorithm.
"""

from __future__ import annotations

import re
import types
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, fields, is_dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Set, Tuple, Type, Union, get_args, get_origin

from ..utils.logging import get_logger
from .errors import ConfigurationError
from .schema import Column, ColumnType, Schema

log = get_logger(__name__)

DEFAULT_TAG = "sql"
KEY_OPTION = "key"

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_OPTIONAL_RE = re.compile(r"^(?:typing\.)?Optional\[(?P<inner>.+)\]$")
_UNION_RE = re.compile(r"^(?:typing\.)?Union\[(?P<inner>.+)\]$")
_NONE_NAMES = frozenset({"None", "NoneType"})


@dataclass(frozen=True)
class FieldDecl:
    """One declared record field."""

    name: str
    type_name: str
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RecordDecl:
    """One declared record type with its fields in declaration order."""

    name: str
    fields: Tuple[FieldDecl, ...] = ()
    module: Optional[str] = None


@dataclass(frozen=True)
class GeneratorOptions:
    """Explicit parse configuration threaded through every parse call."""

    tag: str = DEFAULT_TAG
    type_names: Tuple[str, ...] = ()
    prefix: str = ""

    def wants(self, type_name: str) -> bool:
        """Return whether a type passes the name and prefix filters."""

        if not type_name:
            return False
        if self.prefix and not type_name.startswith(self.prefix):
            log.debug(
                "skipping type %r as it does not have prefix: %r", type_name, self.prefix
            )
            return False
        if self.type_names and type_name not in self.type_names:
            return False
        return True


DEFAULT_OPTIONS = GeneratorOptions()


def parse_bool(value: Any) -> Optional[bool]:
    """Parse a boolean annotation value; `None` when it is not a boolean."""

    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
    return None


def _type_parts(type_text: str) -> List[str]:
    text = type_text.strip().strip("'\"")
    match = _OPTIONAL_RE.match(text)
    if match:
        text = match.group("inner").strip() + "|None"
    else:
        match = _UNION_RE.match(text)
        if match:
            text = "|".join(match.group("inner").split(","))
    return [part.strip() for part in text.split("|")]


def base_type_name(type_text: str) -> str:
    """Reduce declared type text to its base type name.

    `Optional[int]`, `int | None` and `typing.Union[int, None]` all become
    `int`; `datetime.datetime` becomes `datetime`.
    """

    parts = [part for part in _type_parts(type_text) if part not in _NONE_NAMES]
    text = parts[0] if len(parts) == 1 else " | ".join(parts)
    if "[" in text or "|" in text:
        return text
    return text.rsplit(".", 1)[-1]


def is_optional_type(type_text: str) -> bool:
    """Return whether declared type text admits `None`."""

    return any(part in _NONE_NAMES for part in _type_parts(type_text))


def type_class(type_name: str) -> ColumnType:
    """Infer SQL type class from a base type name; text when unknown."""

    if type_name == "str":
        return ColumnType.TEXT
    if type_name == "datetime":
        return ColumnType.DATETIME
    if type_name in ("int", "bool"):
        return ColumnType.INTEGER
    return ColumnType.TEXT


def parse_fk_reference(raw: Any) -> str:
    """Normalize an `fk` annotation into a `table(column)` reference."""

    if isinstance(raw, str):
        text = raw.strip()
        if re.fullmatch(r"\w+\s*\(\s*\w+\s*\)", text):
            return re.sub(r"\s+", "", text)
        parts = text.split(".", maxsplit=1)
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ConfigurationError(
                "fk string must have format 'table(column)' or 'table.column'."
            )
        return f"{parts[0]}({parts[1]})"

    if isinstance(raw, Mapping):
        table = raw.get("table")
        column = raw.get("column", "id")
        if not isinstance(table, str) or not table:
            raise ConfigurationError("fk mapping 'table' must be a non-empty string.")
        if not isinstance(column, str) or not column:
            raise ConfigurationError("fk mapping 'column' must be a non-empty string.")
        return f"{table}({column})"

    if isinstance(raw, Sequence):
        values = tuple(raw)
        if len(values) != 2 or not all(isinstance(v, str) and v for v in values):
            raise ConfigurationError("fk sequence must be (table, column) strings.")
        return f"{values[0]}({values[1]})"

    raise ConfigurationError(
        "Unsupported fk format. Use 'table(column)', 'table.column', "
        "('table', 'column') or {'table': 'table', 'column': 'id'}."
    )


def parse_record(
    decl: RecordDecl,
    options: GeneratorOptions = DEFAULT_OPTIONS,
) -> Optional[Schema]:
    """Build the schema of one record declaration.

    Returns `None` when the type is filtered out or has no annotated field,
    so mixed modules can be processed without errors. Invalid options are
    logged and the offending option is ignored.
    """

    if not options.wants(decl.name):
        return None

    log.debug("evaluating type %r for %r tags", decl.name, options.tag)
    table = ""
    pending: List[Tuple[FieldDecl, str, bool]] = []
    no_update: Set[str] = set()
    foreign_keys: Dict[str, str] = {}

    for fd in decl.fields:
        meta = fd.metadata
        table_override = meta.get("table")
        if isinstance(table_override, str) and table_override:
            table = table_override

        raw = meta.get(options.tag)
        if raw is None or raw == "":
            continue
        if not isinstance(raw, str):
            log.error(
                "type %s field %s: %r annotation must be a string, got %r",
                decl.name,
                fd.name,
                options.tag,
                raw,
            )
            continue

        sql_name, _, option = (part.strip() for part in raw.partition(","))
        if not sql_name:
            log.error("type %s field %s: empty column name", decl.name, fd.name)
            continue

        has_key = False
        if option:
            if option == KEY_OPTION:
                has_key = True
            else:
                log.error(
                    "type %s field %s: invalid option following field name: %r",
                    decl.name,
                    fd.name,
                    option,
                )
        if not has_key and "key" in meta:
            has_key = bool(parse_bool(meta["key"]))
        if has_key:
            log.debug("type %s field %s is a key", decl.name, sql_name)

        if parse_bool(meta.get("update")) is False:
            no_update.add(sql_name)

        if "fk" in meta:
            try:
                foreign_keys[sql_name] = parse_fk_reference(meta["fk"])
            except ConfigurationError as exc:
                log.error("type %s field %s: %s", decl.name, fd.name, exc)
            else:
                log.debug(
                    "type %s field %s has foreign key: %s",
                    decl.name,
                    fd.name,
                    foreign_keys[sql_name],
                )

        pending.append((fd, sql_name, has_key))

    if not pending:
        return None

    key_columns: List[Column] = []
    columns: List[Column] = []
    for fd, sql_name, has_key in pending:
        type_name = base_type_name(fd.type_name)
        if has_key:
            no_update.add(sql_name)
            if key_columns and type_name == "int":
                log.debug(
                    "type %s field %s breaks prior primary key", decl.name, fd.name
                )
        column = Column(
            name=fd.name,
            sql_name=sql_name,
            type_class=type_class(type_name),
            type_name=type_name,
            key=has_key,
            no_update=has_key or sql_name in no_update,
            nullable=is_optional_type(fd.type_name),
            utc=bool(parse_bool(fd.metadata.get("utc"))),
        )
        (key_columns if has_key else columns).append(column)

    return Schema(
        name=decl.name,
        table=table or decl.name.lower(),
        columns=tuple(columns),
        key_columns=tuple(key_columns),
        no_update=frozenset(no_update),
        foreign_keys=foreign_keys,
    )


def parse_records(
    decls: Sequence[RecordDecl],
    options: GeneratorOptions = DEFAULT_OPTIONS,
) -> List[Schema]:
    """Parse many declarations, dropping those that yield no schema."""

    schemas = []
    for decl in decls:
        schema = parse_record(decl, options)
        if schema is not None:
            schemas.append(schema)
    return schemas


def declaration_from_dataclass(cls: Type[Any]) -> RecordDecl:
    """Describe a dataclass as a record declaration."""

    if not (isinstance(cls, type) and is_dataclass(cls)):
        raise TypeError(f"{getattr(cls, '__name__', cls)!r} must be a dataclass.")
    return RecordDecl(
        name=cls.__name__,
        fields=tuple(
            FieldDecl(name=f.name, type_name=annotation_text(f.type), metadata=dict(f.metadata))
            for f in fields(cls)
        ),
        module=cls.__module__,
    )


@lru_cache(maxsize=None)
def schema_for(cls: Type[Any], tag: str = DEFAULT_TAG) -> Schema:
    """Build (once per class and tag) the schema of a dataclass record.

    Raises:
        ConfigurationError: If the class has no field annotated with `tag`.
    """

    schema = parse_record(declaration_from_dataclass(cls), GeneratorOptions(tag=tag))
    if schema is None:
        raise ConfigurationError(f"{cls.__name__} has no fields annotated with {tag!r}.")
    return schema


def annotation_text(annotation: Any) -> str:
    """Render a runtime annotation as declared type text."""

    if isinstance(annotation, str):
        return annotation
    origin = get_origin(annotation)
    if origin in (Union, types.UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return f"Optional[{annotation_text(args[0])}]"
    if isinstance(annotation, type) and origin is None:
        return annotation.__name__
    return repr(annotation).replace("typing.", "")
