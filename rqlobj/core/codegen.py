"""Code synthesis: expand schemas into Python `DBObject` accessor classes.

For a record `User` the output defines `UserObject`, wrapping one record
with the accessors `DBU` needs, and `UserList`, a list filled by
`DBU.list`. Each accessor is a pure function of the schema; field lists and
value lists are all emitted from `Schema.select_columns` order.
"""

from __future__ import annotations

import ast
import io
import re
from typing import Iterable, Mapping, Optional, Sequence

from ..utils.logging import get_logger
from .ddl import create_table_sql
from .errors import SynthesisError
from .schema import Column, Schema

log = get_logger(__name__)

# Arguments to format are:
#   command: generator command line
_HEADER = "# generated by '{command}'; DO NOT EDIT\n"

# Arguments to format are:
#   decoders: comma separated codec function names
#   imports: record class import lines
_PRELUDE = '''"""DBObject accessors generated from dataclass annotations."""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from rqlobj.core.codecs import {decoders}
from rqlobj.core.contracts import Receiver, ScanFunc
{imports}
'''

# Arguments to format are:
#   name: record class name
#   table: sql table
_OBJECT = '''

class {name}Object:
    """DBObject accessors for `{name}` records in table `{table}`."""

    __slots__ = ("obj",)

    def __init__(self, obj: Optional[{name}] = None):
        self.obj = obj if obj is not None else {name}()

    def table_name(self) -> str:
        return {table!r}
'''

# Arguments to format are:
#   key: key attribute name
_PRIMARY_VALID = '''
    def primary(self) -> Tuple[int, bool]:
        return self.obj.{key} or 0, True

    def set_primary(self, value: int) -> None:
        self.obj.{key} = value
'''

_PRIMARY_INVALID = '''
    def primary(self) -> Tuple[int, bool]:
        return 0, False

    def set_primary(self, value: int) -> None:
        pass
'''

# Arguments to format are:
#   method: accessor name
#   elements: comma separated python expressions
_STRINGS = '''
    def {method}(self) -> List[str]:
        return [{elements}]
'''

# Arguments to format are:
#   method: accessor name
#   value: string literal
_FIELDS = '''
    def {method}(self) -> str:
        return {value!r}
'''

# Arguments to format are:
#   method: accessor name
#   elements: comma separated attribute reads off `o`
_VALUES = '''
    def {method}(self) -> List[Any]:
        o = self.obj
        return [{elements}]
'''

# Arguments to format are:
#   elements: comma separated Receiver constructions
_RECEIVERS = '''
    def receivers(self) -> List[Receiver]:
        o = self.obj
        return [{elements}]
'''

# Arguments to format are:
#   ddl: string literal of the create table statement
_SQL_CREATE = '''
    def sql_create(self) -> str:
        return {ddl}
'''

# Arguments to format are:
#   name: record class name
#   table: sql table
#   select: select statement prefix
_LIST = '''

class {name}List(List[{name}]):
    """Rows of table `{table}` decoded into `{name}` records."""

    def sql_get(self, extra: str = "") -> str:
        return {select!r} + extra + ";"

    def sql_results(self, scan: ScanFunc) -> None:
        add = {name}Object()
        scan(*add.receivers())
        self.append(add.obj)
'''


class Generator:
    """Accumulates generated source for a set of schemas."""

    def __init__(self) -> None:
        self.buf = io.StringIO()

    def printf(self, template: str, **args: object) -> None:
        self.buf.write(template.format(**args))

    def header(
        self,
        schemas: Sequence[Schema],
        *,
        command: str,
        imports: Optional[Mapping[str, Sequence[str]]] = None,
        relative: bool = False,
    ) -> None:
        decoders = sorted(
            {c.decoder.__name__ for s in schemas for c in s.select_columns}
        )
        self.printf(_HEADER, command=command)
        self.printf(
            _PRELUDE,
            decoders=", ".join(decoders or ["as_is"]),
            imports="".join(_import_lines(imports or {}, relative=relative)),
        )

    def build_wrappers(self, s: Schema) -> None:
        """Emit the accessor class and list class for one schema."""

        log.debug("%s uses table %s", s.name, s.table)
        select = s.select_columns
        inserts = s.insert_columns
        receivers = [_receiver(c) for c in select]
        if len(receivers) != len(s.select_fields().split(",")):
            raise SynthesisError(f"{s.name}: receivers do not match select fields")
        if len(inserts) != len([f for f in s.insert_fields().split(",") if f]):
            raise SynthesisError(f"{s.name}: insert values do not match insert fields")

        self.printf(_OBJECT, name=s.name, table=s.table)
        if s.single_integer_primary:
            self.printf(_PRIMARY_VALID, key=s.key_columns[0].name)
        else:
            self.printf(_PRIMARY_INVALID)
        self.printf(_STRINGS, method="key_names", elements=_quote_list(s.key_names()))
        self.printf(_STRINGS, method="key_fields", elements=_quote_list(s.key_fields()))
        self.printf(_VALUES, method="key_values", elements=_attr_list(s.key_columns))
        self.printf(_STRINGS, method="names", elements=_quote_list(s.names()))
        self.printf(_FIELDS, method="select_fields", value=s.select_fields())
        self.printf(_FIELDS, method="insert_fields", value=s.insert_fields())
        self.printf(_VALUES, method="insert_values", elements=_attr_list(inserts))
        self.printf(
            _VALUES,
            method="update_values",
            elements=_attr_list([*inserts, *s.key_columns]),
        )
        self.printf(_RECEIVERS, elements=", ".join(receivers))
        self.printf(_SQL_CREATE, ddl=_string_literal(create_table_sql(s)))
        self.printf(
            _LIST,
            name=s.name,
            table=s.table,
            select=f"select {s.select_fields()} from {s.table} ",
        )

    def format(self) -> str:
        return format_source(self.buf.getvalue())


def generate_source(
    schemas: Sequence[Schema],
    *,
    command: str = "rqlobj-gen",
    imports: Optional[Mapping[str, Sequence[str]]] = None,
    relative: bool = False,
) -> str:
    """Generate the formatted accessor module for `schemas`.

    Args:
        schemas: Parsed record schemas, emitted in order.
        command: Command line recorded in the header comment.
        imports: Source module name -> record class names to import.
        relative: Import source modules relative to the output's package.
    """

    g = Generator()
    g.header(schemas, command=command, imports=imports, relative=relative)
    for schema in schemas:
        g.build_wrappers(schema)
    return g.format()


def format_source(src: str) -> str:
    """Validate generated source and normalize its whitespace.

    Invalid source is returned unformatted with a warning so the user can
    inspect the output.
    """

    try:
        ast.parse(src)
    except SyntaxError as exc:
        log.warning("internal error: invalid Python generated: %s", exc)
        log.warning("import the generated module to analyze the error")
        return src
    lines = [line.rstrip() for line in src.splitlines()]
    text = re.sub(r"\n{4,}", "\n\n\n", "\n".join(lines))
    return text.strip("\n") + "\n"


def _import_lines(imports: Mapping[str, Sequence[str]], *, relative: bool) -> Iterable[str]:
    for module in sorted(imports):
        names = ", ".join(sorted(set(imports[module])))
        prefix = "." if relative else ""
        yield f"\nfrom {prefix}{module} import {names}\n"


def _receiver(c: Column) -> str:
    return f"Receiver(o, {c.name!r}, {c.decoder.__name__})"


def _quote_list(items: Sequence[str]) -> str:
    return ", ".join(repr(item) for item in items)


def _attr_list(columns: Sequence[Column]) -> str:
    return ", ".join(f"o.{c.name}" for c in columns)


def _string_literal(text: str) -> str:
    if '"""' in text or "\\" in text or text.endswith('"'):
        return repr(text)
    return f'"""{text}"""'

