from __future__ import annotations

import unittest
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from rqlobj.core.annotations import (
    FieldDecl,
    GeneratorOptions,
    RecordDecl,
    base_type_name,
    declaration_from_dataclass,
    is_optional_type,
    parse_bool,
    parse_fk_reference,
    parse_record,
    parse_records,
    schema_for,
    type_class,
)
from rqlobj.core.codecs import ZERO_TIME
from rqlobj.core.errors import ConfigurationError
from rqlobj.core.schema import Column, ColumnType, Schema
from rqlobj.core.source import parse_source


@dataclass
class Item:
    name: str = field(default="", metadata={"sql": "name"})
    kind: int = field(default=0, metadata={"sql": "kind"})
    id: int = field(default=0, metadata={"sql": "id,key", "table": "t"})


@dataclass
class Membership:
    group_id: int = field(default=0, metadata={"sql": "group_id", "key": True})
    user_id: int = field(default=0, metadata={"sql": "user_id", "key": "true"})
    role: str = field(default="", metadata={"sql": "role"})
    note: Optional[str] = None


@dataclass
class Audit:
    id: Optional[int] = field(default=None, metadata={"sql": "id,key"})
    owner_id: int = field(default=0, metadata={"sql": "owner_id", "fk": "users.id"})
    created: datetime = field(default=ZERO_TIME, metadata={"sql": "created", "update": False})
    seen: Optional[datetime] = field(default=None, metadata={"sql": "seen", "table": "audit_log"})


@dataclass
class Stamped:
    id: int = field(default=0, metadata={"sql": "id,key"})
    at: datetime = field(default=ZERO_TIME, metadata={"sql": "at", "utc": "true"})


@dataclass
class Plain:
    name: str = ""


def _decl(name: str, *fields: FieldDecl) -> RecordDecl:
    return RecordDecl(name=name, fields=tuple(fields))


class FieldAnnotationParserTests(unittest.TestCase):
    def test_key_suffix_and_table_annotation(self) -> None:
        schema = schema_for(Item)

        self.assertEqual(schema.table, "t")
        self.assertEqual(schema.key_fields(), ["id"])
        self.assertEqual(schema.key_names(), ["id"])
        self.assertEqual(schema.names(), ["name", "kind"])
        self.assertEqual(schema.select_fields(), "id,name,kind")
        self.assertEqual(schema.insert_fields(), "name,kind")
        self.assertTrue(schema.single_integer_primary)

    def test_key_annotation_builds_composite_key(self) -> None:
        schema = schema_for(Membership)

        self.assertEqual(schema.table, "membership")
        self.assertEqual(schema.key_fields(), ["group_id", "user_id"])
        self.assertEqual(schema.names(), ["role"])
        self.assertFalse(schema.single_integer_primary)
        self.assertEqual(schema.select_fields(), "group_id,user_id,role")

    def test_unannotated_fields_are_ignored(self) -> None:
        schema = schema_for(Membership)

        self.assertNotIn("note", [c.name for c in schema.select_columns])

    def test_update_false_fk_and_type_classes(self) -> None:
        schema = schema_for(Audit)

        self.assertEqual(schema.table, "audit_log")
        self.assertTrue(schema.single_integer_primary)
        self.assertEqual(schema.foreign_keys, {"owner_id": "users(id)"})
        self.assertIn("created", schema.no_update)
        self.assertEqual(schema.insert_fields(), "owner_id,seen")
        self.assertEqual(schema.select_fields(), "id,owner_id,created,seen")
        types = {c.sql_name: c.type_class for c in schema.select_columns}
        self.assertEqual(types["created"], ColumnType.DATETIME)
        self.assertEqual(types["seen"], ColumnType.DATETIME)
        self.assertEqual(types["owner_id"], ColumnType.INTEGER)

    def test_last_table_annotation_wins(self) -> None:
        decl = _decl(
            "Multi",
            FieldDecl("a", "str", {"sql": "a", "table": "first"}),
            FieldDecl("b", "str", {"sql": "b", "table": "second"}),
        )

        self.assertEqual(parse_record(decl).table, "second")

    def test_no_annotated_fields_yields_none(self) -> None:
        self.assertIsNone(parse_record(declaration_from_dataclass(Plain)))
        with self.assertRaises(ConfigurationError):
            schema_for(Plain)

    def test_invalid_key_suffix_is_reported_and_skipped(self) -> None:
        decl = _decl(
            "Broken",
            FieldDecl("id", "int", {"sql": "id,primary"}),
            FieldDecl("name", "str", {"sql": "name"}),
        )

        with self.assertLogs("rqlobj", level="ERROR") as logs:
            schema = parse_record(decl)

        self.assertIn("invalid option following field name", "\n".join(logs.output))
        self.assertEqual(schema.key_fields(), [])
        self.assertEqual(schema.select_fields(), "id,name")

    def test_non_string_annotation_is_reported(self) -> None:
        decl = _decl(
            "Odd",
            FieldDecl("id", "int", {"sql": 5}),
            FieldDecl("name", "str", {"sql": "name"}),
        )

        with self.assertLogs("rqlobj", level="ERROR"):
            schema = parse_record(decl)

        self.assertEqual(schema.select_fields(), "name")

    def test_invalid_fk_is_reported_and_dropped(self) -> None:
        decl = _decl("Ref", FieldDecl("owner", "int", {"sql": "owner", "fk": "users"}))

        with self.assertLogs("rqlobj", level="ERROR"):
            schema = parse_record(decl)

        self.assertEqual(schema.foreign_keys, {})
        self.assertEqual(schema.select_fields(), "owner")

    def test_second_integer_key_is_logged(self) -> None:
        with self.assertLogs("rqlobj", level="DEBUG") as logs:
            parse_record(declaration_from_dataclass(Membership))

        self.assertTrue(any("breaks prior primary key" in line for line in logs.output))

    def test_single_non_integer_key_is_not_identity(self) -> None:
        text_key = _decl("Code", FieldDecl("code", "str", {"sql": "code,key"}))
        bool_key = _decl("Flag", FieldDecl("flag", "bool", {"sql": "flag,key"}))

        self.assertFalse(parse_record(text_key).single_integer_primary)
        self.assertFalse(parse_record(bool_key).single_integer_primary)
        self.assertEqual(parse_record(bool_key).key_columns[0].type_class, ColumnType.INTEGER)

    def test_custom_tag(self) -> None:
        decl = _decl(
            "Tagged",
            FieldDecl("id", "int", {"db": "id,key"}),
            FieldDecl("name", "str", {"sql": "ignored", "db": "label"}),
        )

        schema = parse_record(decl, GeneratorOptions(tag="db"))

        self.assertEqual(schema.select_fields(), "id,label")
        self.assertIsNone(parse_record(_decl("Tagged", FieldDecl("x", "int", {"db": "x"}))))

    def test_type_and_prefix_filters(self) -> None:
        decls = [
            declaration_from_dataclass(Item),
            declaration_from_dataclass(Membership),
            declaration_from_dataclass(Plain),
        ]

        everything = parse_records(decls)
        only_items = parse_records(decls, GeneratorOptions(type_names=("Item",)))
        by_prefix = parse_records(decls, GeneratorOptions(prefix="Mem"))

        self.assertEqual([s.name for s in everything], ["Item", "Membership"])
        self.assertEqual([s.name for s in only_items], ["Item"])
        self.assertEqual([s.name for s in by_prefix], ["Membership"])

    def test_declaration_requires_dataclass(self) -> None:
        with self.assertRaises(TypeError):
            declaration_from_dataclass(object)

    def test_schema_rejects_key_and_non_key_overlap(self) -> None:
        column = Column(name="id", sql_name="id", type_class=ColumnType.INTEGER, type_name="int")

        with self.assertRaises(ValueError):
            Schema(name="Bad", table="bad", columns=(column,), key_columns=(column,))


class TypeAndValueParsingTests(unittest.TestCase):
    def test_base_type_name_unwraps_optional_and_modules(self) -> None:
        self.assertEqual(base_type_name("Optional[int]"), "int")
        self.assertEqual(base_type_name("typing.Optional[str]"), "str")
        self.assertEqual(base_type_name("int | None"), "int")
        self.assertEqual(base_type_name("None | bytes"), "bytes")
        self.assertEqual(base_type_name("typing.Union[str, None]"), "str")
        self.assertEqual(base_type_name("datetime.datetime"), "datetime")
        self.assertEqual(base_type_name("'int'"), "int")

    def test_optional_detection(self) -> None:
        for text in ("Optional[datetime]", "datetime | None", "None | int", "typing.Union[str, None]"):
            self.assertTrue(is_optional_type(text), text)
        for text in ("datetime", "int", "datetime.datetime", "Union[int, str]"):
            self.assertFalse(is_optional_type(text), text)

    def test_columns_carry_decoding_flags(self) -> None:
        by_name = {c.name: c for c in schema_for(Audit).columns}

        self.assertTrue(by_name["seen"].nullable)
        self.assertFalse(by_name["created"].nullable)
        self.assertFalse(by_name["created"].utc)
        self.assertTrue(schema_for(Stamped).columns[0].utc)

    def test_type_class_inference(self) -> None:
        self.assertEqual(type_class("str"), ColumnType.TEXT)
        self.assertEqual(type_class("int"), ColumnType.INTEGER)
        self.assertEqual(type_class("bool"), ColumnType.INTEGER)
        self.assertEqual(type_class("datetime"), ColumnType.DATETIME)
        self.assertEqual(type_class("bytes"), ColumnType.TEXT)
        self.assertEqual(type_class("float"), ColumnType.TEXT)
        self.assertEqual(type_class("Decimal"), ColumnType.TEXT)

    def test_parse_bool(self) -> None:
        for raw in (True, "1", "t", "T", "TRUE", "true", "True"):
            self.assertIs(parse_bool(raw), True)
        for raw in (False, "0", "f", "F", "FALSE", "false", "False"):
            self.assertIs(parse_bool(raw), False)
        self.assertIsNone(parse_bool("yes"))
        self.assertIsNone(parse_bool(1))

    def test_fk_reference_formats(self) -> None:
        self.assertEqual(parse_fk_reference("users(id)"), "users(id)")
        self.assertEqual(parse_fk_reference("users ( id )"), "users(id)")
        self.assertEqual(parse_fk_reference("users.id"), "users(id)")
        self.assertEqual(parse_fk_reference(("users", "email")), "users(email)")
        self.assertEqual(parse_fk_reference({"table": "users"}), "users(id)")

        for raw in ("users", ("users",), {"column": "id"}, 42):
            with self.assertRaises(ConfigurationError):
                parse_fk_reference(raw)


SOURCE = '''
import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, Optional


@dataclass
class User:
    id: int = field(default=0, metadata={"sql": "id,key", "table": "users"})
    email: str = field(default="", metadata={"sql": "email"})
    seen: Optional[datetime] = field(default=None, metadata={"sql": "seen"})
    cache: ClassVar[dict] = {}
    scratch: str = ""


class NotRecord:
    x: int = 0


@dataclasses.dataclass(frozen=True)
class Other:
    name: str = field(default="", metadata=LOOKUP)
'''


class SourceParsingTests(unittest.TestCase):
    def test_finds_dataclasses_and_their_fields(self) -> None:
        with self.assertLogs("rqlobj", level="WARNING"):
            decls = parse_source(SOURCE, module="models")

        self.assertEqual([d.name for d in decls], ["User", "Other"])
        user = decls[0]
        self.assertEqual(user.module, "models")
        self.assertEqual([f.name for f in user.fields], ["id", "email", "seen", "scratch"])
        self.assertEqual(user.fields[2].type_name, "Optional[datetime]")
        self.assertEqual(user.fields[0].metadata, {"sql": "id,key", "table": "users"})
        self.assertEqual(decls[1].fields[0].metadata, {})

    def test_parsed_source_matches_runtime_schema(self) -> None:
        with self.assertLogs("rqlobj", level="WARNING"):
            decl = parse_source(SOURCE)[0]

        schema = parse_record(decl)

        self.assertEqual(schema.table, "users")
        self.assertEqual(schema.select_fields(), "id,email,seen")
        self.assertEqual(schema.select_columns[2].type_class, ColumnType.DATETIME)

    def test_invalid_source_raises_syntax_error(self) -> None:
        with self.assertRaises(SyntaxError):
            parse_source("class Broken(:\n    pass\n")


if __name__ == "__main__":
    unittest.main()
