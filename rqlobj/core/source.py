"""Static discovery of dataclass record declarations in Python source."""

from __future__ import annotations

import ast
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..utils.logging import get_logger
from .annotations import FieldDecl, RecordDecl

log = get_logger(__name__)

_DATACLASS_NAMES = frozenset({"dataclass", "dataclasses.dataclass"})
_FIELD_NAMES = frozenset({"field", "dataclasses.field"})


def parse_source(text: str, *, filename: str = "<string>", module: Optional[str] = None) -> List[RecordDecl]:
    """Return the dataclass declarations found in one module's source.

    Raises:
        SyntaxError: If `text` is not valid Python.
    """

    tree = ast.parse(text, filename=filename)
    decls = []
    for node in ast.walk(tree):
        if isinstance(node, ast.ClassDef) and _is_dataclass(node):
            decls.append(
                RecordDecl(name=node.name, fields=tuple(_class_fields(node)), module=module)
            )
    return decls


def parse_files(paths: Iterable[Path]) -> List[RecordDecl]:
    """Parse every file and collect declarations in file order."""

    decls: List[RecordDecl] = []
    for path in paths:
        log.debug("evaluating file: %s", path)
        text = path.read_text(encoding="utf-8")
        decls.extend(parse_source(text, filename=str(path), module=path.stem))
    return decls


def _is_dataclass(node: ast.ClassDef) -> bool:
    for decorator in node.decorator_list:
        target = decorator.func if isinstance(decorator, ast.Call) else decorator
        if ast.unparse(target) in _DATACLASS_NAMES:
            return True
    return False


def _class_fields(node: ast.ClassDef) -> Iterable[FieldDecl]:
    for stmt in node.body:
        if not isinstance(stmt, ast.AnnAssign) or not isinstance(stmt.target, ast.Name):
            continue
        type_name = ast.unparse(stmt.annotation)
        if type_name.startswith(("ClassVar", "typing.ClassVar")):
            continue
        yield FieldDecl(
            name=stmt.target.id,
            type_name=type_name,
            metadata=_field_metadata(stmt.value, owner=node.name, name=stmt.target.id),
        )


def _field_metadata(value: Optional[ast.expr], *, owner: str, name: str) -> Dict[str, Any]:
    if not isinstance(value, ast.Call) or ast.unparse(value.func) not in _FIELD_NAMES:
        return {}
    for keyword in value.keywords:
        if keyword.arg != "metadata":
            continue
        try:
            metadata = ast.literal_eval(keyword.value)
        except ValueError:
            log.warning("type %s field %s: metadata is not a literal; ignored", owner, name)
            return {}
        if not isinstance(metadata, dict):
            log.warning("type %s field %s: metadata is not a dict; ignored", owner, name)
            return {}
        return metadata
    return {}
