from __future__ import annotations

import ast
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from typer.testing import CliRunner

from rqlobj.cli import app, resolve_inputs

MODELS = '''
from dataclasses import dataclass, field


@dataclass
class User:
    id: int = field(default=0, metadata={"sql": "id,key", "table": "users"})
    email: str = field(default="", metadata={"sql": "email"})


@dataclass
class Tag:
    label: str = field(default="", metadata={"sql": "label,key"})


@dataclass
class Scratch:
    value: int = 0
'''


class GeneratorCliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name)
        self.pkg = self.root / "app"
        self.pkg.mkdir()
        (self.pkg / "models.py").write_text(MODELS, encoding="utf-8")
        patcher = mock.patch("rqlobj.cli.configure_logging")
        patcher.start()
        self.addCleanup(patcher.stop)

    def _invoke(self, *args: str):
        return self.runner.invoke(app, list(args))

    def test_generates_accessors_for_a_directory(self) -> None:
        result = self._invoke(str(self.pkg))

        self.assertEqual(result.exit_code, 0, result.output)
        src = (self.pkg / "db_generated.py").read_text(encoding="utf-8")
        ast.parse(src)
        self.assertTrue(src.startswith(f"# generated by 'rqlobj-gen {self.pkg}'; DO NOT EDIT"))
        self.assertIn("from models import Tag, User", src)
        self.assertIn("class UserObject:", src)
        self.assertIn("class TagObject:", src)
        self.assertNotIn("ScratchObject", src)

    def test_package_sources_are_imported_relatively(self) -> None:
        (self.pkg / "__init__.py").write_text("", encoding="utf-8")

        result = self._invoke(str(self.pkg))

        self.assertEqual(result.exit_code, 0, result.output)
        src = (self.pkg / "db_generated.py").read_text(encoding="utf-8")
        self.assertIn("from .models import Tag, User", src)

    def test_rerun_skips_generated_output(self) -> None:
        first = self._invoke(str(self.pkg))
        second = self._invoke(str(self.pkg))

        self.assertEqual(first.exit_code, 0, first.output)
        self.assertEqual(second.exit_code, 0, second.output)
        src = (self.pkg / "db_generated.py").read_text(encoding="utf-8")
        self.assertEqual(src.count("class UserObject:"), 1)

    def test_type_filter_and_output(self) -> None:
        out = self.root / "users_db.py"

        result = self._invoke("--type", "User", "--output", str(out), str(self.pkg / "models.py"))

        self.assertEqual(result.exit_code, 0, result.output)
        src = out.read_text(encoding="utf-8")
        self.assertIn("class UserObject:", src)
        self.assertNotIn("class TagObject:", src)
        self.assertIn("--type User", src.splitlines()[0])

    def test_prefix_and_tag(self) -> None:
        result = self._invoke("--prefix", "Ta", "--tag", "sql", str(self.pkg))

        self.assertEqual(result.exit_code, 0, result.output)
        src = (self.pkg / "db_generated.py").read_text(encoding="utf-8")
        self.assertIn("class TagObject:", src)
        self.assertNotIn("class UserObject:", src)

    def test_files_from_different_directories_are_a_usage_error(self) -> None:
        other = self.root / "other"
        other.mkdir()
        (other / "more.py").write_text(MODELS, encoding="utf-8")

        result = self._invoke(str(self.pkg / "models.py"), str(other / "more.py"))

        self.assertEqual(result.exit_code, 2)

    def test_non_python_file_is_a_usage_error(self) -> None:
        notes = self.pkg / "notes.txt"
        notes.write_text("hello", encoding="utf-8")

        result = self._invoke(str(notes))

        self.assertEqual(result.exit_code, 2)

    def test_unparseable_source_exits_with_error(self) -> None:
        (self.pkg / "broken.py").write_text("class Broken(:\n", encoding="utf-8")

        result = self._invoke(str(self.pkg))

        self.assertEqual(result.exit_code, 1)
        self.assertFalse((self.pkg / "db_generated.py").exists())

    def test_empty_directory_exits_with_error(self) -> None:
        empty = self.root / "empty"
        empty.mkdir()

        result = self._invoke(str(empty))

        self.assertEqual(result.exit_code, 1)


class ResolveInputsTests(unittest.TestCase):
    def test_directory_excludes_output_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a.py").write_text("", encoding="utf-8")
            (root / "b.py").write_text("", encoding="utf-8")
            (root / "out.py").write_text("", encoding="utf-8")

            directory, files = resolve_inputs([root], "out.py")

            self.assertEqual(directory, root)
            self.assertEqual([f.name for f in files], ["a.py", "b.py"])


if __name__ == "__main__":
    unittest.main()
