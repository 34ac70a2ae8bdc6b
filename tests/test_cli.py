"""Tests for the typed-records command line tool."""

from __future__ import annotations

import json

from typed_records.cli import main
from typed_records.introspection import qualified_name
from typed_records.metadata import METADATA_FILE
from typed_records.method_field import MethodFieldDefinition


class Task:
    def __init__(self, title: str) -> None:
        self.title = title

    def getShortTitle(self) -> str:
        return self.title[:10]

    def isDone(self, field: MethodFieldDefinition) -> bool:
        return False


SCHEMA = f"""
type Task = "{qualified_name(Task)}" {{
    title: text,
    short_title: text via getShortTitle,
    done: boolean via isDone,
    broken: text via missing,
    index by_title (title)
}}
index everywhere (short_title)
"""


def write_schema(tmp_path, text=SCHEMA):
    path = tmp_path / "schema.tt"
    path.write_text(text)
    return path


class TestDescribe:
    """Tests for the describe command."""

    def test_text_output(self, tmp_path, capsys):
        """Test describing a schema as text."""
        assert main(["describe", str(write_schema(tmp_path))]) == 0
        out = capsys.readouterr().out

        assert f"Task ({qualified_name(Task)})" in out
        assert "Short Title" in out
        assert "via getShortTitle" in out
        assert "Is Done?" in out
        assert "[single self parameter]" in out
        assert "error: Method 'missing' not found" in out
        assert "index by_title (title)" in out
        assert "index everywhere (short_title)" in out

    def test_json_output(self, tmp_path, capsys):
        """Test describing a schema as JSON."""
        assert main(["describe", str(write_schema(tmp_path)), "--json"]) == 0
        payload = json.loads(capsys.readouterr().out)

        task = payload["types"][0]
        methods = {m["name"]: m for m in task["methods"]}
        assert methods["short_title"]["display_name"] == "Short Title"
        assert methods["short_title"]["parameter_types"] == []
        assert methods["done"]["single_self_parameter"] is True
        assert "error" in methods["broken"]
        assert payload["indexes"] == [{"name": "everywhere", "fields": ["short_title"]}]

    def test_single_type(self, tmp_path, capsys):
        """Test describing one type."""
        assert main(["describe", str(write_schema(tmp_path)), "--type", "Task"]) == 0
        assert "Task" in capsys.readouterr().out

    def test_unknown_type(self, tmp_path, capsys):
        """Test describing a type that isn't defined."""
        assert main(["describe", str(write_schema(tmp_path)), "--type", "Nope"]) == 1
        assert "Unknown type: Nope" in capsys.readouterr().err

    def test_missing_schema(self, tmp_path, capsys):
        """Test a schema path that doesn't exist."""
        assert main(["describe", str(tmp_path / "missing.tt")]) == 1
        assert "Schema file not found" in capsys.readouterr().err

    def test_syntax_error(self, tmp_path, capsys):
        """Test that syntax errors are reported."""
        path = write_schema(tmp_path, "type Task { title text }")
        assert main(["describe", str(path)]) == 1
        assert "Error: Syntax error" in capsys.readouterr().err


class TestSave:
    """Tests for the save command."""

    def test_writes_metadata(self, tmp_path, capsys):
        """Test writing the metadata file."""
        data_dir = tmp_path / "data"
        assert main(["save", str(write_schema(tmp_path)), str(data_dir)]) == 0
        assert (data_dir / METADATA_FILE).exists()
        assert "Saved 1 types" in capsys.readouterr().out
