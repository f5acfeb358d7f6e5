from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from schemafun.errors import SchemaLoadError
from schemafun.loader import catalogue_directory, load_schemas_from_directory, read_schema_file
from schemafun.schema import SchemaRegistry
from schemafun.settings import LoaderSettings


def write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def schema_dir(tmp_path):
    write_json(tmp_path / "person.json", {"$id": "Person", "type": "object"})
    write_json(tmp_path / "order.JSON", {"$id": "Order", "type": "object"})
    (tmp_path / "notes.txt").write_text("not a schema", encoding="utf-8")
    sub = tmp_path / "billing"
    sub.mkdir()
    write_json(sub / "invoice.json", {"$id": "Invoice", "type": "object"})
    return tmp_path


def test_catalogue_directory(schema_dir):
    assert catalogue_directory(schema_dir) == {
        "order": schema_dir / "order.JSON",
        "person": schema_dir / "person.json",
    }
    nested = catalogue_directory(schema_dir, recursive=True)
    assert nested["billing"] == {"invoice": schema_dir / "billing" / "invoice.json"}


def test_catalogue_missing_directory_is_empty(tmp_path):
    assert catalogue_directory(tmp_path / "nope") == {}


def test_load_registers_by_id(schema_dir, caplog):
    registry = SchemaRegistry()
    with caplog.at_level(logging.INFO, logger="schemafun.loader"):
        ids = load_schemas_from_directory(registry, schema_dir)

    assert ids == ["Invoice", "Order", "Person"]
    assert set(registry.ids()) == {"Invoice", "Order", "Person"}
    assert "Registered 3 schema(s)" in caplog.text


def test_load_honours_settings(schema_dir):
    registry = SchemaRegistry()
    settings = LoaderSettings(root=schema_dir, recursive=False, extensions=["json"])
    assert load_schemas_from_directory(registry, settings=settings) == ["Order", "Person"]


def test_custom_id_extractor(schema_dir):
    registry = SchemaRegistry()
    ids = load_schemas_from_directory(
        registry, schema_dir, lambda path, schema: path.stem.lower(), recursive=False
    )
    assert ids == ["order", "person"]


def test_missing_id_is_an_error(tmp_path):
    write_json(tmp_path / "anon.json", {"type": "object"})
    with pytest.raises(SchemaLoadError) as excinfo:
        load_schemas_from_directory(SchemaRegistry(), tmp_path)
    assert excinfo.value.context["path"].endswith("anon.json")


def test_invalid_files(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(SchemaLoadError, match="Invalid JSON"):
        read_schema_file(bad)

    listed = write_json(tmp_path / "list.json", [1, 2])
    with pytest.raises(SchemaLoadError, match="JSON object"):
        read_schema_file(listed)


def test_missing_directory_warns(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="schemafun.loader"):
        assert load_schemas_from_directory(SchemaRegistry(), tmp_path / "nope") == []
    assert "does not exist" in caplog.text


def test_root_is_required():
    with pytest.raises(ValueError):
        load_schemas_from_directory(SchemaRegistry())


def test_undecodable_file_is_a_load_error(tmp_path):
    (tmp_path / "latin.json").write_bytes(b'{"$id": "\xff\xfe"}')

    with pytest.raises(SchemaLoadError, match="Cannot read") as excinfo:
        load_schemas_from_directory(SchemaRegistry(), tmp_path)

    assert excinfo.value.context["path"].endswith("latin.json")
    assert isinstance(excinfo.value.inner_error, UnicodeDecodeError)
    assert excinfo.value.__cause__ is excinfo.value.inner_error


def test_unreadable_path_is_a_load_error(tmp_path):
    with pytest.raises(SchemaLoadError) as excinfo:
        read_schema_file(tmp_path / "missing.json")
    assert isinstance(excinfo.value.inner_error, OSError)
