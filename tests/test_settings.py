from __future__ import annotations

from pathlib import Path

import pytest

from schemafun.errors import SettingsError
from schemafun.settings import LoaderSettings, load_settings


def write_toml(path: Path, content: str) -> None:
    path.write_text(content, encoding="utf-8")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ("SCHEMAFUN_LOADER__ROOT", "SCHEMAFUN_LOADER__RECURSIVE", "SCHEMAFUN_LOADER__EXTENSIONS"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults():
    settings = load_settings()
    assert settings.loader.root is None
    assert settings.loader.recursive is True
    assert settings.loader.extensions == ["json"]
    assert settings.loader.id_field == "$id"


def test_toml_is_found_in_working_directory(tmp_path):
    write_toml(
        tmp_path / "schemafun.toml",
        """
[loader]
root = "schemas"
recursive = false
""",
    )
    settings = load_settings()
    assert settings.loader.root == Path("schemas")
    assert settings.loader.recursive is False


def test_env_overrides_toml(tmp_path, monkeypatch):
    config_path = tmp_path / "custom.toml"
    write_toml(
        config_path,
        """
[loader]
root = "from-toml"
extensions = ["json"]
""",
    )
    monkeypatch.setenv("SCHEMAFUN_LOADER__ROOT", "from-env")
    monkeypatch.setenv("SCHEMAFUN_LOADER__EXTENSIONS", ".JSON, schema")

    settings = load_settings(config_path=config_path)
    assert settings.loader.root == Path("from-env")
    assert settings.loader.extensions == ["json", "schema"]


def test_overrides_win(monkeypatch):
    monkeypatch.setenv("SCHEMAFUN_LOADER__RECURSIVE", "false")
    settings = load_settings(overrides={"loader": {"recursive": True}})
    assert settings.loader.recursive is True


def test_missing_explicit_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(config_path=tmp_path / "missing.toml")


def test_invalid_toml(tmp_path):
    config_path = tmp_path / "bad.toml"
    write_toml(config_path, "[loader\n")
    with pytest.raises(SettingsError):
        load_settings(config_path=config_path)


def test_invalid_values():
    with pytest.raises(SettingsError):
        load_settings(overrides={"loader": {"extensions": ""}})
    with pytest.raises(ValueError):
        LoaderSettings(id_field=" ")
