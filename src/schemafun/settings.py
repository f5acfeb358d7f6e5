from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import SettingsError

CONFIG_FILENAME = "schemafun.toml"
ENV_PREFIX = "SCHEMAFUN_"


class LoaderSettings(BaseModel):
    root: Path | None = None
    recursive: bool = True
    extensions: List[str] = ["json"]
    id_field: str = "$id"

    model_config = ConfigDict(extra="ignore")

    @field_validator("extensions", mode="before")
    @classmethod
    def split_extensions(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            cleaned = [str(ext).strip().lstrip(".").lower() for ext in value]
            value = [ext for ext in cleaned if ext]
            if not value:
                raise ValueError("extensions must name at least one file extension")
        return value

    @field_validator("id_field")
    @classmethod
    def validate_id_field(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("id_field must not be empty")
        return value


class SchemafunSettings(BaseModel):
    loader: LoaderSettings = LoaderSettings()

    model_config = ConfigDict(extra="ignore")


def resolve_config_path(config: Path | None) -> Path | None:
    if config is not None:
        return config if config.exists() else None
    candidate = Path.cwd() / CONFIG_FILENAME
    return candidate if candidate.exists() else None


def _deep_update(target: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = value
    return target


def _load_toml(path: Path | None) -> Dict[str, Any]:
    if path is None or not path.exists():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise SettingsError(f"Invalid TOML in {path}: {exc}") from exc


def _extract_prefixed(source: Dict[str, str], *, prefix: str = ENV_PREFIX, delimiter: str = "__") -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for key, value in source.items():
        if not key.startswith(prefix):
            continue
        path = key.removeprefix(prefix).split(delimiter)
        target = data
        for part in path[:-1]:
            target = target.setdefault(part.lower(), {})
        target[path[-1].lower()] = value
    return data


def load_settings(
    *,
    config_path: Path | None = None,
    overrides: Dict[str, Any] | None = None,
) -> SchemafunSettings:
    """Load settings from TOML, then ``SCHEMAFUN_*`` env vars, then overrides.

    ``SCHEMAFUN_LOADER__RECURSIVE=false`` sets ``loader.recursive``.
    """
    resolved = resolve_config_path(config_path)
    if config_path is not None and resolved is None:
        raise FileNotFoundError(f"Config file not found at {config_path}")

    merged: Dict[str, Any] = {}
    _deep_update(merged, _load_toml(resolved))
    _deep_update(merged, _extract_prefixed(dict(os.environ)))
    if overrides:
        _deep_update(merged, overrides)

    try:
        return SchemafunSettings(**merged)
    except ValidationError as exc:
        raise SettingsError(f"Invalid schemafun settings: {exc}") from exc


__all__ = [
    "CONFIG_FILENAME",
    "ENV_PREFIX",
    "LoaderSettings",
    "SchemafunSettings",
    "resolve_config_path",
    "load_settings",
]
