"""
Configuration Loader (``rentroll_config.loader``).

Responsibility
--------------
Loads an optional YAML settings file, parses it into ``ImportSettings`` and
applies environment overrides on top.

Precedence (lowest to highest)
------------------------------
1. ``ImportSettings`` defaults (``data/client1_health/unit.csv``,
   PostgreSQL on localhost:5437).
2. YAML file (explicit ``path`` argument, else ``$RENTROLL_CONFIG``).
3. Environment variables: ``DATABASE_URL`` (or ``DB_HOST``/``DB_PORT``/
   ``DB_USER``/``DB_PASS``/``DB_NAME``), ``DATA_ROOT``,
   ``DATA_FOLDER_NAME``, ``MIGRATION_ERROR_LOG``, ``LOG_LEVEL``.

Failure modes
-------------
* Missing YAML file  -> ``ConfigurationError``.
* Malformed YAML  -> ``ConfigurationError`` (chained to the YAML error).
* Unknown keys or a non-mapping document  -> ``ConfigurationError``.
"""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from rentroll_config.schema import ImportSettings
from rentroll_kernel.exceptions import ConfigurationError

_FIELD_NAMES = frozenset(f.name for f in dataclasses.fields(ImportSettings))
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _log_level(value: Any) -> str:
    level = str(value).upper()
    if level not in _LOG_LEVELS:
        raise ConfigurationError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {value!r}")
    return level


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_settings(data: Any, base: ImportSettings | None = None) -> ImportSettings:
    """Parse a settings mapping on top of ``base`` (defaults if None)."""
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings document must be a mapping, got {type(data).__name__}")
    unknown = sorted(set(data) - _FIELD_NAMES)
    if unknown:
        raise ConfigurationError(f"Unknown settings key(s): {', '.join(unknown)}")

    values = dict(data)
    if "date_formats" in values:
        formats = values["date_formats"]
        if isinstance(formats, str) or not all(isinstance(f, str) for f in formats):
            raise ConfigurationError("date_formats must be a list of strftime patterns")
        values["date_formats"] = tuple(formats)
    if "source_options" in values and not isinstance(values["source_options"], dict):
        raise ConfigurationError("source_options must be a mapping")
    for key in (
        "database_url",
        "data_root",
        "data_folder_name",
        "unit_file",
        "rent_roll_file",
        "error_log_path",
    ):
        if key in values:
            values[key] = str(values[key])
    if "log_level" in values:
        values["log_level"] = _log_level(values["log_level"])

    return dataclasses.replace(base or ImportSettings(), **values)


def database_url_from_env(env: Mapping[str, str]) -> str | None:
    """DATABASE_URL wins; otherwise compose one from DB_* parts if any is set."""
    if env.get("DATABASE_URL"):
        return env["DATABASE_URL"]
    parts = ("DB_HOST", "DB_PORT", "DB_USER", "DB_PASS", "DB_NAME")
    if not any(env.get(p) for p in parts):
        return None
    host = env.get("DB_HOST") or "localhost"
    port = env.get("DB_PORT") or "5437"
    user = env.get("DB_USER") or "monument"
    password = env.get("DB_PASS") or "monument123"
    name = env.get("DB_NAME") or "monument"
    return f"postgresql://{user}:{password}@{host}:{port}/{name}"


def apply_env_overrides(settings: ImportSettings, env: Mapping[str, str]) -> ImportSettings:
    """Return ``settings`` with any environment overrides applied."""
    overrides: dict[str, Any] = {}
    db_url = database_url_from_env(env)
    if db_url:
        overrides["database_url"] = db_url
    if env.get("DATA_ROOT"):
        overrides["data_root"] = env["DATA_ROOT"]
    if env.get("DATA_FOLDER_NAME"):
        overrides["data_folder_name"] = env["DATA_FOLDER_NAME"]
    if env.get("MIGRATION_ERROR_LOG"):
        overrides["error_log_path"] = env["MIGRATION_ERROR_LOG"]
    if env.get("LOG_LEVEL"):
        overrides["log_level"] = _log_level(env["LOG_LEVEL"])
    return dataclasses.replace(settings, **overrides) if overrides else settings


def load_settings(
    path: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> ImportSettings:
    """Defaults -> YAML file -> environment."""
    env = os.environ if env is None else env
    settings = ImportSettings()

    config_path = path or env.get("RENTROLL_CONFIG")
    if config_path:
        config_path = Path(config_path)
        if not config_path.is_file():
            raise ConfigurationError(f"Settings file not found: {config_path}", path=str(config_path))
        try:
            document = load_yaml_file(config_path)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Malformed settings file {config_path}: {exc}", path=str(config_path)) from exc
        settings = parse_settings(document, settings)

    return apply_env_overrides(settings, env)
