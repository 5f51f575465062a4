"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Reads YAML documents, deep-merges them in precedence order, applies
environment overrides, and parses the result into ``LedgerSettings``.

Precedence (lowest first)
-------------------------
1. ``defaults.yaml`` shipped with the package.
2. A user YAML file: the explicit ``path`` argument, else ``$LEDGER_CONFIG``.
3. ``LEDGER_DATABASE_URL``, ``LEDGER_LOG_LEVEL``, ``LEDGER_DB_ECHO``.

Failure modes
-------------
* Missing user YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Non-mapping document or bad values  -> ``ValueError``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from ledger_config.schema import LedgerSettings

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

CONFIG_ENV_VAR = "LEDGER_CONFIG"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level YAML must be a mapping")
    return data


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if environ.get("LEDGER_DATABASE_URL"):
        overrides.setdefault("database", {})["url"] = environ["LEDGER_DATABASE_URL"]
    if environ.get("LEDGER_DB_ECHO"):
        overrides.setdefault("database", {})["echo"] = parse_bool(
            environ["LEDGER_DB_ECHO"], "LEDGER_DB_ECHO"
        )
    if environ.get("LEDGER_LOG_LEVEL"):
        overrides.setdefault("logging", {})["level"] = environ["LEDGER_LOG_LEVEL"]
    return deep_merge(data, overrides)


def parse_settings(data: Mapping[str, Any]) -> LedgerSettings:
    """Build LedgerSettings from the merged document."""
    database = data.get("database") or {}
    logging_section = data.get("logging") or {}
    ledger = data.get("ledger") or {}
    try:
        return LedgerSettings(
            database_url=str(database["url"]),
            echo=parse_bool(database.get("echo", False), "database.echo"),
            pool_size=int(database.get("pool_size", 20)),
            max_overflow=int(database.get("max_overflow", 10)),
            pool_timeout=int(database.get("pool_timeout", 30)),
            pool_recycle=int(database.get("pool_recycle", 1800)),
            log_level=str(logging_section.get("level", "INFO")).upper(),
            default_currency=str(ledger.get("default_currency", "EUR")).upper(),
        )
    except KeyError as exc:
        raise ValueError(f"Missing required setting: database.{exc.args[0]}") from exc


def load_settings(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> LedgerSettings:
    """
    Load settings from defaults, an optional YAML file, and the environment.

    Args:
        path: User YAML file.  Defaults to ``$LEDGER_CONFIG`` when unset.
        environ: Environment mapping; ``os.environ`` when None.
    """
    env = os.environ if environ is None else environ
    data = load_yaml_file(DEFAULTS_PATH)

    user_path = path if path is not None else env.get(CONFIG_ENV_VAR)
    if user_path:
        data = deep_merge(data, load_yaml_file(Path(user_path)))

    data = apply_env_overrides(data, env)
    return parse_settings(data)
