"""
Load config from config.yaml with optional env overrides.
Single source of truth for the revisions database, the proto file layout, and logging.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml

from .core.errors import ConfigurationError

# Defaults if no YAML or env
_DEFAULTS = {
    "db": {
        "url": None,
        "table": "health_plan_revisions",
        "id_column": "id",
        "blob_column": "form_data_proto",
        "ledger_table": "proto_migrations",
    },
    "files": {
        "extension": ".proto",
        "ledger_file": "_ran_migrations",
    },
    "migrate": {"workers": 1},
    "logging": {"level": "INFO"},
}

_SQLITE_PREFIX = "sqlite://"


def _config_yaml_path() -> Path:
    """MCR_PROTO_CONFIG if set; else config.yaml at repo root (parent of package dir)."""
    override = os.environ.get("MCR_PROTO_CONFIG")
    if override:
        return Path(override)
    return Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    config_path = _config_yaml_path()
    if not config_path.exists():
        return {}
    with open(config_path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"invalid config file {config_path}: {e}") from e
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _env_overrides() -> dict:
    overrides: dict = {}
    url = os.environ.get("DATABASE_URL")
    if url:
        overrides.setdefault("db", {})["url"] = url
    table = os.environ.get("MCR_PROTO_TABLE")
    if table:
        overrides.setdefault("db", {})["table"] = table
    level = os.environ.get("MCR_PROTO_LOG_LEVEL")
    if level:
        overrides.setdefault("logging", {})["level"] = level
    return overrides


def get_config() -> dict:
    """Return merged config: defaults <- config.yaml <- env."""
    merged = _deep_merge(_DEFAULTS, _load_yaml())
    merged = _deep_merge(merged, _env_overrides())
    return merged


def database_url() -> str:
    """Connection string for database mode. Raises ConfigurationError when unset."""
    url = get_config()["db"].get("url")
    if not url:
        raise ConfigurationError("DATABASE_URL must be defined in env (or db.url in config.yaml)")
    return str(url)


def sqlite_path_from_url(url: str) -> str:
    """
    Resolve a connection string to a sqlite3 path.
    Accepts sqlite:///relative.db, sqlite:////abs/path.db, sqlite://:memory: and bare paths.
    """
    if url.startswith(_SQLITE_PREFIX):
        rest = url[len(_SQLITE_PREFIX):]
        if rest == ":memory:" or rest == "/:memory:":
            return ":memory:"
        if not rest.startswith("/") or rest == "/":
            raise ConfigurationError(f"malformed sqlite URL: {url!r}")
        # sqlite:///rel -> "rel"; sqlite:////abs -> "/abs"
        path = rest[1:]
        if not path:
            raise ConfigurationError(f"malformed sqlite URL: {url!r}")
        return path
    if "://" in url:
        scheme = url.split("://", 1)[0]
        raise ConfigurationError(f"unsupported database scheme {scheme!r}; only sqlite is supported")
    return url


def db_table() -> str:
    return str(get_config()["db"]["table"])


def db_id_column() -> str:
    return str(get_config()["db"]["id_column"])


def db_blob_column() -> str:
    return str(get_config()["db"]["blob_column"])


def db_ledger_table() -> str:
    return str(get_config()["db"]["ledger_table"])


def proto_extension() -> str:
    return str(get_config()["files"]["extension"])


def ledger_file_name() -> str:
    return str(get_config()["files"]["ledger_file"])


def default_workers() -> int:
    return int(get_config()["migrate"]["workers"])


def log_level(override: Optional[str] = None) -> str:
    return str(override or get_config()["logging"]["level"]).upper()
