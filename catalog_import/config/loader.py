from __future__ import annotations

import codecs
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import BusinessRulesConfig, DatabaseConfig, ImportConfig

"""Config loader.

Responsibilities:
- Load YAML config (default config/import.yml)
- Validate against the bundled JSON schema (unknown keys rejected)
- Apply defaults for every missing key
- Resolve database connection settings with environment precedence
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "default_config",
    "load_config",
    "resolve_dsn",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or config data fails
            schema validation (wrong types, unknown keys, ...)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def default_config() -> ImportConfig:
    return ImportConfig()


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
        table=db_raw.get("table", "products"),
    )

    defaults = BusinessRulesConfig()
    rules_raw = data.get("business_rules") or {}
    rules = BusinessRulesConfig(
        # float 経由の誤差を避けるため str から Decimal 化
        min_cost=Decimal(str(rules_raw.get("min_cost", defaults.min_cost))),
        min_stock=int(rules_raw.get("min_stock", defaults.min_stock)),
        max_cost=Decimal(str(rules_raw.get("max_cost", defaults.max_cost))),
    )

    encoding = data.get("encoding", "utf-8-sig")
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise ConfigError(f"unknown encoding: {encoding}") from e

    return ImportConfig(
        database=db,
        business_rules=rules,
        currency=data.get("currency", "gbp"),
        encoding=encoding,
        logs_dir=data.get("logs_dir", "./logs"),
        log_file=data.get("log_file"),
    )


def resolve_dsn(db_cfg: DatabaseConfig, environ: dict[str, str]) -> str:
    """Build the libpq DSN.

    接続情報の解決優先順位:
        1. DATABASE_URL / PGDSN があれば DSN 全体をそのまま使用
        2. config の database.dsn
        3. 個別 PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
           (不足分は config の database セクションで補完)
    """
    dsn = environ.get("DATABASE_URL") or environ.get("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = environ.get("PGHOST", db_cfg.host or "localhost")
    port = environ.get("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = environ.get("PGUSER", db_cfg.user or "postgres")
    password = environ.get("PGPASSWORD", db_cfg.password or "")
    database = environ.get("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn
