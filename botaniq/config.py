"""Configuration utilities for the session and survey service.

This module loads application configuration with the following rules:
- Primary source: `botaniq_config.json` at the project root (optional).
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG_FILE = Path("botaniq_config.json")
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _truthy(value: Optional[str]) -> bool:
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


class DatabaseConfig(BaseModel):
    dsn: str
    ssl_required: bool = Field(default=False)
    statement_timeout_ms: Optional[int] = Field(default=None, gt=0)

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v.strip()


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(default=5000, gt=0, lt=65536)


class MigrationsConfig(BaseModel):
    auto_apply: bool = True
    directory: str = "migrations"


class StaticConfig(BaseModel):
    directory: Optional[str] = "public"


class AppConfig(BaseModel):
    database: DatabaseConfig
    server: ServerConfig = Field(default_factory=ServerConfig)
    migrations: MigrationsConfig = Field(default_factory=MigrationsConfig)
    static: StaticConfig = Field(default_factory=StaticConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) botaniq_config.json at project root
    4) Defaults for everything except the database DSN, which is required
    """

    base = _read_json_file(ROOT_CONFIG_FILE)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    # Database
    dsn = _env("DATABASE_URL") or _read_config_file("database.url") or _base("database.dsn")
    if not dsn:
        logger.error("No database configured; set DATABASE_URL")
        raise ValueError("DATABASE_URL is not set")
    ssl_required_text = _env("DATABASE_SSL_REQUIRED") or _read_config_file("database.ssl.required") or _base("database.ssl_required", "false")
    timeout_text = _env("DATABASE_STATEMENT_TIMEOUT_MS") or _read_config_file("database.statement_timeout_ms") or _base("database.statement_timeout_ms")

    # Server
    host = _env("HOST") or _base("server.host", "0.0.0.0")
    port_text = _env("PORT") or _base("server.port", "5000")

    # Migrations and static assets
    auto_apply_text = _env("AUTO_APPLY_MIGRATIONS") or _base("migrations.auto_apply", "true")
    migrations_dir = _env("MIGRATIONS_DIR") or _base("migrations.directory", "migrations")
    static_dir = _env("STATIC_DIR") or _base("static.directory", "public")

    try:
        cfg = AppConfig(
            database=DatabaseConfig(
                dsn=dsn,
                ssl_required=_truthy(ssl_required_text),
                statement_timeout_ms=int(str(timeout_text).strip()) if timeout_text else None,
            ),
            server=ServerConfig(host=host, port=int(str(port_text).strip())),
            migrations=MigrationsConfig(auto_apply=_truthy(auto_apply_text), directory=migrations_dir),
            static=StaticConfig(directory=static_dir or None),
        )
        return cfg
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise
    except ValueError as e:
        # int() on a non-numeric PORT or timeout override
        logger.error("Invalid numeric configuration value: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "ServerConfig",
    "MigrationsConfig",
    "StaticConfig",
    "load_config",
]
