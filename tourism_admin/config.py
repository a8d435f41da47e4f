"""Configuration utilities for the tourism admin service.

This module loads application configuration with the following rules:
- Primary source: `dashboard_config.json` in the working directory.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_DASHBOARD_CONFIG = Path("dashboard_config.json")
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Recoverable: log and ignore unreadable override
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _as_bool(value: object) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


class DatabaseConfig(BaseModel):
    dsn: str
    auto_apply_migrations: bool = Field(default=True)
    migrations_journal: Optional[str] = None

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v


class OrderingConfig(BaseModel):
    batch_max_moves: int = Field(default=500, gt=0)


class CorsConfig(BaseModel):
    allow_origins: List[str] = Field(default_factory=lambda: ["*"])


class AppConfig(BaseModel):
    database: DatabaseConfig
    ordering: OrderingConfig
    cors: CorsConfig


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
    3) dashboard_config.json (primary base)
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_DASHBOARD_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        if isinstance(cur, list):
            return ",".join(str(x) for x in cur)
        return str(cur) if cur is not None else default

    # Database
    dsn = (
        _env("TEST_DATABASE_URL")
        or _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or "sqlite+pysqlite:///:memory:"
    )
    auto_migrate_text = _env("AUTO_APPLY_MIGRATIONS") or _read_config_file("database.auto_apply_migrations") or _base("database.auto_apply_migrations", "true")
    journal = _env("MIGRATIONS_JOURNAL") or _read_config_file("database.migrations_journal") or _base("database.migrations_journal")

    # Ordering
    batch_max_text = _env("ORDERING_BATCH_MAX_MOVES") or _read_config_file("ordering.batch_max_moves") or _base("ordering.batch_max_moves", "500")

    # CORS
    origins_text = _env("CORS_ALLOW_ORIGINS") or _read_config_file("cors.allow_origins") or _base("cors.allow_origins", "*")
    origins = [o.strip() for o in str(origins_text).split(",") if o.strip()]

    try:
        cfg = AppConfig(
            database=DatabaseConfig(
                dsn=dsn,
                auto_apply_migrations=_as_bool(auto_migrate_text),
                migrations_journal=journal,
            ),
            ordering=OrderingConfig(batch_max_moves=int(str(batch_max_text).strip())),
            cors=CorsConfig(allow_origins=origins or ["*"]),
        )
        return cfg
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise
    except ValueError as e:
        # int() on a malformed numeric override
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "OrderingConfig",
    "CorsConfig",
    "load_config",
]
