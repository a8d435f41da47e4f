"""Lightweight SQL migrations runner.

Applies .sql files in lexical order from the packaged ``migrations/``
directory. Skips rollback files and, when a journal path is given, records
applied filenames in a file-backed JSON journal to avoid reapplying the same
migration. Intended for local development and CI; production environments
should use Alembic or the platform's migration mechanism.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

DEFAULT_MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        # Skip rollback scripts in forward runs
        if "rollback" in p.name.lower():
            continue
        yield p


def _split_statements(sql: str) -> list[str]:
    statements: list[str] = []
    for stmt in sql.split(";"):
        lines = [ln for ln in stmt.splitlines() if not ln.strip().startswith("--")]
        s = "\n".join(lines).strip()
        if not s or s.upper() in {"BEGIN", "COMMIT", "END"}:
            continue
        statements.append(s)
    return statements


def _exec_sql(conn: Connection, sql: str) -> None:
    """Execute a migration file one statement at a time.

    pysqlite refuses multiple statements per execute(); splitting for every
    dialect keeps each file inside the surrounding transaction.
    """
    for stmt in _split_statements(sql):
        conn.exec_driver_sql(stmt)


def _load_journal(journal_path: Path) -> list[dict]:
    if not journal_path.exists():
        return []
    try:
        data = json.loads(journal_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        logger.error("migration_journal_parse_failed path=%s", str(journal_path), exc_info=True)
        return []
    if not isinstance(data, list):
        return []
    return [e for e in data if isinstance(e, dict)]


def apply_migrations(
    engine: Engine,
    migrations_dir: str | os.PathLike[str] | None = None,
    journal_path: str | os.PathLike[str] | None = None,
) -> list[str]:
    """Apply pending migrations and return the filenames applied in this run.

    Without a ``journal_path`` every file is applied on each call; the shipped
    migrations are written to be re-runnable (``IF NOT EXISTS``).
    """
    root = Path(migrations_dir) if migrations_dir is not None else DEFAULT_MIGRATIONS_DIR
    if not root.exists():
        logger.warning("migrations_dir_missing path=%s", str(root))
        return []

    journal = Path(journal_path) if journal_path is not None else None
    entries = _load_journal(journal) if journal is not None else []
    applied = {Path(str(e.get("filename", ""))).name for e in entries}
    ran: list[str] = []

    for sql_path in _iter_sql_files(root):
        fname = sql_path.name
        if fname in applied:
            continue
        sql = sql_path.read_text(encoding="utf-8")
        if not sql.strip():
            continue
        with engine.begin() as conn:
            _exec_sql(conn, sql)
        logger.info("migration_applied file=%s", fname)
        ran.append(fname)
        entries.append(
            {
                "filename": f"migrations/{fname}",
                # ISO-8601 UTC without fractional seconds (e.g., 2024-01-01T00:00:00Z)
                "applied_at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
            }
        )
        if journal is not None:
            _atomic_write_json(journal, entries)
    return ran


def _atomic_write_json(path: Path, content: list[dict]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(content, ensure_ascii=False, indent=2), encoding="utf-8")
    os.replace(tmp_path, path)


__all__ = ["apply_migrations", "DEFAULT_MIGRATIONS_DIR"]
