"""Database bootstrap utilities for the tourism admin service.

Exposes engine construction and the SQL migrations runner. The DB layer is
intentionally minimal and does not leak ORM models into route handlers.
"""

from tourism_admin.db.base import dispose_engines, get_engine
from tourism_admin.db.migrations_runner import apply_migrations

__all__ = [
    "get_engine",
    "dispose_engines",
    "apply_migrations",
]
