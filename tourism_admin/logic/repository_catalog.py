"""Catalog item data access for the ordering-related CRUD paths.

Only the writes that interact with ordering live here: creation (which
assigns the next free position), deletion (optionally followed by compaction)
and the active toggle.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging
import re
import uuid

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tourism_admin.logic.errors import CatalogConflictError, CatalogValidationError, PositionStoreError
from tourism_admin.logic.order_engine import CollectionRef, OrderEngine
from tourism_admin.models.collections import get_descriptor

logger = logging.getLogger(__name__)

_SLUG_STRIP = re.compile(r"[^a-z0-9-]")


def _slug(name: str) -> str:
    return _SLUG_STRIP.sub("", re.sub(r"\s+", "-", name.strip().lower())) or "item"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _q(conn: Connection, ident: str) -> str:
    return conn.dialect.identifier_preparer.quote(ident)


def create_item(
    order_engine: OrderEngine,
    collection: CollectionRef,
    name: str,
    *,
    item_id: Optional[str] = None,
    description: Optional[str] = None,
    is_active: Optional[bool] = None,
    created_at: Optional[str] = None,
) -> Dict[str, Any]:
    """Insert an item at the tail of its collection and return the stored row.

    The position comes from ``get_next_position`` and is advisory: a racing
    insert can land on the same value until the next compaction.
    """
    d = get_descriptor(collection)
    if not isinstance(name, str) or not name.strip():
        raise CatalogValidationError("name is required")
    new_id = (item_id or "").strip() or f"{d.name}-{_slug(name)}-{uuid.uuid4().hex[:8]}"
    position = order_engine.get_next_position(d.name)
    stamp = created_at or _now_iso()
    row = {
        "id": new_id,
        "name": name.strip(),
        "description": description.strip() if isinstance(description, str) and description.strip() else None,
        "is_active": True if is_active is None else bool(is_active),
        "position": position,
        "created_at": stamp,
        "updated_at": stamp,
    }
    try:
        with order_engine.engine.begin() as conn:
            columns = ", ".join(
                _q(conn, c)
                for c in (d.id_field, d.name_field, "description", "is_active", d.position_field, d.created_field, "updated_at")
            )
            conn.execute(
                sql_text(
                    f"INSERT INTO {_q(conn, d.table)} ({columns}) "
                    "VALUES (:id, :name, :description, :is_active, :position, :created_at, :updated_at)"
                ),
                row,
            )
    except IntegrityError as exc:
        logger.info("catalog.create.conflict collection=%s id=%s", d.name, new_id)
        raise CatalogConflictError(f"item '{new_id}' already exists in {d.name}") from exc
    except SQLAlchemyError as exc:
        logger.error("catalog.create failed collection=%s id=%s", d.name, new_id, exc_info=True)
        raise PositionStoreError(f"could not create item in {d.name}: {exc}") from exc
    logger.info("catalog.create collection=%s id=%s position=%s", d.name, new_id, position)
    return get_item(order_engine, d.name, new_id) or {}


def get_item(order_engine: OrderEngine, collection: CollectionRef, item_id: str) -> Optional[Dict[str, Any]]:
    d = get_descriptor(collection)
    try:
        with order_engine.engine.connect() as conn:
            row = conn.execute(
                sql_text(f"SELECT * FROM {_q(conn, d.table)} WHERE {_q(conn, d.id_field)} = :id"),
                {"id": item_id},
            ).mappings().fetchone()
    except SQLAlchemyError as exc:
        logger.error("catalog.get failed collection=%s id=%s", d.name, item_id, exc_info=True)
        raise PositionStoreError(f"could not read item from {d.name}: {exc}") from exc
    return dict(row) if row else None


def delete_item(order_engine: OrderEngine, collection: CollectionRef, item_id: str, *, compact: bool = False) -> bool:
    """Delete an item; survivors keep their positions unless ``compact`` is set.

    Returns False when no row matched. Compaction runs in its own transaction
    after the delete has committed.
    """
    d = get_descriptor(collection)
    try:
        with order_engine.engine.begin() as conn:
            deleted = conn.execute(
                sql_text(f"DELETE FROM {_q(conn, d.table)} WHERE {_q(conn, d.id_field)} = :id"),
                {"id": item_id},
            ).rowcount
    except SQLAlchemyError as exc:
        logger.error("catalog.delete failed collection=%s id=%s", d.name, item_id, exc_info=True)
        raise PositionStoreError(f"could not delete item from {d.name}: {exc}") from exc
    if not deleted:
        return False
    logger.info("catalog.delete collection=%s id=%s compact=%s", d.name, item_id, compact)
    if compact:
        result = order_engine.compact_positions(d.name)
        if not result.success:
            raise PositionStoreError(result.message)
    return True


def set_item_active(order_engine: OrderEngine, collection: CollectionRef, item_id: str, is_active: bool) -> bool:
    d = get_descriptor(collection)
    try:
        with order_engine.engine.begin() as conn:
            updated = conn.execute(
                sql_text(
                    f"UPDATE {_q(conn, d.table)} SET is_active = :active, updated_at = :now "
                    f"WHERE {_q(conn, d.id_field)} = :id"
                ),
                {"active": bool(is_active), "now": _now_iso(), "id": item_id},
            ).rowcount
    except SQLAlchemyError as exc:
        logger.error("catalog.set_active failed collection=%s id=%s", d.name, item_id, exc_info=True)
        raise PositionStoreError(f"could not update item in {d.name}: {exc}") from exc
    return bool(updated)


__all__ = ["create_item", "get_item", "delete_item", "set_item_active"]
