"""Position store procedures.

In-process implementations of the four ordering procedures
(``get_next_order_position``, ``swap_order_position``,
``compact_order_positions``, ``reorder_positions``) plus the read helpers the
engine needs. Every function takes an open SQLAlchemy ``Connection`` and the
table/column names to operate on, so one implementation serves every
collection. Mutating procedures expect to be called inside a transaction
(``engine.begin()``); they never commit themselves.

Identifiers come from the collection registry and are quoted through the
dialect's identifier preparer; all values are bound parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import logging

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from tourism_admin.logic.errors import ItemNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class SwapOutcome:
    record_id: str
    previous_position: Optional[int]
    new_position: int
    # (id, name, new position) for every row pushed out of the target slot
    displaced: List[Tuple[str, Optional[str], int]] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.previous_position != self.new_position or bool(self.displaced)


@dataclass
class RenumberOutcome:
    total: int
    changed: int
    duplicate_groups: Dict[int, int] = field(default_factory=dict)


def _q(conn: Connection, ident: str) -> str:
    return conn.dialect.identifier_preparer.quote(ident)


def _lock_clause(conn: Connection) -> str:
    # SQLite serializes writers at the database level and has no row locks
    return "" if conn.dialect.name == "sqlite" else " FOR UPDATE"


def _canonical_order(conn: Connection, order_column: str, created_column: str, id_column: str) -> str:
    """ORDER BY for the canonical sort: position (NULLs last), created_at, id."""
    pos = _q(conn, order_column)
    return (
        f"CASE WHEN {pos} IS NULL THEN 1 ELSE 0 END ASC, {pos} ASC, "
        f"{_q(conn, created_column)} ASC, {_q(conn, id_column)} ASC"
    )


def _as_position(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def get_next_order_position(conn: Connection, table: str, order_column: str) -> int:
    """Return ``count(rows) + 1`` for the table. Advisory only; nothing is reserved."""
    row = conn.execute(sql_text(f"SELECT COUNT(*) FROM {_q(conn, table)}")).fetchone()
    count = int(row[0]) if row and row[0] is not None else 0
    return count + 1


def list_ordered_rows(
    conn: Connection,
    table: str,
    order_column: str,
    *,
    id_column: str = "id",
    created_column: str = "created_at",
) -> List[Dict[str, Any]]:
    result = conn.execute(
        sql_text(
            f"SELECT * FROM {_q(conn, table)} "
            f"ORDER BY {_canonical_order(conn, order_column, created_column, id_column)}"
        )
    )
    return [dict(r) for r in result.mappings().all()]


def find_duplicate_positions(conn: Connection, table: str, order_column: str) -> Dict[int, int]:
    """Return ``{position: row_count}`` for every position held by more than one row."""
    pos = _q(conn, order_column)
    rows = conn.execute(
        sql_text(
            f"SELECT {pos}, COUNT(*) FROM {_q(conn, table)} "
            f"WHERE {pos} IS NOT NULL GROUP BY {pos} HAVING COUNT(*) > 1 ORDER BY {pos} ASC"
        )
    ).fetchall()
    return {int(r[0]): int(r[1]) for r in rows}


def position_aggregates(conn: Connection, table: str, order_column: str) -> Tuple[int, Optional[int], Optional[int]]:
    """Return ``(total, min_position, max_position)``."""
    pos = _q(conn, order_column)
    row = conn.execute(
        sql_text(f"SELECT COUNT(*), MIN({pos}), MAX({pos}) FROM {_q(conn, table)}")
    ).fetchone()
    if not row:
        return 0, None, None
    return int(row[0] or 0), _as_position(row[1]), _as_position(row[2])


def swap_order_position(
    conn: Connection,
    table: str,
    record_id: str,
    new_position: int,
    id_column: str = "id",
    order_column: str = "order_position",
    *,
    created_column: str = "created_at",
    name_column: str = "name",
) -> SwapOutcome:
    """Move ``record_id`` to ``new_position`` and push colliding rows up.

    Any other row already holding ``new_position`` is reassigned to the first
    position above the target that no other row holds. The moved row's old
    slot counts as free. Displaced rows are handled in canonical order and each
    claimed slot is taken into account for the next one, so uniqueness holds
    at the target even when duplicates were already present.
    """
    tbl = _q(conn, table)
    idc = _q(conn, id_column)
    pos = _q(conn, order_column)
    rows = conn.execute(
        sql_text(
            f"SELECT {idc}, {pos}, {_q(conn, name_column)} FROM {tbl} "
            f"ORDER BY {_canonical_order(conn, order_column, created_column, id_column)}"
            f"{_lock_clause(conn)}"
        )
    ).fetchall()

    positions: Dict[str, Optional[int]] = {}
    names: Dict[str, Optional[str]] = {}
    ordered_ids: List[str] = []
    for r in rows:
        rid = str(r[0])
        ordered_ids.append(rid)
        positions[rid] = _as_position(r[1])
        names[rid] = str(r[2]) if r[2] is not None else None

    if record_id not in positions:
        raise ItemNotFoundError(table, record_id)

    previous = positions[record_id]
    colliding = [rid for rid in ordered_ids if rid != record_id and positions[rid] == new_position]
    outcome = SwapOutcome(record_id=record_id, previous_position=previous, new_position=new_position)
    if previous == new_position and not colliding:
        return outcome

    occupied = {p for rid, p in positions.items() if rid != record_id and p is not None}
    occupied.add(new_position)
    moves: List[Tuple[str, int]] = [(record_id, new_position)]
    for rid in colliding:
        slot = new_position + 1
        while slot in occupied:
            slot += 1
        occupied.add(slot)
        moves.append((rid, slot))
        outcome.displaced.append((rid, names.get(rid), slot))

    stmt = sql_text(f"UPDATE {tbl} SET {pos} = :pos WHERE {idc} = :id")
    for rid, slot in moves:
        conn.execute(stmt, {"pos": int(slot), "id": rid})

    logger.info(
        "position_store.swap table=%s id=%s from=%s to=%s displaced=%s",
        table,
        record_id,
        previous,
        new_position,
        [(rid, slot) for rid, _name, slot in outcome.displaced],
    )
    return outcome


def _renumber(conn: Connection, table: str, id_column: str, order_column: str, created_column: str) -> RenumberOutcome:
    tbl = _q(conn, table)
    idc = _q(conn, id_column)
    pos = _q(conn, order_column)
    rows = conn.execute(
        sql_text(
            f"SELECT {idc}, {pos} FROM {tbl} "
            f"ORDER BY {_canonical_order(conn, order_column, created_column, id_column)}"
            f"{_lock_clause(conn)}"
        )
    ).fetchall()
    stmt = sql_text(f"UPDATE {tbl} SET {pos} = :pos WHERE {idc} = :id")
    changed = 0
    for idx, r in enumerate(rows, start=1):
        if _as_position(r[1]) == idx:
            continue
        conn.execute(stmt, {"pos": idx, "id": str(r[0])})
        changed += 1
    return RenumberOutcome(total=len(rows), changed=changed)


def compact_order_positions(
    conn: Connection,
    table: str,
    order_column: str = "order_position",
    *,
    id_column: str = "id",
    created_column: str = "created_at",
) -> RenumberOutcome:
    """Renumber all rows to ``1..N`` in canonical order. Idempotent."""
    outcome = _renumber(conn, table, id_column, order_column, created_column)
    logger.info(
        "position_store.compact table=%s total=%s changed=%s",
        table,
        outcome.total,
        outcome.changed,
    )
    return outcome


def reorder_positions(
    conn: Connection,
    table: str,
    id_column: str = "id",
    order_column: str = "order_position",
    *,
    created_column: str = "created_at",
) -> RenumberOutcome:
    """Repair a table's ordering: record duplicate groups, then renumber ``1..N``."""
    duplicates = find_duplicate_positions(conn, table, order_column)
    outcome = _renumber(conn, table, id_column, order_column, created_column)
    outcome.duplicate_groups = duplicates
    if duplicates:
        logger.warning(
            "position_store.reorder repaired duplicates table=%s groups=%s",
            table,
            duplicates,
        )
    logger.info(
        "position_store.reorder table=%s total=%s changed=%s",
        table,
        outcome.total,
        outcome.changed,
    )
    return outcome


__all__ = [
    "SwapOutcome",
    "RenumberOutcome",
    "get_next_order_position",
    "list_ordered_rows",
    "find_duplicate_positions",
    "position_aggregates",
    "swap_order_position",
    "compact_order_positions",
    "reorder_positions",
]
