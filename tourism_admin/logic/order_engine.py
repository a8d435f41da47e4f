"""Positional ordering engine for catalog collections.

Keeps ``order_position`` unique and >= 1 within each collection and restores
density (``1..N``) through compaction. Every multi-row write runs in a single
transaction; the engine holds no in-process locks and leaves isolation to the
database. Write operations report failures through ``OrderUpdateResult``;
read operations raise ``PositionStoreError``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from tourism_admin.logic.errors import ItemNotFoundError, PositionStoreError
from tourism_admin.logic.position_store import (
    compact_order_positions,
    find_duplicate_positions,
    get_next_order_position,
    list_ordered_rows,
    position_aggregates,
    reorder_positions,
    swap_order_position,
)
from tourism_admin.models.collections import Collection, get_descriptor
from tourism_admin.models.ordering import DisplacedItem, OrderStats, OrderUpdateResult

logger = logging.getLogger(__name__)

CollectionRef = Union[Collection, str]
DEFAULT_BATCH_MAX_MOVES = 500
# Upper bound of a 32-bit INTEGER column (PostgreSQL INTEGER, SQLite fits it)
MAX_POSITION = 2**31 - 1


def coerce_position(value: Any) -> Optional[int]:
    """Return ``value`` as a positive int, or None when it is not one.

    Accepts ints, integral floats and digit strings; booleans are rejected,
    as are values above ``MAX_POSITION``.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        candidate = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        candidate = int(value)
    elif isinstance(value, str):
        try:
            candidate = int(value.strip())
        except ValueError:
            return None
    else:
        return None
    return candidate if 1 <= candidate <= MAX_POSITION else None


class OrderEngine:
    """Collection-scoped ordering operations bound to one SQLAlchemy engine.

    Build one at process start and hand it to whoever needs it; it carries no
    mutable state beyond its configuration.
    """

    def __init__(self, engine: Engine, *, batch_max_moves: int = DEFAULT_BATCH_MAX_MOVES) -> None:
        self._engine = engine
        self._batch_max_moves = int(batch_max_moves)

    @property
    def engine(self) -> Engine:
        return self._engine

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_next_position(self, collection: CollectionRef) -> int:
        d = get_descriptor(collection)
        try:
            with self._engine.connect() as conn:
                return get_next_order_position(conn, d.table, d.position_field)
        except SQLAlchemyError as exc:
            logger.error("order.next_position failed collection=%s", d.name, exc_info=True)
            raise PositionStoreError(f"could not read next position for {d.name}: {exc}") from exc

    def get_ordered_items(self, collection: CollectionRef) -> List[Dict[str, Any]]:
        d = get_descriptor(collection)
        try:
            with self._engine.connect() as conn:
                return list_ordered_rows(
                    conn,
                    d.table,
                    d.position_field,
                    id_column=d.id_field,
                    created_column=d.created_field,
                )
        except SQLAlchemyError as exc:
            logger.error("order.list failed collection=%s", d.name, exc_info=True)
            raise PositionStoreError(f"could not list {d.name}: {exc}") from exc

    def validate_no_duplicates(self, collection: CollectionRef) -> bool:
        d = get_descriptor(collection)
        try:
            with self._engine.connect() as conn:
                duplicates = find_duplicate_positions(conn, d.table, d.position_field)
        except SQLAlchemyError as exc:
            logger.error("order.validate failed collection=%s", d.name, exc_info=True)
            raise PositionStoreError(f"could not validate {d.name}: {exc}") from exc
        if duplicates:
            logger.warning("order.validate duplicates collection=%s groups=%s", d.name, duplicates)
            return False
        return True

    def get_order_stats(self, collection: CollectionRef) -> OrderStats:
        d = get_descriptor(collection)
        try:
            with self._engine.connect() as conn:
                total, min_pos, max_pos = position_aggregates(conn, d.table, d.position_field)
                duplicates = find_duplicate_positions(conn, d.table, d.position_field)
        except SQLAlchemyError as exc:
            logger.error("order.stats failed collection=%s", d.name, exc_info=True)
            raise PositionStoreError(f"could not compute stats for {d.name}: {exc}") from exc
        has_duplicates = bool(duplicates)
        is_continuous = total == 0 or (not has_duplicates and min_pos == 1 and max_pos == total)
        return OrderStats(
            total=total,
            min_position=min_pos,
            max_position=max_pos,
            has_duplicates=has_duplicates,
            is_continuous=is_continuous,
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def swap_position(self, collection: CollectionRef, item_id: str, new_position: Any) -> OrderUpdateResult:
        """Move one item to ``new_position``, displacing whoever holds it.

        Targets beyond the collection size are accepted as-is and leave a sparse tail;
        moving an item onto its own position is a successful no-op.
        """
        d = get_descriptor(collection)
        target = coerce_position(new_position)
        if target is None:
            logger.info("order.swap.rejected collection=%s id=%s position=%r", d.name, item_id, new_position)
            return OrderUpdateResult(
                success=False,
                code="POSITION_INVALID",
                message=f"Position must be an integer between 1 and {MAX_POSITION}, got {new_position!r}",
            )
        try:
            with self._engine.begin() as conn:
                outcome = swap_order_position(
                    conn,
                    d.table,
                    str(item_id),
                    target,
                    d.id_field,
                    d.position_field,
                    created_column=d.created_field,
                    name_column=d.name_field,
                )
        except ItemNotFoundError as exc:
            logger.info("order.swap.not_found collection=%s id=%s", d.name, item_id)
            return OrderUpdateResult(success=False, code="ITEM_NOT_FOUND", message=str(exc))
        except SQLAlchemyError as exc:
            logger.error("order.swap.failed collection=%s id=%s position=%s", d.name, item_id, target, exc_info=True)
            return OrderUpdateResult(
                success=False,
                code="STORE_ERROR",
                message=f"Could not update order: {exc}",
            )

        if not outcome.changed:
            return OrderUpdateResult(
                success=True,
                message="Item already at requested position",
                affected_items=0,
                new_position=target,
            )
        displaced = [DisplacedItem(id=rid, name=name, position=slot) for rid, name, slot in outcome.displaced]
        message = "Order updated"
        if displaced:
            moved = ", ".join(f"{x.name or x.id} moved to position {x.position}" for x in displaced)
            message = f"Order updated; {moved} to make room"
        logger.info(
            "order.swap.applied collection=%s id=%s from=%s to=%s displaced=%s",
            d.name,
            item_id,
            outcome.previous_position,
            target,
            len(displaced),
        )
        return OrderUpdateResult(
            success=True,
            message=message,
            affected_items=1 + len(displaced),
            new_position=target,
            displaced=displaced,
        )

    def compact_positions(self, collection: CollectionRef) -> OrderUpdateResult:
        d = get_descriptor(collection)
        try:
            with self._engine.begin() as conn:
                outcome = compact_order_positions(
                    conn,
                    d.table,
                    d.position_field,
                    id_column=d.id_field,
                    created_column=d.created_field,
                )
        except SQLAlchemyError as exc:
            logger.error("order.compact.failed collection=%s", d.name, exc_info=True)
            return OrderUpdateResult(success=False, code="STORE_ERROR", message=f"Could not compact positions: {exc}")
        return OrderUpdateResult(
            success=True,
            message="Positions compacted",
            affected_items=outcome.changed,
        )

    def reorder_table(self, collection: CollectionRef) -> OrderUpdateResult:
        d = get_descriptor(collection)
        try:
            with self._engine.begin() as conn:
                outcome = reorder_positions(
                    conn,
                    d.table,
                    d.id_field,
                    d.position_field,
                    created_column=d.created_field,
                )
        except SQLAlchemyError as exc:
            logger.error("order.reorder.failed collection=%s", d.name, exc_info=True)
            return OrderUpdateResult(success=False, code="STORE_ERROR", message=f"Could not reorder table: {exc}")
        message = "Table reordered"
        if outcome.duplicate_groups:
            message = f"Table reordered; repaired {len(outcome.duplicate_groups)} duplicated position(s)"
        return OrderUpdateResult(success=True, message=message, affected_items=outcome.changed)

    def batch_move(self, collection: CollectionRef, moves: Iterable[Tuple[str, Any]]) -> OrderUpdateResult:
        """Apply moves one by one, in order, each in its own transaction.

        Stops at the first failing move. Moves applied before it are kept and
        counted in ``affected_items``; ``failed_index`` is the 0-based index of
        the failing move.
        """
        d = get_descriptor(collection)
        planned = list(moves)
        if len(planned) > self._batch_max_moves:
            return OrderUpdateResult(
                success=False,
                code="BATCH_TOO_LARGE",
                message=f"Batch of {len(planned)} moves exceeds the limit of {self._batch_max_moves}",
                affected_items=0,
            )
        logger.info("order.batch.start collection=%s moves=%s", d.name, len(planned))
        applied = 0
        for index, (item_id, position) in enumerate(planned):
            result = self.swap_position(d.name, item_id, position)
            if not result.success:
                logger.warning(
                    "order.batch.stopped collection=%s applied=%s failed_index=%s code=%s",
                    d.name,
                    applied,
                    index,
                    result.code,
                )
                return OrderUpdateResult(
                    success=False,
                    code="BATCH_PARTIAL",
                    message=f"Batch move stopped at move {index + 1} of {len(planned)}: {result.message}",
                    affected_items=applied,
                    failed_index=index,
                )
            applied += 1
        return OrderUpdateResult(
            success=True,
            message=f"{applied} items reordered",
            affected_items=applied,
        )


__all__ = ["OrderEngine", "coerce_position", "DEFAULT_BATCH_MAX_MOVES", "MAX_POSITION"]
