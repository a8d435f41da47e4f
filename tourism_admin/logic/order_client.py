"""Per-collection facade over ``OrderEngine``."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Tuple

from tourism_admin.logic.order_engine import CollectionRef, OrderEngine
from tourism_admin.models.collections import CollectionDescriptor, get_descriptor
from tourism_admin.models.ordering import OrderStats, OrderUpdateResult


class CollectionOrderClient:
    """Engine operations with the collection fixed at construction."""

    def __init__(self, order_engine: OrderEngine, collection: CollectionRef) -> None:
        self._engine = order_engine
        self._descriptor = get_descriptor(collection)

    @property
    def descriptor(self) -> CollectionDescriptor:
        return self._descriptor

    def get_ordered_items(self) -> List[Dict[str, Any]]:
        return self._engine.get_ordered_items(self._descriptor.name)

    def get_next_position(self) -> int:
        return self._engine.get_next_position(self._descriptor.name)

    def swap_position(self, item_id: str, new_position: Any) -> OrderUpdateResult:
        return self._engine.swap_position(self._descriptor.name, item_id, new_position)

    def batch_move(self, moves: Iterable[Tuple[str, Any]]) -> OrderUpdateResult:
        return self._engine.batch_move(self._descriptor.name, moves)

    def compact_positions(self) -> OrderUpdateResult:
        return self._engine.compact_positions(self._descriptor.name)

    def reorder_table(self) -> OrderUpdateResult:
        return self._engine.reorder_table(self._descriptor.name)

    def validate_no_duplicates(self) -> bool:
        return self._engine.validate_no_duplicates(self._descriptor.name)

    def get_order_stats(self) -> OrderStats:
        return self._engine.get_order_stats(self._descriptor.name)


def order_client_for(order_engine: OrderEngine, collection: CollectionRef) -> CollectionOrderClient:
    return CollectionOrderClient(order_engine, collection)


__all__ = ["CollectionOrderClient", "order_client_for"]
