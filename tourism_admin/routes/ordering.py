"""Ordering endpoints for catalog collections.

Implements:
- GET   /collections
- GET   /collections/{collection}/items
- GET   /collections/{collection}/next-position
- PATCH /collections/{collection}/items/{item_id}/position
- POST  /collections/{collection}/batch-move
- POST  /collections/{collection}/compact
- POST  /collections/{collection}/reorder
- GET   /collections/{collection}/validate
- GET   /collections/{collection}/stats

Callers should re-fetch the ordered list after a successful move: a move can
relocate a second row to make room.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from tourism_admin.logic.order_client import CollectionOrderClient
from tourism_admin.logic.problem_factory import problem_from_result
from tourism_admin.models.collections import all_descriptors
from tourism_admin.models.ordering import BatchMoveRequest, OrderStats, OrderUpdateResult, PositionUpdate
from tourism_admin.routes.dependencies import get_order_client

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/collections", summary="List orderable collections", tags=["Ordering"])
def list_collections() -> dict:
    return {
        "collections": [
            {"name": d.name, "table": d.table, "position_field": d.position_field}
            for d in all_descriptors()
        ]
    }


@router.get("/collections/{collection}/items", summary="List items in display order", tags=["Ordering"])
def get_ordered_items(client: CollectionOrderClient = Depends(get_order_client)) -> dict:
    items = client.get_ordered_items()
    return {"collection": client.descriptor.name, "items": items, "count": len(items)}


@router.get("/collections/{collection}/next-position", tags=["Ordering"])
def get_next_position(client: CollectionOrderClient = Depends(get_order_client)) -> dict:
    return {"collection": client.descriptor.name, "next_position": client.get_next_position()}


@router.patch(
    "/collections/{collection}/items/{item_id}/position",
    summary="Move an item to a position",
    response_model=OrderUpdateResult,
    tags=["Ordering"],
)
def swap_position(
    item_id: str,
    body: PositionUpdate,
    client: CollectionOrderClient = Depends(get_order_client),
) -> OrderUpdateResult:
    result = client.swap_position(item_id, body.position)
    if not result.success:
        raise problem_from_result(result, item_id=item_id)
    return result


@router.post(
    "/collections/{collection}/batch-move",
    summary="Apply several moves in order",
    response_model=OrderUpdateResult,
    tags=["Ordering"],
)
def batch_move(
    body: BatchMoveRequest,
    client: CollectionOrderClient = Depends(get_order_client),
) -> OrderUpdateResult:
    result = client.batch_move([(m.id, m.position) for m in body.moves])
    if not result.success:
        raise problem_from_result(result)
    return result


@router.post("/collections/{collection}/compact", response_model=OrderUpdateResult, tags=["Ordering"])
def compact_positions(client: CollectionOrderClient = Depends(get_order_client)) -> OrderUpdateResult:
    result = client.compact_positions()
    if not result.success:
        raise problem_from_result(result)
    return result


@router.post("/collections/{collection}/reorder", response_model=OrderUpdateResult, tags=["Ordering"])
def reorder_table(client: CollectionOrderClient = Depends(get_order_client)) -> OrderUpdateResult:
    result = client.reorder_table()
    if not result.success:
        raise problem_from_result(result)
    return result


@router.get("/collections/{collection}/validate", tags=["Ordering"])
def validate_no_duplicates(client: CollectionOrderClient = Depends(get_order_client)) -> dict:
    return {"collection": client.descriptor.name, "valid": client.validate_no_duplicates()}


@router.get("/collections/{collection}/stats", response_model=OrderStats, tags=["Ordering"])
def get_order_stats(client: CollectionOrderClient = Depends(get_order_client)) -> OrderStats:
    return client.get_order_stats()


__all__ = ["router"]
