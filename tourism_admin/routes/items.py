"""Catalog item endpoints that interact with ordering.

- POST   /collections/{collection}/items              create at the tail
- DELETE /collections/{collection}/items/{item_id}    delete, optional compaction
- PATCH  /collections/{collection}/items/{item_id}/active
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from tourism_admin.logic.errors import CatalogConflictError, CatalogValidationError
from tourism_admin.logic.order_engine import OrderEngine
from tourism_admin.logic.problem_factory import problem_exception
from tourism_admin.logic.repository_catalog import create_item, delete_item, set_item_active
from tourism_admin.models.catalog import ItemActiveUpdate, ItemCreate
from tourism_admin.models.collections import CollectionDescriptor
from tourism_admin.routes.dependencies import get_order_engine, resolve_collection

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/collections/{collection}/items", status_code=201, tags=["Catalog"])
def create_collection_item(
    body: ItemCreate,
    descriptor: CollectionDescriptor = Depends(resolve_collection),
    order_engine: OrderEngine = Depends(get_order_engine),
) -> dict:
    try:
        return create_item(
            order_engine,
            descriptor.name,
            body.name,
            item_id=body.id,
            description=body.description,
            is_active=body.is_active,
        )
    except CatalogValidationError as exc:
        raise problem_exception("CATALOG_INVALID", str(exc)) from None
    except CatalogConflictError as exc:
        raise problem_exception("CATALOG_CONFLICT", str(exc)) from None


@router.delete("/collections/{collection}/items/{item_id}", status_code=204, tags=["Catalog"])
def delete_collection_item(
    item_id: str,
    compact: bool = False,
    descriptor: CollectionDescriptor = Depends(resolve_collection),
    order_engine: OrderEngine = Depends(get_order_engine),
) -> Response:
    if not delete_item(order_engine, descriptor.name, item_id, compact=compact):
        raise problem_exception("ITEM_NOT_FOUND", f"item '{item_id}' not found in {descriptor.name}")
    return Response(status_code=204)


@router.patch("/collections/{collection}/items/{item_id}/active", tags=["Catalog"])
def update_item_active(
    item_id: str,
    body: ItemActiveUpdate,
    descriptor: CollectionDescriptor = Depends(resolve_collection),
    order_engine: OrderEngine = Depends(get_order_engine),
) -> dict:
    if not set_item_active(order_engine, descriptor.name, item_id, body.is_active):
        raise problem_exception("ITEM_NOT_FOUND", f"item '{item_id}' not found in {descriptor.name}")
    return {"id": item_id, "is_active": body.is_active}


__all__ = ["router"]
