"""Shared FastAPI dependencies for collection-scoped routes."""

from __future__ import annotations

from fastapi import Request

from tourism_admin.logic.order_client import CollectionOrderClient, order_client_for
from tourism_admin.logic.order_engine import OrderEngine
from tourism_admin.logic.problem_factory import problem_exception
from tourism_admin.models.collections import CollectionDescriptor, UnknownCollectionError, get_descriptor


def get_order_engine(request: Request) -> OrderEngine:
    return request.app.state.order_engine


def resolve_collection(collection: str) -> CollectionDescriptor:
    """Translate the ``{collection}`` path segment, answering 404 when unknown."""
    try:
        return get_descriptor(collection)
    except UnknownCollectionError:
        raise problem_exception("COLLECTION_UNKNOWN", f"Unknown collection '{collection}'") from None


def get_order_client(request: Request, collection: str) -> CollectionOrderClient:
    descriptor = resolve_collection(collection)
    return order_client_for(get_order_engine(request), descriptor.name)


__all__ = ["get_order_engine", "resolve_collection", "get_order_client"]
