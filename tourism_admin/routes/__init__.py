"""APIRouter registration for the tourism admin service."""

from __future__ import annotations

from fastapi import APIRouter

from tourism_admin.routes.items import router as items_router
from tourism_admin.routes.ordering import router as ordering_router

api_router = APIRouter()
api_router.include_router(ordering_router)
api_router.include_router(items_router)

__all__ = ["api_router"]
