"""Request bodies for catalog item endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class ItemCreate(BaseModel):
    name: str
    id: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class ItemActiveUpdate(BaseModel):
    is_active: bool


__all__ = ["ItemCreate", "ItemActiveUpdate"]
