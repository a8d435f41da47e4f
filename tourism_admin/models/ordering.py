"""Result and request types for the ordering engine."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class DisplacedItem(BaseModel):
    id: str
    name: Optional[str] = None
    position: int


class OrderUpdateResult(BaseModel):
    success: bool
    message: str
    code: Optional[str] = None
    affected_items: Optional[int] = None
    new_position: Optional[int] = None
    failed_index: Optional[int] = None
    displaced: List[DisplacedItem] = Field(default_factory=list)


class OrderStats(BaseModel):
    total: int
    min_position: Optional[int] = None
    max_position: Optional[int] = None
    has_duplicates: bool
    is_continuous: bool


class PositionUpdate(BaseModel):
    position: int


class MoveRequest(BaseModel):
    id: str
    position: int


class BatchMoveRequest(BaseModel):
    moves: List[MoveRequest]


__all__ = [
    "DisplacedItem",
    "OrderUpdateResult",
    "OrderStats",
    "PositionUpdate",
    "MoveRequest",
    "BatchMoveRequest",
]
