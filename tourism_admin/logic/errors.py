"""Exceptions raised by the ordering and catalog logic."""

from __future__ import annotations


class PositionStoreError(RuntimeError):
    """Store access failed (connectivity, SQL error)."""


class ItemNotFoundError(LookupError):
    def __init__(self, table: str, item_id: str) -> None:
        super().__init__(f"item {item_id!r} not found in {table}")
        self.table = table
        self.item_id = item_id


class CatalogValidationError(ValueError):
    """Caller-supplied catalog attributes are invalid."""


class CatalogConflictError(ValueError):
    """The item collides with an existing row (duplicate id)."""


__all__ = ["PositionStoreError", "ItemNotFoundError", "CatalogValidationError", "CatalogConflictError"]
