"""Functional tests for catalog item creation, deletion and the active toggle."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine

from tourism_admin.logic.errors import CatalogConflictError, CatalogValidationError, PositionStoreError
from tourism_admin.logic.order_engine import OrderEngine
from tourism_admin.logic.repository_catalog import create_item, delete_item, get_item, set_item_active


def test_create_appends_at_next_position(order_engine, seed) -> None:
    seed("excursions", [("a", 1), ("b", 2)])
    row = create_item(order_engine, "excursions", "  Sunset Cruise ", description="Boat trip")
    assert row["order_position"] == 3
    assert row["name"] == "Sunset Cruise"
    assert row["description"] == "Boat trip"
    assert bool(row["is_active"]) is True
    assert row["id"].startswith("excursions-sunset-cruise-")


def test_create_keeps_explicit_id_and_inactive_flag(order_engine) -> None:
    row = create_item(order_engine, "services", "Taxi", item_id="svc-taxi", is_active=False)
    assert row["id"] == "svc-taxi"
    assert row["order_position"] == 1
    assert bool(row["is_active"]) is False


def test_create_with_existing_id_is_a_conflict(order_engine, seed, positions) -> None:
    seed("excursions", [("dup", 1)])
    with pytest.raises(CatalogConflictError):
        create_item(order_engine, "excursions", "Second", item_id="dup")
    assert positions("excursions") == {"dup": 1}
    assert get_item(order_engine, "excursions", "dup")["name"] == "Item dup"


@pytest.mark.parametrize("name", ["", "   "])
def test_create_requires_name(order_engine, name) -> None:
    with pytest.raises(CatalogValidationError):
        create_item(order_engine, "services", name)


def test_delete_leaves_gap_without_compaction(order_engine, seed, positions) -> None:
    seed("restaurants", [("a", 1), ("b", 2), ("c", 3)])
    assert delete_item(order_engine, "restaurants", "b") is True
    assert positions("restaurants") == {"a": 1, "c": 3}
    assert order_engine.get_order_stats("restaurants").is_continuous is False


def test_delete_with_compaction_closes_gap(order_engine, seed, positions) -> None:
    seed("restaurants", [("a", 1), ("b", 2), ("c", 3)])
    assert delete_item(order_engine, "restaurants", "a", compact=True) is True
    assert positions("restaurants") == {"b": 1, "c": 2}


def test_delete_missing_item_returns_false(order_engine, seed, positions) -> None:
    seed("restaurants", [("a", 1)])
    assert delete_item(order_engine, "restaurants", "nope", compact=True) is False
    assert positions("restaurants") == {"a": 1}


def test_toggle_active_keeps_position(order_engine, seed, positions) -> None:
    seed("supermarkets", [("a", 1), ("b", 2)])
    assert set_item_active(order_engine, "supermarkets", "a", False) is True
    row = get_item(order_engine, "supermarkets", "a")
    assert row is not None
    assert bool(row["is_active"]) is False
    assert positions("supermarkets") == {"a": 1, "b": 2}
    assert set_item_active(order_engine, "supermarkets", "zzz", True) is False


def test_writes_against_missing_tables_raise_store_error(tmp_path) -> None:
    bare = create_engine(f"sqlite:///{tmp_path / 'bare.db'}")
    try:
        broken = OrderEngine(bare)
        with pytest.raises(PositionStoreError):
            delete_item(broken, "excursions", "a")
        with pytest.raises(PositionStoreError):
            set_item_active(broken, "excursions", "a", False)
    finally:
        bare.dispose()
