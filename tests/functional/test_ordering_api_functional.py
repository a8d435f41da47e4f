"""HTTP contract tests for the ordering and catalog endpoints.

Runs the FastAPI app in-process through TestClient against the shared SQLite
database; failures must come back as application/problem+json.
"""

from __future__ import annotations

from tourism_admin.http.problem import PROBLEM_MEDIA_TYPE

BASE = "/api/v1/collections"


def _is_problem(resp) -> bool:
    return resp.headers.get("content-type", "").startswith(PROBLEM_MEDIA_TYPE)


def test_list_collections(client) -> None:
    resp = client.get(BASE)
    assert resp.status_code == 200
    names = [c["name"] for c in resp.json()["collections"]]
    assert "excursions" in names and "service_categories" in names


def test_items_are_listed_in_display_order(client, seed) -> None:
    seed("excursions", [("b", 2), ("a", 1), ("c", 3)])
    resp = client.get(f"{BASE}/excursions/items")
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 3
    assert [i["id"] for i in body["items"]] == ["a", "b", "c"]
    assert resp.headers.get("X-Request-Id")


def test_request_id_is_echoed(client) -> None:
    resp = client.get(BASE, headers={"X-Request-Id": "req-123"})
    assert resp.headers["X-Request-Id"] == "req-123"


def test_next_position(client, seed) -> None:
    seed("services", [("a", 1), ("b", 2)])
    resp = client.get(f"{BASE}/services/next-position")
    assert resp.status_code == 200
    assert resp.json() == {"collection": "services", "next_position": 3}


def test_swap_position_reports_displaced_neighbour(client, seed, positions) -> None:
    seed("excursions", [("a", 1), ("b", 2), ("c", 3)])
    resp = client.patch(f"{BASE}/excursions/items/c/position", json={"position": 1})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["new_position"] == 1
    assert body["displaced"] == [{"id": "a", "name": "Item a", "position": 3}]
    assert positions("excursions") == {"c": 1, "b": 2, "a": 3}


def test_swap_position_rejects_non_positive(client, seed, positions) -> None:
    seed("excursions", [("a", 1)])
    resp = client.patch(f"{BASE}/excursions/items/a/position", json={"position": 0})
    assert resp.status_code == 422
    assert _is_problem(resp)
    assert resp.json()["code"] == "POSITION_INVALID"
    assert positions("excursions") == {"a": 1}


def test_swap_position_rejects_target_beyond_integer_column(client, seed, positions) -> None:
    seed("excursions", [("a", 1), ("b", 2)])
    resp = client.patch(f"{BASE}/excursions/items/a/position", json={"position": 2**63})
    assert resp.status_code == 422
    assert _is_problem(resp)
    assert resp.json()["code"] == "POSITION_INVALID"
    assert positions("excursions") == {"a": 1, "b": 2}


def test_swap_position_rejects_non_numeric_body(client, seed) -> None:
    seed("excursions", [("a", 1)])
    resp = client.patch(f"{BASE}/excursions/items/a/position", json={"position": "first"})
    assert resp.status_code == 422
    assert _is_problem(resp)
    assert resp.json()["code"] == "REQUEST_INVALID"


def test_swap_position_unknown_item(client) -> None:
    resp = client.patch(f"{BASE}/excursions/items/ghost/position", json={"position": 2})
    assert resp.status_code == 404
    body = resp.json()
    assert body["code"] == "ITEM_NOT_FOUND"
    assert body["item_id"] == "ghost"


def test_unknown_collection_is_404(client) -> None:
    resp = client.get(f"{BASE}/hotels/items")
    assert resp.status_code == 404
    assert _is_problem(resp)
    assert resp.json()["code"] == "COLLECTION_UNKNOWN"


def test_batch_move_partial_failure(client, seed, positions) -> None:
    seed("restaurants", [("a", 1), ("b", 2), ("c", 3)])
    resp = client.post(
        f"{BASE}/restaurants/batch-move",
        json={"moves": [{"id": "a", "position": 4}, {"id": "ghost", "position": 1}, {"id": "c", "position": 1}]},
    )
    assert resp.status_code == 409
    body = resp.json()
    assert body["code"] == "BATCH_PARTIAL"
    assert body["affected_items"] == 1
    assert body["failed_index"] == 1
    assert positions("restaurants") == {"a": 4, "b": 2, "c": 3}


def test_batch_move_success(client, seed, positions) -> None:
    seed("restaurants", [("a", 1), ("b", 2), ("c", 3)])
    resp = client.post(
        f"{BASE}/restaurants/batch-move",
        json={"moves": [{"id": "c", "position": 1}, {"id": "b", "position": 2}]},
    )
    assert resp.status_code == 200
    assert resp.json()["affected_items"] == 2
    assert positions("restaurants") == {"c": 1, "b": 2, "a": 3}


def test_maintenance_endpoints(client, seed, positions) -> None:
    seed("destinations", [("a", 2), ("b", 2), ("c", 7)])
    assert client.get(f"{BASE}/destinations/validate").json() == {"collection": "destinations", "valid": False}

    stats = client.get(f"{BASE}/destinations/stats").json()
    assert stats == {
        "total": 3,
        "min_position": 2,
        "max_position": 7,
        "has_duplicates": True,
        "is_continuous": False,
    }

    resp = client.post(f"{BASE}/destinations/reorder")
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert positions("destinations") == {"a": 1, "b": 2, "c": 3}
    assert client.get(f"{BASE}/destinations/validate").json()["valid"] is True

    client.patch(f"{BASE}/destinations/items/a/position", json={"position": 10})
    resp = client.post(f"{BASE}/destinations/compact")
    assert resp.status_code == 200
    assert positions("destinations") == {"b": 1, "c": 2, "a": 3}
    assert client.get(f"{BASE}/destinations/stats").json()["is_continuous"] is True


def test_create_and_delete_items(client, seed, positions) -> None:
    seed("supermarkets", [("a", 1), ("b", 2)])
    resp = client.post(f"{BASE}/supermarkets/items", json={"name": "Corner Shop", "id": "corner"})
    assert resp.status_code == 201
    assert resp.json()["order_position"] == 3

    resp = client.post(f"{BASE}/supermarkets/items", json={"name": "Other Shop", "id": "corner"})
    assert resp.status_code == 409
    assert _is_problem(resp)
    assert resp.json()["code"] == "CATALOG_CONFLICT"

    resp = client.post(f"{BASE}/supermarkets/items", json={"name": "  "})
    assert resp.status_code == 422
    assert resp.json()["code"] == "CATALOG_INVALID"

    resp = client.delete(f"{BASE}/supermarkets/items/a", params={"compact": "true"})
    assert resp.status_code == 204
    assert positions("supermarkets") == {"b": 1, "corner": 2}

    resp = client.delete(f"{BASE}/supermarkets/items/a")
    assert resp.status_code == 404
    assert resp.json()["code"] == "ITEM_NOT_FOUND"


def test_toggle_active(client, seed) -> None:
    seed("services", [("a", 1)])
    resp = client.patch(f"{BASE}/services/items/a/active", json={"is_active": False})
    assert resp.status_code == 200
    assert resp.json() == {"id": "a", "is_active": False}
    resp = client.patch(f"{BASE}/services/items/zzz/active", json={"is_active": True})
    assert resp.status_code == 404


def test_health(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["db"] is True
