"""Central error mapping for ordering and catalog failures.

Single source of truth for mapping failure codes to problem+json titles and
HTTP statuses. Route modules must go through ``logic/problem_factory`` instead
of hardcoding strings or numbers.
"""

from __future__ import annotations

ERROR_MAP = {
    "COLLECTION_UNKNOWN": {"status": 404, "title": "Not Found"},
    "ITEM_NOT_FOUND": {"status": 404, "title": "Not Found"},
    "POSITION_INVALID": {"status": 422, "title": "Invalid Request"},
    "BATCH_TOO_LARGE": {"status": 422, "title": "Invalid Request"},
    "CATALOG_INVALID": {"status": 422, "title": "Invalid Request"},
    "BATCH_PARTIAL": {"status": 409, "title": "Conflict"},
    "CATALOG_CONFLICT": {"status": 409, "title": "Conflict"},
    "STORE_ERROR": {"status": 503, "title": "Service Unavailable"},
}

DEFAULT_ERROR = {"status": 500, "title": "Internal Server Error"}

__all__ = ["ERROR_MAP", "DEFAULT_ERROR"]
