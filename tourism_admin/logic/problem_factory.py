"""Centralised construction of problem+json payloads.

Builds RFC7807 dicts carrying a stable ``code`` so route modules do not embed
status numbers or titles. The ``message`` field is meant to be shown to the
admin verbatim.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
import logging

from fastapi import HTTPException

from tourism_admin.http.error_mapping import DEFAULT_ERROR, ERROR_MAP
from tourism_admin.models.ordering import OrderUpdateResult


logger = logging.getLogger(__name__)


def problem(code: str, detail: str, **extra: Any) -> Dict[str, object]:
    mapping = ERROR_MAP.get(code, DEFAULT_ERROR)
    body: Dict[str, object] = {
        "title": mapping["title"],
        "status": mapping["status"],
        "detail": detail,
        "message": detail,
        "code": code,
    }
    body.update({k: v for k, v in extra.items() if v is not None})
    logger.info("error_handler.handle code=%s status=%s", code, mapping["status"])
    return body


def problem_exception(code: str, detail: str, **extra: Any) -> HTTPException:
    body = problem(code, detail, **extra)
    return HTTPException(status_code=int(body["status"]), detail=body)


def problem_from_result(result: OrderUpdateResult, *, item_id: Optional[str] = None) -> HTTPException:
    """Turn a failed ``OrderUpdateResult`` into an HTTPException carrying problem+json."""
    return problem_exception(
        result.code or "STORE_ERROR",
        result.message,
        affected_items=result.affected_items,
        failed_index=result.failed_index,
        item_id=item_id,
    )


__all__ = ["problem", "problem_exception", "problem_from_result"]
