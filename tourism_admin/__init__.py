"""FastAPI application package for the tourism admin ordering service.

Exposes the application factory. Ordering logic lives in
`tourism_admin/logic/`, route handlers in `tourism_admin/routes/`.
"""

from __future__ import annotations

from tourism_admin.main import create_app

__all__ = ["create_app"]
