from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text as sql_text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tourism_admin.config import AppConfig, load_config
from tourism_admin.db.base import get_engine
from tourism_admin.db.migrations_runner import apply_migrations
from tourism_admin.http.problem import (
    handle_http_exception,
    handle_position_store_error,
    handle_request_validation_error,
    handle_unexpected_error,
    handle_unknown_collection,
)
from tourism_admin.http.request_id import RequestIdMiddleware
from tourism_admin.logging_setup import configure_logging
from tourism_admin.logic.errors import PositionStoreError
from tourism_admin.logic.order_engine import OrderEngine
from tourism_admin.middleware.cors import apply_cors
from tourism_admin.models.collections import UnknownCollectionError
from tourism_admin.routes import api_router

logger = logging.getLogger(__name__)


def _health_check(engine: Engine) -> Callable[[], dict]:
    def check() -> dict:
        try:
            with engine.connect() as conn:
                conn.execute(sql_text("SELECT 1"))
            return {"status": "ok", "db": True}
        except SQLAlchemyError as e:
            logger.error("Health DB check failed", exc_info=True)
            return {"status": "degraded", "db": False, "reason": str(e)}

    return check


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build the FastAPI application.

    The ordering engine is constructed once here and shared through
    ``app.state.order_engine``.
    """
    configure_logging()
    cfg = config or load_config()
    engine = get_engine(cfg.database.dsn)

    if cfg.database.auto_apply_migrations:
        try:
            applied = apply_migrations(engine, journal_path=cfg.database.migrations_journal)
        except SQLAlchemyError:
            logger.error("Failed to apply migrations at startup", exc_info=True)
            raise
        if applied:
            logger.info("startup migrations applied=%s", applied)
    else:
        logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")

    app = FastAPI(title="Tourism Admin Ordering Service")
    app.state.config = cfg
    app.state.order_engine = OrderEngine(engine, batch_max_moves=cfg.ordering.batch_max_moves)

    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(PositionStoreError, handle_position_store_error)
    app.add_exception_handler(UnknownCollectionError, handle_unknown_collection)
    app.add_exception_handler(Exception, handle_unexpected_error)

    apply_cors(app, origins=cfg.cors.allow_origins)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix="/api/v1")

    health_check = _health_check(engine)

    @app.get("/health")
    def health():
        return health_check()

    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
