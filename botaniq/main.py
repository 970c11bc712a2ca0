from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from botaniq.config import AppConfig, load_config
from botaniq.db.base import build_engine, ping
from botaniq.db.migrations_runner import apply_migrations
from botaniq.errors import SurveyServiceError
from botaniq.http.failure import (
    handle_http_exception,
    handle_request_validation_error,
    handle_service_error,
    handle_unexpected_error,
)
from botaniq.http.request_id import RequestIdMiddleware
from botaniq.logging_setup import configure_logging
from botaniq.routes import api_router
from botaniq.routes.pages import build_pages_router

logger = logging.getLogger(__name__)

APP_TITLE = "BOTANIQ Session & Survey Service"


def _mount_static(app: FastAPI, directory: str | None) -> None:
    if not directory:
        return
    path = Path(directory)
    if not path.is_dir():
        logger.info("static_dir_absent path=%s", str(path))
        return
    app.include_router(build_pages_router(path))
    # Mounted last so the API and page routes keep precedence over "/"
    app.mount("/", StaticFiles(directory=str(path), html=True), name="static")
    logger.info("static_dir_mounted path=%s", str(path))


def create_app(engine: Engine | None = None, config: AppConfig | None = None) -> FastAPI:
    """Build the FastAPI application.

    `engine` is the datastore handle shared by all requests; when omitted it
    is built from `config.database`. Tests pass an in-memory SQLite engine.
    """
    configure_logging()
    cfg = config or load_config()
    datastore = engine or build_engine(db_config=cfg.database)

    app = FastAPI(title=APP_TITLE)
    app.state.engine = datastore
    app.state.config = cfg

    app.add_exception_handler(SurveyServiceError, handle_service_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)

    # Apply migrations and probe the datastore on startup to avoid import-time side effects
    @app.on_event("startup")
    def _startup() -> None:
        if cfg.migrations.auto_apply:
            applied = apply_migrations(datastore, cfg.migrations.directory)
            logger.info("startup_migrations applied=%s", applied)
        else:
            logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")
        if ping(datastore):
            logger.info("datastore_connected dialect=%s", datastore.dialect.name)
        else:
            logger.error("datastore_unreachable dialect=%s", datastore.dialect.name)
            raise RuntimeError("Datastore unreachable at startup")

    app.include_router(api_router)
    _mount_static(app, cfg.static.directory)
    return app


__all__ = ["create_app", "APP_TITLE"]
