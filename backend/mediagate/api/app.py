"""FastAPI application factory."""

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from mediagate import __version__
from mediagate.api.routes import auth, content, health, plans, subscriptions, users, watch_history
from mediagate.config import is_production
from mediagate.database.session import init_db
from mediagate.platform.errors import (
    AppError,
    ErrorHandlerMiddleware,
    app_error_handler,
    http_exception_handler,
    request_validation_handler,
)
from mediagate.services.session_token_service import SessionTokenConfig

logger = logging.getLogger(__name__)


def create_app(create_schema: bool = False) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        create_schema: create missing tables on startup (local development)

    Raises:
        ValueError: production without distinct JWT secrets
    """
    if is_production():
        # Fail fast on missing or shared secrets.
        SessionTokenConfig.from_env()

    app = FastAPI(title="mediagate", version=__version__)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(content.router)
    app.include_router(plans.router)
    app.include_router(users.router)
    app.include_router(subscriptions.router)
    app.include_router(watch_history.router)

    if create_schema:
        init_db()

    return app
