"""
Main FastAPI application for the Newsroom backend.
Wires configuration, database, admin guard, and routes together.
"""

import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import (
    APP_DESCRIPTION,
    APP_TITLE,
    LOG_LEVEL,
    LOG_RETENTION,
    LOG_ROTATION,
    Settings,
    load_settings,
)
from .database import Database, QueryFailedError, RecordNotFoundError, StoreError, init_database
from .middleware.auth_middleware import AdminGuard
from .middleware.request_logging import RequestLoggingMiddleware
from .routes import images, media, posts, static
from .services.token_verifier import GoogleTokenVerifier, TokenVerifier

API_PREFIX = "/newsroom"


def configure_logging(settings: Settings) -> None:
    """Add the rotating file sinks used in deployment."""
    os.makedirs(settings.log_dir, exist_ok=True)
    logger.add(
        os.path.join(settings.log_dir, "newsroom.log"),
        rotation=LOG_ROTATION,
        retention=LOG_RETENTION,
        level=LOG_LEVEL,
    )
    logger.add(
        os.path.join(settings.log_dir, "errors.log"),
        rotation=LOG_ROTATION,
        retention=LOG_RETENTION,
        level="ERROR",
    )


def create_app(
    settings: Optional[Settings] = None,
    token_verifier: Optional[TokenVerifier] = None,
) -> FastAPI:
    """
    Build the application around an immutable settings object.

    Args:
        settings: Configuration; read from the environment when omitted
        token_verifier: Identity token strategy; Google verification when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or load_settings()
    verifier = token_verifier or GoogleTokenVerifier(settings.google_client_id)

    app = FastAPI(title=APP_TITLE, description=APP_DESCRIPTION)
    app.state.settings = settings
    app.state.db = Database(settings.postgres_dsn)
    app.state.admin_guard = AdminGuard(verifier, settings.admin_subjects)

    if not settings.admin_subjects:
        logger.warning("ADMINS not set; admin only requests will be rejected")

    app.add_middleware(RequestLoggingMiddleware, enabled=settings.request_logging_enabled)

    app.include_router(posts.router, prefix=API_PREFIX)
    app.include_router(images.router, prefix=API_PREFIX)
    app.include_router(media.router, prefix=API_PREFIX)
    # Catch-all static routes go last so they never shadow the API
    app.include_router(static.router)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(StoreError)
    async def store_exception_handler(request: Request, exc: StoreError):
        if isinstance(exc, RecordNotFoundError):
            return JSONResponse(status_code=404, content={"error": "Not found"})
        if not isinstance(exc, QueryFailedError):
            logger.error(f"Unexpected store error on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": "A database error occurred. Please try again later."},
        )

    @app.on_event("startup")
    async def startup_event():
        try:
            await init_database(app.state.db)
            logger.info("Newsroom application started successfully")
        except Exception as e:
            logger.error(f"Error during application startup: {str(e)}")

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.db.disconnect()

    return app


_settings = load_settings()
configure_logging(_settings)
app = create_app(_settings)
logger.info(f"Admin allow-list holds {len(_settings.admin_subjects)} subject(s)")


def run() -> None:
    """Serve the app with uvicorn; reload needs the import string."""
    import uvicorn

    uvicorn.run(
        "newsroom.server:app", host=_settings.host, port=_settings.port, reload=_settings.dev
    )


if __name__ == "__main__":
    run()
