"""pinnote: FastAPI application.

Notes owned by their authors, trashable, recoverable, and optionally
locked behind a per-note PIN.
"""

from __future__ import annotations

import logging
import secrets
import time
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pinnote.accounts import load_avatar
from pinnote.config import PinnoteConfig, load_config
from pinnote.errors import (
    AuthError,
    ConflictError,
    InternalError,
    NotFoundError,
    PinnoteError,
    ValidationError,
)
from pinnote.routes import accounts, meta, posts
from pinnote.security import CredentialHasher, TokenService
from pinnote.store import RecordStore

logger = logging.getLogger("pinnote")
audit_logger = logging.getLogger("pinnote.audit")


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: connect to MongoDB unless a store was supplied. Shutdown: close it."""
    config: PinnoteConfig = app.state.config
    owned = app.state.store is None
    if owned:
        logger.info("Connecting to MongoDB (database: %s)", config.mongo_db)
        app.state.store = RecordStore.connect(
            config.mongo_uri, config.mongo_db, timeout_ms=config.mongo_timeout_ms
        )
    logger.info("pinnote ready")
    yield
    if owned:
        app.state.store.close()
        app.state.store = None
    logger.info("pinnote shut down")


def _token_service(config: PinnoteConfig) -> TokenService:
    secret = config.token_secret
    if not secret:
        logger.warning("No token secret configured; tokens will not survive a restart")
        secret = secrets.token_urlsafe(48)
    ttl = timedelta(minutes=config.token_ttl_minutes) if config.token_ttl_minutes > 0 else None
    return TokenService(secret, algorithm=config.token_algorithm, ttl=ttl)


def create_app(config: PinnoteConfig | None = None, store: RecordStore | None = None) -> FastAPI:
    """Application factory."""
    if config is None:
        config = load_config()

    app = FastAPI(
        title="pinnote",
        description="Multi-user notes with trash, recovery and per-note PIN locks",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.store = store
    app.state.hasher = CredentialHasher()
    app.state.tokens = _token_service(config)
    app.state.avatar = load_avatar(config.avatar_path)

    # ── Exception handlers ────────────────────────────────────

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return _failure(400, exc.message)

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return _failure(400, exc.message)

    @app.exception_handler(AuthError)
    async def auth_handler(request: Request, exc: AuthError):
        return _failure(401, exc.message)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _failure(404, exc.message)

    @app.exception_handler(InternalError)
    async def internal_handler(request: Request, exc: InternalError):
        return _failure(500, "Internal server error")

    @app.exception_handler(PinnoteError)
    async def pinnote_handler(request: Request, exc: PinnoteError):
        logger.error("Unmapped error %s: %s", type(exc).__name__, exc.message)
        return _failure(500, "Internal server error")

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _failure(400, "Invalid request body")

    @app.exception_handler(Exception)
    async def unexpected_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _failure(500, "Internal server error")

    # ── Audit middleware ──────────────────────────────────────

    @app.middleware("http")
    async def audit_log(request: Request, call_next):
        start = time.monotonic()
        response = await call_next(request)
        elapsed = time.monotonic() - start
        audit_logger.info(
            "%s %s %d %.3fs",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
        )
        return response

    # ── Routers ───────────────────────────────────────────────

    app.include_router(meta.router)
    app.include_router(accounts.router)
    app.include_router(posts.router)

    return app
