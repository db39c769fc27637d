"""Tinsel — FastAPI application.

Guests reach their own assignment through an unguessable link; the
organizer gets the links back once, at creation time.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from tinsel import __version__
from tinsel.auth import make_api_key_checker
from tinsel.backends.abstract import StorageBackend
from tinsel.backends.memory import InMemoryBackend
from tinsel.config import TinselConfig, load_config
from tinsel.errors import (
    InvalidInputError,
    NotFoundError,
    RateLimitedError,
    TinselError,
)
from tinsel.guest_index import GuestIndex
from tinsel.links import redact_guest_ids
from tinsel.party import PartyNamespace
from tinsel.ratelimit import make_rate_limiter
from tinsel.routes import admin, guests, meta, parties

logger = logging.getLogger("tinsel")
audit_logger = logging.getLogger("tinsel.audit")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

INTERNAL_ERROR = {"error": "Internal server error"}


def build_backend(config: TinselConfig) -> StorageBackend:
    """Construct the storage backend named by ``config.storage``."""
    if config.storage == "arango":
        from tinsel.backends.arango import ArangoDBBackend

        logger.info(
            "Connecting to ArangoDB at %s (database: %s)",
            config.arango_host,
            config.arango_db,
        )
        return ArangoDBBackend(
            host=config.arango_host,
            db_name=config.arango_db,
            username=config.arango_user,
            password=config.arango_password,
        )
    return InMemoryBackend()


def attach_backend(app: FastAPI, backend: StorageBackend) -> None:
    """Wire the party namespace and guest index onto ``app.state``."""
    app.state.backend = backend
    app.state.parties = PartyNamespace(backend)
    app.state.guest_index = GuestIndex(backend)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    msg = str(first.get("msg", "Invalid request")).removeprefix("Value error, ")
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    if first.get("type") == "value_error" or not loc:
        return msg
    return f"{'.'.join(loc)}: {msg}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: open storage unless one was injected. Shutdown: close it."""
    owns_backend = getattr(app.state, "backend", None) is None
    if owns_backend:
        attach_backend(app, build_backend(app.state.config))
    logger.info("Tinsel ready (storage: %s)", app.state.config.storage)
    yield
    if owns_backend:
        app.state.backend.close()
    logger.info("Tinsel shut down")


def create_app(
    config: TinselConfig | None = None,
    backend: StorageBackend | None = None,
) -> FastAPI:
    """Application factory.

    Pass ``backend`` to inject storage directly (tests do); otherwise the
    lifespan hook builds one from ``config``.
    """
    if config is None:
        config = load_config()

    app = FastAPI(
        title="Tinsel",
        description="Secret Santa gift exchange with private per-guest links",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.backend = None
    if backend is not None:
        attach_backend(app, backend)

    check_rate = make_rate_limiter(config.rate_limit)

    # ── Exception handlers ────────────────────────────────────

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(RateLimitedError)
    async def rate_limited_handler(request: Request, exc: RateLimitedError):
        return JSONResponse(status_code=429, content={"error": str(exc)})

    @app.exception_handler(TinselError)
    async def tinsel_handler(request: Request, exc: TinselError):
        logger.error(
            "%s %s failed: %s",
            request.method,
            redact_guest_ids(request.url.path),
            exc,
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content=INTERNAL_ERROR)

    @app.exception_handler(StarletteHTTPException)
    async def http_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    # ── CORS and last-resort errors ───────────────────────────

    @app.middleware("http")
    async def cors(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled error on %s %s", request.method, redact_guest_ids(request.url.path)
            )
            response = JSONResponse(status_code=500, content=INTERNAL_ERROR)
        response.headers.update(CORS_HEADERS)
        return response

    # ── Audit middleware ──────────────────────────────────────

    @app.middleware("http")
    async def audit_log(request: Request, call_next):
        start = time.monotonic()
        response = await call_next(request)
        elapsed = time.monotonic() - start
        audit_logger.info(
            "%s %s %d %.3fs",
            request.method,
            redact_guest_ids(request.url.path),
            response.status_code,
            elapsed,
        )
        return response

    # ── Routers ───────────────────────────────────────────────

    app.include_router(meta.router)
    app.include_router(parties.router, dependencies=[Depends(check_rate)])
    app.include_router(guests.router)
    if config.api_key:
        check_key = make_api_key_checker(config.api_key)
        app.include_router(admin.router, dependencies=[Depends(check_key)])
    else:
        logger.info("No API key configured, admin routes disabled")

    return app
