"""
Salon Booking Backend — FastAPI Application Factory
======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds the Database, the credential collaborators
       and the router, registers middleware and exception handlers, and
       returns the app. `uvicorn salon.main:app` serves the default instance.

Application Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                        FastAPI App                           │
    │                                                              │
    │  Middleware Chain:                                           │
    │  ┌──────┐ ┌────────┐ ┌───────────────┐ ┌─────────┐ ┌──────┐  │
    │  │ CORS │→│ Req ID │→│ Rate Limit    │→│ Logging │→│ GZip │  │
    │  └──────┘ └────────┘ │ POST /register│ └─────────┘ └──────┘  │
    │                      │ POST /login   │                       │
    │                      └───────────────┘                       │
    │  Routes:                                                     │
    │    /register /login /treatments /booktreatment               │
    │    /bookedtreatment /userinfo /health                        │
    │                                                              │
    │  Exception Handlers:                                         │
    │    400 validation / duplicate / credentials · 401 · 404      │
    │    409 · 500                                                 │
    └──────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Verify database connectivity (bounded retries, then abort)
    3. Create tables when DB_CREATE_ALL is set
    4. Seed the treatment catalog (awaited, idempotent)

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from salon import __version__
from salon.config import Settings
from salon.database import Database
from salon.exceptions import (
    AuthenticationError,
    BookingConflictError,
    DatabaseError,
    DuplicateUserError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from salon.middleware.logging import RequestLoggingMiddleware
from salon.middleware.rate_limit import RateLimitMiddleware
from salon.middleware.request_id import RequestIDMiddleware, request_id_var
from salon.routes import build_api_router
from salon.services.catalog import ensure_catalog
from salon.services.credentials import PasswordHasher, TokenIssuer
from salon.services.treatment_store import TreatmentStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Nothing logged by this application contains passwords or access tokens.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup runs to completion before the first request is served; any
    failure here (unreachable database, seeding error) aborts startup.
    """
    settings: Settings = app.state.settings
    database: Database = app.state.database

    setup_logging(settings)
    logger.info("Salon backend v%s starting", __version__)

    try:
        await database.verify_connection()
    except Exception:
        logger.critical("Database unreachable after %d attempts, aborting startup",
                        settings.db_connect_attempts)
        await database.dispose()
        raise

    if settings.db_create_all:
        await database.create_all()
        logger.info("Database tables created from ORM metadata")

    async with database.session_factory() as session:
        await ensure_catalog(TreatmentStore(session))

    logger.info(
        "Startup complete (double booking %s, rate limit %s)",
        "allowed" if settings.allow_double_booking else "rejected",
        f"{settings.rate_limit_requests}/{settings.rate_limit_window}s"
        if settings.rate_limit_enabled else "off",
    )

    yield

    logger.info("Shutting down...")
    await database.dispose()
    logger.info("Shutdown complete")


# ══════════════════════════════════════════════════════════════════════════
# Global Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _field_errors(exc: RequestValidationError) -> list:
    """Flattens pydantic errors into [{field, message}] with camelCase field paths."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        field = ".".join(loc) or "body"
        ctx = err.get("ctx") or {}
        if err.get("type") == "value_error" and "error" in ctx:
            message = str(ctx["error"])
        else:
            message = err.get("msg", "Invalid value")
        errors.append({"field": field, "message": message})
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler table:
        RequestValidationError   → 400 validation_error (per-field list)
        DuplicateUserError       → 400 duplicate_user
        ValidationError          → 400 validation_error
        InvalidCredentialsError  → 400 invalid_credentials
        AuthenticationError      → 401 unauthenticated (+ loggedOut)
        NotFoundError            → 404 not_found
        BookingConflictError     → 409 booking_conflict
        DatabaseError            → 500 server_error
        Exception (fallback)     → 500 internal_server_error

    429s never reach this table: the rate limit middleware answers them itself.

    Handlers never put stack traces, SQL, hashes or tokens in the response;
    `exc.context` is logged server-side except where it only names the field.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = _field_errors(exc)
        logger.warning("[%s] Request validation failed on %s: %s",
                       rid, request.url.path, [e["field"] for e in errors])
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Request validation failed",
                "details": {"errors": errors},
                "request_id": rid,
            },
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        code = "duplicate_user" if isinstance(exc, DuplicateUserError) else "validation_error"
        logger.warning("[%s] %s: %s", rid, code, exc.message)
        details = {"field": exc.field} if exc.field else None
        return JSONResponse(
            status_code=400,
            content={
                "error": code,
                "message": exc.message,
                "details": details,
                "request_id": rid,
            },
        )

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(request: Request, exc: InvalidCredentialsError):
        # Reason is logged only; the response is identical for both causes
        rid = request_id_var.get("")
        logger.warning("[%s] Login failed: %s", rid, exc.context)
        return JSONResponse(
            status_code=400,
            content={
                "error": "invalid_credentials",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        rid = request_id_var.get("")
        logger.info("[%s] Unauthenticated request to %s", rid, request.url.path)
        return JSONResponse(
            status_code=401,
            content={
                "error": "unauthenticated",
                "message": exc.message,
                "loggedOut": True,
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        logger.info("[%s] Not found: %s", rid, exc.context)
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(BookingConflictError)
    async def handle_booking_conflict(request: Request, exc: BookingConflictError):
        rid = request_id_var.get("")
        logger.info("[%s] Booking conflict: %s", rid, exc.context)
        return JSONResponse(
            status_code=409,
            content={
                "error": "booking_conflict",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | context=%s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration for this instance; defaults to the environment.
                  Tests pass their own to get an isolated database and policy.

    Returns:
        Configured FastAPI instance. Nothing touches the database until the
        lifespan runs.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="Salon Booking API",
        description="Register, log in, browse salon treatments and book them.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = Database(settings)

    # Last added runs first: CORS → RequestID → RateLimit → Logging → GZip
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        requests=settings.rate_limit_requests,
        window=settings.rate_limit_window,
        enabled=settings.rate_limit_enabled,
    )
    app.add_middleware(RequestIDMiddleware)
    # Outermost, so preflights are answered here and 429s carry CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    register_exception_handlers(app)

    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    token_issuer = TokenIssuer(nbytes=settings.access_token_bytes)
    app.include_router(build_api_router(hasher, token_issuer, settings))

    return app


app = create_app()


def run() -> None:
    """Console entry point: serves the default app with uvicorn."""
    import uvicorn

    settings: Settings = app.state.settings
    uvicorn.run(
        "salon.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
