"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryQuestionStore, InMemoryUserDirectory
from src.adapters.repository.postgres import (
    PostgresQuestionStore,
    PostgresUserDirectory,
    run_migrations,
)
from src.api.dependencies import build_account_lifecycle, build_token_issuer
from src.api.routes import accounts_router, questions_router
from src.config.settings import Settings, get_settings
from src.domain.exceptions import AccountError, InternalError, Unauthenticated
from src.domain.guard import AuthGuard

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "accounts",
        "description": "Registration, OTP verification and login",
    },
    {
        "name": "questions",
        "description": "Quiz question storage",
    },
]


def status_for(exc: AccountError) -> int:
    """Map a domain exception category to an HTTP status code."""
    if isinstance(exc, Unauthenticated):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, InternalError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {type(exc).__name__}")
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 rather than FastAPI's default 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Refuses to start without a token signing secret
    - Creates database connection pool and runs migrations (postgres backend)
    - Builds the account lifecycle service and auth guard
    - Closes connection pool on shutdown
    """
    settings: Settings = app.state.settings
    if settings is None:
        settings = get_settings()
    logging.getLogger("src").setLevel(settings.log_level.upper())

    logger.info("Starting application...")

    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET must be set to start the application")

    pool: ConnectionPool | None = None
    if settings.storage_backend == "postgres":
        logger.info("Connecting to database...")
        statement_timeout_ms = int(settings.storage_timeout_seconds * 1000)
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            kwargs={"options": f"-c statement_timeout={statement_timeout_ms}"},
            open=True,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)

        directory = PostgresUserDirectory(pool, timeout=settings.storage_timeout_seconds)
        question_store = PostgresQuestionStore(pool, timeout=settings.storage_timeout_seconds)
    else:
        logger.warning("Using in-memory storage; data is lost on restart")
        directory = InMemoryUserDirectory()
        question_store = InMemoryQuestionStore()

    # Store services in app state for dependency injection
    app.state.pool = pool
    app.state.accounts = build_account_lifecycle(settings, directory)
    app.state.question_store = question_store
    app.state.auth_guard = AuthGuard(build_token_issuer(settings))

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Explicit settings; when None, environment settings are
            loaded at startup
    """
    application = FastAPI(
        title="quizauth",
        description="Quiz API with OTP-verified accounts and bearer-token authentication",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    application.state.settings = settings
    application.state.pool = None

    application.add_exception_handler(AccountError, account_error_handler)
    application.add_exception_handler(RequestValidationError, validation_error_handler)

    application.include_router(accounts_router)
    application.include_router(questions_router)

    @application.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "Quiz Backend is running"

    @application.get("/health")
    def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with database validation.

        Returns 200 OK if application and database are healthy.
        Raises exception if database connection fails.
        """
        pool = request.app.state.pool
        if pool is not None:
            with pool.connection() as conn:
                conn.execute("SELECT 1")

        return {"status": "healthy"}

    return application


app = create_app()
