"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from psycopg_pool import ConnectionPool

from src.adapters.repository import (
    InMemoryIdentityRepository,
    InMemoryMagicLinkTokenRepository,
    PostgresIdentityRepository,
    PostgresMagicLinkTokenRepository,
    run_migrations,
)
from src.adapters.session import JwtSessionIssuer
from src.adapters.smtp import build_email_sender
from src.api.v1 import router as v1_router
from src.config.settings import get_settings
from src.domain.credentials import utc_now
from src.domain.exceptions import StoreUnavailable

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Authentication API v1 - Magic link, one-time code and password sign-in",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the credential stores (PostgreSQL pool + migrations, or in-memory)
    - Purges expired magic link tokens
    - Selects the email transport and session issuer once
    - Closes the connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")

    pool = None
    if settings.storage_backend == "postgres":
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )
        logger.info("Running database migrations...")
        run_migrations(pool)
        app.state.identities = PostgresIdentityRepository(pool)
        app.state.magic_link_tokens = PostgresMagicLinkTokenRepository(pool)
    else:
        logger.warning("Using in-memory credential store; data is lost on restart")
        app.state.identities = InMemoryIdentityRepository()
        app.state.magic_link_tokens = InMemoryMagicLinkTokenRepository()

    purged = app.state.magic_link_tokens.purge_expired(utc_now())
    if purged:
        logger.info("Purged %d expired magic link token(s)", purged)

    app.state.pool = pool
    app.state.email_sender = build_email_sender(settings)
    app.state.session_issuer = JwtSessionIssuer(
        secret=settings.session_secret.get_secret_value(),
        issuer=settings.session_issuer,
        ttl_seconds=settings.session_ttl_seconds,
    )
    logger.info("Email provider: %s", settings.email_provider)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="verigate",
    description="Authentication API - Magic link verification gating one-time code and password sign-in",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
    """Infrastructure faults are logged for alerting and never shown as user messages."""
    logger.error("Store unavailable handling %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Service temporarily unavailable"},
    )


@app.get("/health")
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
