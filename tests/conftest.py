"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for expiry tests
- A recording email sender that captures links and codes
- In-memory stores and a fully wired orchestrator
- A PostgreSQL pool, skipped when the database is unreachable
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.repository.memory import (
    InMemoryIdentityRepository,
    InMemoryMagicLinkTokenRepository,
)
from src.adapters.repository.postgres import run_migrations
from src.adapters.session.jwt import JwtSessionIssuer
from src.config.settings import get_settings
from src.domain.orchestrator import AuthOrchestrator, create_orchestrator
from tests.helpers import TEST_SECRET, FakeClock, RecordingEmailSender


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository() -> InMemoryIdentityRepository:
    return InMemoryIdentityRepository()


@pytest.fixture
def tokens() -> InMemoryMagicLinkTokenRepository:
    return InMemoryMagicLinkTokenRepository()


@pytest.fixture
def sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def session_issuer() -> JwtSessionIssuer:
    return JwtSessionIssuer(secret=TEST_SECRET)


@pytest.fixture
def orchestrator(
    repository: InMemoryIdentityRepository,
    tokens: InMemoryMagicLinkTokenRepository,
    sender: RecordingEmailSender,
    session_issuer: JwtSessionIssuer,
    clock: FakeClock,
) -> AuthOrchestrator:
    """Orchestrator over in-memory stores with bcrypt at its minimum cost."""
    return create_orchestrator(
        repository=repository,
        tokens=tokens,
        email_sender=sender,
        session_issuer=session_issuer,
        verify_url="http://testserver/v1/magic-link/verify",
        bcrypt_cost=4,
        clock=clock,
    )


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """
    Connection pool for tests that need PostgreSQL.

    Skips the requesting test when the database is unreachable.
    """
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    try:
        pool.wait(timeout=3.0)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not available")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Empty both credential tables before a test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM magic_link_tokens")
        conn.execute("DELETE FROM identities")
        conn.commit()
    yield
