"""
Shared fixtures for adversarial tests.

Every store fixture is parametrized over the in-memory and PostgreSQL
adapters; the PostgreSQL variants skip when the database is unreachable.
"""

import pytest

from src.adapters.repository.memory import (
    InMemoryIdentityRepository,
    InMemoryMagicLinkTokenRepository,
)
from src.adapters.repository.postgres import (
    PostgresIdentityRepository,
    PostgresMagicLinkTokenRepository,
)
from src.domain.ports import IdentityRepository, MagicLinkTokenRepository

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture(params=["memory", "postgres"])
def backend(request: pytest.FixtureRequest) -> str:
    if request.param == "postgres":
        request.getfixturevalue("clean_database")
    return request.param


@pytest.fixture
def identity_store(backend: str, request: pytest.FixtureRequest) -> IdentityRepository:
    if backend == "postgres":
        return PostgresIdentityRepository(request.getfixturevalue("pool"))
    return InMemoryIdentityRepository()


@pytest.fixture
def token_store(backend: str, request: pytest.FixtureRequest) -> MagicLinkTokenRepository:
    if backend == "postgres":
        return PostgresMagicLinkTokenRepository(request.getfixturevalue("pool"))
    return InMemoryMagicLinkTokenRepository()
