"""
Integration tests for the PostgreSQL credential stores.

Tests repository operations against a real PostgreSQL database.
Requires PostgreSQL to be running (via docker-compose); skipped otherwise.
"""

from datetime import UTC, datetime, timedelta

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import (
    PostgresIdentityRepository,
    PostgresMagicLinkTokenRepository,
)
from src.domain.credentials import hash_otp

pytestmark = [pytest.mark.integration, pytest.mark.usefixtures("clean_database")]

EMAIL = "test@example.com"
EXPIRES = datetime(2030, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def repository(pool: ConnectionPool) -> PostgresIdentityRepository:
    return PostgresIdentityRepository(pool)


@pytest.fixture
def tokens(pool: ConnectionPool) -> PostgresMagicLinkTokenRepository:
    return PostgresMagicLinkTokenRepository(pool)


class TestCreate:
    def test_create_returns_unverified_identity(self, repository: PostgresIdentityRepository) -> None:
        identity = repository.create(EMAIL, "Test", "$2b$10$hashedpasswordvalue")

        assert identity is not None
        assert identity.email == EMAIL
        assert identity.verified is False
        assert identity.password_hash == "$2b$10$hashedpasswordvalue"
        assert identity.otp_hash is None
        assert identity.created_at is not None

    def test_create_duplicate_returns_none(self, repository: PostgresIdentityRepository) -> None:
        repository.create(EMAIL, "Test", None)

        assert repository.create(EMAIL, "Other", None) is None

    def test_get_by_email_unknown(self, repository: PostgresIdentityRepository) -> None:
        assert repository.get_by_email("nobody@example.com") is None


class TestOtpColumns:
    def test_store_otp_overwrites_previous(self, repository: PostgresIdentityRepository) -> None:
        repository.create(EMAIL, "Test", None)
        repository.store_otp(EMAIL, hash_otp("111111"), EXPIRES)
        second = hash_otp("222222")

        assert repository.store_otp(EMAIL, second, EXPIRES + timedelta(minutes=5)) is True

        identity = repository.get_by_email(EMAIL)
        assert identity.otp_hash == second
        assert identity.otp_expires == EXPIRES + timedelta(minutes=5)

    def test_store_otp_unknown_email(self, repository: PostgresIdentityRepository) -> None:
        assert repository.store_otp(EMAIL, hash_otp("111111"), EXPIRES) is False

    def test_consume_otp_clears_and_verifies(self, repository: PostgresIdentityRepository) -> None:
        repository.create(EMAIL, "Test", None)
        otp_hash = hash_otp("111111")
        repository.store_otp(EMAIL, otp_hash, EXPIRES)

        assert repository.consume_otp(EMAIL, otp_hash) is True

        identity = repository.get_by_email(EMAIL)
        assert identity.otp_hash is None
        assert identity.otp_expires is None
        assert identity.verified is True

    def test_consume_stale_hash_leaves_new_code(self, repository: PostgresIdentityRepository) -> None:
        repository.create(EMAIL, "Test", None)
        stale = hash_otp("111111")
        repository.store_otp(EMAIL, stale, EXPIRES)
        current = hash_otp("222222")
        repository.store_otp(EMAIL, current, EXPIRES)

        assert repository.consume_otp(EMAIL, stale) is False
        assert repository.get_by_email(EMAIL).otp_hash == current

    def test_half_set_otp_rejected_by_constraint(self, pool: ConnectionPool) -> None:
        with pytest.raises(psycopg.errors.CheckViolation), pool.connection() as conn:
            conn.execute(
                "INSERT INTO identities (id, email, name, otp_hash) VALUES (%s, %s, %s, %s)",
                ("x", EMAIL, "Test", "salt$digest"),
            )


class TestVerification:
    def test_mark_verified_clears_outstanding_code(self, repository: PostgresIdentityRepository) -> None:
        repository.create(EMAIL, "Test", None)
        repository.store_otp(EMAIL, hash_otp("111111"), EXPIRES)

        assert repository.mark_verified(EMAIL) is True

        identity = repository.get_by_email(EMAIL)
        assert identity.verified is True
        assert identity.otp_hash is None

    def test_mark_verified_unknown_email(self, repository: PostgresIdentityRepository) -> None:
        assert repository.mark_verified(EMAIL) is False

    def test_create_verified_new_email(self, repository: PostgresIdentityRepository) -> None:
        identity = repository.create_verified(EMAIL)

        assert identity.verified is True
        assert identity.name == ""

    def test_create_verified_existing_keeps_identity(self, repository: PostgresIdentityRepository) -> None:
        created = repository.create(EMAIL, "Test", None)

        identity = repository.create_verified(EMAIL)

        assert identity.id == created.id
        assert identity.name == "Test"
        assert identity.verified is True


class TestMagicLinkTokens:
    def test_consume_is_single_use(self, tokens: PostgresMagicLinkTokenRepository) -> None:
        tokens.save(EMAIL, "token-hash", EXPIRES)

        assert tokens.consume(EMAIL, "token-hash") == EXPIRES
        assert tokens.consume(EMAIL, "token-hash") is None

    def test_consume_requires_matching_email(self, tokens: PostgresMagicLinkTokenRepository) -> None:
        tokens.save(EMAIL, "token-hash", EXPIRES)

        assert tokens.consume("other@example.com", "token-hash") is None

    def test_purge_expired(self, tokens: PostgresMagicLinkTokenRepository) -> None:
        tokens.save(EMAIL, "old", EXPIRES - timedelta(days=1))
        tokens.save(EMAIL, "new", EXPIRES + timedelta(days=1))

        assert tokens.purge_expired(EXPIRES) == 1
        assert tokens.consume(EMAIL, "new") is not None
