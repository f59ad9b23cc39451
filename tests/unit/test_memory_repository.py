"""
Unit tests for the in-memory store adapters.

Tests verify the same contract the PostgreSQL adapter honours:
atomic create, paired OTP fields, conditional consume, monotonic verified.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta

from src.adapters.repository.memory import (
    InMemoryIdentityRepository,
    InMemoryMagicLinkTokenRepository,
)

EMAIL = "frank@example.com"
NOW = datetime(2026, 1, 1, tzinfo=UTC)


class TestIdentityStore:
    def test_create_returns_unverified_identity(self) -> None:
        repo = InMemoryIdentityRepository()

        identity = repo.create(EMAIL, "Frank", "$2b$10$hash")

        assert identity.email == EMAIL
        assert identity.verified is False
        assert identity.otp_hash is None
        assert identity.id

    def test_create_duplicate_returns_none(self) -> None:
        repo = InMemoryIdentityRepository()
        repo.create(EMAIL, "Frank", None)

        assert repo.create(EMAIL, "Other", None) is None

    def test_concurrent_create_exactly_one_succeeds(self) -> None:
        repo = InMemoryIdentityRepository()

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: repo.create(EMAIL, "Frank", None), range(20)))

        assert sum(1 for r in results if r is not None) == 1

    def test_returned_identity_is_a_copy(self) -> None:
        repo = InMemoryIdentityRepository()
        repo.create(EMAIL, "Frank", None)

        repo.get_by_email(EMAIL).verified = True

        assert repo.get_by_email(EMAIL).verified is False

    def test_store_otp_sets_both_fields(self) -> None:
        repo = InMemoryIdentityRepository()
        repo.create(EMAIL, "Frank", None)

        assert repo.store_otp(EMAIL, "salt$digest", NOW) is True

        stored = repo.get_by_email(EMAIL)
        assert (stored.otp_hash, stored.otp_expires) == ("salt$digest", NOW)

    def test_store_otp_unknown_email(self) -> None:
        assert InMemoryIdentityRepository().store_otp(EMAIL, "salt$digest", NOW) is False

    def test_store_otp_overwrites(self) -> None:
        repo = InMemoryIdentityRepository()
        repo.create(EMAIL, "Frank", None)
        repo.store_otp(EMAIL, "first", NOW)

        repo.store_otp(EMAIL, "second", NOW + timedelta(minutes=1))

        assert repo.get_by_email(EMAIL).otp_hash == "second"

    def test_consume_requires_matching_hash(self) -> None:
        repo = InMemoryIdentityRepository()
        repo.create(EMAIL, "Frank", None)
        repo.store_otp(EMAIL, "second", NOW)

        assert repo.consume_otp(EMAIL, "first") is False
        assert repo.get_by_email(EMAIL).otp_hash == "second"

    def test_consume_clears_pair_and_verifies(self) -> None:
        repo = InMemoryIdentityRepository()
        repo.create(EMAIL, "Frank", None)
        repo.store_otp(EMAIL, "h", NOW)

        assert repo.consume_otp(EMAIL, "h") is True

        stored = repo.get_by_email(EMAIL)
        assert stored.otp_hash is None
        assert stored.otp_expires is None
        assert stored.verified is True
        assert repo.consume_otp(EMAIL, "h") is False

    def test_mark_verified_unknown_email(self) -> None:
        assert InMemoryIdentityRepository().mark_verified(EMAIL) is False

    def test_create_verified_new_and_existing(self) -> None:
        repo = InMemoryIdentityRepository()

        created = repo.create_verified(EMAIL)
        again = repo.create_verified(EMAIL)

        assert created.verified is True
        assert again.id == created.id


class TestTokenStore:
    def test_consume_returns_expiry_once(self) -> None:
        tokens = InMemoryMagicLinkTokenRepository()
        tokens.save(EMAIL, "hash", NOW)

        assert tokens.consume(EMAIL, "hash") == NOW
        assert tokens.consume(EMAIL, "hash") is None

    def test_consume_is_bound_to_email(self) -> None:
        tokens = InMemoryMagicLinkTokenRepository()
        tokens.save(EMAIL, "hash", NOW)

        assert tokens.consume("other@example.com", "hash") is None

    def test_purge_expired(self) -> None:
        tokens = InMemoryMagicLinkTokenRepository()
        tokens.save(EMAIL, "old", NOW - timedelta(minutes=1))
        tokens.save(EMAIL, "live", NOW + timedelta(minutes=1))

        assert tokens.purge_expired(NOW) == 1
        assert tokens.consume(EMAIL, "live") is not None
