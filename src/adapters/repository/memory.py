"""
In-memory repository adapters - Implement the domain's store ports.

Used for development (STORAGE_BACKEND=memory) and domain tests. A single
lock per store gives every operation the same read-modify-write atomicity
the PostgreSQL adapter gets from conditional UPDATE statements.
"""

import threading
import uuid
from dataclasses import replace
from datetime import datetime

from src.domain.credentials import utc_now
from src.domain.ports import Identity


class InMemoryIdentityRepository:
    """
    Implements IdentityRepository protocol with a dict keyed by email.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Returned identities are copies; mutating them never touches the store.
    """

    def __init__(self) -> None:
        self._identities: dict[str, Identity] = {}
        self._lock = threading.Lock()

    def get_by_email(self, email: str) -> Identity | None:
        with self._lock:
            identity = self._identities.get(email)
            return replace(identity) if identity is not None else None

    def create(self, email: str, name: str, password_hash: str | None) -> Identity | None:
        with self._lock:
            if email in self._identities:
                return None
            identity = Identity(
                id=uuid.uuid4().hex,
                email=email,
                name=name,
                password_hash=password_hash,
                created_at=utc_now(),
            )
            self._identities[email] = identity
            return replace(identity)

    def store_otp(self, email: str, otp_hash: str, expires: datetime) -> bool:
        with self._lock:
            identity = self._identities.get(email)
            if identity is None:
                return False
            identity.otp_hash = otp_hash
            identity.otp_expires = expires
            return True

    def consume_otp(self, email: str, otp_hash: str) -> bool:
        with self._lock:
            identity = self._identities.get(email)
            if identity is None or identity.otp_hash != otp_hash:
                return False
            identity.otp_hash = None
            identity.otp_expires = None
            identity.verified = True
            return True

    def mark_verified(self, email: str) -> bool:
        with self._lock:
            identity = self._identities.get(email)
            if identity is None:
                return False
            identity.verified = True
            identity.otp_hash = None
            identity.otp_expires = None
            return True

    def create_verified(self, email: str) -> Identity:
        with self._lock:
            identity = self._identities.get(email)
            if identity is None:
                identity = Identity(
                    id=uuid.uuid4().hex,
                    email=email,
                    name="",
                    created_at=utc_now(),
                )
                self._identities[email] = identity
            identity.verified = True
            return replace(identity)


class InMemoryMagicLinkTokenRepository:
    """Implements MagicLinkTokenRepository protocol."""

    def __init__(self) -> None:
        self._tokens: dict[tuple[str, str], datetime] = {}
        self._lock = threading.Lock()

    def save(self, email: str, token_hash: str, expires: datetime) -> None:
        with self._lock:
            self._tokens[(email, token_hash)] = expires

    def consume(self, email: str, token_hash: str) -> datetime | None:
        with self._lock:
            return self._tokens.pop((email, token_hash), None)

    def purge_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [key for key, expires in self._tokens.items() if expires < now]
            for key in expired:
                del self._tokens[key]
            return len(expired)
