"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, along with the value types that cross them.
Adapters implement these protocols.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol

from .exceptions import FAILURE_MESSAGES, FailureKind

Clock = Callable[[], datetime]


@dataclass
class Identity:
    """
    One account record, keyed by normalized email.

    otp_hash and otp_expires are always both set or both None.
    verified only ever moves from False to True.
    """

    id: str
    email: str
    name: str
    password_hash: str | None = None
    verified: bool = False
    otp_hash: str | None = None
    otp_expires: datetime | None = None
    created_at: datetime | None = None

    @property
    def has_live_otp(self) -> bool:
        return self.otp_hash is not None and self.otp_expires is not None


@dataclass(frozen=True)
class Eligibility:
    """Verification Gate answer for an email."""

    exists: bool
    verified: bool


@dataclass(frozen=True)
class OneTimeCode:
    """A freshly issued OTP. The plain code never reaches the store."""

    email: str
    code: str
    expires_at: datetime


@dataclass(frozen=True)
class SessionToken:
    """Opaque session handed back by the session issuer."""

    identity_id: str
    token: str
    expires_at: datetime | None = None


@dataclass(frozen=True)
class EmailMessage:
    """Templated email content."""

    subject: str
    text: str
    html: str


class CredentialKind(str, Enum):
    """Secret types accepted by the Credential Verifier."""

    PASSWORD = "password"
    OTP = "otp"


class VerifyOutcome(Enum):
    """
    Result of a credential check.

    Used by CredentialVerifier.verify() to indicate success or specific failure.
    """

    SUCCESS = "success"
    INVALID_CREDENTIAL = "invalid_credential"
    EXPIRED = "expired"
    NOT_VERIFIED = "not_verified"
    NO_PASSWORD_SET = "no_password_set"


class AuthStatus(str, Enum):
    """
    Terminal states of a login attempt.

    - AUTHENTICATED: session granted
    - LINK_DISPATCHED: magic link sent on explicit request
    - FALLBACK_DISPATCHED: password/OTP attempt on an unverified account
      converted into a magic-link send
    - REJECTED: failure carries a FailureKind and message
    """

    AUTHENTICATED = "authenticated"
    LINK_DISPATCHED = "link_dispatched"
    FALLBACK_DISPATCHED = "fallback_dispatched"
    REJECTED = "rejected"


@dataclass(frozen=True)
class AuthResult:
    """Tagged outcome returned by every Auth Orchestrator login entry point."""

    status: AuthStatus
    failure: FailureKind | None = None
    session: SessionToken | None = None
    message: str = field(default="")

    @classmethod
    def authenticated(cls, session: SessionToken) -> "AuthResult":
        return cls(status=AuthStatus.AUTHENTICATED, session=session, message="Signed in")

    @classmethod
    def link_dispatched(cls) -> "AuthResult":
        return cls(status=AuthStatus.LINK_DISPATCHED, message="Check your email for a sign-in link")

    @classmethod
    def fallback_dispatched(cls) -> "AuthResult":
        return cls(
            status=AuthStatus.FALLBACK_DISPATCHED,
            message="Your email is not verified yet. We sent you a sign-in link.",
        )

    @classmethod
    def rejected(cls, failure: FailureKind) -> "AuthResult":
        return cls(status=AuthStatus.REJECTED, failure=failure, message=FAILURE_MESSAGES[failure])


# Verifier outcomes that map onto a rejection reason.
OUTCOME_FAILURES: dict[VerifyOutcome, FailureKind] = {
    VerifyOutcome.INVALID_CREDENTIAL: FailureKind.INVALID_CREDENTIAL,
    VerifyOutcome.EXPIRED: FailureKind.EXPIRED,
    VerifyOutcome.NOT_VERIFIED: FailureKind.NOT_VERIFIED,
    VerifyOutcome.NO_PASSWORD_SET: FailureKind.NO_PASSWORD_SET,
}


class IdentityRepository(Protocol):
    """Port interface for identity and credential persistence."""

    def get_by_email(self, email: str) -> Identity | None:
        """
        Look up an identity.

        Args:
            email: Normalized email address

        Returns:
            Identity if found, None otherwise
        """
        ...

    def create(self, email: str, name: str, password_hash: str | None) -> Identity | None:
        """
        Atomically create an unverified identity.

        Returns:
            The new Identity, or None if the email is already taken
        """
        ...

    def store_otp(self, email: str, otp_hash: str, expires: datetime) -> bool:
        """
        Set otp_hash and otp_expires together, replacing any prior code.

        Returns:
            True if the identity exists and was updated
        """
        ...

    def consume_otp(self, email: str, otp_hash: str) -> bool:
        """
        Clear the OTP and set verified, only if the stored hash still matches.

        This is the single-row conditional update that makes OTP use
        single-shot and safe against a concurrent re-issue.

        Returns:
            True if the code was consumed by this call
        """
        ...

    def mark_verified(self, email: str) -> bool:
        """
        Set verified and clear any outstanding OTP.

        Returns:
            True if the identity exists
        """
        ...

    def create_verified(self, email: str) -> Identity:
        """
        Create a verified identity for an unseen email, or verify the existing one.

        Used by magic-link completion; must be safe under concurrent calls.
        """
        ...


class MagicLinkTokenRepository(Protocol):
    """Port interface for single-use magic-link token storage."""

    def save(self, email: str, token_hash: str, expires: datetime) -> None:
        """Store a hashed token for email."""
        ...

    def consume(self, email: str, token_hash: str) -> datetime | None:
        """
        Atomically delete a token and return its expiry.

        Returns:
            Stored expiry if the token existed, None if unknown or already used
        """
        ...

    def purge_expired(self, now: datetime) -> int:
        """Delete expired tokens. Returns number removed."""
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send(self, recipient: str, message: EmailMessage) -> None:
        """
        Deliver a templated message.

        Raises:
            DeliveryFailed: If the transport rejects or cannot reach the provider
        """
        ...


class SessionIssuer(Protocol):
    """Port interface for session issuance."""

    def issue_session(self, identity_id: str) -> SessionToken:
        """Issue a session for a verified identity."""
        ...
