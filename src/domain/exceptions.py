"""
Domain exceptions - Semantic error types for authentication.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.

Every AuthError is a user-recoverable outcome carrying a FailureKind and
one message from a fixed set. StoreUnavailable is the only infrastructure
error and intentionally sits outside the AuthError hierarchy.

NO_PASSWORD_SET, INVALID_CREDENTIAL and EXPIRED have no exception class:
login attempts report them as AuthResult.rejected(kind) instead of raising.
"""

from enum import Enum


class FailureKind(str, Enum):
    """Tagged reasons a request can be rejected."""

    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    NOT_VERIFIED = "not_verified"
    NO_PASSWORD_SET = "no_password_set"
    INVALID_CREDENTIAL = "invalid_credential"
    EXPIRED = "expired"
    DELIVERY_FAILED = "delivery_failed"
    PASSWORD_TOO_LONG = "password_too_long"


# Human-readable reasons shown to users. Never reveal more than the kind itself.
FAILURE_MESSAGES: dict[FailureKind, str] = {
    FailureKind.NOT_FOUND: "Account not found. Please sign up.",
    FailureKind.ALREADY_EXISTS: "An account with this email already exists.",
    FailureKind.NOT_VERIFIED: "Please verify your email with a magic link first.",
    FailureKind.NO_PASSWORD_SET: "This account has no password. Sign in with a magic link or code.",
    FailureKind.INVALID_CREDENTIAL: "Invalid credentials.",
    FailureKind.EXPIRED: "Your code has expired. Please request a new one.",
    FailureKind.DELIVERY_FAILED: "We could not send the email. Please try again.",
    FailureKind.PASSWORD_TOO_LONG: "Password must be at most 72 bytes.",
}


class AuthError(Exception):
    """Base class for authentication domain errors."""

    failure: FailureKind = FailureKind.INVALID_CREDENTIAL

    @property
    def message(self) -> str:
        return FAILURE_MESSAGES[self.failure]


class IdentityNotFound(AuthError):
    """No identity is registered for the email."""

    failure = FailureKind.NOT_FOUND


class IdentityAlreadyExists(AuthError):
    """Sign-up collided with an existing identity."""

    failure = FailureKind.ALREADY_EXISTS


class NotVerified(AuthError):
    """Identity has not completed magic-link verification."""

    failure = FailureKind.NOT_VERIFIED


class PasswordTooLong(AuthError):
    """Password exceeds the 72-byte bcrypt input limit."""

    failure = FailureKind.PASSWORD_TOO_LONG


class DeliveryFailed(AuthError):
    """Email transport reported an error."""

    failure = FailureKind.DELIVERY_FAILED


class StoreUnavailable(Exception):
    """
    Credential store fault (connection loss, query error).

    Not an AuthError: callers should log and alert, not show a user message.
    """

    pass
