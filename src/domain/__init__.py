"""
Domain layer - Pure business logic with zero framework imports.

This package contains the multi-mode authentication state machine:
magic link, one-time code and password login over a single identity,
gated on a verified flag that only the magic-link channel establishes.
It defines its own port interfaces for infrastructure abstraction.
"""

from .exceptions import (
    AuthError,
    DeliveryFailed,
    FailureKind,
    IdentityAlreadyExists,
    IdentityNotFound,
    NotVerified,
    PasswordTooLong,
    StoreUnavailable,
)
from .gate import VerificationGate
from .magic_link import MagicLinkIssuer
from .orchestrator import AuthOrchestrator, create_orchestrator
from .otp import OtpIssuer
from .ports import (
    AuthResult,
    AuthStatus,
    CredentialKind,
    Eligibility,
    EmailMessage,
    EmailSender,
    Identity,
    IdentityRepository,
    MagicLinkTokenRepository,
    OneTimeCode,
    SessionIssuer,
    SessionToken,
    VerifyOutcome,
)
from .verifier import CredentialVerifier

__all__ = [
    "AuthError",
    "AuthOrchestrator",
    "AuthResult",
    "AuthStatus",
    "CredentialKind",
    "CredentialVerifier",
    "DeliveryFailed",
    "Eligibility",
    "EmailMessage",
    "EmailSender",
    "FailureKind",
    "Identity",
    "IdentityAlreadyExists",
    "IdentityNotFound",
    "IdentityRepository",
    "MagicLinkIssuer",
    "MagicLinkTokenRepository",
    "NotVerified",
    "OneTimeCode",
    "OtpIssuer",
    "PasswordTooLong",
    "SessionIssuer",
    "SessionToken",
    "StoreUnavailable",
    "VerificationGate",
    "VerifyOutcome",
    "create_orchestrator",
]
