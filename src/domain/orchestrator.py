"""
Auth Orchestrator - the single entry point for every login mode.

Login State Machine (per attempt)
=================================

Entry points and terminal states:

    sign_up(email, name, password?)   -> identity created, link dispatched
    login(email)                      -> LINK_DISPATCHED
    send_otp(email)                   -> code dispatched (raises NotVerified)
    authenticate_password(email, pw)  -> AUTHENTICATED | FALLBACK_DISPATCHED | REJECTED
    authenticate_otp(email, code)     -> AUTHENTICATED | FALLBACK_DISPATCHED | REJECTED
    complete_magic_link(email, token) -> AUTHENTICATED | REJECTED

Password and OTP attempts always consult the Verification Gate first.
An existing but unverified identity never reaches the Credential Verifier:
the attempt is converted into a magic-link send (FALLBACK_DISPATCHED).
send_otp does not fall back; its NotVerified error is left for the caller
to act on by requesting a magic link itself.

Verified identities only move forward (False -> True). Nothing here retries.
"""

import logging
from dataclasses import dataclass

from .credentials import hash_password, normalize_email, utc_now
from .exceptions import FailureKind, IdentityAlreadyExists, IdentityNotFound
from .gate import VerificationGate
from .magic_link import MagicLinkIssuer
from .otp import OtpIssuer
from .ports import (
    OUTCOME_FAILURES,
    AuthResult,
    Clock,
    CredentialKind,
    Eligibility,
    EmailSender,
    Identity,
    IdentityRepository,
    MagicLinkTokenRepository,
    OneTimeCode,
    SessionIssuer,
    VerifyOutcome,
)
from .verifier import CredentialVerifier

logger = logging.getLogger(__name__)


@dataclass
class AuthOrchestrator:
    """
    Domain service composing the gate, verifier, issuers and session issuance.

    All user-facing failures are reported as tagged AuthResult values or
    AuthError subclasses. StoreUnavailable propagates untouched.
    """

    repository: IdentityRepository
    gate: VerificationGate
    verifier: CredentialVerifier
    otp_issuer: OtpIssuer
    magic_link: MagicLinkIssuer
    session_issuer: SessionIssuer
    bcrypt_cost: int = 10

    def sign_up(self, email: str, name: str, password: str | None = None) -> Identity:
        """
        Create an unverified identity and dispatch a verification link.

        Args:
            email: User's email address (will be normalized)
            name: Display name
            password: Optional password (will be hashed)

        Returns:
            The created Identity

        Raises:
            PasswordTooLong: If the password exceeds 72 bytes (nothing is stored)
            IdentityAlreadyExists: If the email is already registered
            DeliveryFailed: If the magic link could not be sent
        """
        normalized_email = normalize_email(email)
        password_hash = hash_password(password, self.bcrypt_cost) if password else None

        identity = self.repository.create(normalized_email, name.strip(), password_hash)
        if identity is None:
            raise IdentityAlreadyExists(normalized_email)

        logger.info("Signed up identity %s", identity.id)
        self.magic_link.send(normalized_email)
        return identity

    def login(self, email: str) -> AuthResult:
        """
        Send a magic link to an existing identity.

        Raises:
            IdentityNotFound: If no identity exists (caller redirects to sign-up)
            DeliveryFailed: If the magic link could not be sent
        """
        normalized_email = normalize_email(email)
        if not self.gate.check_eligibility(normalized_email).exists:
            raise IdentityNotFound(normalized_email)

        self.magic_link.send(normalized_email)
        return AuthResult.link_dispatched()

    def send_otp(self, email: str) -> OneTimeCode:
        """
        Issue a one-time code.

        Raises:
            IdentityNotFound: If no identity exists
            NotVerified: If the identity is unverified (no automatic fallback)
            DeliveryFailed: If the code could not be sent
        """
        return self.otp_issuer.issue(email)

    def check_verified(self, email: str) -> Eligibility:
        """Report {exists, verified}; never fails for an unknown email."""
        return self.gate.check_eligibility(email)

    def authenticate_password(self, email: str, password: str) -> AuthResult:
        """
        Password login.

        Unknown email -> REJECTED(NOT_FOUND); unverified -> magic-link fallback.
        """
        return self._authenticate(email, password, CredentialKind.PASSWORD, FailureKind.NOT_FOUND)

    def authenticate_otp(self, email: str, code: str) -> AuthResult:
        """
        One-time code login.

        Unknown email -> REJECTED(INVALID_CREDENTIAL); unverified -> magic-link
        fallback; expired code -> REJECTED(EXPIRED).
        """
        return self._authenticate(
            email, code, CredentialKind.OTP, FailureKind.INVALID_CREDENTIAL
        )

    def complete_magic_link(self, email: str, token: str) -> AuthResult:
        """Complete a sign-in link; the only primary verification path."""
        return self.magic_link.complete(email, token)

    def _authenticate(
        self, email: str, secret: str, kind: CredentialKind, missing: FailureKind
    ) -> AuthResult:
        normalized_email = normalize_email(email)

        eligibility = self.gate.check_eligibility(normalized_email)
        if not eligibility.exists:
            logger.info("%s login for unknown email", kind.value)
            return AuthResult.rejected(missing)
        if not eligibility.verified:
            return self._fallback(normalized_email, kind)

        identity = self.repository.get_by_email(normalized_email)
        if identity is None:
            return AuthResult.rejected(missing)

        outcome = self.verifier.verify(identity, secret, kind)
        if outcome is VerifyOutcome.SUCCESS:
            logger.info("%s login succeeded for identity %s", kind.value, identity.id)
            return AuthResult.authenticated(self.session_issuer.issue_session(identity.id))
        if outcome is VerifyOutcome.NOT_VERIFIED:
            return self._fallback(normalized_email, kind)

        logger.info("%s login rejected for identity %s: %s", kind.value, identity.id, outcome.value)
        return AuthResult.rejected(OUTCOME_FAILURES[outcome])

    def _fallback(self, email: str, kind: CredentialKind) -> AuthResult:
        logger.info("%s login on unverified account %s, sending magic link", kind.value, email)
        self.magic_link.send(email)
        return AuthResult.fallback_dispatched()


def create_orchestrator(
    repository: IdentityRepository,
    tokens: MagicLinkTokenRepository,
    email_sender: EmailSender,
    session_issuer: SessionIssuer,
    *,
    verify_url: str = "http://localhost:8000/verify",
    otp_ttl_seconds: int = 600,
    magic_link_ttl_seconds: int = 600,
    bcrypt_cost: int = 10,
    clock: Clock = utc_now,
) -> AuthOrchestrator:
    """Wire the domain components around a shared store and clock."""
    magic_link = MagicLinkIssuer(
        repository=repository,
        tokens=tokens,
        email_sender=email_sender,
        session_issuer=session_issuer,
        verify_url=verify_url,
        ttl_seconds=magic_link_ttl_seconds,
        clock=clock,
    )
    return AuthOrchestrator(
        repository=repository,
        gate=VerificationGate(repository),
        verifier=CredentialVerifier(repository, clock=clock),
        otp_issuer=OtpIssuer(repository, email_sender, ttl_seconds=otp_ttl_seconds, clock=clock),
        magic_link=magic_link,
        session_issuer=session_issuer,
        bcrypt_cost=bcrypt_cost,
    )
