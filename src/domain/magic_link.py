"""
Magic-Link Issuer - passwordless sign-in and the sole verification path.

Sending stores only the SHA-256 of a random token and emails the plain
token inside a link built on the injected verify_url. Completing the link
consumes the token (single use), flips verified exactly once, and issues a
session. Completion for an email with no identity yet creates a verified
identity.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from urllib.parse import quote, urlencode

from .credentials import generate_link_token, hash_link_token, normalize_email, utc_now
from .exceptions import FailureKind
from .messages import magic_link_message
from .ports import (
    AuthResult,
    Clock,
    EmailSender,
    IdentityRepository,
    MagicLinkTokenRepository,
    SessionIssuer,
)

logger = logging.getLogger(__name__)


@dataclass
class MagicLinkIssuer:
    """Issues and completes single-use sign-in links."""

    repository: IdentityRepository
    tokens: MagicLinkTokenRepository
    email_sender: EmailSender
    session_issuer: SessionIssuer
    verify_url: str = "http://localhost:8000/verify"
    ttl_seconds: int = 600
    clock: Clock = field(default=utc_now)

    def send(self, email: str) -> None:
        """
        Store a fresh token and email the sign-in link.

        Expired tokens are purged first, so the token store stays bounded by
        the links issued within one lifetime.

        Raises:
            DeliveryFailed: If the email could not be sent (token stays stored)
        """
        normalized_email = normalize_email(email)
        plain_token, token_hash = generate_link_token()
        now = self.clock()
        purged = self.tokens.purge_expired(now)
        if purged:
            logger.debug("Purged %d expired magic link token(s)", purged)
        self.tokens.save(normalized_email, token_hash, now + timedelta(seconds=self.ttl_seconds))

        logger.info("Sending magic link to %s", normalized_email)
        url = self.build_url(normalized_email, plain_token)
        self.email_sender.send(normalized_email, magic_link_message(url, self.ttl_seconds // 60))

    def build_url(self, email: str, token: str) -> str:
        params = urlencode({"token": token, "email": email}, quote_via=quote)
        separator = "&" if "?" in self.verify_url else "?"
        return f"{self.verify_url}{separator}{params}"

    def complete(self, email: str, token: str) -> AuthResult:
        """
        Consume a link token, verify the identity and issue a session.

        Returns:
            AUTHENTICATED on success, REJECTED(INVALID_CREDENTIAL) for an
            unknown or already used token, REJECTED(EXPIRED) past expiry
        """
        normalized_email = normalize_email(email)
        expires = self.tokens.consume(normalized_email, hash_link_token(token))
        if expires is None:
            logger.warning("Unknown or used magic link for %s", normalized_email)
            return AuthResult.rejected(FailureKind.INVALID_CREDENTIAL)
        if self.clock() > expires:
            logger.info("Expired magic link for %s", normalized_email)
            return AuthResult.rejected(FailureKind.EXPIRED)

        identity = None
        if self.repository.mark_verified(normalized_email):
            identity = self.repository.get_by_email(normalized_email)
        if identity is None:
            identity = self.repository.create_verified(normalized_email)
            logger.info("Created verified identity %s from magic link", identity.id)

        logger.info("Magic link completed for %s", normalized_email)
        return AuthResult.authenticated(self.session_issuer.issue_session(identity.id))
