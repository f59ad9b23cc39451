"""
OTP Issuer - generates, persists and dispatches one-time codes.

A code may only be issued to a verified identity: OTP never bootstraps
verification, only the magic link does. Issuing replaces any outstanding
code for the identity.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta

from .credentials import generate_otp, hash_otp, normalize_email, utc_now
from .exceptions import IdentityNotFound, NotVerified
from .messages import otp_message
from .ports import Clock, EmailSender, IdentityRepository, OneTimeCode

logger = logging.getLogger(__name__)


@dataclass
class OtpIssuer:
    """Issues 6-digit codes valid for ttl_seconds."""

    repository: IdentityRepository
    email_sender: EmailSender
    ttl_seconds: int = 600
    clock: Clock = field(default=utc_now)

    def issue(self, email: str) -> OneTimeCode:
        """
        Issue a new one-time code and email it.

        Args:
            email: User's email (will be normalized)

        Returns:
            OneTimeCode with the plain code and its expiry

        Raises:
            IdentityNotFound: If no identity exists for email
            NotVerified: If the identity has not completed magic-link verification
            DeliveryFailed: If the email could not be sent (code stays stored)
        """
        normalized_email = normalize_email(email)
        identity = self.repository.get_by_email(normalized_email)
        if identity is None:
            raise IdentityNotFound(normalized_email)
        if not identity.verified:
            raise NotVerified(normalized_email)

        code = generate_otp()
        expires_at = self.clock() + timedelta(seconds=self.ttl_seconds)

        # Identity may have vanished between read and write; treat as absent
        if not self.repository.store_otp(normalized_email, hash_otp(code), expires_at):
            raise IdentityNotFound(normalized_email)

        logger.info("Issued one-time code for %s (expires %s)", normalized_email, expires_at)
        self.email_sender.send(normalized_email, otp_message(code, self.ttl_seconds // 60))
        return OneTimeCode(email=normalized_email, code=code, expires_at=expires_at)
