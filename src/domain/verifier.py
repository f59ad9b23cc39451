"""
Credential Verifier - checks a presented password or one-time code.

Check order for both kinds:
1. verified flag (NOT_VERIFIED before touching the secret)
2. credential presence (NO_PASSWORD_SET / no live code)
3. expiry (OTP only, inclusive of the expiry instant)
4. constant-time comparison

A successful OTP check consumes the code through the repository's
conditional update, which also sets verified. If another request
re-issued or consumed the code in between, the update matches no row
and the outcome is INVALID_CREDENTIAL.
"""

import logging
from dataclasses import dataclass, field

from .credentials import check_password, otp_matches, utc_now
from .ports import Clock, CredentialKind, Identity, IdentityRepository, VerifyOutcome

logger = logging.getLogger(__name__)


@dataclass
class CredentialVerifier:
    """Validates secrets against stored credential state."""

    repository: IdentityRepository
    clock: Clock = field(default=utc_now)

    def verify(self, identity: Identity, secret: str, kind: CredentialKind) -> VerifyOutcome:
        """
        Verify a secret for an identity.

        Args:
            identity: Identity as read from the store
            secret: Plain password or one-time code
            kind: Which credential the secret is

        Returns:
            VerifyOutcome indicating success or specific failure reason
        """
        if not identity.verified:
            return VerifyOutcome.NOT_VERIFIED

        if kind is CredentialKind.PASSWORD:
            return self._verify_password(identity, secret)
        return self._verify_otp(identity, secret)

    def _verify_password(self, identity: Identity, password: str) -> VerifyOutcome:
        if identity.password_hash is None:
            # Still burn bcrypt time so the response is indistinguishable
            check_password(password, None)
            return VerifyOutcome.NO_PASSWORD_SET
        if not check_password(password, identity.password_hash):
            return VerifyOutcome.INVALID_CREDENTIAL
        return VerifyOutcome.SUCCESS

    def _verify_otp(self, identity: Identity, code: str) -> VerifyOutcome:
        if not identity.has_live_otp:
            return VerifyOutcome.INVALID_CREDENTIAL

        # Inclusive boundary: valid at exactly otp_expires
        if self.clock() > identity.otp_expires:
            return VerifyOutcome.EXPIRED

        if not otp_matches(code.strip(), identity.otp_hash):
            return VerifyOutcome.INVALID_CREDENTIAL

        if not self.repository.consume_otp(identity.email, identity.otp_hash):
            logger.warning("One-time code for %s changed before it could be consumed", identity.email)
            return VerifyOutcome.INVALID_CREDENTIAL

        identity.otp_hash = None
        identity.otp_expires = None
        identity.verified = True
        return VerifyOutcome.SUCCESS
