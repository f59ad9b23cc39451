"""
Verification Gate - eligibility policy for non-magic-link logins.

Every login entry point asks the gate first, before any secret is
inspected. An absent identity is a normal answer, not an error.
"""

from dataclasses import dataclass

from .credentials import normalize_email
from .ports import Eligibility, IdentityRepository


@dataclass
class VerificationGate:
    """Read-only view over the identity store's verified flag."""

    repository: IdentityRepository

    def check_eligibility(self, email: str) -> Eligibility:
        """
        Report whether an identity exists and has been verified.

        Never raises for a missing identity. Store faults propagate
        as StoreUnavailable.
        """
        identity = self.repository.get_by_email(normalize_email(email))
        if identity is None:
            return Eligibility(exists=False, verified=False)
        return Eligibility(exists=True, verified=identity.verified)
