"""Session adapters - Session issuance implementations."""

from .jwt import JwtSessionIssuer

__all__ = ["JwtSessionIssuer"]
