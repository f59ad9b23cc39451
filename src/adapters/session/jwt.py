"""
JWT session issuer adapter - Implements SessionIssuer protocol.

Issues HS256-signed tokens with standard claims (sub, aud, iss, iat, exp).
The domain treats the token as opaque; whoever consumes the session
validates it with the same secret and audience.
"""

from datetime import timedelta

import jwt

from src.domain.credentials import utc_now
from src.domain.ports import Clock, SessionToken

_ALGORITHM = "HS256"


class JwtSessionIssuer:
    """
    Implements SessionIssuer protocol via PyJWT.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        secret: str,
        issuer: str = "verigate",
        ttl_seconds: int = 3600,
        clock: Clock = utc_now,
    ) -> None:
        self._secret = secret
        self.issuer = issuer
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    def issue_session(self, identity_id: str) -> SessionToken:
        # PyJWT encodes iat/exp as integer seconds
        now = self._clock().replace(microsecond=0)
        expires_at = now + self.ttl
        payload = {
            "sub": identity_id,
            "aud": self.issuer,
            "iss": self.issuer,
            "iat": now,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._secret, algorithm=_ALGORITHM)
        return SessionToken(identity_id=identity_id, token=token, expires_at=expires_at)
