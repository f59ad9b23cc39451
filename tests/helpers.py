"""
Test doubles shared across unit, integration and adversarial tests.
"""

import re
from datetime import UTC, datetime, timedelta
from urllib.parse import parse_qs, urlparse

import jwt

from src.domain.ports import EmailMessage

TEST_SECRET = "test-session-secret-0123456789abcdef"


def session_subject(token: str, secret: str = TEST_SECRET, audience: str = "verigate") -> str:
    """Validate a session token the way a consuming service would; return its subject."""
    claims = jwt.decode(token, secret, algorithms=["HS256"], audience=audience, issuer=audience)
    return claims["sub"]


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingEmailSender:
    """EmailSender that keeps every message instead of delivering it."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, EmailMessage]] = []

    def send(self, recipient: str, message: EmailMessage) -> None:
        self.sent.append((recipient, message))

    def link_tokens(self, recipient: str) -> list[str]:
        """Tokens of every magic link sent to recipient, oldest first."""
        tokens = []
        for to, message in self.sent:
            match = re.search(r"(https?://\S+)", message.text)
            if to == recipient and match:
                tokens.append(parse_qs(urlparse(match.group(1)).query)["token"][0])
        return tokens

    def last_link_token(self, recipient: str) -> str:
        tokens = self.link_tokens(recipient)
        if not tokens:
            raise AssertionError(f"no magic link sent to {recipient}")
        return tokens[-1]

    def last_code(self, recipient: str) -> str:
        for to, message in reversed(self.sent):
            match = re.search(r"code is (\d{6})", message.text)
            if to == recipient and match:
                return match.group(1)
        raise AssertionError(f"no code sent to {recipient}")

    def count_links(self, recipient: str) -> int:
        return sum(1 for to, m in self.sent if to == recipient and "/magic-link/verify" in m.text)
