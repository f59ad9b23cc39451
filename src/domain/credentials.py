"""
Credential primitives - hashing, code generation and comparison.

Passwords use bcrypt (constant-time checkpw). One-time codes are stored
as a salted SHA-256 digest in the form "<salt-hex>$<digest-hex>" and
compared with hmac.compare_digest. Magic-link tokens are stored as a
plain SHA-256 digest (high-entropy secrets need no salt).
"""

import hashlib
import hmac
import secrets
from datetime import UTC, datetime

import bcrypt

from .exceptions import PasswordTooLong

OTP_MIN = 100000
OTP_MAX = 999999
MAX_PASSWORD_BYTES = 72

# Pre-computed bcrypt hash compared against when an identity has no password,
# so the verifier spends the same bcrypt time on every password attempt.
_DUMMY_BCRYPT_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10))


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def password_too_long(password: str) -> bool:
    """bcrypt only accepts the first 72 bytes of its input."""
    return len(password.encode()) > MAX_PASSWORD_BYTES


def hash_password(password: str, rounds: int = 10) -> str:
    """
    Hash password using bcrypt with cost factor >= 10.

    Raises:
        PasswordTooLong: If the UTF-8 encoded password exceeds 72 bytes
    """
    if password_too_long(password):
        raise PasswordTooLong()
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def check_password(password: str, password_hash: str | None) -> bool:
    """
    Constant-time password check.

    A missing hash, or a password no stored hash can match, still runs
    bcrypt against a dummy value and returns False.
    """
    if password_hash is None or password_too_long(password):
        bcrypt.checkpw(password.encode()[:MAX_PASSWORD_BYTES], _DUMMY_BCRYPT_HASH)
        return False
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # Malformed stored hash
        return False


def generate_otp() -> str:
    """
    Generate a cryptographically secure 6-digit code.

    Uniform over [100000, 999999], so the string is always 6 characters.
    """
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def hash_otp(code: str, salt: str | None = None) -> str:
    """Salted digest of a one-time code."""
    salt = salt if salt is not None else secrets.token_hex(16)
    digest = hashlib.sha256(f"{salt}:{code}".encode()).hexdigest()
    return f"{salt}${digest}"


def otp_matches(code: str, otp_hash: str) -> bool:
    """Compare a presented code against a stored salted digest."""
    salt, sep, _ = otp_hash.partition("$")
    if not sep:
        return False
    return hmac.compare_digest(hash_otp(code, salt).encode(), otp_hash.encode())


def generate_link_token() -> tuple[str, str]:
    """
    Generate a magic link token and its SHA-256 hash.

    Returns:
        (plain_token, token_hash) - plain for email, hash for storage.
    """
    plain = secrets.token_urlsafe(32)
    return plain, hash_link_token(plain)


def hash_link_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()
