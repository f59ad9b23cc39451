"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.domain.credentials import MAX_PASSWORD_BYTES, password_too_long
from src.domain.ports import AuthStatus


class SignUpRequest(BaseModel):
    """Request model for sign-up."""

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    password: str | None = Field(
        default=None,
        min_length=8,
        description=f"Optional password (min 8 characters, max {MAX_PASSWORD_BYTES} bytes)",
    )

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str | None) -> str | None:
        if v is not None and password_too_long(v):
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class SignUpResponse(BaseModel):
    """Response model for successful sign-up."""

    message: str
    email: str
    status: AuthStatus


class EmailRequest(BaseModel):
    """Request model carrying only an email (magic link, code request)."""

    email: EmailStr


class PasswordLoginRequest(BaseModel):
    """Request model for password login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class OtpLoginRequest(BaseModel):
    """Request model for one-time code login."""

    email: EmailStr
    code: str = Field(
        ...,
        min_length=6,
        max_length=6,
        pattern=r"^\d{6}$",
        description="6-digit one-time code",
    )


class OtpResponse(BaseModel):
    """Response model for a dispatched one-time code."""

    message: str
    email: str
    expires_at: datetime


class EligibilityResponse(BaseModel):
    """Response model for the verification check."""

    exists: bool
    verified: bool


class AuthResponse(BaseModel):
    """Response model for every login entry point."""

    status: AuthStatus
    message: str
    session_token: str | None = None
    expires_at: datetime | None = None


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
