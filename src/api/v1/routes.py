"""
API v1 routes.

Defines REST endpoints for sign-up, magic-link, one-time code and
password login. Routes only translate between HTTP and the orchestrator's
tagged outcomes; every decision is made in the domain layer.

Handlers are plain functions: the orchestrator blocks on bcrypt, the
database and email delivery, so FastAPI runs them in its threadpool.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from src.api.dependencies import get_orchestrator
from src.api.models import (
    AuthResponse,
    EligibilityResponse,
    EmailRequest,
    ErrorResponse,
    OtpLoginRequest,
    OtpResponse,
    PasswordLoginRequest,
    SignUpRequest,
    SignUpResponse,
)
from src.domain.exceptions import AuthError, FailureKind
from src.domain.orchestrator import AuthOrchestrator
from src.domain.ports import AuthResult, AuthStatus

router = APIRouter(tags=["v1"])

Orchestrator = Annotated[AuthOrchestrator, Depends(get_orchestrator)]

FAILURE_STATUS_CODES: dict[FailureKind, int] = {
    FailureKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    FailureKind.NOT_VERIFIED: status.HTTP_403_FORBIDDEN,
    FailureKind.NO_PASSWORD_SET: status.HTTP_401_UNAUTHORIZED,
    FailureKind.INVALID_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    FailureKind.EXPIRED: status.HTTP_401_UNAUTHORIZED,
    FailureKind.DELIVERY_FAILED: status.HTTP_502_BAD_GATEWAY,
    FailureKind.PASSWORD_TOO_LONG: 422,
}

_ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Invalid, expired or missing credential"},
    404: {"model": ErrorResponse, "description": "Account not found"},
    502: {"model": ErrorResponse, "description": "Email delivery failed"},
}


def _http_error(failure: FailureKind, message: str) -> HTTPException:
    return HTTPException(status_code=FAILURE_STATUS_CODES[failure], detail=message)


def _auth_response(result: AuthResult, response: Response) -> AuthResponse:
    """Map a tagged outcome onto an HTTP response."""
    if result.status is AuthStatus.REJECTED:
        raise _http_error(result.failure, result.message)
    if result.status is AuthStatus.FALLBACK_DISPATCHED:
        response.status_code = status.HTTP_202_ACCEPTED

    session = result.session
    return AuthResponse(
        status=result.status,
        message=result.message,
        session_token=session.token if session else None,
        expires_at=session.expires_at if session else None,
    )


@router.post(
    "/signup",
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "Email already registered"},
        502: _ERROR_RESPONSES[502],
        422: {"description": "Validation error"},
    },
    summary="Sign up",
    description="Create an unverified account and send a magic link to verify the email.",
)
def sign_up(request_data: SignUpRequest, service: Orchestrator) -> SignUpResponse:
    try:
        identity = service.sign_up(request_data.email, request_data.name, request_data.password)
    except AuthError as e:
        raise _http_error(e.failure, e.message) from None
    return SignUpResponse(
        message="Check your email for a sign-in link",
        email=identity.email,
        status=AuthStatus.LINK_DISPATCHED,
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={404: _ERROR_RESPONSES[404], 502: _ERROR_RESPONSES[502]},
    summary="Request a magic link",
)
def login(request_data: EmailRequest, response: Response, service: Orchestrator) -> AuthResponse:
    try:
        result = service.login(request_data.email)
    except AuthError as e:
        raise _http_error(e.failure, e.message) from None
    return _auth_response(result, response)


@router.post(
    "/otp",
    response_model=OtpResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Email not verified, request a magic link"},
        404: _ERROR_RESPONSES[404],
        502: _ERROR_RESPONSES[502],
    },
    summary="Request a one-time code",
    description="Send a 6-digit code to a verified account. "
    "Unverified accounts get 403 and should request a magic link instead.",
)
def send_otp(request_data: EmailRequest, service: Orchestrator) -> OtpResponse:
    try:
        code = service.send_otp(request_data.email)
    except AuthError as e:
        raise _http_error(e.failure, e.message) from None
    return OtpResponse(
        message="Code sent",
        email=code.email,
        expires_at=code.expires_at,
    )


@router.get(
    "/verified",
    response_model=EligibilityResponse,
    summary="Check whether an account exists and is verified",
)
def check_verified(
    email: Annotated[str, Query(min_length=3, max_length=255)], service: Orchestrator
) -> EligibilityResponse:
    eligibility = service.check_verified(email)
    return EligibilityResponse(exists=eligibility.exists, verified=eligibility.verified)


@router.post(
    "/authenticate/password",
    response_model=AuthResponse,
    responses={202: {"model": AuthResponse, "description": "Magic link sent instead"}, **_ERROR_RESPONSES},
    summary="Sign in with password",
)
def authenticate_password(
    request_data: PasswordLoginRequest, response: Response, service: Orchestrator
) -> AuthResponse:
    try:
        result = service.authenticate_password(request_data.email, request_data.password)
    except AuthError as e:
        raise _http_error(e.failure, e.message) from None
    return _auth_response(result, response)


@router.post(
    "/authenticate/otp",
    response_model=AuthResponse,
    responses={202: {"model": AuthResponse, "description": "Magic link sent instead"}, **_ERROR_RESPONSES},
    summary="Sign in with a one-time code",
)
def authenticate_otp(
    request_data: OtpLoginRequest, response: Response, service: Orchestrator
) -> AuthResponse:
    try:
        result = service.authenticate_otp(request_data.email, request_data.code)
    except AuthError as e:
        raise _http_error(e.failure, e.message) from None
    return _auth_response(result, response)


@router.get(
    "/magic-link/verify",
    response_model=AuthResponse,
    responses={401: _ERROR_RESPONSES[401]},
    summary="Complete a magic link",
)
def verify_magic_link(
    token: Annotated[str, Query(min_length=1, max_length=256)],
    email: Annotated[str, Query(min_length=3, max_length=255)],
    response: Response,
    service: Orchestrator,
) -> AuthResponse:
    result = service.complete_magic_link(email, token)
    # Token in the URL must not leak through the Referer header
    response.headers["Referrer-Policy"] = "no-referrer"
    return _auth_response(result, response)
