"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting the
auth orchestrator and its infrastructure adapters into routes.
Adapters are created once in the application lifespan and kept
in app.state.
"""

from fastapi import Request

from src.config.settings import get_settings
from src.domain.orchestrator import AuthOrchestrator, create_orchestrator
from src.domain.ports import (
    EmailSender,
    IdentityRepository,
    MagicLinkTokenRepository,
    SessionIssuer,
)


def get_identity_repository(request: Request) -> IdentityRepository:
    """Identity store created during app lifespan startup."""
    return request.app.state.identities


def get_token_repository(request: Request) -> MagicLinkTokenRepository:
    """Magic-link token store created during app lifespan startup."""
    return request.app.state.magic_link_tokens


def get_email_sender(request: Request) -> EmailSender:
    """Email transport selected once at startup."""
    return request.app.state.email_sender


def get_session_issuer(request: Request) -> SessionIssuer:
    return request.app.state.session_issuer


def get_orchestrator(request: Request) -> AuthOrchestrator:
    """
    Create the auth orchestrator with injected dependencies.

    Wires together the stores, email sender and session issuer. Magic links
    point at the app's own verify route under the public base URL.
    """
    settings = get_settings()
    verify_path = request.app.url_path_for("verify_magic_link")
    return create_orchestrator(
        repository=get_identity_repository(request),
        tokens=get_token_repository(request),
        email_sender=get_email_sender(request),
        session_issuer=get_session_issuer(request),
        verify_url=f"{settings.base_url.rstrip('/')}{verify_path}",
        otp_ttl_seconds=settings.otp_ttl_seconds,
        magic_link_ttl_seconds=settings.magic_link_ttl_seconds,
        bcrypt_cost=settings.bcrypt_cost,
    )
