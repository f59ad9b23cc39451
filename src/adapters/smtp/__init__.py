"""
Email adapters - Transport implementations of the EmailSender port.

build_email_sender() picks the provider once at process start.
"""

from src.config.settings import Settings

from .console import ConsoleEmailSender
from .resend import ResendEmailSender
from .smtp import SmtpEmailSender


def build_email_sender(settings: Settings) -> ConsoleEmailSender | SmtpEmailSender | ResendEmailSender:
    """
    Select the email transport configured by EMAIL_PROVIDER.

    Raises:
        ValueError: If the provider name is unknown
    """
    provider = settings.email_provider
    if provider == "console":
        return ConsoleEmailSender()
    if provider == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username or None,
            password=settings.smtp_password.get_secret_value() or None,
            use_tls=settings.smtp_starttls,
            timeout=settings.email_timeout_seconds,
            from_email=settings.email_from,
        )
    if provider == "resend":
        return ResendEmailSender(
            api_key=settings.resend_api_key.get_secret_value(),
            from_email=settings.email_from,
            timeout=settings.email_timeout_seconds,
        )
    raise ValueError(f"Unknown email provider: {provider}")


__all__ = ["ConsoleEmailSender", "ResendEmailSender", "SmtpEmailSender", "build_email_sender"]
