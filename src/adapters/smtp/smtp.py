"""
SMTP email sender adapter - Implements EmailSender protocol.

Sends multipart (text + HTML) messages through an SMTP relay with
optional STARTTLS and login. Transport errors surface as DeliveryFailed.
"""

import email.message
import email.policy
import logging
import smtplib

from src.domain.exceptions import DeliveryFailed
from src.domain.ports import EmailMessage

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """Implements EmailSender protocol via smtplib."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
        from_email: str = "noreply@example.com",
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.from_email = from_email

    def build_message(self, recipient: str, message: EmailMessage) -> email.message.EmailMessage:
        mime = email.message.EmailMessage(policy=email.policy.default)
        mime["To"] = recipient
        mime["From"] = self.from_email
        mime["Subject"] = message.subject
        mime.set_content(message.text, subtype="plain", charset="utf-8")
        mime.add_alternative(message.html, subtype="html", charset="utf-8")
        return mime

    def send(self, recipient: str, message: EmailMessage) -> None:
        mime = self.build_message(recipient, message)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username and self.password:
                    smtp.login(self.username, self.password)
                smtp.send_message(mime)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s via SMTP: %s", recipient, e)
            raise DeliveryFailed(recipient) from e

        logger.info("Email sent to %s via SMTP", recipient)
