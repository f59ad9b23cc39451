"""
Resend email sender adapter - Implements EmailSender protocol.

Simple HTTP POST to the Resend API. Non-2xx responses and network errors
surface as DeliveryFailed.
"""

import logging

import httpx

from src.domain.exceptions import DeliveryFailed
from src.domain.ports import EmailMessage

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class ResendEmailSender:
    """Implements EmailSender protocol via the Resend HTTP API."""

    def __init__(
        self,
        api_key: str,
        from_email: str = "onboarding@resend.dev",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self.from_email = from_email
        self._client = client or httpx.Client(timeout=timeout)

    def send(self, recipient: str, message: EmailMessage) -> None:
        try:
            resp = self._client.post(
                RESEND_API_URL,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json={
                    "from": self.from_email,
                    "to": recipient,
                    "subject": message.subject,
                    "text": message.text,
                    "html": message.html,
                },
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Failed to send email to %s via Resend: %s", recipient, e)
            raise DeliveryFailed(recipient) from e

        logger.info("Email sent to %s via Resend", recipient)
