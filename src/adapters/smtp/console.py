"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging messages to stdout for demo purposes.
"""

import logging

from src.domain.ports import EmailMessage

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints magic links and codes to stdout.
    """

    def send(self, recipient: str, message: EmailMessage) -> None:
        """
        Log the message to console (simulates email delivery).

        The text body is logged at INFO level to be visible in docker-compose logs.

        Args:
            recipient: Recipient email address (normalized by domain layer)
            message: Rendered email content
        """
        logger.info("[EMAIL] To: %s Subject: %s\n%s", recipient, message.subject, message.text)
