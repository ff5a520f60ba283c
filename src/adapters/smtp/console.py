"""
Console email sender adapter - Implements NotificationSender protocol.

This module provides a console-based implementation of the domain's
notification sender port. Messages are rendered as they would be mailed
and logged to stdout for demo purposes.
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

from src.domain.user import User

logger = logging.getLogger(__name__)

VERIFY_PATH = "/api/v1/users/sign-up/verify"


@dataclass(frozen=True)
class OutgoingEmail:
    """A rendered message ready for a mail transport."""

    sender: str
    recipient: str
    subject: str
    body: str


class ConsoleEmailSender:
    """
    Implements NotificationSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints rendered emails to stdout.
    """

    def __init__(self, base_url: str = "http://localhost:8000", sender: str = "no-reply@devboard.local") -> None:
        """
        Args:
            base_url: Public URL of this service, used to build links
            sender: From address of outgoing mail
        """
        self._base_url = base_url.rstrip("/")
        self._sender = sender

    def verification_link(self, encoded_token: str) -> str:
        return f"{self._base_url}{VERIFY_PATH}?{urlencode({'token': encoded_token})}"

    def render_verification(self, user: User, encoded_token: str) -> OutgoingEmail:
        link = self.verification_link(encoded_token)
        body = (
            f"Hello {user.username},\n\n"
            "Thanks for signing up. Please confirm your email address by opening the link below:\n\n"
            f"{link}\n\n"
            "If you did not create an account, you can ignore this message."
        )
        return OutgoingEmail(
            sender=self._sender,
            recipient=user.email,
            subject="Complete your registration",
            body=body,
        )

    def render_confirmation(self, user: User) -> OutgoingEmail:
        body = (
            f"Hello {user.username},\n\n"
            "Your email address has been verified and your account is now active."
        )
        return OutgoingEmail(
            sender=self._sender,
            recipient=user.email,
            subject="Your account is active",
            body=body,
        )

    def send_verification_email(self, user: User, encoded_token: str) -> None:
        """
        Log the verification email (simulates email delivery).

        In production, this would be replaced with an SMTP adapter.
        Logged at INFO level to be visible in docker-compose logs.
        """
        message = self.render_verification(user, encoded_token)
        logger.info(
            "[VERIFICATION] To: %s Subject: %s Link: %s",
            message.recipient,
            message.subject,
            self.verification_link(encoded_token),
        )
        logger.debug("Message body:\n%s", message.body)

    def send_confirmation_email(self, user: User) -> None:
        """Log the account confirmation email."""
        message = self.render_confirmation(user)
        logger.info("[CONFIRMATION] To: %s Subject: %s", message.recipient, message.subject)
        logger.debug("Message body:\n%s", message.body)
