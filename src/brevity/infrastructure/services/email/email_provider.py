"""Abstract base class for email providers.

Defines the interface that all email providers must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EmailMessage:
    """A fully rendered email, ready to hand to a provider."""

    to: str
    subject: str
    html_body: str
    text_body: str
    from_email: str
    from_name: str
    reply_to: str | None = None


class EmailProvider(ABC):
    """Abstract base class for email providers.

    Providers only deliver; rendering and addressing happen in the
    ``EmailService``.
    """

    @abstractmethod
    async def send_email(self, message: EmailMessage) -> bool:
        """Send an email.

        Args:
            message: Rendered message to deliver.

        Returns:
            True if email was sent successfully, False otherwise.

        Raises:
            aiosmtplib.SMTPException: If the transport rejects the message.
            OSError: If the transport cannot be reached.
        """
        pass
