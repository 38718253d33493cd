"""Console email provider.

Used when no SMTP host is configured: messages are written to the log
instead of being delivered, so verification links and reset codes can be
picked up during development.
"""

from brevity.core.logging import get_logger
from brevity.infrastructure.services.email.email_provider import EmailMessage, EmailProvider

logger = get_logger(__name__)


class ConsoleEmailProvider(EmailProvider):
    """Logs emails instead of sending them."""

    async def send_email(self, message: EmailMessage) -> bool:
        logger.info(
            f"[EMAIL] {message.subject}\n"
            f"To: {message.to}\n"
            f"From: {message.from_name} <{message.from_email}>\n"
            f"Body:\n{message.text_body}\n"
            f"{'=' * 80}"
        )
        return True
