"""SMTP email provider implementation.

Uses aiosmtplib for asynchronous email sending via SMTP.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib
from pydantic import BaseModel, ConfigDict

from brevity.core.config import Settings, get_settings
from brevity.core.logging import get_logger
from brevity.infrastructure.services.email.email_provider import EmailMessage, EmailProvider

logger = get_logger(__name__)


class SMTPSettings(BaseModel):
    """Configuration settings for the SMTP provider."""

    model_config = ConfigDict(from_attributes=True)

    host: str
    port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True
    use_ssl: bool = False
    timeout: int = 10

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SMTPSettings":
        settings = settings or get_settings()
        if not settings.smtp_host:
            raise ValueError("BREVITY_SMTP_HOST is not configured")
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            use_ssl=settings.smtp_use_ssl,
            timeout=settings.smtp_timeout,
        )


class SMTPProvider(EmailProvider):
    """SMTP email provider implementation.

    Sends emails using the SMTP protocol via aiosmtplib.
    """

    def __init__(self, settings: SMTPSettings) -> None:
        """Initialize the SMTP provider.

        Args:
            settings: SMTP configuration settings.
        """
        self.settings = settings

    @staticmethod
    def build_mime(message: EmailMessage) -> MIMEMultipart:
        """Build a multipart/alternative MIME message with text and HTML parts."""
        mime = MIMEMultipart("alternative")
        mime["Subject"] = message.subject
        mime["From"] = f"{message.from_name} <{message.from_email}>"
        mime["To"] = message.to
        if message.reply_to:
            mime["Reply-To"] = message.reply_to

        mime.attach(MIMEText(message.text_body, "plain"))
        mime.attach(MIMEText(message.html_body, "html"))
        return mime

    async def send_email(self, message: EmailMessage) -> bool:
        """Send an email via SMTP.

        Returns:
            True if email was sent successfully.

        Raises:
            aiosmtplib.SMTPException: If the server rejects the message.
            OSError: If the server cannot be reached.
        """
        mime = self.build_mime(message)

        try:
            async with aiosmtplib.SMTP(
                hostname=self.settings.host,
                port=self.settings.port,
                use_tls=self.settings.use_ssl,  # aiosmtplib uses use_tls for SSL/TLS on connection
                timeout=self.settings.timeout,
            ) as smtp:
                if self.settings.use_tls and not self.settings.use_ssl:
                    await smtp.starttls()

                if self.settings.username and self.settings.password:
                    await smtp.login(self.settings.username, self.settings.password)
                await smtp.send_message(mime)

            return True
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email via SMTP", host=self.settings.host, error=str(e))
            raise
