"""Email service for account lifecycle notifications.

Renders the built-in templates and hands the result to an email provider.
With no SMTP host configured, messages are logged to the console instead of
being delivered.
"""

from typing import Any
from urllib.parse import urlencode

import aiosmtplib

from brevity.core.config import Settings, get_settings
from brevity.core.logging import get_logger
from brevity.domain.entities.account import Account
from brevity.infrastructure.services.email import templates
from brevity.infrastructure.services.email.console_provider import ConsoleEmailProvider
from brevity.infrastructure.services.email.email_provider import EmailMessage, EmailProvider
from brevity.infrastructure.services.email.smtp_provider import SMTPProvider, SMTPSettings
from brevity.infrastructure.services.email.template_renderer import (
    TemplateRenderer,
    get_template_renderer,
)

logger = get_logger(__name__)


class EmailService:
    """Service for sending account emails."""

    def __init__(
        self,
        provider: EmailProvider,
        settings: Settings | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        """Initialize the email service.

        Args:
            provider: Delivery backend.
            settings: Application settings (sender, URLs, lifetimes).
            renderer: Template renderer; defaults to the shared instance.
        """
        self.provider = provider
        self.settings = settings or get_settings()
        self.renderer = renderer or get_template_renderer()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "EmailService":
        """Build the service with SMTP delivery when configured, console otherwise."""
        settings = settings or get_settings()
        provider: EmailProvider
        if settings.smtp_host:
            provider = SMTPProvider(SMTPSettings.from_settings(settings))
        else:
            provider = ConsoleEmailProvider()
        return cls(provider, settings)

    @property
    def base_url(self) -> str:
        return self.settings.external_url.rstrip("/")

    def _common_variables(self, account: Account) -> dict[str, Any]:
        return {
            "display_name": account.display_name,
            "app_name": self.settings.app_name,
            "app_url": self.base_url,
        }

    def verification_url(self, envelope: str) -> str:
        query = urlencode({"token": envelope})
        return f"{self.base_url}{self.settings.api_prefix}/auth/verify-email?{query}"

    async def _send(
        self, account: Account, template: templates.EmailTemplate, variables: dict[str, Any]
    ) -> bool:
        rendered = self.renderer.render_email(
            template, {**self._common_variables(account), **variables}
        )
        message = EmailMessage(
            to=account.email,
            subject=rendered.subject,
            html_body=rendered.html_body,
            text_body=rendered.text_body,
            from_email=self.settings.email_from,
            from_name=self.settings.email_from_name,
        )
        try:
            sent = await self.provider.send_email(message)
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(
                "Email delivery failed",
                account_id=account.id,
                subject=message.subject,
                error=str(e),
            )
            return False

        if sent:
            logger.info("Email sent", account_id=account.id, subject=message.subject)
        else:
            logger.warning("Email provider declined message", account_id=account.id)
        return sent

    async def send_verification_email(
        self, account: Account, envelope: str, resend: bool = False
    ) -> bool:
        """Send the verification link.

        Args:
            account: Recipient.
            envelope: Signed verification envelope to embed in the link.
            resend: Use the "resend" wording.

        Returns:
            True if the message was handed off successfully.
        """
        template = templates.RESEND_VERIFICATION if resend else templates.EMAIL_VERIFICATION
        return await self._send(
            account,
            template,
            {
                "verification_url": self.verification_url(envelope),
                "expires_in_hours": self.settings.email_verification_expire_hours,
            },
        )

    async def send_password_reset_code(self, account: Account, code: str) -> bool:
        return await self._send(
            account,
            templates.PASSWORD_RESET,
            {
                "code": code,
                "expires_in_minutes": self.settings.password_reset_expire_minutes,
            },
        )

    async def send_password_reset_success(self, account: Account) -> bool:
        return await self._send(account, templates.PASSWORD_RESET_SUCCESS, {})

    def render_verification_page(self, account: Account) -> str:
        """HTML page shown after a verification link has been followed."""
        return self.renderer.render(
            templates.VERIFICATION_SUCCESS_PAGE, self._common_variables(account)
        )
