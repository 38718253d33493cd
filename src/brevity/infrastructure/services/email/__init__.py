"""Email delivery: providers, templates and rendering."""

from brevity.infrastructure.services.email.console_provider import ConsoleEmailProvider
from brevity.infrastructure.services.email.email_provider import EmailMessage, EmailProvider
from brevity.infrastructure.services.email.smtp_provider import SMTPProvider, SMTPSettings
from brevity.infrastructure.services.email.template_renderer import (
    RenderedEmail,
    TemplateRenderer,
    get_template_renderer,
)

__all__ = [
    "ConsoleEmailProvider",
    "EmailMessage",
    "EmailProvider",
    "RenderedEmail",
    "SMTPProvider",
    "SMTPSettings",
    "TemplateRenderer",
    "get_template_renderer",
]
