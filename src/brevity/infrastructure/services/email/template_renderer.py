"""Rendering of the built-in email templates.

Templates run in a Jinja2 sandbox with ``StrictUndefined``, so a template
that reaches for an attribute it should not have, or a variable nobody
passed, fails loudly instead of mailing a half-empty message. HTML bodies
are autoescaped; subjects and plain-text bodies are not.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from jinja2 import StrictUndefined, Template, TemplateSyntaxError, UndefinedError
from jinja2.sandbox import SandboxedEnvironment

from brevity.core.logging import get_logger
from brevity.infrastructure.services.email.templates import EmailTemplate

logger = get_logger(__name__)


def _sandbox(autoescape: bool) -> SandboxedEnvironment:
    return SandboxedEnvironment(
        autoescape=autoescape,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html_body: str
    text_body: str


class TemplateRenderer:
    """Compiles template sources once and renders them on demand."""

    def __init__(self) -> None:
        self._environments = {True: _sandbox(True), False: _sandbox(False)}
        self._compiled: dict[tuple[bool, str], Template] = {}

    def _compile(self, source: str, html: bool) -> Template:
        key = (html, source)
        template = self._compiled.get(key)
        if template is None:
            try:
                template = self._environments[html].from_string(source)
            except TemplateSyntaxError as e:
                logger.error("Email template does not compile", error=e.message, line=e.lineno)
                raise
            self._compiled[key] = template
        return template

    def render(self, source: str, variables: dict[str, Any], html: bool = True) -> str:
        """Render one template source.

        Raises:
            TemplateSyntaxError: If the source is not valid Jinja2.
            UndefinedError: If the source uses a variable not in ``variables``.
        """
        template = self._compile(source, html)
        try:
            return template.render(variables)
        except UndefinedError as e:
            logger.error(
                "Email template variable missing",
                error=e.message,
                provided=sorted(variables),
            )
            raise

    def render_email(self, template: EmailTemplate, variables: dict[str, Any]) -> RenderedEmail:
        """Render the subject, HTML body and text body of a built-in template."""
        return RenderedEmail(
            subject=self.render(template.subject, variables, html=False).strip(),
            html_body=self.render(template.html_body, variables),
            text_body=self.render(template.text_body, variables, html=False),
        )


@lru_cache
def get_template_renderer() -> TemplateRenderer:
    """Shared renderer, so compiled templates are reused across requests."""
    return TemplateRenderer()
