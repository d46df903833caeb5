"""Template rendering for email notifications using Jinja2.

This module wraps Jinja2 template rendering with caching and strict
undefined checking to catch template errors early.
"""

import logging
from typing import Dict

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError, select_autoescape

from .models import NotificationTemplateError

logger = logging.getLogger(__name__)

TEMPLATE_KINDS = (
    "new_blog",
    "new_job",
    "like",
    "application",
    "follow",
    "content_removed",
    "welcome",
)


class TemplateRenderer:
    """Renders email templates using Jinja2.

    Each kind has three templates in insyd.notifications.email_templates:
    ``<kind>_subject.j2``, ``<kind>_body.html.j2`` and ``<kind>_body.txt.j2``.
    Only the HTML bodies are autoescaped.
    """

    def __init__(self, template_dir: str = "email_templates"):
        self.env = Environment(
            loader=PackageLoader("insyd.notifications", template_dir),
            autoescape=select_autoescape(enabled_extensions=("html.j2",), default=False),
            undefined=StrictUndefined,
        )

        logger.debug(f"Initialized TemplateRenderer with templates from {template_dir}")

    def render(self, kind: str, context: Dict) -> Dict[str, str]:
        """Render the subject and both bodies for one email kind.

        Args:
            kind: One of TEMPLATE_KINDS
            context: Dictionary of template variables

        Returns:
            Dictionary containing:
            - subject: Rendered subject line (single line, no newlines)
            - html_body: Rendered HTML body
            - text_body: Rendered plain text body

        Raises:
            NotificationTemplateError: If kind is unknown or rendering fails
        """
        if kind not in TEMPLATE_KINDS:
            raise NotificationTemplateError(f"Unknown email template kind: {kind}")

        try:
            subject_template = self.env.get_template(f"{kind}_subject.j2")
            html_template = self.env.get_template(f"{kind}_body.html.j2")
            text_template = self.env.get_template(f"{kind}_body.txt.j2")

            subject = subject_template.render(context).strip().replace("\n", " ")
            html_body = html_template.render(context)
            text_body = text_template.render(context)

            logger.debug(f"Rendered {kind} templates for {context.get('recipient_email', 'unknown')}")

            return {
                "subject": subject,
                "html_body": html_body,
                "text_body": text_body,
            }

        except TemplateError as e:
            error_msg = f"Template rendering failed: {e}"
            logger.error(error_msg, exc_info=True)
            raise NotificationTemplateError(error_msg) from e
