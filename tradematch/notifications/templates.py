"""Template rendering for notification bodies using Jinja2.

Templates live in the ``tradematch.notifications`` package under
``message_templates/`` and are rendered with strict undefined checking so a
missing variable fails loudly instead of producing a half-empty message.
"""

import logging
from typing import Any, Dict, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from .models import NotificationTemplateError

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """Renders the plain-text bodies of notifications.

    Templates are cached by the Jinja2 environment after first load.
    """

    def __init__(
        self,
        template_dir: str = "message_templates",
        body_template: str = "status_body.txt.j2",
    ):
        """Initialize template renderer with Jinja2 environment.

        Args:
            template_dir: Directory name within the tradematch.notifications package
            body_template: Filename of the plain-text body template
        """
        self.body_template_name = body_template

        # Plain text output; nothing to escape
        self.env = Environment(
            loader=PackageLoader("tradematch.notifications", template_dir),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )

        logger.debug(f"Initialized TemplateRenderer with templates from {template_dir}")

    def render(self, context: Dict[str, Any], template_name: Optional[str] = None) -> str:
        """Render a message body.

        Args:
            context: Template variables (headline, message, new_status, rejection_reason
                for the status body)
            template_name: Template to render instead of the status body

        Returns:
            Rendered plain-text body

        Raises:
            NotificationTemplateError: If template rendering fails
        """
        try:
            template = self.env.get_template(template_name or self.body_template_name)
            return template.render(context).strip() + "\n"
        except TemplateError as e:
            error_msg = f"Template rendering failed: {e}"
            logger.error(error_msg, exc_info=True)
            raise NotificationTemplateError(error_msg) from e
