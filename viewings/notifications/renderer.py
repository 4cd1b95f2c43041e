"""Jinja2-based renderer for notification emails."""

from datetime import datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from viewings.notifications.schemas import RenderedEmail, TemplateKind

TEMPLATE_DIR = Path(__file__).parent / "templates"


def format_viewing_date(value: datetime, timezone: str = "UTC") -> str:
    """Human readable viewing time, e.g. 'Monday, January 5, 2026 at 02:00 PM (UTC)'."""
    local = value.astimezone(ZoneInfo(timezone))
    return f"{local:%A, %B} {local.day}, {local:%Y at %I:%M %p} ({timezone})"


class EmailRenderer:
    """Render subject, plain text and HTML bodies for each template kind.

    Each kind has three files in the template directory:
    <kind>.subject.j2, <kind>.txt.j2 and <kind>.html.j2.
    """

    def __init__(
        self,
        template_dir: str | Path = TEMPLATE_DIR,
        timezone: str = "UTC",
        brand_name: str = "SandraImmobiliere",
    ):
        """Initialize renderer with template directory.

        Args:
            template_dir: Directory containing the .j2 templates
            timezone: Zone used to display viewing dates
            brand_name: Agency name shown in greetings and signatures
        """
        self.template_dir = Path(template_dir)
        self.timezone = timezone
        self.brand_name = brand_name
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "htm", "html.j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["viewing_date"] = lambda v: format_viewing_date(v, self.timezone)

    def render(self, kind: TemplateKind, context: dict[str, Any]) -> RenderedEmail:
        """Render all parts of one email.

        Raises:
            TemplateNotFound: If a template file for the kind is missing
        """
        ctx = {"brand_name": self.brand_name, "year": datetime.now().year, **context}
        subject = self.env.get_template(f"{kind.value}.subject.j2").render(ctx)
        return RenderedEmail(
            subject=" ".join(subject.split()),
            text=self.env.get_template(f"{kind.value}.txt.j2").render(ctx),
            html=self.env.get_template(f"{kind.value}.html.j2").render(ctx),
        )


__all__ = ["EmailRenderer", "TemplateNotFound", "format_viewing_date"]
