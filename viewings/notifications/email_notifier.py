"""SMTP email notifier.

Renders a template and hands the message to the configured mail server.
Delivery never raises: every outcome is reported as a NotificationResult.
"""

import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Any, Protocol, runtime_checkable

import structlog

from viewings.config import Settings, settings
from viewings.errors import NotificationError
from viewings.notifications.renderer import EmailRenderer
from viewings.notifications.retry import send_with_retry
from viewings.notifications.schemas import NotificationResult, TemplateKind

logger = structlog.get_logger()


@runtime_checkable
class Notifier(Protocol):
    """Anything that can deliver a templated message to one recipient."""

    async def send(
        self, kind: TemplateKind, recipient_email: str, payload: dict[str, Any]
    ) -> NotificationResult:
        """Send one message; failures are reported, not raised."""
        ...

    def is_configured(self) -> bool:
        """Whether the transport has enough configuration to send."""
        ...

    async def health_check(self) -> bool:
        """Whether the transport is currently reachable."""
        ...


class EmailNotifier:
    """Notifier delivering rendered templates over SMTP."""

    def __init__(
        self,
        config: Settings | None = None,
        renderer: EmailRenderer | None = None,
    ):
        """Initialize with SMTP settings.

        Args:
            config: Settings with smtp_* and mail_* fields. Defaults to app settings.
            renderer: Template renderer. Defaults to packaged templates.
        """
        self._config = config or settings
        self._renderer = renderer or EmailRenderer(
            timezone=self._config.timezone,
            brand_name=self._config.mail_from_name,
        )

    def is_configured(self) -> bool:
        return bool(self._config.smtp_host and self._sender_address())

    def _sender_address(self) -> str | None:
        return self._config.mail_from_address or self._config.smtp_username

    def build_message(
        self, kind: TemplateKind, recipient_email: str, payload: dict[str, Any]
    ) -> EmailMessage:
        """Render a template into a multipart text/HTML message."""
        rendered = self._renderer.render(kind, payload)
        sender = self._sender_address() or "no-reply@localhost"

        message = EmailMessage()
        message["Subject"] = rendered.subject
        message["From"] = formataddr((self._config.mail_from_name, sender))
        message["To"] = recipient_email
        message["Message-ID"] = make_msgid(domain=sender.split("@")[-1])
        message.set_content(rendered.text)
        message.add_alternative(rendered.html, subtype="html")
        return message

    async def send(
        self, kind: TemplateKind, recipient_email: str, payload: dict[str, Any]
    ) -> NotificationResult:
        """Render and deliver one message.

        Args:
            kind: Template to use
            recipient_email: Destination address
            payload: Template context

        Returns:
            NotificationResult with success status and Message-ID or error
        """
        if not self.is_configured():
            logger.warning(
                "email not sent, smtp not configured",
                template=kind.value,
                email=recipient_email,
            )
            return NotificationResult(
                success=False,
                recipient_email=recipient_email,
                error="smtp_not_configured",
            )

        try:
            message = self.build_message(kind, recipient_email, payload)
            await self._deliver(message)
        except NotificationError as e:
            logger.warning(
                "email delivery failed",
                template=kind.value,
                email=recipient_email,
                error=e.message,
            )
            return NotificationResult(
                success=False, recipient_email=recipient_email, error=e.message
            )

        logger.info(
            "email sent",
            template=kind.value,
            email=recipient_email,
            message_id=message["Message-ID"],
        )
        return NotificationResult(
            success=True,
            recipient_email=recipient_email,
            message_id=message["Message-ID"],
        )

    @send_with_retry
    async def _deliver(self, message: EmailMessage) -> None:
        """One delivery attempt, run in a worker thread."""
        await asyncio.to_thread(self._deliver_sync, message)

    def _deliver_sync(self, message: EmailMessage) -> None:
        config = self._config
        with smtplib.SMTP(config.smtp_host, config.smtp_port, timeout=30) as server:
            if config.smtp_use_tls:
                server.starttls(context=ssl.create_default_context())
            if config.smtp_username and config.smtp_password:
                server.login(config.smtp_username, config.smtp_password)
            server.send_message(message)

    async def health_check(self) -> bool:
        """Check that the SMTP server accepts a connection (and login)."""
        if not self.is_configured():
            return False
        try:
            await asyncio.to_thread(self._check_smtp_sync)
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("smtp health check failed", error=str(e))
            return False

    def _check_smtp_sync(self) -> None:
        config = self._config
        with smtplib.SMTP(config.smtp_host, config.smtp_port, timeout=10) as server:
            if config.smtp_use_tls:
                server.starttls(context=ssl.create_default_context())
            if config.smtp_username and config.smtp_password:
                server.login(config.smtp_username, config.smtp_password)
            server.noop()
