"""Email notifications for meeting lifecycle events.

Templates are rendered with Jinja2 and delivered over SMTP; the dispatcher
decides recipients and isolates failures from the lifecycle operations.
"""

from viewings.notifications.dispatcher import NotificationDispatcher
from viewings.notifications.email_notifier import EmailNotifier, Notifier
from viewings.notifications.renderer import EmailRenderer
from viewings.notifications.schemas import (
    NotificationRecord,
    NotificationResult,
    RenderedEmail,
    TemplateKind,
)

__all__ = [
    "EmailNotifier",
    "EmailRenderer",
    "NotificationDispatcher",
    "NotificationRecord",
    "NotificationResult",
    "Notifier",
    "RenderedEmail",
    "TemplateKind",
]
