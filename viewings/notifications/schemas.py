"""Notification schemas: template kinds, delivery results and audit records."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TemplateKind(str, Enum):
    """Email templates known to the notifier."""

    NEW_REQUEST = "new_request"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class RenderedEmail(BaseModel):
    """A fully rendered message ready for transport."""

    subject: str
    text: str
    html: str


class NotificationResult(BaseModel):
    """Result of a notification attempt."""

    model_config = ConfigDict(str_strip_whitespace=True)

    success: bool = Field(description="Whether the message was handed to the mail server")
    recipient_email: str = Field(description="Email address of the recipient")
    message_id: str | None = Field(default=None, description="Message-ID header if sent")
    error: str | None = Field(default=None, description="Error message if failed")


class NotificationRecord(BaseModel):
    """Audit record for a notification attempt."""

    model_config = ConfigDict(str_strip_whitespace=True)

    meeting_id: str = Field(description="Meeting the notification is about")
    template: TemplateKind = Field(description="Template that was sent")
    recipient_email: str = Field(description="Email address of the recipient")
    sent_at: datetime = Field(description="When the attempt finished")
    success: bool = Field(description="Whether notification succeeded")
    error: str | None = Field(default=None, description="Error if notification failed")
