"""Notification dispatch for meeting lifecycle events.

Runs after the meeting state has been persisted. Each recipient is
isolated: one bad address or transport error never prevents the others
from being notified, and nothing raised here reaches the lifecycle
operation that triggered it.
"""

import asyncio
from datetime import UTC, datetime
from typing import Any

import structlog

from viewings.identity.provider import IdentityProvider
from viewings.models.meeting import Meeting
from viewings.notifications.email_notifier import Notifier
from viewings.notifications.schemas import (
    NotificationRecord,
    NotificationResult,
    TemplateKind,
)

logger = structlog.get_logger()

DEFAULT_AGENT_NAME = "Our Agent"


class NotificationDispatcher:
    """Decides who hears about a meeting change and with which template.

    Keeps an in-memory audit trail of every attempt.
    """

    def __init__(
        self,
        notifier: Notifier,
        identities: IdentityProvider,
        dashboard_url: str = "http://localhost:3000/admin/meetings",
    ):
        """Initialize dispatcher.

        Args:
            notifier: Transport used to deliver messages
            identities: Source of admin accounts and current requester emails
            dashboard_url: Link included in admin notifications
        """
        self._notifier = notifier
        self._identities = identities
        self._dashboard_url = dashboard_url
        self._audit_log: list[NotificationRecord] = []

    async def notify_admins_of_request(
        self,
        meeting: Meeting,
        notes: str | None = None,
        rescheduled: bool = False,
    ) -> list[NotificationResult]:
        """Tell every admin about a new or rescheduled request.

        Args:
            meeting: The persisted meeting
            notes: Notes to show instead of the meeting's own notes
            rescheduled: Whether this is a reschedule of an existing request

        Returns:
            One result per admin (empty if admins could not be listed)
        """
        try:
            admins = await self._identities.list_admins()
        except Exception as e:
            logger.error(
                "admin lookup failed, request notification skipped",
                meeting_id=str(meeting.id),
                error=str(e),
            )
            return []

        if not admins:
            logger.warning("no admin accounts to notify", meeting_id=str(meeting.id))
            return []

        payload = {
            "requester_name": meeting.requester_name,
            "requester_email": meeting.requester_email,
            "requester_phone": meeting.requester_phone,
            "property_title": meeting.property_title,
            "scheduled_at": meeting.scheduled_at,
            "notes": meeting.notes if notes is None else notes,
            "rescheduled": rescheduled,
            "dashboard_url": self._dashboard_url,
        }
        results = await asyncio.gather(
            *(
                self._send(meeting, TemplateKind.NEW_REQUEST, admin.email, payload)
                for admin in admins
            )
        )
        return list(results)

    async def notify_requester_decision(
        self,
        meeting: Meeting,
        agent_name: str | None = None,
    ) -> NotificationResult | None:
        """Tell the requester their meeting was accepted or rejected.

        Returns:
            The delivery result, or None when the status has no decision template
        """
        kind = {
            "accepted": TemplateKind.ACCEPTED,
            "rejected": TemplateKind.REJECTED,
        }.get(meeting.status.value)
        if kind is None:
            return None

        payload = {
            "requester_name": meeting.requester_name,
            "property_title": meeting.property_title,
            "scheduled_at": meeting.scheduled_at,
            "admin_response": meeting.admin_response,
            "agent_name": agent_name or DEFAULT_AGENT_NAME,
        }
        recipient = await self._requester_email(meeting)
        return await self._send(meeting, kind, recipient, payload)

    async def notify_requester_cancelled(self, meeting: Meeting) -> NotificationResult:
        """Tell the requester their meeting was cancelled."""
        payload = {
            "requester_name": meeting.requester_name,
            "property_title": meeting.property_title,
            "scheduled_at": meeting.scheduled_at,
        }
        recipient = await self._requester_email(meeting)
        return await self._send(meeting, TemplateKind.CANCELLED, recipient, payload)

    async def _requester_email(self, meeting: Meeting) -> str:
        """Current account email of the requester, else the snapshot email."""
        if meeting.requester_id:
            try:
                identity = await self._identities.get_by_id(meeting.requester_id)
            except Exception as e:
                logger.warning(
                    "requester lookup failed, using snapshot email",
                    meeting_id=str(meeting.id),
                    error=str(e),
                )
                identity = None
            if identity is not None:
                return identity.email
        return meeting.requester_email

    async def _send(
        self,
        meeting: Meeting,
        kind: TemplateKind,
        recipient: str,
        payload: dict[str, Any],
    ) -> NotificationResult:
        try:
            result = await self._notifier.send(kind, recipient, payload)
        except Exception as e:
            logger.error(
                "notifier raised",
                meeting_id=str(meeting.id),
                template=kind.value,
                email=recipient,
                error=str(e),
            )
            result = NotificationResult(
                success=False, recipient_email=recipient, error=str(e)
            )
        self._record_audit(meeting, kind, result)
        return result

    def _record_audit(
        self,
        meeting: Meeting,
        kind: TemplateKind,
        result: NotificationResult,
    ) -> None:
        record = NotificationRecord(
            meeting_id=str(meeting.id),
            template=kind,
            recipient_email=result.recipient_email,
            sent_at=datetime.now(UTC),
            success=result.success,
            error=result.error,
        )
        self._audit_log.append(record)
        logger.info(
            "notification recorded",
            meeting_id=record.meeting_id,
            template=kind.value,
            email=record.recipient_email,
            success=result.success,
        )

    def get_audit_log(self) -> list[NotificationRecord]:
        """Return copy of audit log."""
        return list(self._audit_log)

    def clear_audit_log(self) -> None:
        """Clear audit log."""
        self._audit_log.clear()
