"""Notification service - queues outbound messages in the outbox"""

import logging
from datetime import date, datetime, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ... import config
from ...email_service import compile_mjml_to_html
from ...errors import NotFoundError, ValidationError
from ...models import NOTIFICATION_CHANNELS, Agent, Notification
from ...shared.validators import require_fields, validate_uuid
from .dispatcher import process_due
from .repository import NotificationRepository
from .schemas import (
    EmailNotificationRequest,
    MessageNotificationRequest,
    NotificationStatusUpdate,
    PushNotificationRequest,
    ScheduleNotificationRequest,
)

logger = logging.getLogger(__name__)


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class NotificationService:
    """Service layer for the notification outbox"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository()

    def enqueue(
        self,
        channel: str,
        recipient: str,
        body: str,
        subject: Optional[str] = None,
        agent_id: Optional[str] = None,
        scheduled_time: Optional[datetime] = None,
    ) -> Notification:
        if channel not in NOTIFICATION_CHANNELS:
            raise ValidationError(
                f"Invalid notification type. Valid values are: {', '.join(NOTIFICATION_CHANNELS)}"
            )
        notification = self.repo.create(
            self.db,
            agent_id=agent_id,
            channel=channel,
            recipient=recipient,
            subject=subject,
            body=body,
            status="Pending",
            scheduled_time=_naive_utc(scheduled_time),
            attempts=0,
            max_attempts=config.NOTIFICATION_MAX_ATTEMPTS,
        )
        logger.info(f"📨 Queued {channel} notification {notification.notification_id} for {recipient}")
        return notification

    def enqueue_agent_email(self, agent: Agent, subject: str, html: str) -> Optional[Notification]:
        recipient = agent.email or config.FALLBACK_AGENT_EMAIL
        if not recipient:
            logger.warning(f"⚠️ Agent {agent.agent_id} has no email address, skipping '{subject}'")
            return None
        return self.enqueue("Email", recipient, html, subject=subject, agent_id=agent.agent_id)

    def try_enqueue_agent_email(
        self, agent: Agent, subject: str, build_mjml: Callable[[], str]
    ) -> Optional[str]:
        """
        Render and queue an email to the agent, best effort.

        Any failure while building or queuing is logged and swallowed so the
        operation that triggered the email still succeeds. Returns the queued
        notification id, if any.
        """
        try:
            html = compile_mjml_to_html(build_mjml())
            notification = self.enqueue_agent_email(agent, subject, html)
            return notification.notification_id if notification else None
        except Exception as e:
            self.db.rollback()
            logger.warning(f"⚠️ Could not queue '{subject}' email for agent {agent.agent_id}: {e}")
            return None

    # ------------------------------------------------------------------
    # Endpoint operations
    # ------------------------------------------------------------------

    def send_email(self, agent_id: str, data: EmailNotificationRequest) -> Notification:
        require_fields(
            {"toEmail": data.to_email, "subject": data.subject, "body": data.body},
            ("toEmail", "subject", "body"),
        )
        return self.enqueue("Email", data.to_email, data.body, subject=data.subject, agent_id=agent_id)

    def send_message(self, agent_id: str, channel: str, data: MessageNotificationRequest) -> Notification:
        require_fields(
            {"recipientPhone": data.recipient_phone, "message": data.message},
            ("recipientPhone", "message"),
        )
        return self.enqueue(channel, data.recipient_phone, data.message, agent_id=agent_id)

    def send_push(self, agent_id: str, data: PushNotificationRequest) -> Notification:
        require_fields({"title": data.title, "body": data.body}, ("title", "body"))
        return self.enqueue("Push", agent_id, data.body, subject=data.title, agent_id=agent_id)

    def schedule(self, agent_id: str, data: ScheduleNotificationRequest) -> Notification:
        require_fields(
            {
                "notificationType": data.notification_type,
                "recipient": data.recipient,
                "body": data.body,
                "scheduledTime": data.scheduled_time,
            },
            ("notificationType", "recipient", "body", "scheduledTime"),
        )
        return self.enqueue(
            data.notification_type,
            data.recipient,
            data.body,
            subject=data.subject,
            agent_id=agent_id,
            scheduled_time=data.scheduled_time,
        )

    def get(self, agent_id: str, notification_id: str) -> Notification:
        validate_uuid(notification_id, "Notification")
        notification = self.repo.get_by_id(self.db, notification_id, agent_id)
        if not notification:
            raise NotFoundError("Notification not found")
        return notification

    def cancel(self, agent_id: str, notification_id: str) -> Notification:
        notification = self.get(agent_id, notification_id)
        if notification.status != "Pending":
            raise ValidationError(
                f"Only pending notifications can be cancelled (current status: {notification.status})",
                "NOTIFICATION_NOT_PENDING",
            )
        return self.repo.update(self.db, notification, status="Cancelled", next_attempt_at=None)

    def history(
        self,
        agent_id: str,
        channel: Optional[str],
        status: Optional[str],
        start_date: Optional[date],
        end_date: Optional[date],
        page_number: int,
        page_size: int,
    ) -> tuple[list[Notification], int]:
        return self.repo.get_history(
            self.db, agent_id, channel, status, start_date, end_date, page_number, page_size
        )

    def update_status(self, agent_id: str, notification_id: str, data: NotificationStatusUpdate) -> Notification:
        require_fields({"status": data.status}, ("status",))
        notification = self.get(agent_id, notification_id)
        updates = {"status": data.status}
        if data.status == "Sent":
            updates["sent_at"] = datetime.utcnow()
            updates["next_attempt_at"] = None
        if data.error_message is not None:
            updates["last_error"] = data.error_message[:500]
        return self.repo.update(self.db, notification, **updates)

    async def process_due(self) -> dict:
        return await process_due(self.db)
