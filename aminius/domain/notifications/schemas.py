"""Notification domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from ...models import NOTIFICATION_STATUSES
from ...shared.schemas import CamelModel, CamelRequest
from ...shared.validators import validate_choice, validate_email


class EmailNotificationRequest(CamelRequest):
    to_email: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None

    @field_validator("to_email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class MessageNotificationRequest(CamelRequest):
    """SMS and WhatsApp"""

    recipient_phone: Optional[str] = None
    message: Optional[str] = None


class PushNotificationRequest(CamelRequest):
    title: Optional[str] = None
    body: Optional[str] = None


class ScheduleNotificationRequest(CamelRequest):
    notification_type: Optional[str] = None  # channel name
    recipient: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    scheduled_time: Optional[datetime] = None


class NotificationStatusUpdate(CamelRequest):
    status: Optional[str] = None
    error_message: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, NOTIFICATION_STATUSES, "status")


class NotificationResponse(CamelModel):
    notification_id: str
    agent_id: Optional[str] = None
    channel: str
    recipient: str
    subject: Optional[str] = None
    body: str
    status: str
    scheduled_time: Optional[datetime] = None
    attempts: int
    max_attempts: int
    next_attempt_at: Optional[datetime] = None
    last_error: Optional[str] = None
    sent_at: Optional[datetime] = None
    created_date: Optional[datetime] = None
