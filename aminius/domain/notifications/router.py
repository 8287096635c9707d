"""Notification router - outbox endpoints"""

import logging
import math
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...database import Database, get_database, get_db
from ...shared.dependencies import valid_agent_id
from ...shared.responses import success
from ...shared.validators import parse_date_param
from .dispatcher import dispatch_notifications
from .schemas import (
    EmailNotificationRequest,
    MessageNotificationRequest,
    NotificationResponse,
    NotificationStatusUpdate,
    PushNotificationRequest,
    ScheduleNotificationRequest,
)
from .service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    """Dependency injection for NotificationService"""
    return NotificationService(db)


def _queued(notification, background_tasks: BackgroundTasks, database: Database) -> dict:
    background_tasks.add_task(dispatch_notifications, database, [notification.notification_id])
    return success(
        NotificationResponse.model_validate(notification),
        "Notification queued",
        notificationId=notification.notification_id,
    )


@router.post("/process")
async def process_due_notifications(service: NotificationService = Depends(get_notification_service)):
    """Deliver every due outbox row (cron entry point)"""
    result = await service.process_due()
    return success(result, "Notifications processed")


@router.post("/{agent_id}/email", status_code=201)
async def send_email(
    data: EmailNotificationRequest,
    background_tasks: BackgroundTasks,
    agent_id: str = Depends(valid_agent_id),
    database: Database = Depends(get_database),
    service: NotificationService = Depends(get_notification_service),
):
    return _queued(service.send_email(agent_id, data), background_tasks, database)


@router.post("/{agent_id}/sms", status_code=201)
async def send_sms(
    data: MessageNotificationRequest,
    background_tasks: BackgroundTasks,
    agent_id: str = Depends(valid_agent_id),
    database: Database = Depends(get_database),
    service: NotificationService = Depends(get_notification_service),
):
    return _queued(service.send_message(agent_id, "SMS", data), background_tasks, database)


@router.post("/{agent_id}/whatsapp", status_code=201)
async def send_whatsapp(
    data: MessageNotificationRequest,
    background_tasks: BackgroundTasks,
    agent_id: str = Depends(valid_agent_id),
    database: Database = Depends(get_database),
    service: NotificationService = Depends(get_notification_service),
):
    return _queued(service.send_message(agent_id, "WhatsApp", data), background_tasks, database)


@router.post("/{agent_id}/push", status_code=201)
async def send_push(
    data: PushNotificationRequest,
    background_tasks: BackgroundTasks,
    agent_id: str = Depends(valid_agent_id),
    database: Database = Depends(get_database),
    service: NotificationService = Depends(get_notification_service),
):
    return _queued(service.send_push(agent_id, data), background_tasks, database)


@router.post("/{agent_id}/schedule", status_code=201)
async def schedule_notification(
    data: ScheduleNotificationRequest,
    agent_id: str = Depends(valid_agent_id),
    service: NotificationService = Depends(get_notification_service),
):
    notification = service.schedule(agent_id, data)
    return success(
        NotificationResponse.model_validate(notification),
        "Notification scheduled",
        notificationId=notification.notification_id,
    )


@router.get("/{agent_id}/history")
async def get_notification_history(
    agent_id: str = Depends(valid_agent_id),
    notification_type: Optional[str] = Query(None, alias="notificationType"),
    status: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(50, alias="pageSize", ge=1, le=200),
    service: NotificationService = Depends(get_notification_service),
):
    items, total = service.history(
        agent_id,
        notification_type,
        status,
        parse_date_param(start_date, "startDate"),
        parse_date_param(end_date, "endDate"),
        page_number,
        page_size,
    )
    return success(
        {
            "notifications": [NotificationResponse.model_validate(n) for n in items],
            "total": total,
            "pageNumber": page_number,
            "pageSize": page_size,
            "totalPages": math.ceil(total / page_size) if total else 0,
        }
    )


@router.get("/{agent_id}/{notification_id}")
async def get_notification(
    notification_id: str,
    agent_id: str = Depends(valid_agent_id),
    service: NotificationService = Depends(get_notification_service),
):
    return success(NotificationResponse.model_validate(service.get(agent_id, notification_id)))


@router.post("/{agent_id}/{notification_id}/cancel")
async def cancel_notification(
    notification_id: str,
    agent_id: str = Depends(valid_agent_id),
    service: NotificationService = Depends(get_notification_service),
):
    notification = service.cancel(agent_id, notification_id)
    return success(NotificationResponse.model_validate(notification), "Notification cancelled")


@router.patch("/{agent_id}/{notification_id}/status")
async def update_notification_status(
    notification_id: str,
    data: NotificationStatusUpdate,
    agent_id: str = Depends(valid_agent_id),
    service: NotificationService = Depends(get_notification_service),
):
    notification = service.update_status(agent_id, notification_id, data)
    return success(NotificationResponse.model_validate(notification), "Notification status updated")
