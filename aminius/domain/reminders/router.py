"""Reminder router - FastAPI endpoints for reminders"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.dependencies import valid_agent_id
from ...shared.responses import success
from ...shared.validators import parse_date_param
from ..clients.schemas import BirthdayResponse
from ..policies.schemas import PolicyResponse
from ..policies.service import DEFAULT_EXPIRY_WINDOW_DAYS
from .schemas import (
    ReminderComplete,
    ReminderCreate,
    ReminderResponse,
    ReminderSettingResponse,
    ReminderSettingUpdate,
    ReminderUpdate,
)
from .service import DEFAULT_UPCOMING_DAYS, ReminderService

router = APIRouter(prefix="/api/reminders", tags=["Reminders"])


def get_reminder_service(db: Session = Depends(get_db)) -> ReminderService:
    """Dependency injection for ReminderService"""
    return ReminderService(db)


@router.post("/{agent_id}", status_code=201)
async def create_reminder(
    data: ReminderCreate,
    agent_id: str = Depends(valid_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    reminder = service.create_reminder(agent_id, data)
    return success(
        ReminderResponse.model_validate(reminder), "Reminder created successfully", reminderId=reminder.reminder_id
    )


@router.get("/{agent_id}")
async def get_reminders(
    agent_id: str = Depends(valid_agent_id),
    reminder_type: Optional[str] = Query(None, alias="reminderType"),
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    client_id: Optional[str] = Query(None, alias="clientId"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(50, alias="pageSize", ge=1, le=200),
    service: ReminderService = Depends(get_reminder_service),
):
    result = service.list_reminders(
        agent_id,
        reminder_type=reminder_type,
        status=status,
        priority=priority,
        client_id=client_id,
        start_date=parse_date_param(start_date, "startDate"),
        end_date=parse_date_param(end_date, "endDate"),
        page_number=page_number,
        page_size=page_size,
    )
    result["reminders"] = [ReminderResponse.model_validate(r) for r in result["reminders"]]
    return success(result)


@router.get("/{agent_id}/today")
async def get_today_reminders(
    agent_id: str = Depends(valid_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    return success([ReminderResponse.model_validate(r) for r in service.get_today(agent_id)])


@router.get("/{agent_id}/upcoming")
async def get_upcoming_reminders(
    agent_id: str = Depends(valid_agent_id),
    days_ahead: int = Query(DEFAULT_UPCOMING_DAYS, alias="daysAhead", ge=0, le=365),
    service: ReminderService = Depends(get_reminder_service),
):
    return success([ReminderResponse.model_validate(r) for r in service.get_upcoming(agent_id, days_ahead)])


@router.get("/{agent_id}/completed")
async def get_completed_reminders(
    agent_id: str = Depends(valid_agent_id),
    limit: int = Query(50, ge=1, le=500),
    service: ReminderService = Depends(get_reminder_service),
):
    return success([ReminderResponse.model_validate(r) for r in service.get_completed(agent_id, limit)])


@router.get("/{agent_id}/birthdays")
async def get_birthday_reminders(
    agent_id: str = Depends(valid_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    return success([BirthdayResponse.model_validate(c) for c in service.get_birthday_reminders(agent_id)])


@router.get("/{agent_id}/policy-expiry")
async def get_policy_expiry_reminders(
    agent_id: str = Depends(valid_agent_id),
    days_ahead: int = Query(DEFAULT_EXPIRY_WINDOW_DAYS, alias="daysAhead", ge=0, le=3650),
    service: ReminderService = Depends(get_reminder_service),
):
    policies = service.get_policy_expiry_reminders(agent_id, days_ahead)
    return success([PolicyResponse.model_validate(p) for p in policies])


@router.get("/{agent_id}/statistics")
async def get_reminder_statistics(
    agent_id: str = Depends(valid_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    return success(service.get_statistics(agent_id))


@router.get("/{agent_id}/settings")
async def get_reminder_settings(
    agent_id: str = Depends(valid_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    return success([ReminderSettingResponse.model_validate(s) for s in service.get_settings(agent_id)])


@router.put("/{agent_id}/settings")
async def update_reminder_settings(
    data: ReminderSettingUpdate,
    agent_id: str = Depends(valid_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    setting = service.update_setting(agent_id, data)
    return success(ReminderSettingResponse.model_validate(setting), "Reminder settings updated")


@router.post("/{agent_id}/generate/birthdays", status_code=201)
async def generate_birthday_reminders(
    agent_id: str = Depends(valid_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    created = service.generate_birthday_reminders(agent_id)
    return success({"created": created}, f"{created} birthday reminder(s) created")


@router.post("/{agent_id}/generate/policy-expiry", status_code=201)
async def generate_policy_expiry_reminders(
    agent_id: str = Depends(valid_agent_id),
    days_ahead: int = Query(DEFAULT_EXPIRY_WINDOW_DAYS, alias="daysAhead", ge=0, le=3650),
    service: ReminderService = Depends(get_reminder_service),
):
    created = service.generate_policy_expiry_reminders(agent_id, days_ahead)
    return success({"created": created}, f"{created} policy expiry reminder(s) created")


@router.get("/{agent_id}/{reminder_id}")
async def get_reminder(
    reminder_id: str,
    agent_id: str = Depends(valid_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    return success(ReminderResponse.model_validate(service.get_reminder(agent_id, reminder_id)))


@router.put("/{agent_id}/{reminder_id}")
async def update_reminder(
    reminder_id: str,
    data: ReminderUpdate,
    agent_id: str = Depends(valid_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    reminder = service.update_reminder(agent_id, reminder_id, data)
    return success(ReminderResponse.model_validate(reminder), "Reminder updated successfully")


@router.post("/{agent_id}/{reminder_id}/complete")
async def complete_reminder(
    reminder_id: str,
    data: Optional[ReminderComplete] = None,
    agent_id: str = Depends(valid_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    reminder = service.complete_reminder(agent_id, reminder_id, data.notes if data else None)
    return success(ReminderResponse.model_validate(reminder), "Reminder completed")


@router.delete("/{agent_id}/{reminder_id}")
async def delete_reminder(
    reminder_id: str,
    agent_id: str = Depends(valid_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    service.delete_reminder(agent_id, reminder_id)
    return success(message="Reminder deleted successfully")
