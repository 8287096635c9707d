"""Reminder domain schemas"""

from datetime import date, datetime, time
from typing import Optional

from pydantic import field_validator

from ...models import PRIORITIES, REMINDER_STATUSES, REMINDER_TYPES
from ...shared.schemas import CamelModel, CamelRequest
from ...shared.validators import is_valid_uuid, parse_date, parse_time, validate_choice

REMINDER_REQUIRED_FIELDS = ("title", "reminderType", "reminderDate")


class ReminderFields(CamelRequest):
    client_id: Optional[str] = None
    appointment_id: Optional[str] = None
    reminder_type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    reminder_date: Optional[date] = None
    reminder_time: Optional[time] = None
    client_name: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    enable_sms: Optional[bool] = None
    enable_whatsapp: Optional[bool] = None
    enable_push_notification: Optional[bool] = None
    advance_notice: Optional[str] = None
    custom_message: Optional[str] = None
    auto_send: Optional[bool] = None
    notes: Optional[str] = None

    @field_validator("client_id", "appointment_id")
    @classmethod
    def check_ids(cls, v, info):
        if v is not None and not is_valid_uuid(v):
            name = "Client" if info.field_name == "client_id" else "Appointment"
            raise ValueError(f"Invalid {name} UUID format")
        return v.lower() if v else v

    @field_validator("reminder_type")
    @classmethod
    def check_type(cls, v):
        return validate_choice(v, REMINDER_TYPES, "reminderType")

    @field_validator("priority")
    @classmethod
    def check_priority(cls, v):
        return validate_choice(v, PRIORITIES, "priority")

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, REMINDER_STATUSES, "status")

    @field_validator("reminder_date", mode="before")
    @classmethod
    def check_date(cls, v):
        return parse_date(v, "reminderDate")

    @field_validator("reminder_time", mode="before")
    @classmethod
    def check_time(cls, v):
        return parse_time(v, "reminderTime")


class ReminderCreate(ReminderFields):
    pass


class ReminderUpdate(ReminderFields):
    pass


class ReminderComplete(CamelRequest):
    notes: Optional[str] = None


class ReminderResponse(CamelModel):
    reminder_id: str
    agent_id: str
    client_id: Optional[str] = None
    appointment_id: Optional[str] = None
    reminder_type: str
    title: str
    description: Optional[str] = None
    reminder_date: date
    reminder_time: Optional[time] = None
    client_name: Optional[str] = None
    priority: str
    status: str
    enable_sms: bool
    enable_whatsapp: bool
    enable_push_notification: bool
    advance_notice: str
    custom_message: Optional[str] = None
    auto_send: bool
    notes: Optional[str] = None
    completed_date: Optional[datetime] = None
    created_date: Optional[datetime] = None
    modified_date: Optional[datetime] = None


class ReminderSettingUpdate(CamelRequest):
    reminder_type: Optional[str] = None
    is_enabled: Optional[bool] = None
    days_before: Optional[int] = None
    time_of_day: Optional[time] = None
    repeat_daily: Optional[bool] = None

    @field_validator("reminder_type")
    @classmethod
    def check_type(cls, v):
        return validate_choice(v, REMINDER_TYPES, "reminderType")

    @field_validator("days_before")
    @classmethod
    def check_days_before(cls, v):
        if v is not None and not 0 <= v <= 365:
            raise ValueError("daysBefore must be between 0 and 365")
        return v

    @field_validator("time_of_day", mode="before")
    @classmethod
    def check_time_of_day(cls, v):
        return parse_time(v, "timeOfDay")


class ReminderSettingResponse(CamelModel):
    reminder_setting_id: Optional[str] = None
    reminder_type: str
    is_enabled: bool
    days_before: int
    time_of_day: Optional[time] = None
    repeat_daily: bool
