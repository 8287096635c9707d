"""Appointment domain schemas - Pydantic models for validation"""

from datetime import date, datetime, time
from typing import Optional

from pydantic import field_validator

from ...models import APPOINTMENT_STATUSES, APPOINTMENT_TYPES, PRIORITIES
from ...shared.schemas import CamelModel, CamelRequest
from ...shared.validators import is_valid_uuid, parse_date, parse_time, validate_choice

APPOINTMENT_REQUIRED_FIELDS = ("clientId", "title", "appointmentDate", "startTime", "endTime", "type")


class AppointmentFields(CamelRequest):
    client_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    appointment_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    notes: Optional[str] = None
    reminder_set: Optional[bool] = None

    @field_validator("client_id")
    @classmethod
    def check_client_id(cls, v):
        if v is not None and not is_valid_uuid(v):
            raise ValueError("Invalid Client UUID format")
        return v.lower() if v else v

    @field_validator("appointment_date", mode="before")
    @classmethod
    def check_date(cls, v):
        return parse_date(v, "appointmentDate")

    @field_validator("start_time", mode="before")
    @classmethod
    def check_start_time(cls, v):
        return parse_time(v, "startTime")

    @field_validator("end_time", mode="before")
    @classmethod
    def check_end_time(cls, v):
        return parse_time(v, "endTime")

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return validate_choice(v, APPOINTMENT_TYPES, "type")

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, APPOINTMENT_STATUSES, "status")

    @field_validator("priority")
    @classmethod
    def check_priority(cls, v):
        return validate_choice(v, PRIORITIES, "priority")


class AppointmentCreate(AppointmentFields):
    """Schema for creating an appointment; required fields are checked by the service"""


class AppointmentUpdate(AppointmentFields):
    """Schema for a partial appointment update"""


class ConflictCheckRequest(CamelRequest):
    appointment_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    exclude_appointment_id: Optional[str] = None

    @field_validator("appointment_date", mode="before")
    @classmethod
    def check_date(cls, v):
        return parse_date(v, "appointmentDate")

    @field_validator("start_time", mode="before")
    @classmethod
    def check_start_time(cls, v):
        return parse_time(v, "startTime")

    @field_validator("end_time", mode="before")
    @classmethod
    def check_end_time(cls, v):
        return parse_time(v, "endTime")

    @field_validator("exclude_appointment_id")
    @classmethod
    def check_exclude_id(cls, v):
        if v is not None and not is_valid_uuid(v):
            raise ValueError("Invalid Appointment UUID format")
        return v.lower() if v else v


class StatusUpdate(CamelRequest):
    """Status is checked against the whitelist in the service so the 400 can list valid values"""

    status: Optional[str] = None


class AppointmentResponse(CamelModel):
    appointment_id: str
    agent_id: str
    client_id: str
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    client_email: Optional[str] = None
    title: str
    description: Optional[str] = None
    appointment_date: date
    start_time: time
    end_time: time
    location: Optional[str] = None
    type: str
    status: str
    priority: str
    notes: Optional[str] = None
    reminder_set: bool = False
    created_date: Optional[datetime] = None
    modified_date: Optional[datetime] = None


class ConflictResult(CamelModel):
    has_conflict: bool
    conflict_count: int
    conflicts: list[AppointmentResponse] = []


class AppointmentStatistics(CamelModel):
    today_appointments: int = 0
    week_appointments: int = 0
    month_appointments: int = 0
    completed_appointments: int = 0
    upcoming_appointments: int = 0
    cancelled_appointments: int = 0
