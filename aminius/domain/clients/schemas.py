"""Client domain schemas - Pydantic models for validation"""

from datetime import date, datetime, time
from typing import Optional

from pydantic import field_validator

from ...shared.schemas import CamelModel, CamelRequest
from ...shared.validators import parse_date, validate_email, validate_phone


class ClientFields(CamelRequest):
    first_name: Optional[str] = None
    surname: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    national_id: Optional[str] = None
    date_of_birth: Optional[date] = None
    is_client: Optional[bool] = None
    insurance_type: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone_number")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def check_date_of_birth(cls, v):
        return parse_date(v, "dateOfBirth")


class ClientCreate(ClientFields):
    """Schema for creating a new client or prospect"""


class ClientUpdate(ClientFields):
    """Schema for updating an existing client (partial)"""


class ClientResponse(CamelModel):
    client_id: str
    agent_id: str
    first_name: str
    surname: str
    last_name: str
    full_name: str
    phone_number: str
    email: str
    address: Optional[str] = None
    national_id: Optional[str] = None
    date_of_birth: Optional[date] = None
    age: Optional[int] = None
    is_client: bool
    insurance_type: Optional[str] = None
    notes: Optional[str] = None
    created_date: Optional[datetime] = None
    modified_date: Optional[datetime] = None


class ClientPolicySummary(CamelModel):
    policy_id: str
    policy_name: str
    policy_number: Optional[str] = None
    status: str
    start_date: date
    end_date: date
    premium: Optional[float] = None


class ClientAppointmentSummary(CamelModel):
    appointment_id: str
    title: str
    appointment_date: date
    start_time: time
    end_time: time
    type: str
    status: str


class ClientReminderSummary(CamelModel):
    reminder_id: str
    title: str
    reminder_type: str
    reminder_date: date
    reminder_time: Optional[time] = None
    priority: str


class ClientDetailResponse(ClientResponse):
    policies: list[ClientPolicySummary] = []
    recent_appointments: list[ClientAppointmentSummary] = []
    active_reminders: list[ClientReminderSummary] = []


class BirthdayResponse(CamelModel):
    client_id: str
    full_name: str
    phone_number: str
    email: str
    date_of_birth: date
    age: int
    insurance_type: Optional[str] = None
