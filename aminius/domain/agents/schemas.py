"""Agent domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from ...shared.schemas import CamelModel, CamelRequest
from ...shared.validators import validate_email, validate_phone

MIN_PASSWORD_LENGTH = 8


def _check_password(v):
    if v is not None and len(v) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    return v


class AgentRegister(CamelRequest):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None
    avatar: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return _check_password(v)


class AgentLogin(CamelRequest):
    email: Optional[str] = None
    password: Optional[str] = None


class AgentUpdate(CamelRequest):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)


class AgentSettingsUpdate(CamelRequest):
    dark_mode: Optional[bool] = None
    email_notifications: Optional[bool] = None
    sms_notifications: Optional[bool] = None
    whatsapp_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None
    sound_enabled: Optional[bool] = None


class ChangePassword(CamelRequest):
    old_password: Optional[str] = None
    new_password: Optional[str] = None

    @field_validator("new_password")
    @classmethod
    def check_password(cls, v):
        return _check_password(v)


class PasswordResetRequest(CamelRequest):
    email: Optional[str] = None


class PasswordResetConfirm(CamelRequest):
    token: Optional[str] = None
    new_password: Optional[str] = None

    @field_validator("new_password")
    @classmethod
    def check_password(cls, v):
        return _check_password(v)


class AgentSettingsResponse(CamelModel):
    dark_mode: bool
    email_notifications: bool
    sms_notifications: bool
    whatsapp_notifications: bool
    push_notifications: bool
    sound_enabled: bool


class AgentResponse(CamelModel):
    agent_id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    avatar: Optional[str] = None
    created_date: Optional[datetime] = None
    modified_date: Optional[datetime] = None
    settings: Optional[AgentSettingsResponse] = None


class InsuranceCompanyResponse(CamelModel):
    company_id: str
    company_name: str


class PolicyTypeResponse(CamelModel):
    type_id: str
    type_name: str
