"""Policy domain schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import field_validator

from ...models import POLICY_STATUSES
from ...shared.schemas import CamelModel, CamelRequest
from ...shared.validators import is_valid_uuid, parse_date, validate_choice


def _uuid(v, name):
    if v is not None and not is_valid_uuid(v):
        raise ValueError(f"Invalid {name} UUID format")
    return v.lower() if v else v


class PolicyFields(CamelRequest):
    client_id: Optional[str] = None
    policy_name: Optional[str] = None
    policy_number: Optional[str] = None
    company_id: Optional[str] = None
    type_id: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    premium: Optional[float] = None
    notes: Optional[str] = None

    @field_validator("client_id")
    @classmethod
    def check_client_id(cls, v):
        return _uuid(v, "Client")

    @field_validator("company_id")
    @classmethod
    def check_company_id(cls, v):
        return _uuid(v, "Company")

    @field_validator("type_id")
    @classmethod
    def check_type_id(cls, v):
        return _uuid(v, "Policy Type")

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, POLICY_STATUSES, "status")

    @field_validator("start_date", mode="before")
    @classmethod
    def check_start_date(cls, v):
        return parse_date(v, "startDate")

    @field_validator("end_date", mode="before")
    @classmethod
    def check_end_date(cls, v):
        return parse_date(v, "endDate")

    @field_validator("premium")
    @classmethod
    def check_premium(cls, v):
        if v is not None and v < 0:
            raise ValueError("premium cannot be negative")
        return v


class PolicyCreate(PolicyFields):
    pass


class PolicyUpdate(PolicyFields):
    pass


class PolicyRenew(CamelRequest):
    new_end_date: Optional[date] = None
    new_start_date: Optional[date] = None
    premium: Optional[float] = None
    notes: Optional[str] = None

    @field_validator("new_end_date", mode="before")
    @classmethod
    def check_end_date(cls, v):
        return parse_date(v, "newEndDate")

    @field_validator("new_start_date", mode="before")
    @classmethod
    def check_start_date(cls, v):
        return parse_date(v, "newStartDate")


class PolicyResponse(CamelModel):
    policy_id: str
    agent_id: str
    client_id: str
    client_name: Optional[str] = None
    policy_name: str
    policy_number: Optional[str] = None
    company_id: Optional[str] = None
    company_name: Optional[str] = None
    type_id: Optional[str] = None
    type_name: Optional[str] = None
    status: str
    start_date: date
    end_date: date
    days_until_expiry: int
    premium: Optional[float] = None
    notes: Optional[str] = None
    created_date: Optional[datetime] = None
    modified_date: Optional[datetime] = None
