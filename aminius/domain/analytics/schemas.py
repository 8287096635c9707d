"""Analytics domain schemas"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import field_validator

from ...shared.schemas import CamelModel, CamelRequest
from ...shared.validators import is_valid_uuid, parse_date


class ActivityLogCreate(CamelRequest):
    agent_id: Optional[str] = None
    activity_type: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    description: Optional[str] = None
    additional_data: Optional[Any] = None

    @field_validator("agent_id")
    @classmethod
    def check_agent_id(cls, v):
        if v is not None and not is_valid_uuid(v):
            raise ValueError("Invalid Agent UUID format")
        return v


class ActivityLogResponse(CamelModel):
    activity_id: str
    agent_id: str
    activity_type: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    description: Optional[str] = None
    additional_data: Optional[Any] = None
    activity_date: Optional[datetime] = None


class DashboardStatisticsResponse(CamelModel):
    agent_id: str
    stat_date: date
    total_clients: int = 0
    total_prospects: int = 0
    active_policies: int = 0
    today_appointments: int = 0
    week_appointments: int = 0
    month_appointments: int = 0
    completed_appointments: int = 0
    pending_reminders: int = 0
    today_birthdays: int = 0
    expiring_policies: int = 0
    updated_date: Optional[datetime] = None


class DashboardCacheSet(CamelRequest):
    agent_id: Optional[str] = None
    view_name: Optional[str] = None
    cache_data: Optional[Any] = None
    cache_date: Optional[date] = None
    expiration_hours: Optional[float] = None

    @field_validator("agent_id")
    @classmethod
    def check_agent_id(cls, v):
        if v is not None and not is_valid_uuid(v):
            raise ValueError("Invalid Agent UUID format")
        return v

    @field_validator("cache_date", mode="before")
    @classmethod
    def check_cache_date(cls, v):
        return parse_date(v, "cacheDate")

    @field_validator("expiration_hours")
    @classmethod
    def check_expiration(cls, v):
        if v is not None and v <= 0:
            raise ValueError("expirationHours must be positive")
        return v


class DashboardCacheResponse(CamelModel):
    agent_id: str
    view_name: str
    cache_date: date
    cache_data: str
    expires_at: Optional[datetime] = None
