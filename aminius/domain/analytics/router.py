"""Analytics router - activity log, dashboard statistics and view cache"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...errors import NotFoundError
from ...shared.dependencies import valid_agent_id
from ...shared.responses import success
from ...shared.validators import parse_date_param, require_fields
from .schemas import (
    ActivityLogCreate,
    ActivityLogResponse,
    DashboardCacheResponse,
    DashboardCacheSet,
    DashboardStatisticsResponse,
)
from .service import AnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    """Dependency injection for AnalyticsService"""
    return AnalyticsService(db)


# ============================================================================
# ACTIVITY LOG
# ============================================================================


@router.post("/activity-log", status_code=201)
async def create_activity_log(
    data: ActivityLogCreate,
    service: AnalyticsService = Depends(get_analytics_service),
):
    activity = service.create_activity(data)
    return success(ActivityLogResponse.model_validate(activity), "Activity logged")


@router.get("/activity-log/{agent_id}")
async def get_activity_logs(
    agent_id: str = Depends(valid_agent_id),
    limit: int = Query(50, ge=1, le=500),
    service: AnalyticsService = Depends(get_analytics_service),
):
    activities = service.get_activities(agent_id, limit)
    return success([ActivityLogResponse.model_validate(a) for a in activities])


@router.get("/activity-log/{agent_id}/date-range")
async def get_activity_logs_by_date_range(
    agent_id: str = Depends(valid_agent_id),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    require_fields({"startDate": start_date, "endDate": end_date}, ("startDate", "endDate"))
    activities = service.get_activities_between(
        agent_id,
        parse_date_param(start_date, "startDate"),
        parse_date_param(end_date, "endDate"),
    )
    return success([ActivityLogResponse.model_validate(a) for a in activities])


# ============================================================================
# DASHBOARD
# ============================================================================


@router.get("/dashboard-statistics/{agent_id}")
async def get_dashboard_statistics(
    agent_id: str = Depends(valid_agent_id),
    service: AnalyticsService = Depends(get_analytics_service),
):
    snapshot = service.get_dashboard_statistics(agent_id)
    return success(DashboardStatisticsResponse.model_validate(snapshot))


@router.delete("/dashboard-cache/expired")
async def clear_expired_cache(service: AnalyticsService = Depends(get_analytics_service)):
    deleted = service.clear_expired_cache()
    return success({"deleted": deleted}, "Expired cache cleared")


@router.post("/dashboard-cache")
async def set_cached_view(
    data: DashboardCacheSet,
    service: AnalyticsService = Depends(get_analytics_service),
):
    entry = service.set_cached_view(data)
    return success(DashboardCacheResponse.model_validate(entry), "View cached")


@router.get("/dashboard-cache/{agent_id}/{view_name}")
async def get_cached_view(
    view_name: str,
    agent_id: str = Depends(valid_agent_id),
    cache_date: Optional[str] = Query(None, alias="cacheDate"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    entry = service.get_cached_view(agent_id, view_name, parse_date_param(cache_date, "cacheDate"))
    if entry is None:
        raise NotFoundError("Cached view not found or expired")
    return success(DashboardCacheResponse.model_validate(entry))
