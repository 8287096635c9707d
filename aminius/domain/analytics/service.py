"""Analytics service - activity tracking, dashboard counters and cached views"""

import json
import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import ValidationError
from ...models import ActivityLog, DashboardStatistics, DashboardViewCache
from ...shared.dates import local_today
from ...shared.validators import require_fields
from .repository import AnalyticsRepository
from .schemas import ActivityLogCreate, DashboardCacheSet

logger = logging.getLogger(__name__)


def record_activity(
    db: Session,
    agent_id: str,
    activity_type: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    description: Optional[str] = None,
    additional_data: Optional[Any] = None,
) -> None:
    """Log an activity without letting a logging failure break the caller"""
    try:
        AnalyticsRepository.create_activity(
            db,
            agent_id=agent_id,
            activity_type=activity_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            additional_data=additional_data,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"⚠️ Failed to record {activity_type} activity for agent {agent_id}: {e}")


class AnalyticsService:
    """Service layer for analytics"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AnalyticsRepository()

    def create_activity(self, data: ActivityLogCreate) -> ActivityLog:
        require_fields(
            {"agentId": data.agent_id, "activityType": data.activity_type},
            ("agentId", "activityType"),
        )
        return self.repo.create_activity(
            self.db,
            agent_id=data.agent_id,
            activity_type=data.activity_type,
            entity_type=data.entity_type,
            entity_id=data.entity_id,
            description=data.description,
            additional_data=data.additional_data,
        )

    def get_activities(self, agent_id: str, limit: int) -> list[ActivityLog]:
        return self.repo.get_activities(self.db, agent_id, limit)

    def get_activities_between(self, agent_id: str, start_date: date, end_date: date) -> list[ActivityLog]:
        if end_date < start_date:
            raise ValidationError("endDate must be on or after startDate")
        # Inclusive of the whole end day
        start = datetime.combine(start_date, datetime.min.time())
        end = datetime.combine(end_date + timedelta(days=1), datetime.min.time())
        return self.repo.get_activities_between(self.db, agent_id, start, end)

    def get_dashboard_statistics(self, agent_id: str) -> DashboardStatistics:
        """Compute live counters and store them as today's snapshot"""
        today = local_today()
        counters = self.repo.compute_counters(self.db, agent_id, today)
        return self.repo.upsert_statistics(self.db, agent_id, today, counters)

    def get_cached_view(self, agent_id: str, view_name: str, cache_date: Optional[date]) -> Optional[DashboardViewCache]:
        return self.repo.get_cached_view(
            self.db, agent_id, view_name, cache_date or local_today(), datetime.utcnow()
        )

    def set_cached_view(self, data: DashboardCacheSet) -> DashboardViewCache:
        require_fields(
            {"agentId": data.agent_id, "viewName": data.view_name, "cacheData": data.cache_data},
            ("agentId", "viewName", "cacheData"),
        )
        cache_data = data.cache_data if isinstance(data.cache_data, str) else json.dumps(data.cache_data)
        expires_at = (
            datetime.utcnow() + timedelta(hours=data.expiration_hours) if data.expiration_hours else None
        )
        return self.repo.set_cached_view(
            self.db,
            data.agent_id,
            data.view_name,
            data.cache_date or local_today(),
            cache_data,
            expires_at,
        )

    def clear_expired_cache(self) -> int:
        deleted = self.repo.clear_expired_cache(self.db, datetime.utcnow())
        if deleted:
            logger.info(f"🧹 Cleared {deleted} expired dashboard cache rows")
        return deleted
