"""Analytics repository - activity log, dashboard counters and view cache"""

from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import extract, or_
from sqlalchemy.orm import Session

from ...models import (
    ActivityLog,
    Appointment,
    Client,
    ClientPolicy,
    DashboardStatistics,
    DashboardViewCache,
    Reminder,
)
from ...shared.dates import month_bounds, week_bounds

EXPIRING_POLICY_DAYS = 30


class AnalyticsRepository:
    """Repository for analytics database operations"""

    @staticmethod
    def create_activity(db: Session, **data) -> ActivityLog:
        activity = ActivityLog(**data)
        db.add(activity)
        db.commit()
        db.refresh(activity)
        return activity

    @staticmethod
    def get_activities(db: Session, agent_id: str, limit: int = 50) -> list[ActivityLog]:
        return (
            db.query(ActivityLog)
            .filter(ActivityLog.agent_id == agent_id)
            .order_by(ActivityLog.activity_date.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_activities_between(db: Session, agent_id: str, start: datetime, end: datetime) -> list[ActivityLog]:
        return (
            db.query(ActivityLog)
            .filter(
                ActivityLog.agent_id == agent_id,
                ActivityLog.activity_date >= start,
                ActivityLog.activity_date < end,
            )
            .order_by(ActivityLog.activity_date.desc())
            .all()
        )

    @staticmethod
    def compute_counters(db: Session, agent_id: str, today: date) -> dict:
        """Live dashboard counters for one agent"""
        week_start, week_end = week_bounds(today)
        month_start, month_end = month_bounds(today.year, today.month)

        clients = db.query(Client).filter(Client.agent_id == agent_id, Client.is_active.is_(True))
        appointments = db.query(Appointment).filter(
            Appointment.agent_id == agent_id, Appointment.is_active.is_(True)
        )
        policies = db.query(ClientPolicy).filter(
            ClientPolicy.agent_id == agent_id, ClientPolicy.is_active.is_(True)
        )

        return {
            "total_clients": clients.filter(Client.is_client.is_(True)).count(),
            "total_prospects": clients.filter(Client.is_client.is_(False)).count(),
            "active_policies": policies.filter(ClientPolicy.status == "Active").count(),
            "today_appointments": appointments.filter(
                Appointment.appointment_date == today, Appointment.status != "Cancelled"
            ).count(),
            "week_appointments": appointments.filter(
                Appointment.appointment_date.between(week_start, week_end),
                Appointment.status != "Cancelled",
            ).count(),
            "month_appointments": appointments.filter(
                Appointment.appointment_date.between(month_start, month_end),
                Appointment.status != "Cancelled",
            ).count(),
            "completed_appointments": appointments.filter(Appointment.status == "Completed").count(),
            "pending_reminders": db.query(Reminder)
            .filter(
                Reminder.agent_id == agent_id,
                Reminder.is_active.is_(True),
                Reminder.status == "Active",
            )
            .count(),
            "today_birthdays": clients.filter(
                Client.date_of_birth.isnot(None),
                extract("month", Client.date_of_birth) == today.month,
                extract("day", Client.date_of_birth) == today.day,
            ).count(),
            "expiring_policies": policies.filter(
                ClientPolicy.status == "Active",
                ClientPolicy.end_date.between(today, today + timedelta(days=EXPIRING_POLICY_DAYS)),
            ).count(),
        }

    @staticmethod
    def upsert_statistics(db: Session, agent_id: str, stat_date: date, counters: dict) -> DashboardStatistics:
        snapshot = (
            db.query(DashboardStatistics)
            .filter(DashboardStatistics.agent_id == agent_id, DashboardStatistics.stat_date == stat_date)
            .first()
        )
        if snapshot is None:
            snapshot = DashboardStatistics(agent_id=agent_id, stat_date=stat_date)
            db.add(snapshot)
        for key, value in counters.items():
            setattr(snapshot, key, value)
        db.commit()
        db.refresh(snapshot)
        return snapshot

    @staticmethod
    def get_cached_view(
        db: Session, agent_id: str, view_name: str, cache_date: date, now: datetime
    ) -> Optional[DashboardViewCache]:
        return (
            db.query(DashboardViewCache)
            .filter(
                DashboardViewCache.agent_id == agent_id,
                DashboardViewCache.view_name == view_name,
                DashboardViewCache.cache_date == cache_date,
                or_(DashboardViewCache.expires_at.is_(None), DashboardViewCache.expires_at > now),
            )
            .first()
        )

    @staticmethod
    def set_cached_view(
        db: Session,
        agent_id: str,
        view_name: str,
        cache_date: date,
        cache_data: str,
        expires_at: Optional[datetime],
    ) -> DashboardViewCache:
        entry = (
            db.query(DashboardViewCache)
            .filter(
                DashboardViewCache.agent_id == agent_id,
                DashboardViewCache.view_name == view_name,
                DashboardViewCache.cache_date == cache_date,
            )
            .first()
        )
        if entry is None:
            entry = DashboardViewCache(agent_id=agent_id, view_name=view_name, cache_date=cache_date)
            db.add(entry)
        entry.cache_data = cache_data
        entry.expires_at = expires_at
        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def clear_expired_cache(db: Session, now: datetime) -> int:
        deleted = (
            db.query(DashboardViewCache)
            .filter(DashboardViewCache.expires_at.isnot(None), DashboardViewCache.expires_at < now)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted
