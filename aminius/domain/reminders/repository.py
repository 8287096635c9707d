"""Reminder repository - Database operations for reminders"""

from datetime import date
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Reminder, ReminderSetting
from ...shared.queries import LIKE_ESCAPE, contains_pattern


class ReminderRepository:
    """Repository for reminder database operations"""

    @staticmethod
    def _active(db: Session, agent_id: str):
        return db.query(Reminder).filter(Reminder.agent_id == agent_id, Reminder.is_active.is_(True))

    @staticmethod
    def get_by_id(db: Session, reminder_id: str, agent_id: str) -> Optional[Reminder]:
        return ReminderRepository._active(db, agent_id).filter(Reminder.reminder_id == reminder_id).first()

    @staticmethod
    def create(db: Session, agent_id: str, **data) -> Reminder:
        reminder = Reminder(agent_id=agent_id, **data)
        db.add(reminder)
        db.commit()
        db.refresh(reminder)
        return reminder

    @staticmethod
    def update(db: Session, reminder: Reminder, **updates) -> Reminder:
        for key, value in updates.items():
            if hasattr(reminder, key):
                setattr(reminder, key, value)
        db.commit()
        db.refresh(reminder)
        return reminder

    @staticmethod
    def get_filtered(
        db: Session,
        agent_id: str,
        reminder_type: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        client_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page_number: int = 1,
        page_size: int = 50,
    ) -> tuple[list[Reminder], int]:
        query = ReminderRepository._active(db, agent_id)
        if reminder_type:
            query = query.filter(Reminder.reminder_type == reminder_type)
        if status:
            query = query.filter(Reminder.status == status)
        if priority:
            query = query.filter(Reminder.priority == priority)
        if client_id:
            query = query.filter(Reminder.client_id == client_id)
        if start_date:
            query = query.filter(Reminder.reminder_date >= start_date)
        if end_date:
            query = query.filter(Reminder.reminder_date <= end_date)

        total = query.count()
        reminders = (
            query.order_by(Reminder.reminder_date, Reminder.reminder_time)
            .offset((page_number - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return reminders, total

    @staticmethod
    def get_between(
        db: Session, agent_id: str, start: date, end: date, status: Optional[str] = "Active"
    ) -> list[Reminder]:
        query = ReminderRepository._active(db, agent_id).filter(Reminder.reminder_date.between(start, end))
        if status:
            query = query.filter(Reminder.status == status)
        return query.order_by(Reminder.reminder_date, Reminder.reminder_time).all()

    @staticmethod
    def get_completed(db: Session, agent_id: str, limit: int = 50) -> list[Reminder]:
        return (
            ReminderRepository._active(db, agent_id)
            .filter(Reminder.status == "Completed")
            .order_by(Reminder.completed_date.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def search(db: Session, agent_id: str, term: str, limit: int = 50) -> list[Reminder]:
        pattern = contains_pattern(term)
        return (
            ReminderRepository._active(db, agent_id)
            .filter(
                or_(
                    Reminder.title.ilike(pattern, escape=LIKE_ESCAPE),
                    Reminder.description.ilike(pattern, escape=LIKE_ESCAPE),
                    Reminder.client_name.ilike(pattern, escape=LIKE_ESCAPE),
                    Reminder.notes.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
            .order_by(Reminder.reminder_date.desc())
            .limit(limit)
            .all()
        )


    @staticmethod
    def get_statistics(db: Session, agent_id: str, today: date, upcoming_end: date) -> dict:
        base = ReminderRepository._active(db, agent_id)
        active = base.filter(Reminder.status == "Active")
        return {
            "totalActive": active.count(),
            "totalCompleted": base.filter(Reminder.status == "Completed").count(),
            "todayReminders": active.filter(Reminder.reminder_date == today).count(),
            "upcomingReminders": active.filter(Reminder.reminder_date.between(today, upcoming_end)).count(),
            "highPriority": active.filter(Reminder.priority == "High").count(),
            "overdue": active.filter(Reminder.reminder_date < today).count(),
        }

    @staticmethod
    def exists_generated(
        db: Session, agent_id: str, reminder_type: str, client_id: str, title: str, reminder_date: date
    ) -> bool:
        """A generated reminder is identified by type, client, title and date"""
        return (
            ReminderRepository._active(db, agent_id)
            .filter(
                Reminder.reminder_type == reminder_type,
                Reminder.client_id == client_id,
                Reminder.title == title,
                Reminder.reminder_date == reminder_date,
            )
            .first()
            is not None
        )

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @staticmethod
    def get_settings(db: Session, agent_id: str) -> list[ReminderSetting]:
        return db.query(ReminderSetting).filter(ReminderSetting.agent_id == agent_id).all()

    @staticmethod
    def get_setting(db: Session, agent_id: str, reminder_type: str) -> Optional[ReminderSetting]:
        return (
            db.query(ReminderSetting)
            .filter(ReminderSetting.agent_id == agent_id, ReminderSetting.reminder_type == reminder_type)
            .first()
        )

    @staticmethod
    def save_setting(db: Session, agent_id: str, reminder_type: str, **values) -> ReminderSetting:
        """Upsert on (agent_id, reminder_type)"""
        setting = ReminderRepository.get_setting(db, agent_id, reminder_type)
        if setting is None:
            setting = ReminderSetting(agent_id=agent_id, reminder_type=reminder_type)
            db.add(setting)
        for key, value in values.items():
            setattr(setting, key, value)
        db.commit()
        db.refresh(setting)
        return setting
