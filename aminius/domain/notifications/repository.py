"""Notification repository - Database operations for the outbox"""

from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from ...models import Notification


class NotificationRepository:
    """Repository for notification outbox operations"""

    @staticmethod
    def create(db: Session, **data) -> Notification:
        notification = Notification(**data)
        db.add(notification)
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    def get_by_id(db: Session, notification_id: str, agent_id: Optional[str] = None) -> Optional[Notification]:
        query = db.query(Notification).filter(Notification.notification_id == notification_id)
        if agent_id:
            query = query.filter(Notification.agent_id == agent_id)
        return query.first()

    @staticmethod
    def get_many(db: Session, notification_ids: list[str]) -> list[Notification]:
        if not notification_ids:
            return []
        return db.query(Notification).filter(Notification.notification_id.in_(notification_ids)).all()

    @staticmethod
    def due_filter(now: datetime):
        """Pending rows past their schedule and retry time, or Sending rows whose claim has lapsed"""
        return or_(
            and_(
                Notification.status == "Pending",
                or_(Notification.scheduled_time.is_(None), Notification.scheduled_time <= now),
                or_(Notification.next_attempt_at.is_(None), Notification.next_attempt_at <= now),
            ),
            and_(Notification.status == "Sending", Notification.next_attempt_at <= now),
        )

    @staticmethod
    def get_due(db: Session, now: datetime, limit: int) -> list[Notification]:
        return (
            db.query(Notification)
            .filter(NotificationRepository.due_filter(now))
            .order_by(Notification.created_date.asc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def claim(db: Session, notification: Notification, now: datetime, lease_seconds: int) -> bool:
        """
        Mark a due row as Sending with a conditional UPDATE.

        Only one drainer can win the row; the others see a rowcount of 0.
        The lease is kept in next_attempt_at so a crashed drainer's row is
        picked up again once it lapses.
        """
        claimed = (
            db.query(Notification)
            .filter(
                Notification.notification_id == notification.notification_id,
                NotificationRepository.due_filter(now),
            )
            .update(
                {"status": "Sending", "next_attempt_at": now + timedelta(seconds=lease_seconds)},
                synchronize_session=False,
            )
        )
        db.commit()
        if claimed:
            db.refresh(notification)
        return claimed == 1

    @staticmethod
    def get_history(
        db: Session,
        agent_id: str,
        channel: Optional[str] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page_number: int = 1,
        page_size: int = 50,
    ) -> tuple[list[Notification], int]:
        query = db.query(Notification).filter(Notification.agent_id == agent_id)
        if channel:
            query = query.filter(Notification.channel == channel)
        if status:
            query = query.filter(Notification.status == status)
        if start_date:
            query = query.filter(Notification.created_date >= datetime.combine(start_date, datetime.min.time()))
        if end_date:
            query = query.filter(
                Notification.created_date < datetime.combine(end_date + timedelta(days=1), datetime.min.time())
            )

        total = query.count()
        items = (
            query.order_by(Notification.created_date.desc())
            .offset((page_number - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return items, total

    @staticmethod
    def update(db: Session, notification: Notification, **updates) -> Notification:
        for key, value in updates.items():
            setattr(notification, key, value)
        db.commit()
        db.refresh(notification)
        return notification
