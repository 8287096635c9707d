"""Appointment repository - Database operations for appointments"""

from datetime import date, time
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, Client
from ...shared.queries import LIKE_ESCAPE, contains_pattern


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def _active(db: Session, agent_id: str):
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.client))
            .filter(Appointment.agent_id == agent_id, Appointment.is_active.is_(True))
        )

    @staticmethod
    def get_by_id(db: Session, appointment_id: str, agent_id: str) -> Optional[Appointment]:
        return (
            AppointmentRepository._active(db, agent_id)
            .filter(Appointment.appointment_id == appointment_id)
            .first()
        )

    @staticmethod
    def create(db: Session, agent_id: str, **data) -> Appointment:
        appointment = Appointment(agent_id=agent_id, **data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def update(db: Session, appointment: Appointment, **updates) -> Appointment:
        for key, value in updates.items():
            if hasattr(appointment, key):
                setattr(appointment, key, value)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def soft_delete(db: Session, appointment_id: str, agent_id: str) -> int:
        """Returns rows affected"""
        affected = (
            db.query(Appointment)
            .filter(
                Appointment.appointment_id == appointment_id,
                Appointment.agent_id == agent_id,
                Appointment.is_active.is_(True),
            )
            .update({Appointment.is_active: False}, synchronize_session=False)
        )
        db.commit()
        return affected

    @staticmethod
    def find_conflicts(
        db: Session,
        agent_id: str,
        appointment_date: date,
        start_time: time,
        end_time: time,
        exclude_appointment_id: Optional[str] = None,
    ) -> list[Appointment]:
        """Active, non-cancelled appointments whose [start, end) overlaps the requested interval"""
        query = AppointmentRepository._active(db, agent_id).filter(
            Appointment.appointment_date == appointment_date,
            Appointment.status != "Cancelled",
            Appointment.start_time < end_time,
            Appointment.end_time > start_time,
        )
        if exclude_appointment_id:
            query = query.filter(Appointment.appointment_id != exclude_appointment_id)
        return query.order_by(Appointment.start_time).all()

    @staticmethod
    def get_filtered(
        db: Session,
        agent_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
        appointment_type: Optional[str] = None,
        priority: Optional[str] = None,
        client_id: Optional[str] = None,
        search_term: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 50,
    ) -> tuple[list[Appointment], int]:
        query = AppointmentRepository._active(db, agent_id)
        if start_date:
            query = query.filter(Appointment.appointment_date >= start_date)
        if end_date:
            query = query.filter(Appointment.appointment_date <= end_date)
        if status:
            query = query.filter(Appointment.status == status)
        if appointment_type:
            query = query.filter(Appointment.type == appointment_type)
        if priority:
            query = query.filter(Appointment.priority == priority)
        if client_id:
            query = query.filter(Appointment.client_id == client_id)
        if search_term:
            query = query.join(Client, Client.client_id == Appointment.client_id).filter(
                AppointmentRepository.search_filter(search_term)
            )

        total = query.count()
        appointments = (
            query.order_by(Appointment.appointment_date.desc(), Appointment.start_time)
            .offset((page_number - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return appointments, total

    @staticmethod
    def search_filter(term: str):
        pattern = contains_pattern(term)
        return or_(
            Appointment.title.ilike(pattern, escape=LIKE_ESCAPE),
            Appointment.description.ilike(pattern, escape=LIKE_ESCAPE),
            Appointment.location.ilike(pattern, escape=LIKE_ESCAPE),
            Appointment.notes.ilike(pattern, escape=LIKE_ESCAPE),
            Client.first_name.ilike(pattern, escape=LIKE_ESCAPE),
            Client.surname.ilike(pattern, escape=LIKE_ESCAPE),
            Client.last_name.ilike(pattern, escape=LIKE_ESCAPE),
        )

    @staticmethod
    def search(db: Session, agent_id: str, term: str, limit: int = 50) -> list[Appointment]:
        return (
            AppointmentRepository._active(db, agent_id)
            .join(Client, Client.client_id == Appointment.client_id)
            .filter(AppointmentRepository.search_filter(term))
            .order_by(Appointment.appointment_date.desc(), Appointment.start_time)
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_between(db: Session, agent_id: str, start: date, end: date) -> list[Appointment]:
        """Appointments with start <= date <= end, in calendar order"""
        return (
            AppointmentRepository._active(db, agent_id)
            .filter(Appointment.appointment_date >= start, Appointment.appointment_date <= end)
            .order_by(Appointment.appointment_date, Appointment.start_time)
            .all()
        )

    @staticmethod
    def get_for_all_agents_on(db: Session, day: date) -> list[Appointment]:
        """Every active, non-cancelled appointment on ``day`` (daily digest)"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.client), joinedload(Appointment.agent))
            .filter(
                Appointment.appointment_date == day,
                Appointment.is_active.is_(True),
                Appointment.status != "Cancelled",
            )
            .order_by(Appointment.agent_id, Appointment.start_time)
            .all()
        )

    @staticmethod
    def count(
        db: Session,
        agent_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        statuses: Optional[tuple] = None,
        exclude_statuses: Optional[tuple] = None,
    ) -> int:
        query = db.query(Appointment).filter(
            Appointment.agent_id == agent_id, Appointment.is_active.is_(True)
        )
        if start:
            query = query.filter(Appointment.appointment_date >= start)
        if end:
            query = query.filter(Appointment.appointment_date <= end)
        if statuses:
            query = query.filter(Appointment.status.in_(statuses))
        if exclude_statuses:
            query = query.filter(Appointment.status.notin_(exclude_statuses))
        return query.count()

    @staticmethod
    def client_belongs_to_agent(db: Session, client_id: str, agent_id: str) -> bool:
        return (
            db.query(Client.client_id)
            .filter(
                and_(
                    Client.client_id == client_id,
                    Client.agent_id == agent_id,
                    Client.is_active.is_(True),
                )
            )
            .first()
            is not None
        )
