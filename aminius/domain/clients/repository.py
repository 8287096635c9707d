"""Client repository - Database operations for clients and prospects"""

from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import extract, func, or_
from sqlalchemy.orm import Session

from ...models import Appointment, Client, ClientPolicy, Reminder
from ...shared.queries import LIKE_ESCAPE, contains_pattern


def client_search_filter(term: str):
    pattern = contains_pattern(term)
    return or_(
        Client.first_name.ilike(pattern, escape=LIKE_ESCAPE),
        Client.surname.ilike(pattern, escape=LIKE_ESCAPE),
        Client.last_name.ilike(pattern, escape=LIKE_ESCAPE),
        Client.email.ilike(pattern, escape=LIKE_ESCAPE),
        Client.phone_number.ilike(pattern, escape=LIKE_ESCAPE),
        Client.national_id.ilike(pattern, escape=LIKE_ESCAPE),
        Client.insurance_type.ilike(pattern, escape=LIKE_ESCAPE),
    )


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def _active(db: Session, agent_id: str):
        return db.query(Client).filter(Client.agent_id == agent_id, Client.is_active.is_(True))

    @staticmethod
    def get_client_by_id(db: Session, client_id: str, agent_id: str) -> Optional[Client]:
        return ClientRepository._active(db, agent_id).filter(Client.client_id == client_id).first()

    @staticmethod
    def create_client(db: Session, agent_id: str, **client_data) -> Client:
        client = Client(agent_id=agent_id, **client_data)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def update_client(db: Session, client: Client, **updates) -> Client:
        """Update a client with provided fields"""
        for key, value in updates.items():
            if hasattr(client, key):
                setattr(client, key, value)
        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def get_clients(
        db: Session,
        agent_id: str,
        filter_type: str = "all",
        insurance_type: Optional[str] = None,
        search_term: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 50,
    ) -> tuple[list[Client], int]:
        query = ClientRepository._active(db, agent_id)
        if filter_type == "clients":
            query = query.filter(Client.is_client.is_(True))
        elif filter_type == "prospects":
            query = query.filter(Client.is_client.is_(False))
        if insurance_type:
            query = query.filter(Client.insurance_type == insurance_type)
        if search_term:
            query = query.filter(client_search_filter(search_term))

        total = query.count()
        clients = (
            query.order_by(Client.first_name, Client.surname)
            .offset((page_number - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return clients, total

    @staticmethod
    def search_clients(db: Session, agent_id: str, term: str, limit: Optional[int] = None) -> list[Client]:
        query = (
            ClientRepository._active(db, agent_id)
            .filter(client_search_filter(term))
            .order_by(Client.first_name, Client.surname)
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def get_birthdays(db: Session, agent_id: Optional[str], day: date) -> list[Client]:
        """Active clients born on this month/day (all agents when agent_id is None)"""
        query = db.query(Client).filter(
            Client.is_active.is_(True),
            Client.date_of_birth.isnot(None),
            extract("month", Client.date_of_birth) == day.month,
            extract("day", Client.date_of_birth) == day.day,
        )
        if agent_id:
            query = query.filter(Client.agent_id == agent_id)
        return query.order_by(Client.first_name).all()

    @staticmethod
    def get_statistics(db: Session, agent_id: str, today: date) -> dict:
        base = ClientRepository._active(db, agent_id)
        week_ago = datetime.combine(today - timedelta(days=7), datetime.min.time())
        month_start = datetime.combine(today.replace(day=1), datetime.min.time())

        policies = db.query(ClientPolicy).filter(
            ClientPolicy.agent_id == agent_id,
            ClientPolicy.is_active.is_(True),
            ClientPolicy.status == "Active",
        )
        with_dob = base.filter(Client.date_of_birth.isnot(None))

        return {
            "totalContacts": base.count(),
            "totalClients": base.filter(Client.is_client.is_(True)).count(),
            "totalProspects": base.filter(Client.is_client.is_(False)).count(),
            "todayBirthdays": with_dob.filter(
                extract("month", Client.date_of_birth) == today.month,
                extract("day", Client.date_of_birth) == today.day,
            ).count(),
            "monthBirthdays": with_dob.filter(extract("month", Client.date_of_birth) == today.month).count(),
            "newThisWeek": base.filter(Client.created_date >= week_ago).count(),
            "newThisMonth": base.filter(Client.created_date >= month_start).count(),
            "activePolicies": policies.count(),
            "expiringPolicies": policies.filter(
                ClientPolicy.end_date.between(today, today + timedelta(days=30))
            ).count(),
        }

    @staticmethod
    def get_policies(db: Session, client_id: str) -> list[ClientPolicy]:
        return (
            db.query(ClientPolicy)
            .filter(ClientPolicy.client_id == client_id, ClientPolicy.is_active.is_(True))
            .order_by(ClientPolicy.end_date.desc())
            .all()
        )

    @staticmethod
    def get_recent_appointments(db: Session, client_id: str, limit: int = 10) -> list[Appointment]:
        return (
            db.query(Appointment)
            .filter(Appointment.client_id == client_id, Appointment.is_active.is_(True))
            .order_by(Appointment.appointment_date.desc(), Appointment.start_time.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_active_reminders(db: Session, client_id: str) -> list[Reminder]:
        return (
            db.query(Reminder)
            .filter(
                Reminder.client_id == client_id,
                Reminder.is_active.is_(True),
                Reminder.status == "Active",
            )
            .order_by(Reminder.reminder_date)
            .all()
        )

    @staticmethod
    def count_by_insurance_type(db: Session, agent_id: str) -> dict:
        rows = (
            ClientRepository._active(db, agent_id)
            .with_entities(Client.insurance_type, func.count(Client.client_id))
            .group_by(Client.insurance_type)
            .all()
        )
        return {insurance_type or "Unspecified": count for insurance_type, count in rows}
