"""Policy repository - Database operations for client policies"""

from datetime import date
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from ...models import Client, ClientPolicy, InsuranceCompany, PolicyType
from ...shared.queries import LIKE_ESCAPE, contains_pattern


class PolicyRepository:
    """Repository for client policy database operations"""

    @staticmethod
    def _active(db: Session, agent_id: Optional[str]):
        query = db.query(ClientPolicy).options(
            joinedload(ClientPolicy.client),
            joinedload(ClientPolicy.company),
            joinedload(ClientPolicy.policy_type),
        )
        query = query.filter(ClientPolicy.is_active.is_(True))
        if agent_id:
            query = query.filter(ClientPolicy.agent_id == agent_id)
        return query

    @staticmethod
    def get_by_id(db: Session, policy_id: str, agent_id: str) -> Optional[ClientPolicy]:
        return PolicyRepository._active(db, agent_id).filter(ClientPolicy.policy_id == policy_id).first()

    @staticmethod
    def create(db: Session, agent_id: str, **data) -> ClientPolicy:
        policy = ClientPolicy(agent_id=agent_id, **data)
        db.add(policy)
        db.commit()
        db.refresh(policy)
        return policy

    @staticmethod
    def update(db: Session, policy: ClientPolicy, **updates) -> ClientPolicy:
        for key, value in updates.items():
            if hasattr(policy, key):
                setattr(policy, key, value)
        db.commit()
        db.refresh(policy)
        return policy

    @staticmethod
    def get_filtered(
        db: Session,
        agent_id: str,
        client_id: Optional[str] = None,
        status: Optional[str] = None,
        type_id: Optional[str] = None,
        company_id: Optional[str] = None,
    ) -> list[ClientPolicy]:
        query = PolicyRepository._active(db, agent_id)
        if client_id:
            query = query.filter(ClientPolicy.client_id == client_id)
        if status:
            query = query.filter(ClientPolicy.status == status)
        if type_id:
            query = query.filter(ClientPolicy.type_id == type_id)
        if company_id:
            query = query.filter(ClientPolicy.company_id == company_id)
        return query.order_by(ClientPolicy.end_date).all()

    @staticmethod
    def get_expiring(db: Session, agent_id: Optional[str], start: date, end: date) -> list[ClientPolicy]:
        """Active policies with start <= end_date <= end"""
        return (
            PolicyRepository._active(db, agent_id)
            .filter(ClientPolicy.status == "Active", ClientPolicy.end_date.between(start, end))
            .order_by(ClientPolicy.end_date)
            .all()
        )

    @staticmethod
    def search(db: Session, agent_id: str, term: str, limit: int = 50) -> list[ClientPolicy]:
        pattern = contains_pattern(term)
        return (
            PolicyRepository._active(db, agent_id)
            .join(Client, Client.client_id == ClientPolicy.client_id)
            .outerjoin(InsuranceCompany, InsuranceCompany.company_id == ClientPolicy.company_id)
            .outerjoin(PolicyType, PolicyType.type_id == ClientPolicy.type_id)
            .filter(
                or_(
                    ClientPolicy.policy_name.ilike(pattern, escape=LIKE_ESCAPE),
                    ClientPolicy.policy_number.ilike(pattern, escape=LIKE_ESCAPE),
                    ClientPolicy.notes.ilike(pattern, escape=LIKE_ESCAPE),
                    InsuranceCompany.company_name.ilike(pattern, escape=LIKE_ESCAPE),
                    PolicyType.type_name.ilike(pattern, escape=LIKE_ESCAPE),
                    Client.first_name.ilike(pattern, escape=LIKE_ESCAPE),
                    Client.surname.ilike(pattern, escape=LIKE_ESCAPE),
                    Client.last_name.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
            .order_by(ClientPolicy.end_date)
            .limit(limit)
            .all()
        )

    @staticmethod
    def count_by_status(db: Session, agent_id: str) -> dict:
        rows = (
            db.query(ClientPolicy.status, func.count(ClientPolicy.policy_id))
            .filter(ClientPolicy.agent_id == agent_id, ClientPolicy.is_active.is_(True))
            .group_by(ClientPolicy.status)
            .all()
        )
        return {status: count for status, count in rows}

    @staticmethod
    def lookup_exists(db: Session, model, pk: str) -> bool:
        return db.get(model, pk) is not None
