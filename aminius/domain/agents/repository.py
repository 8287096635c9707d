"""Agent repository - Database operations for agents, settings and lookups"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Agent, AgentSettings, InsuranceCompany, PolicyType


class AgentRepository:
    """Repository for agent database operations"""

    @staticmethod
    def get_by_id(db: Session, agent_id: str) -> Optional[Agent]:
        return (
            db.query(Agent)
            .options(joinedload(Agent.settings))
            .filter(Agent.agent_id == agent_id, Agent.is_active.is_(True))
            .first()
        )

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[Agent]:
        return db.query(Agent).filter(func.lower(Agent.email) == email.lower()).first()

    @staticmethod
    def get_by_reset_token(db: Session, token_hash: str) -> Optional[Agent]:
        return db.query(Agent).filter(Agent.password_reset_token == token_hash).first()

    @staticmethod
    def get_active_agents(db: Session) -> list[Agent]:
        return db.query(Agent).filter(Agent.is_active.is_(True)).all()

    @staticmethod
    def create(db: Session, **agent_data) -> Agent:
        agent = Agent(**agent_data)
        agent.settings = AgentSettings()
        db.add(agent)
        db.commit()
        db.refresh(agent)
        return agent

    @staticmethod
    def update(db: Session, instance, **updates):
        """Apply updates to an agent or its settings row"""
        for key, value in updates.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        db.commit()
        db.refresh(instance)
        return instance

    @staticmethod
    def get_insurance_companies(db: Session) -> list[InsuranceCompany]:
        return (
            db.query(InsuranceCompany)
            .filter(InsuranceCompany.is_active.is_(True))
            .order_by(InsuranceCompany.company_name)
            .all()
        )

    @staticmethod
    def get_policy_types(db: Session) -> list[PolicyType]:
        return db.query(PolicyType).filter(PolicyType.is_active.is_(True)).order_by(PolicyType.type_name).all()
