"""Policy service - client policy lifecycle and expiry tracking"""

import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import NotFoundError, ValidationError
from ...models import POLICY_STATUSES, ClientPolicy, InsuranceCompany, PolicyType
from ...shared.dates import local_today
from ...shared.validators import require_fields, validate_uuid
from ..analytics.service import record_activity
from ..clients.repository import ClientRepository
from .repository import PolicyRepository
from .schemas import PolicyCreate, PolicyRenew, PolicyUpdate

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_WINDOW_DAYS = 30


class PolicyService:
    """Service layer for client policies"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PolicyRepository()

    def _check_lookups(self, company_id: Optional[str], type_id: Optional[str]) -> None:
        if company_id and not self.repo.lookup_exists(self.db, InsuranceCompany, company_id):
            raise NotFoundError("Insurance company not found")
        if type_id and not self.repo.lookup_exists(self.db, PolicyType, type_id):
            raise NotFoundError("Policy type not found")

    def get_policy(self, agent_id: str, policy_id: str) -> ClientPolicy:
        validate_uuid(policy_id, "Policy")
        policy = self.repo.get_by_id(self.db, policy_id, agent_id)
        if not policy:
            raise NotFoundError("Policy not found")
        return policy

    def create_policy(self, agent_id: str, data: PolicyCreate) -> ClientPolicy:
        require_fields(
            data.model_dump(by_alias=True), ("clientId", "policyName", "startDate", "endDate")
        )
        if data.end_date <= data.start_date:
            raise ValidationError("endDate must be after startDate", "INVALID_DATE_RANGE")
        if not ClientRepository.get_client_by_id(self.db, data.client_id, agent_id):
            raise NotFoundError("Client not found")
        self._check_lookups(data.company_id, data.type_id)

        values = data.model_dump(exclude_none=True)
        values.setdefault("status", "Active")
        policy = self.repo.create(self.db, agent_id, **values)

        record_activity(
            self.db, agent_id, "policy_created", "policy", policy.policy_id, f"Added policy {policy.policy_name}"
        )
        return self.get_policy(agent_id, policy.policy_id)

    def update_policy(self, agent_id: str, policy_id: str, data: PolicyUpdate) -> ClientPolicy:
        policy = self.get_policy(agent_id, policy_id)
        updates = data.provided()

        blanked = sorted(
            k for k, v in updates.items() if v is None and k in ("client_id", "policy_name", "status", "start_date", "end_date")
        )
        if blanked:
            raise ValidationError(f"Fields cannot be empty: {', '.join(blanked)}")

        start = updates.get("start_date", policy.start_date)
        end = updates.get("end_date", policy.end_date)
        if end <= start:
            raise ValidationError("endDate must be after startDate", "INVALID_DATE_RANGE")
        if "client_id" in updates and not ClientRepository.get_client_by_id(self.db, updates["client_id"], agent_id):
            raise NotFoundError("Client not found")
        self._check_lookups(updates.get("company_id"), updates.get("type_id"))

        self.repo.update(self.db, policy, **updates)
        return self.get_policy(agent_id, policy_id)

    def list_policies(
        self,
        agent_id: str,
        client_id: Optional[str] = None,
        status: Optional[str] = None,
        type_id: Optional[str] = None,
        company_id: Optional[str] = None,
    ) -> list[ClientPolicy]:
        if status and status not in POLICY_STATUSES:
            raise ValidationError(f"Invalid status. Valid values are: {', '.join(POLICY_STATUSES)}")
        for value, name in ((client_id, "Client"), (type_id, "Policy Type"), (company_id, "Company")):
            if value:
                validate_uuid(value, name)
        return self.repo.get_filtered(self.db, agent_id, client_id, status, type_id, company_id)

    def get_expiring(self, agent_id: Optional[str], days_ahead: int = DEFAULT_EXPIRY_WINDOW_DAYS) -> list[ClientPolicy]:
        today = local_today()
        return self.repo.get_expiring(self.db, agent_id, today, today + timedelta(days=days_ahead))

    def search(self, agent_id: str, term: Optional[str]) -> list[ClientPolicy]:
        if not term or not term.strip():
            return []
        return self.repo.search(self.db, agent_id, term)

    def get_statistics(self, agent_id: str) -> dict:
        by_status = self.repo.count_by_status(self.db, agent_id)
        return {
            "total": sum(by_status.values()),
            "active": by_status.get("Active", 0),
            "inactive": by_status.get("Inactive", 0),
            "expired": by_status.get("Expired", 0),
            "lapsed": by_status.get("Lapsed", 0),
            "expiringSoon": len(self.get_expiring(agent_id)),
        }

    def renew_policy(self, agent_id: str, policy_id: str, data: PolicyRenew) -> ClientPolicy:
        require_fields(data.model_dump(by_alias=True), ("newEndDate",))
        policy = self.get_policy(agent_id, policy_id)

        start = data.new_start_date or policy.start_date
        if data.new_end_date <= start:
            raise ValidationError("newEndDate must be after the policy start date", "INVALID_DATE_RANGE")

        updates = {"start_date": start, "end_date": data.new_end_date, "status": "Active"}
        if data.premium is not None:
            updates["premium"] = data.premium
        if data.notes is not None:
            updates["notes"] = data.notes
        self.repo.update(self.db, policy, **updates)

        record_activity(
            self.db,
            agent_id,
            "policy_renewed",
            "policy",
            policy_id,
            f"Renewed {policy.policy_name} until {data.new_end_date.isoformat()}",
        )
        return self.get_policy(agent_id, policy_id)

    def delete_policy(self, agent_id: str, policy_id: str) -> None:
        policy = self.get_policy(agent_id, policy_id)
        self.repo.update(self.db, policy, is_active=False)
        logger.info(f"🗑️ Policy {policy_id} soft-deleted by agent {agent_id}")
