"""Client service - Business logic for clients and prospects"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import NotFoundError, ValidationError
from ...models import Client
from ...shared.dates import local_today
from ...shared.validators import require_fields, validate_uuid
from ..analytics.service import record_activity
from .repository import ClientRepository
from .schemas import (
    ClientAppointmentSummary,
    ClientCreate,
    ClientDetailResponse,
    ClientPolicySummary,
    ClientReminderSummary,
    ClientResponse,
    ClientUpdate,
)

logger = logging.getLogger(__name__)

CLIENT_REQUIRED_FIELDS = ("firstName", "surname", "lastName", "phoneNumber", "email")
FILTER_TYPES = ("all", "clients", "prospects")

# Columns that can never be blanked out by an update
NON_NULLABLE = {"first_name", "surname", "last_name", "phone_number", "email", "is_client"}


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_client(self, agent_id: str, client_id: str) -> Client:
        validate_uuid(client_id, "Client")
        client = self.repo.get_client_by_id(self.db, client_id, agent_id)
        if not client:
            raise NotFoundError("Client not found")
        return client

    def create_client(self, agent_id: str, data: ClientCreate) -> Client:
        require_fields(data.model_dump(by_alias=True), CLIENT_REQUIRED_FIELDS)

        logger.info(f"📥 Creating client for agent_id: {agent_id}")
        values = data.model_dump(exclude_none=True)
        values.setdefault("is_client", False)
        client = self.repo.create_client(self.db, agent_id, **values)

        record_activity(
            self.db,
            agent_id,
            "client_created" if client.is_client else "prospect_created",
            "client",
            client.client_id,
            f"Added {client.full_name}",
        )
        return client

    def update_client(self, agent_id: str, client_id: str, data: ClientUpdate) -> Client:
        client = self.get_client(agent_id, client_id)
        updates = data.provided()
        blanked = sorted(k for k, v in updates.items() if v is None and k in NON_NULLABLE)
        if blanked:
            raise ValidationError(f"Fields cannot be empty: {', '.join(blanked)}")
        return self.repo.update_client(self.db, client, **updates)

    def get_client_details(self, agent_id: str, client_id: str) -> ClientDetailResponse:
        client = self.get_client(agent_id, client_id)
        return ClientDetailResponse(
            **ClientResponse.model_validate(client).model_dump(),
            policies=[ClientPolicySummary.model_validate(p) for p in self.repo.get_policies(self.db, client_id)],
            recent_appointments=[
                ClientAppointmentSummary.model_validate(a)
                for a in self.repo.get_recent_appointments(self.db, client_id)
            ],
            active_reminders=[
                ClientReminderSummary.model_validate(r)
                for r in self.repo.get_active_reminders(self.db, client_id)
            ],
        )

    def list_clients(
        self,
        agent_id: str,
        filter_type: str,
        insurance_type: Optional[str],
        search_term: Optional[str],
        page_number: int,
        page_size: int,
    ) -> tuple[list[ClientResponse], int]:
        if filter_type not in FILTER_TYPES:
            raise ValidationError(f"Invalid filterType. Valid values are: {', '.join(FILTER_TYPES)}")
        clients, total = self.repo.get_clients(
            self.db, agent_id, filter_type, insurance_type, search_term, page_number, page_size
        )
        return [ClientResponse.model_validate(c) for c in clients], total

    def search_clients(self, agent_id: str, term: Optional[str], limit: Optional[int] = None) -> list[Client]:
        if not term or not term.strip():
            return []
        return self.repo.search_clients(self.db, agent_id, term, limit)

    def get_statistics(self, agent_id: str) -> dict:
        stats = self.repo.get_statistics(self.db, agent_id, local_today())
        stats["byInsuranceType"] = self.repo.count_by_insurance_type(self.db, agent_id)
        return stats

    def get_birthdays(self, agent_id: str) -> list[Client]:
        return self.repo.get_birthdays(self.db, agent_id, local_today())

    def convert_to_client(self, agent_id: str, client_id: str) -> Client:
        client = self.get_client(agent_id, client_id)
        if client.is_client:
            raise ValidationError("Contact is already a client", "ALREADY_CLIENT")
        client = self.repo.update_client(self.db, client, is_client=True)
        record_activity(
            self.db, agent_id, "prospect_converted", "client", client_id, f"Converted {client.full_name}"
        )
        return client

    def delete_client(self, agent_id: str, client_id: str) -> None:
        client = self.get_client(agent_id, client_id)
        self.repo.update_client(self.db, client, is_active=False)
        logger.info(f"🗑️ Client {client_id} soft-deleted by agent {agent_id}")
