"""Search service - global and per-entity search with history"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import NotFoundError, ValidationError
from ...models import Appointment, Client, ClientPolicy, Reminder, SearchHistory
from ...shared.validators import validate_uuid
from ..appointments.repository import AppointmentRepository
from ..clients.repository import ClientRepository
from ..policies.repository import PolicyRepository
from ..reminders.repository import ReminderRepository
from .repository import SearchRepository
from .schemas import SearchResult

logger = logging.getLogger(__name__)

RESULTS_PER_ENTITY = 10
MAX_SUGGESTIONS = 10


def _client_result(client: Client) -> SearchResult:
    return SearchResult(
        entity_type="client",
        entity_id=client.client_id,
        title=client.full_name,
        subtitle=client.email,
        detail1=client.phone_number,
        detail2=client.insurance_type,
        status="Client" if client.is_client else "Prospect",
    )


def _appointment_result(appointment: Appointment) -> SearchResult:
    return SearchResult(
        entity_type="appointment",
        entity_id=appointment.appointment_id,
        title=appointment.title,
        subtitle=appointment.client_name,
        detail1=appointment.appointment_date.isoformat(),
        detail2=f"{appointment.start_time.strftime('%H:%M')} - {appointment.end_time.strftime('%H:%M')}",
        status=appointment.status,
    )


def _policy_result(policy: ClientPolicy) -> SearchResult:
    return SearchResult(
        entity_type="policy",
        entity_id=policy.policy_id,
        title=policy.policy_name,
        subtitle=policy.client_name,
        detail1=policy.company_name,
        detail2=policy.end_date.isoformat(),
        status=policy.status,
    )


def _reminder_result(reminder: Reminder) -> SearchResult:
    return SearchResult(
        entity_type="reminder",
        entity_id=reminder.reminder_id,
        title=reminder.title,
        subtitle=reminder.client_name,
        detail1=reminder.reminder_type,
        detail2=reminder.reminder_date.isoformat(),
        status=reminder.status,
    )


class SearchService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = SearchRepository()

    @staticmethod
    def _term(term: Optional[str]) -> str:
        if not term or not term.strip():
            raise ValidationError("Search term is required", missingFields=["q"])
        return term.strip()

    def global_search(self, agent_id: str, term: Optional[str], limit: int = RESULTS_PER_ENTITY) -> list[SearchResult]:
        term = self._term(term)
        results = [_client_result(c) for c in ClientRepository.search_clients(self.db, agent_id, term, limit)]
        results += [_appointment_result(a) for a in AppointmentRepository.search(self.db, agent_id, term, limit)]
        results += [_policy_result(p) for p in PolicyRepository.search(self.db, agent_id, term, limit)]
        results += [_reminder_result(r) for r in ReminderRepository.search(self.db, agent_id, term, limit)]

        self.repo.record_term(self.db, agent_id, term)
        logger.debug(f"🔍 Global search '{term}' for agent {agent_id}: {len(results)} results")
        return results

    def search_clients(self, agent_id: str, term: Optional[str]) -> list[Client]:
        return ClientRepository.search_clients(self.db, agent_id, self._term(term), 50)

    def search_appointments(self, agent_id: str, term: Optional[str]) -> list[Appointment]:
        return AppointmentRepository.search(self.db, agent_id, self._term(term))

    def search_policies(self, agent_id: str, term: Optional[str]) -> list[ClientPolicy]:
        return PolicyRepository.search(self.db, agent_id, self._term(term))

    def search_reminders(self, agent_id: str, term: Optional[str]) -> list[Reminder]:
        return ReminderRepository.search(self.db, agent_id, self._term(term))

    def get_suggestions(self, agent_id: str, prefix: Optional[str], limit: int = MAX_SUGGESTIONS) -> list[str]:
        """History terms first, then client names, without duplicates"""
        if not prefix or not prefix.strip():
            return []
        prefix = prefix.strip()

        suggestions: list[str] = []
        for value in self.repo.history_starting_with(self.db, agent_id, prefix, limit):
            if value not in suggestions:
                suggestions.append(value)
        for client in self.repo.client_names_starting_with(self.db, agent_id, prefix, limit):
            if client.full_name not in suggestions:
                suggestions.append(client.full_name)
        return suggestions[:limit]

    def get_history(self, agent_id: str, limit: int = 20) -> list[SearchHistory]:
        return self.repo.get_history(self.db, agent_id, limit)

    def get_popular(self, agent_id: str, limit: int = 10) -> list[SearchHistory]:
        return self.repo.get_popular(self.db, agent_id, limit)

    def clear_history(self, agent_id: str) -> int:
        return self.repo.delete_history(self.db, agent_id)

    def delete_history_item(self, agent_id: str, search_history_id: str) -> None:
        validate_uuid(search_history_id, "Search History")
        if self.repo.delete_history(self.db, agent_id, search_history_id) == 0:
            raise NotFoundError("Search history item not found")
