"""Reminder service - follow-ups, birthdays and policy expiry reminders"""

import logging
import math
from datetime import date, time, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import NotFoundError, ValidationError
from ...models import REMINDER_TYPES, Appointment, Reminder, ReminderSetting
from ...shared.dates import local_today, utcnow
from ...shared.validators import require_fields, validate_uuid
from ..agents.repository import AgentRepository
from ..clients.repository import ClientRepository
from ..policies.service import DEFAULT_EXPIRY_WINDOW_DAYS, PolicyService
from .repository import ReminderRepository
from .schemas import REMINDER_REQUIRED_FIELDS, ReminderCreate, ReminderSettingUpdate, ReminderUpdate

logger = logging.getLogger(__name__)

DEFAULT_UPCOMING_DAYS = 7
DEFAULT_REMINDER_TIME = time(9, 0)
# Days between the reminder and the event, per type; others default to 1
DEFAULT_DAYS_BEFORE = {"Policy Expiry": 7, "Birthday": 0}


class ReminderService:
    """Service layer for reminders"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReminderRepository()

    def get_reminder(self, agent_id: str, reminder_id: str) -> Reminder:
        validate_uuid(reminder_id, "Reminder")
        reminder = self.repo.get_by_id(self.db, reminder_id, agent_id)
        if not reminder:
            raise NotFoundError("Reminder not found")
        return reminder

    def _check_links(self, agent_id: str, values: dict) -> None:
        """Linked client must belong to the agent; its name is copied for display"""
        client_id = values.get("client_id")
        if client_id:
            client = ClientRepository.get_client_by_id(self.db, client_id, agent_id)
            if not client:
                raise NotFoundError("Client not found")
            if not values.get("client_name"):
                values["client_name"] = client.full_name

        appointment_id = values.get("appointment_id")
        if appointment_id:
            appointment = self.db.get(Appointment, appointment_id)
            if not appointment or appointment.agent_id != agent_id or not appointment.is_active:
                raise NotFoundError("Appointment not found")

    def create_reminder(self, agent_id: str, data: ReminderCreate) -> Reminder:
        require_fields(data.model_dump(by_alias=True), REMINDER_REQUIRED_FIELDS)
        values = data.model_dump(exclude_none=True)
        self._check_links(agent_id, values)
        values.setdefault("priority", "Medium")
        values.setdefault("status", "Active")
        reminder = self.repo.create(self.db, agent_id, **values)
        logger.info(f"⏰ Reminder {reminder.reminder_id} created for {reminder.reminder_date}")
        return reminder

    def update_reminder(self, agent_id: str, reminder_id: str, data: ReminderUpdate) -> Reminder:
        reminder = self.get_reminder(agent_id, reminder_id)
        updates = data.provided()

        blanked = sorted(
            k for k, v in updates.items() if v is None and k in ("title", "reminder_type", "reminder_date", "priority", "status")
        )
        if blanked:
            raise ValidationError(f"Fields cannot be empty: {', '.join(blanked)}")

        self._check_links(agent_id, updates)
        return self.repo.update(self.db, reminder, **updates)

    def complete_reminder(self, agent_id: str, reminder_id: str, notes: Optional[str] = None) -> Reminder:
        reminder = self.get_reminder(agent_id, reminder_id)
        updates = {"status": "Completed", "completed_date": utcnow()}
        if notes:
            updates["notes"] = f"{reminder.notes}\n{notes}" if reminder.notes else notes
        return self.repo.update(self.db, reminder, **updates)

    def delete_reminder(self, agent_id: str, reminder_id: str) -> None:
        reminder = self.get_reminder(agent_id, reminder_id)
        self.repo.update(self.db, reminder, is_active=False)

    def list_reminders(
        self,
        agent_id: str,
        reminder_type: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        client_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page_number: int = 1,
        page_size: int = 50,
    ) -> dict:
        if client_id:
            validate_uuid(client_id, "Client")
        reminders, total = self.repo.get_filtered(
            self.db, agent_id, reminder_type, status, priority, client_id, start_date, end_date, page_number, page_size
        )
        return {
            "reminders": reminders,
            "total": total,
            "pageNumber": page_number,
            "pageSize": page_size,
            "totalPages": math.ceil(total / page_size) if total else 0,
        }

    def get_today(self, agent_id: str) -> list[Reminder]:
        today = local_today()
        return self.repo.get_between(self.db, agent_id, today, today)

    def get_upcoming(self, agent_id: str, days_ahead: int = DEFAULT_UPCOMING_DAYS) -> list[Reminder]:
        today = local_today()
        return self.repo.get_between(self.db, agent_id, today, today + timedelta(days=days_ahead))

    def get_completed(self, agent_id: str, limit: int = 50) -> list[Reminder]:
        return self.repo.get_completed(self.db, agent_id, limit)

    def search(self, agent_id: str, term: Optional[str]) -> list[Reminder]:
        if not term or not term.strip():
            return []
        return self.repo.search(self.db, agent_id, term)

    def get_birthday_reminders(self, agent_id: str):
        return ClientRepository.get_birthdays(self.db, agent_id, local_today())

    def get_policy_expiry_reminders(self, agent_id: str, days_ahead: int = DEFAULT_EXPIRY_WINDOW_DAYS):
        return PolicyService(self.db).get_expiring(agent_id, days_ahead)

    def get_statistics(self, agent_id: str) -> dict:
        today = local_today()
        return self.repo.get_statistics(self.db, agent_id, today, today + timedelta(days=DEFAULT_UPCOMING_DAYS))

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @staticmethod
    def default_setting(agent_id: str, reminder_type: str) -> ReminderSetting:
        """Unsaved setting used when the agent has not configured a type"""
        return ReminderSetting(
            agent_id=agent_id,
            reminder_type=reminder_type,
            is_enabled=True,
            days_before=DEFAULT_DAYS_BEFORE.get(reminder_type, 1),
            time_of_day=DEFAULT_REMINDER_TIME,
            repeat_daily=False,
        )

    def get_setting(self, agent_id: str, reminder_type: str) -> ReminderSetting:
        return self.repo.get_setting(self.db, agent_id, reminder_type) or self.default_setting(agent_id, reminder_type)

    def get_settings(self, agent_id: str) -> list[ReminderSetting]:
        """One setting per reminder type, saved values first and defaults for the rest"""
        saved = {s.reminder_type: s for s in self.repo.get_settings(self.db, agent_id)}
        return [saved.get(t) or self.default_setting(agent_id, t) for t in REMINDER_TYPES]

    def update_setting(self, agent_id: str, data: ReminderSettingUpdate) -> ReminderSetting:
        require_fields({"reminderType": data.reminder_type}, ("reminderType",))
        values = {k: v for k, v in data.provided().items() if k != "reminder_type" and v is not None}

        if self.repo.get_setting(self.db, agent_id, data.reminder_type) is None:
            default = self.default_setting(agent_id, data.reminder_type)
            for key in ("is_enabled", "days_before", "time_of_day", "repeat_daily"):
                values.setdefault(key, getattr(default, key))

        setting = self.repo.save_setting(self.db, agent_id, data.reminder_type, **values)
        logger.info(f"⚙️ {data.reminder_type} reminder settings updated for agent {agent_id}")
        return setting

    # ------------------------------------------------------------------
    # Generated reminders
    # ------------------------------------------------------------------

    def generate_policy_expiry_reminders(self, agent_id: str, days_ahead: int = DEFAULT_EXPIRY_WINDOW_DAYS) -> int:
        """Create a reminder ahead of each policy expiring within ``days_ahead`` days"""
        setting = self.get_setting(agent_id, "Policy Expiry")
        if not setting.is_enabled:
            logger.debug(f"Policy expiry reminders disabled for agent {agent_id}")
            return 0

        created = 0
        for policy in PolicyService(self.db).get_expiring(agent_id, days_ahead):
            title = f"Policy Expiry: {policy.policy_name}"
            reminder_date = policy.end_date - timedelta(days=setting.days_before)
            if self.repo.exists_generated(self.db, agent_id, "Policy Expiry", policy.client_id, title, reminder_date):
                continue

            kind = policy.type_name or "insurance"
            issuer = f" from {policy.company_name}" if policy.company_name else ""
            days_left = policy.days_until_expiry
            self.repo.create(
                self.db,
                agent_id,
                client_id=policy.client_id,
                reminder_type="Policy Expiry",
                title=title,
                description=f"{kind} policy{issuer} expires on {policy.end_date.isoformat()}",
                reminder_date=reminder_date,
                reminder_time=setting.time_of_day,
                client_name=policy.client_name,
                priority="High" if days_left <= 7 else "Medium",
                status="Active",
                enable_sms=True,
                enable_whatsapp=True,
                custom_message=(
                    f"Dear {policy.client.first_name}, your {kind} policy expires in {days_left} days. "
                    "Please contact us to discuss renewal."
                ),
            )
            created += 1

        if created:
            logger.info(f"⏰ Created {created} policy expiry reminders for agent {agent_id}")
        return created

    def generate_birthday_reminders(self, agent_id: str) -> int:
        """Create a reminder for each client whose birthday is today"""
        setting = self.get_setting(agent_id, "Birthday")
        if not setting.is_enabled:
            logger.debug(f"Birthday reminders disabled for agent {agent_id}")
            return 0

        today = local_today()
        created = 0
        for client in ClientRepository.get_birthdays(self.db, agent_id, today):
            title = f"Birthday: {client.full_name}"
            if self.repo.exists_generated(self.db, agent_id, "Birthday", client.client_id, title, today):
                continue
            self.repo.create(
                self.db,
                agent_id,
                client_id=client.client_id,
                reminder_type="Birthday",
                title=title,
                description=f"{client.full_name} turns {client.age} today",
                reminder_date=today,
                reminder_time=setting.time_of_day,
                client_name=client.full_name,
                priority="Medium",
                status="Active",
                enable_sms=True,
                enable_whatsapp=True,
                custom_message=(
                    f"Happy Birthday {client.first_name}! "
                    "Wishing you health, happiness and prosperity in the year ahead."
                ),
            )
            created += 1

        if created:
            logger.info(f"🎂 Created {created} birthday reminders for agent {agent_id}")
        return created


def generate_reminders_for_all_agents(db: Session) -> dict:
    """Daily job: birthday and policy expiry reminders for every active agent"""
    service = ReminderService(db)
    totals = {"birthdays": 0, "policyExpiry": 0}
    for agent in AgentRepository.get_active_agents(db):
        totals["birthdays"] += service.generate_birthday_reminders(agent.agent_id)
        totals["policyExpiry"] += service.generate_policy_expiry_reminders(agent.agent_id)
    logger.info(f"⏰ Reminder generation: {totals}")
    return totals
