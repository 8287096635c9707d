"""Appointment service - scheduling, conflict detection and calendar views"""

import calendar
import logging
import math
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...email_templates import appointment_created_template
from ...errors import NotFoundError, ValidationError
from ...models import APPOINTMENT_STATUSES, Agent, Appointment
from ...shared.dates import local_today, month_bounds, week_bounds
from ...shared.validators import require_fields, validate_uuid
from ..analytics.service import record_activity
from ..clients.repository import ClientRepository
from ..notifications.service import NotificationService
from .repository import AppointmentRepository
from .schemas import (
    APPOINTMENT_REQUIRED_FIELDS,
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatistics,
    AppointmentUpdate,
    ConflictCheckRequest,
    ConflictResult,
)

logger = logging.getLogger(__name__)

DATE_RANGES = ("all", "today", "week", "month")
CLIENT_AUTOCOMPLETE_LIMIT = 10


def appointment_email_row(appointment: Appointment) -> dict:
    return {
        "date": appointment.appointment_date.isoformat(),
        "start": appointment.start_time.strftime("%H:%M"),
        "end": appointment.end_time.strftime("%H:%M"),
        "title": appointment.title,
        "client": appointment.client_name or "",
        "status": appointment.status,
        "type": appointment.type,
        "priority": appointment.priority,
        "location": appointment.location,
    }


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()
        self.notifications = NotificationService(db)
        # Outbox rows created during this request, dispatched by the router
        self.queued_notifications: list[str] = []

    # ------------------------------------------------------------------
    # Single appointment
    # ------------------------------------------------------------------

    def get_appointment(self, agent_id: str, appointment_id: str) -> Appointment:
        validate_uuid(appointment_id, "Appointment")
        appointment = self.repo.get_by_id(self.db, appointment_id, agent_id)
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    def create_appointment(self, agent_id: str, data: AppointmentCreate) -> Appointment:
        """
        Persist a new appointment, then queue the confirmation email.

        Overlaps are not rejected here; callers use check_time_conflicts
        before submitting.
        """
        require_fields(data.model_dump(by_alias=True), APPOINTMENT_REQUIRED_FIELDS)
        if data.start_time >= data.end_time:
            raise ValidationError("startTime must be before endTime", "INVALID_TIME_RANGE")

        agent = self.db.get(Agent, agent_id)
        if not agent or not agent.is_active:
            raise NotFoundError("Agent not found")
        if not self.repo.client_belongs_to_agent(self.db, data.client_id, agent_id):
            raise NotFoundError("Client not found or inactive", "CLIENT_NOT_FOUND")

        logger.info(f"📅 Creating appointment for agent {agent_id} on {data.appointment_date}")
        values = data.model_dump(exclude_none=True)
        values.setdefault("status", "Scheduled")
        values.setdefault("priority", "Medium")
        appointment = self.repo.create(self.db, agent_id, **values)

        record_activity(
            self.db,
            agent_id,
            "appointment_created",
            "appointment",
            appointment.appointment_id,
            f"Scheduled '{appointment.title}' on {appointment.appointment_date.isoformat()}",
        )

        self._queue_created_email(agent, appointment)
        return self.get_appointment(agent_id, appointment.appointment_id)

    def _queue_created_email(self, agent: Agent, appointment: Appointment) -> None:
        def build():
            week_start, week_end = week_bounds(appointment.appointment_date)
            week = self.repo.get_between(self.db, agent.agent_id, week_start, week_end)
            stats = self.get_statistics(agent.agent_id).model_dump(by_alias=True)
            current = self.get_appointment(agent.agent_id, appointment.appointment_id)
            return appointment_created_template(
                agent.full_name, appointment_email_row(current), [appointment_email_row(a) for a in week], stats
            )

        notification_id = self.notifications.try_enqueue_agent_email(
            agent, f"Appointment scheduled: {appointment.title}", build
        )
        if notification_id:
            self.queued_notifications.append(notification_id)

    def update_appointment(self, agent_id: str, appointment_id: str, data: AppointmentUpdate) -> Appointment:
        """Partial update; overlaps are not re-checked"""
        appointment = self.get_appointment(agent_id, appointment_id)
        updates = data.provided()

        blanked = sorted(
            k
            for k, v in updates.items()
            if v is None
            and k in ("client_id", "title", "appointment_date", "start_time", "end_time", "type", "status", "priority")
        )
        if blanked:
            raise ValidationError(f"Fields cannot be empty: {', '.join(blanked)}")

        start = updates.get("start_time", appointment.start_time)
        end = updates.get("end_time", appointment.end_time)
        if start >= end:
            raise ValidationError("startTime must be before endTime", "INVALID_TIME_RANGE")

        if "client_id" in updates and updates["client_id"] != appointment.client_id:
            if not self.repo.client_belongs_to_agent(self.db, updates["client_id"], agent_id):
                raise NotFoundError("Client not found or inactive", "CLIENT_NOT_FOUND")

        self.repo.update(self.db, appointment, **updates)
        return self.get_appointment(agent_id, appointment_id)

    def update_status(self, agent_id: str, appointment_id: str, status: Optional[str]) -> Appointment:
        if status not in APPOINTMENT_STATUSES:
            raise ValidationError(
                f"Invalid status. Valid values are: {', '.join(APPOINTMENT_STATUSES)}",
                "INVALID_STATUS",
                validStatuses=list(APPOINTMENT_STATUSES),
            )
        appointment = self.get_appointment(agent_id, appointment_id)
        self.repo.update(self.db, appointment, status=status)
        logger.info(f"Appointment {appointment_id} status -> {status}")
        return appointment

    def delete_appointment(self, agent_id: str, appointment_id: str) -> None:
        validate_uuid(appointment_id, "Appointment")
        if self.repo.soft_delete(self.db, appointment_id, agent_id) == 0:
            raise NotFoundError("Appointment not found or already deleted")
        logger.info(f"🗑️ Appointment {appointment_id} soft-deleted by agent {agent_id}")

    # ------------------------------------------------------------------
    # Conflict detection
    # ------------------------------------------------------------------

    def check_time_conflicts(self, agent_id: str, data: ConflictCheckRequest) -> ConflictResult:
        require_fields(
            data.model_dump(by_alias=True), ("appointmentDate", "startTime", "endTime")
        )
        if data.start_time >= data.end_time:
            raise ValidationError("startTime must be before endTime", "INVALID_TIME_RANGE")

        conflicts = self.repo.find_conflicts(
            self.db,
            agent_id,
            data.appointment_date,
            data.start_time,
            data.end_time,
            data.exclude_appointment_id,
        )
        return ConflictResult(
            has_conflict=bool(conflicts),
            conflict_count=len(conflicts),
            conflicts=[AppointmentResponse.model_validate(a) for a in conflicts],
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_appointments(
        self,
        agent_id: str,
        date_range: str = "all",
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
        appointment_type: Optional[str] = None,
        priority: Optional[str] = None,
        client_id: Optional[str] = None,
        search_term: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 50,
    ) -> dict:
        if date_range not in DATE_RANGES:
            raise ValidationError(f"Invalid dateRange. Valid values are: {', '.join(DATE_RANGES)}")
        if client_id:
            validate_uuid(client_id, "Client")

        today = local_today()
        if date_range == "today":
            start_date, end_date = today, today
        elif date_range == "week":
            start_date, end_date = week_bounds(today)
        elif date_range == "month":
            start_date, end_date = month_bounds(today.year, today.month)

        appointments, total = self.repo.get_filtered(
            self.db,
            agent_id,
            start_date,
            end_date,
            status,
            appointment_type,
            priority,
            client_id,
            search_term,
            page_number,
            page_size,
        )
        return {
            "appointments": [AppointmentResponse.model_validate(a) for a in appointments],
            "total": total,
            "pageNumber": page_number,
            "pageSize": page_size,
            "totalPages": math.ceil(total / page_size) if total else 0,
        }

    def get_for_date(self, agent_id: str, day: date) -> list[Appointment]:
        return self.repo.get_between(self.db, agent_id, day, day)

    def get_today(self, agent_id: str) -> list[Appointment]:
        return self.get_for_date(agent_id, local_today())

    def get_week_view(self, agent_id: str, week_start: Optional[date] = None) -> dict:
        start, end = week_bounds(week_start or local_today())
        appointments = self.repo.get_between(self.db, agent_id, start, end)

        days = []
        for offset in range(7):
            day = start + timedelta(days=offset)
            day_appointments = [a for a in appointments if a.appointment_date == day]
            days.append(
                {
                    "date": day.isoformat(),
                    "dayName": calendar.day_name[day.weekday()],
                    "appointmentCount": len(day_appointments),
                    "appointments": [AppointmentResponse.model_validate(a) for a in day_appointments],
                }
            )
        return {
            "weekStartDate": start.isoformat(),
            "weekEndDate": end.isoformat(),
            "totalAppointments": len(appointments),
            "days": days,
        }

    def get_calendar(self, agent_id: str, month: int, year: int) -> dict:
        start, end = month_bounds(year, month)
        appointments = self.repo.get_between(self.db, agent_id, start, end)

        counts: dict[date, int] = {}
        for a in appointments:
            counts[a.appointment_date] = counts.get(a.appointment_date, 0) + 1

        return {
            "month": month,
            "year": year,
            "totalAppointments": len(appointments),
            "days": [
                {"date": (start + timedelta(days=i)).isoformat(), "appointmentCount": counts.get(start + timedelta(days=i), 0)}
                for i in range((end - start).days + 1)
            ],
            "appointments": [AppointmentResponse.model_validate(a) for a in appointments],
        }

    def search(self, agent_id: str, term: Optional[str]) -> list[Appointment]:
        if not term or not term.strip():
            return []
        return self.repo.search(self.db, agent_id, term)

    def search_clients(self, agent_id: str, term: Optional[str]):
        """Booking-form autocomplete"""
        if not term or not term.strip():
            return []
        return ClientRepository.search_clients(self.db, agent_id, term, CLIENT_AUTOCOMPLETE_LIMIT)

    def get_statistics(self, agent_id: str) -> AppointmentStatistics:
        today = local_today()
        week_start, week_end = week_bounds(today)
        month_start, month_end = month_bounds(today.year, today.month)
        not_cancelled = ("Cancelled",)

        return AppointmentStatistics(
            today_appointments=self.repo.count(self.db, agent_id, today, today, exclude_statuses=not_cancelled),
            week_appointments=self.repo.count(
                self.db, agent_id, week_start, week_end, exclude_statuses=not_cancelled
            ),
            month_appointments=self.repo.count(
                self.db, agent_id, month_start, month_end, exclude_statuses=not_cancelled
            ),
            completed_appointments=self.repo.count(self.db, agent_id, statuses=("Completed",)),
            upcoming_appointments=self.repo.count(
                self.db, agent_id, start=today, exclude_statuses=("Completed", "Cancelled")
            ),
            cancelled_appointments=self.repo.count(self.db, agent_id, statuses=("Cancelled",)),
        )
