"""
Scheduled agent digests.

Each digest renders one email per agent, queues it in the outbox and lets
the regular dispatcher deliver it. Agents with nothing to report are skipped.
"""

import logging
from collections import defaultdict

from sqlalchemy.orm import Session

from ...email_templates import birthday_digest_template, daily_appointments_template
from ...models import Agent
from ...shared.dates import local_today
from ..agents.repository import AgentRepository
from ..appointments.repository import AppointmentRepository
from ..appointments.service import appointment_email_row
from ..clients.repository import ClientRepository
from .service import NotificationService

logger = logging.getLogger(__name__)


def _wants_email(agent: Agent) -> bool:
    return agent.settings is None or agent.settings.email_notifications


async def send_daily_appointment_digests(db: Session) -> dict:
    """Email every active agent the list of today's appointments"""
    today = local_today()
    by_agent = defaultdict(list)
    for appointment in AppointmentRepository.get_for_all_agents_on(db, today):
        by_agent[appointment.agent_id].append(appointment)

    service = NotificationService(db)
    queued = 0
    for agent in AgentRepository.get_active_agents(db):
        appointments = by_agent.get(agent.agent_id)
        if not appointments:
            logger.debug(f"No appointments today for agent {agent.agent_id}, skipping digest")
            continue
        if not _wants_email(agent):
            logger.debug(f"Agent {agent.agent_id} has email notifications off, skipping digest")
            continue

        rows = [appointment_email_row(a) for a in appointments]
        notification_id = service.try_enqueue_agent_email(
            agent,
            f"Your appointments for {today.isoformat()}",
            lambda: daily_appointments_template(agent.full_name, today.isoformat(), rows),
        )
        if notification_id:
            queued += 1

    logger.info(f"📅 Daily appointment digests queued: {queued}")
    result = await service.process_due()
    return {"queued": queued, **result}


async def send_birthday_digests(db: Session) -> dict:
    """Email each agent the clients celebrating a birthday today"""
    today = local_today()
    by_agent = defaultdict(list)
    for client in ClientRepository.get_birthdays(db, None, today):
        by_agent[client.agent_id].append({"name": client.full_name, "age": client.age, "phone": client.phone_number})

    service = NotificationService(db)
    queued = 0
    for agent in AgentRepository.get_active_agents(db):
        clients = by_agent.get(agent.agent_id)
        if not clients:
            logger.debug(f"No client birthdays today for agent {agent.agent_id}")
            continue
        if not _wants_email(agent):
            continue

        notification_id = service.try_enqueue_agent_email(
            agent,
            f"🎂 {len(clients)} client birthday(s) today",
            lambda: birthday_digest_template(agent.full_name, clients),
        )
        if notification_id:
            queued += 1

    logger.info(f"🎂 Birthday digests queued: {queued}")
    result = await service.process_due()
    return {"queued": queued, **result}
