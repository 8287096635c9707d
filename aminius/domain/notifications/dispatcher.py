"""
Outbox dispatcher: delivers pending notifications with exponential backoff.

A failed attempt keeps the row Pending with ``next_attempt_at`` pushed out by
``base * 2^(attempts-1)`` seconds until ``max_attempts`` is reached, then the
row is marked Failed.

Every row is claimed (Pending -> Sending) with a conditional UPDATE before it
is sent, so the inline background dispatch and the worker never deliver the
same row twice.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ... import config
from ...database import Database
from ...models import Notification
from . import senders
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


def backoff_seconds(attempts: int, base: Optional[int] = None) -> int:
    base = config.NOTIFICATION_RETRY_BASE_SECONDS if base is None else base
    return base * 2 ** max(attempts - 1, 0)


async def deliver(db: Session, notification: Notification, now: Optional[datetime] = None) -> bool:
    """Attempt one delivery and record the outcome on the row. Returns True when sent."""
    now = now or datetime.utcnow()
    sender = senders.SENDERS.get(notification.channel)

    notification.attempts = (notification.attempts or 0) + 1
    try:
        if sender is None:
            raise senders.DeliveryError(f"No sender for channel {notification.channel}")
        await sender(notification)
    except Exception as e:
        notification.last_error = str(e)[:500]
        if notification.attempts >= notification.max_attempts:
            notification.status = "Failed"
            notification.next_attempt_at = None
            logger.error(
                f"❌ Notification {notification.notification_id} failed permanently "
                f"after {notification.attempts} attempts: {e}"
            )
        else:
            delay = backoff_seconds(notification.attempts)
            notification.status = "Pending"
            notification.next_attempt_at = now + timedelta(seconds=delay)
            logger.error(
                f"❌ Notification {notification.notification_id} attempt {notification.attempts} "
                f"failed, retrying in {delay}s: {e}"
            )
        db.commit()
        return False

    notification.status = "Sent"
    notification.sent_at = now
    notification.next_attempt_at = None
    notification.last_error = None
    db.commit()
    logger.info(f"✅ {notification.channel} notification {notification.notification_id} sent")
    return True


async def deliver_batch(db: Session, notifications: list[Notification], now: datetime) -> dict:
    """Claim and deliver each row; rows another drainer already claimed are skipped"""
    processed = sent = failed = 0
    for notification in notifications:
        if not NotificationRepository.claim(db, notification, now, config.NOTIFICATION_CLAIM_SECONDS):
            logger.debug(f"Notification {notification.notification_id} already claimed, skipping")
            continue
        processed += 1
        if await deliver(db, notification, now):
            sent += 1
        else:
            failed += 1
    return {"processed": processed, "sent": sent, "failed": failed}


async def process_due(db: Session, limit: Optional[int] = None, now: Optional[datetime] = None) -> dict:
    """Drain due outbox rows once"""
    now = now or datetime.utcnow()
    due = NotificationRepository.get_due(db, now, limit or config.NOTIFICATION_BATCH_SIZE)
    result = await deliver_batch(db, due, now)

    if result["processed"]:
        logger.info(
            f"📬 Outbox run: {result['processed']} processed, {result['sent']} sent, {result['failed']} failed"
        )
    return result


async def dispatch_notifications(database: Database, notification_ids: list[str]) -> None:
    """
    Background task: deliver freshly queued rows right away.

    Rows that are scheduled for later, or already handled, are left alone.
    """
    if not notification_ids or not config.NOTIFICATIONS_INLINE_DISPATCH:
        return

    with database.session_scope() as db:
        await deliver_batch(db, NotificationRepository.get_many(db, notification_ids), datetime.utcnow())
