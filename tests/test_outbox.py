import asyncio
from datetime import datetime, timedelta

from aminius.domain.notifications.dispatcher import backoff_seconds, deliver_batch, process_due
from aminius.domain.notifications.repository import NotificationRepository
from aminius.domain.notifications.service import NotificationService

NOW = datetime(2024, 6, 1, 12, 0, 0)


def _queue_sms(db_session, agent_id, max_attempts=None):
    notification = NotificationService(db_session).enqueue(
        "SMS", "+254700111222", "Your policy renews tomorrow", agent_id=agent_id
    )
    if max_attempts:
        notification.max_attempts = max_attempts
        db_session.commit()
    return notification


def test_backoff_doubles_per_attempt():
    assert [backoff_seconds(n, base=60) for n in (1, 2, 3, 4)] == [60, 120, 240, 480]


def test_failed_attempt_is_retried_with_backoff(db_session, agent_id, fake_senders):
    fake_senders["SMS"].fail_times = 1
    notification = _queue_sms(db_session, agent_id)

    first = asyncio.run(process_due(db_session, now=NOW))

    assert first == {"processed": 1, "sent": 0, "failed": 1}
    assert notification.status == "Pending"
    assert notification.attempts == 1
    assert notification.last_error == "provider unavailable"
    assert notification.next_attempt_at == NOW + timedelta(seconds=backoff_seconds(1))

    # Not due again until the backoff has elapsed
    assert asyncio.run(process_due(db_session, now=NOW))["processed"] == 0

    retry_at = notification.next_attempt_at
    second = asyncio.run(process_due(db_session, now=retry_at))

    assert second["sent"] == 1
    assert notification.status == "Sent"
    assert notification.sent_at == retry_at
    assert notification.attempts == 2
    assert notification.last_error is None


def test_row_fails_after_max_attempts(db_session, agent_id, fake_senders):
    fake_senders["SMS"].fail_times = 99
    notification = _queue_sms(db_session, agent_id, max_attempts=3)

    now = NOW
    for _ in range(3):
        asyncio.run(process_due(db_session, now=now))
        now = notification.next_attempt_at or now

    assert notification.status == "Failed"
    assert notification.attempts == 3
    assert notification.next_attempt_at is None
    assert asyncio.run(process_due(db_session, now=now + timedelta(days=1)))["processed"] == 0


def test_scheduled_rows_wait_for_their_time(db_session, agent_id, fake_senders):
    service = NotificationService(db_session)
    notification = service.enqueue(
        "Push", agent_id, "Call John", subject="Reminder", agent_id=agent_id, scheduled_time=NOW + timedelta(hours=1)
    )

    assert asyncio.run(process_due(db_session, now=NOW))["processed"] == 0
    asyncio.run(process_due(db_session, now=NOW + timedelta(hours=1)))

    assert notification.status == "Sent"
    assert fake_senders["Push"].delivered == [notification.notification_id]


def test_overlapping_drains_deliver_a_row_once(database, agent_id, fake_senders):
    first, second = database.session(), database.session()
    notification = _queue_sms(first, agent_id)

    # Both drainers see the row as due before either sends it
    seen_by_first = NotificationRepository.get_due(first, NOW, 10)
    seen_by_second = NotificationRepository.get_due(second, NOW, 10)
    assert len(seen_by_first) == len(seen_by_second) == 1

    first_result = asyncio.run(deliver_batch(first, seen_by_first, NOW))
    second_result = asyncio.run(deliver_batch(second, seen_by_second, NOW))

    assert first_result == {"processed": 1, "sent": 1, "failed": 0}
    assert second_result == {"processed": 0, "sent": 0, "failed": 0}
    assert fake_senders["SMS"].delivered == [notification.notification_id]
    first.close()
    second.close()


def test_lapsed_claim_is_picked_up_again(db_session, agent_id, fake_senders):
    notification = _queue_sms(db_session, agent_id)
    assert NotificationRepository.claim(db_session, notification, NOW, lease_seconds=300)
    assert notification.status == "Sending"

    assert asyncio.run(process_due(db_session, now=NOW))["processed"] == 0
    result = asyncio.run(process_due(db_session, now=NOW + timedelta(seconds=300)))

    assert result["sent"] == 1
    assert notification.status == "Sent"
    assert notification.attempts == 1


def test_send_now_endpoint_dispatches_in_background(client, agent_id, fake_senders):
    response = client.post(
        f"/api/notifications/{agent_id}/sms", json={"recipientPhone": "+254700111222", "message": "Hello"}
    )

    assert response.status_code == 201
    notification_id = response.json()["notificationId"]
    assert fake_senders["SMS"].delivered == [notification_id]

    stored = client.get(f"/api/notifications/{agent_id}/{notification_id}").json()["data"]
    assert stored["status"] == "Sent"


def test_cancel_only_pending(client, agent_id):
    response = client.post(
        f"/api/notifications/{agent_id}/schedule",
        json={
            "notificationType": "Email",
            "recipient": "john.kamau@example.com",
            "subject": "Renewal",
            "body": "<p>Renewal due</p>",
            "scheduledTime": "2099-01-01T09:00:00Z",
        },
    )
    notification_id = response.json()["notificationId"]
    url = f"/api/notifications/{agent_id}/{notification_id}/cancel"

    first = client.post(url)
    second = client.post(url)

    assert first.status_code == 200
    assert first.json()["data"]["status"] == "Cancelled"
    assert second.status_code == 400
    assert second.json()["errorCode"] == "NOTIFICATION_NOT_PENDING"


def test_schedule_rejects_unknown_channel(client, agent_id):
    response = client.post(
        f"/api/notifications/{agent_id}/schedule",
        json={"notificationType": "Fax", "recipient": "x", "body": "y", "scheduledTime": "2099-01-01T09:00:00"},
    )

    assert response.status_code == 400


def test_history_filters_by_channel(client, agent_id):
    client.post(f"/api/notifications/{agent_id}/sms", json={"recipientPhone": "+254700111222", "message": "a"})
    client.post(f"/api/notifications/{agent_id}/push", json={"title": "t", "body": "b"})

    data = client.get(f"/api/notifications/{agent_id}/history", params={"notificationType": "Push"}).json()["data"]

    assert data["total"] == 1
    assert data["notifications"][0]["channel"] == "Push"
