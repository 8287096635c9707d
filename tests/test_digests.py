import asyncio

from aminius.domain.notifications.digests import send_birthday_digests, send_daily_appointment_digests
from aminius.models import Client, Notification
from aminius.shared.dates import local_today


def _book_today(client, agent_id, client_id):
    response = client.post(
        f"/api/appointments/{agent_id}",
        json={
            "clientId": client_id,
            "title": "Claim follow-up",
            "appointmentDate": local_today().isoformat(),
            "startTime": "14:00",
            "endTime": "14:45",
            "type": "Claim Processing",
        },
    )
    assert response.status_code == 201


def test_daily_digest_goes_to_agents_with_appointments(client, db_session, agent_id, client_id):
    _book_today(client, agent_id, client_id)

    result = asyncio.run(send_daily_appointment_digests(db_session))

    assert result["queued"] == 1
    assert result["sent"] == 1
    digest = (
        db_session.query(Notification)
        .filter(Notification.subject == f"Your appointments for {local_today().isoformat()}")
        .one()
    )
    assert digest.recipient == "grace@example.com"
    assert "Claim follow-up" in digest.body


def test_daily_digest_skips_idle_agents(db_session, agent_id, fake_senders):
    result = asyncio.run(send_daily_appointment_digests(db_session))

    assert result["queued"] == 0
    assert fake_senders["Email"].delivered == []


def test_daily_digest_respects_email_preference(client, db_session, agent_id, client_id):
    _book_today(client, agent_id, client_id)
    client.put(f"/api/agent/{agent_id}/settings", json={"emailNotifications": False})

    assert asyncio.run(send_daily_appointment_digests(db_session))["queued"] == 0


def test_birthday_digest(db_session, agent_id, client_id, fake_senders):
    today = local_today()
    john = db_session.get(Client, client_id)
    john.date_of_birth = today.replace(year=today.year - 30)
    db_session.commit()

    result = asyncio.run(send_birthday_digests(db_session))

    assert result["queued"] == 1
    assert len(fake_senders["Email"].delivered) == 1
