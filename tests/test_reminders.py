from datetime import timedelta

from aminius.domain.reminders.service import generate_reminders_for_all_agents
from aminius.shared.dates import local_today


def _create(client, agent_id, **overrides):
    payload = {
        "title": "Call about renewal",
        "reminderType": "Call",
        "reminderDate": local_today().isoformat(),
        "reminderTime": "09:30",
    }
    payload.update(overrides)
    response = client.post(f"/api/reminders/{agent_id}", json=payload)
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def test_create_defaults_and_client_name(client, agent_id, client_id):
    reminder = _create(client, agent_id, clientId=client_id)

    assert reminder["status"] == "Active"
    assert reminder["priority"] == "Medium"
    assert reminder["clientName"] == "John Kamau Otieno"
    assert reminder["reminderTime"] == "09:30:00"
    assert reminder["advanceNotice"] == "1 day"


def test_create_validation(client, agent_id):
    missing = client.post(f"/api/reminders/{agent_id}", json={"title": "x"})
    bad_time = client.post(
        f"/api/reminders/{agent_id}",
        json={"title": "x", "reminderType": "Call", "reminderDate": "2024-06-01", "reminderTime": "9pm"},
    )
    bad_type = client.post(
        f"/api/reminders/{agent_id}",
        json={"title": "x", "reminderType": "Lunch", "reminderDate": "2024-06-01"},
    )

    assert missing.json()["missingFields"] == ["reminderType", "reminderDate"]
    assert bad_time.status_code == 400
    assert bad_type.status_code == 400


def test_complete_appends_notes(client, agent_id):
    reminder = _create(client, agent_id, notes="Left voicemail")

    response = client.post(
        f"/api/reminders/{agent_id}/{reminder['reminderId']}/complete", json={"notes": "Client agreed to renew"}
    )

    data = response.json()["data"]
    assert data["status"] == "Completed"
    assert data["completedDate"] is not None
    assert data["notes"] == "Left voicemail\nClient agreed to renew"


def test_today_upcoming_and_completed(client, agent_id):
    today = local_today()
    _create(client, agent_id, title="Today")
    _create(client, agent_id, title="In five days", reminderDate=(today + timedelta(days=5)).isoformat())
    _create(client, agent_id, title="Next month", reminderDate=(today + timedelta(days=30)).isoformat())
    done = _create(client, agent_id, title="Done")
    client.post(f"/api/reminders/{agent_id}/{done['reminderId']}/complete")

    today_titles = [r["title"] for r in client.get(f"/api/reminders/{agent_id}/today").json()["data"]]
    upcoming = [r["title"] for r in client.get(f"/api/reminders/{agent_id}/upcoming").json()["data"]]
    completed = [r["title"] for r in client.get(f"/api/reminders/{agent_id}/completed").json()["data"]]

    assert today_titles == ["Today"]
    assert upcoming == ["Today", "In five days"]
    assert completed == ["Done"]


def test_list_filters_and_paginates(client, agent_id):
    _create(client, agent_id, priority="High")
    _create(client, agent_id, priority="Low")
    _create(client, agent_id, priority="High", reminderType="Visit")

    data = client.get(f"/api/reminders/{agent_id}", params={"priority": "High", "pageSize": 1}).json()["data"]

    assert data["total"] == 2
    assert data["totalPages"] == 2
    assert len(data["reminders"]) == 1


def test_update_and_soft_delete(client, agent_id):
    reminder = _create(client, agent_id)
    url = f"/api/reminders/{agent_id}/{reminder['reminderId']}"

    updated = client.put(url, json={"priority": "High", "title": "Call back"}).json()["data"]
    blanked = client.put(url, json={"title": ""})

    assert updated["priority"] == "High"
    assert updated["title"] == "Call back"
    assert blanked.status_code == 400
    assert client.delete(url).status_code == 200
    assert client.get(url).status_code == 404


def test_birthday_and_policy_expiry_reminders(client, agent_id, client_id):
    today = local_today()
    client.put(
        f"/api/clients/{agent_id}/{client_id}",
        json={"dateOfBirth": today.replace(year=today.year - 40).isoformat()},
    )
    client.post(
        f"/api/policies/{agent_id}",
        json={
            "clientId": client_id,
            "policyName": "Travel cover",
            "startDate": (today - timedelta(days=300)).isoformat(),
            "endDate": (today + timedelta(days=3)).isoformat(),
        },
    )

    birthdays = client.get(f"/api/reminders/{agent_id}/birthdays").json()["data"]
    expiring = client.get(f"/api/reminders/{agent_id}/policy-expiry", params={"daysAhead": 7}).json()["data"]

    assert [b["clientId"] for b in birthdays] == [client_id]
    assert [p["policyName"] for p in expiring] == ["Travel cover"]


def test_statistics(client, agent_id):
    today = local_today()
    _create(client, agent_id, title="Today", priority="High")
    _create(client, agent_id, title="Missed", reminderDate=(today - timedelta(days=2)).isoformat())
    _create(client, agent_id, title="Soon", reminderDate=(today + timedelta(days=3)).isoformat())
    done = _create(client, agent_id, title="Done")
    client.post(f"/api/reminders/{agent_id}/{done['reminderId']}/complete", json={})

    stats = client.get(f"/api/reminders/{agent_id}/statistics").json()["data"]

    assert stats["totalActive"] == 3
    assert stats["totalCompleted"] == 1
    assert stats["todayReminders"] == 1
    assert stats["upcomingReminders"] == 2
    assert stats["highPriority"] == 1
    assert stats["overdue"] == 1


def test_settings_default_per_type(client, agent_id):
    settings = client.get(f"/api/reminders/{agent_id}/settings").json()["data"]
    by_type = {s["reminderType"]: s for s in settings}

    assert len(settings) == 8
    assert by_type["Policy Expiry"]["daysBefore"] == 7
    assert by_type["Birthday"]["daysBefore"] == 0
    assert by_type["Call"]["timeOfDay"] == "09:00:00"
    assert all(s["isEnabled"] for s in settings)
    assert all(s["reminderSettingId"] is None for s in settings)


def test_update_settings_upserts(client, agent_id):
    url = f"/api/reminders/{agent_id}/settings"

    first = client.put(url, json={"reminderType": "Policy Expiry", "daysBefore": 14})
    second = client.put(url, json={"reminderType": "Policy Expiry", "timeOfDay": "07:30"})
    missing = client.put(url, json={"daysBefore": 3})
    bad_type = client.put(url, json={"reminderType": "Lunch"})
    bad_days = client.put(url, json={"reminderType": "Call", "daysBefore": 400})

    assert first.status_code == 200
    saved = second.json()["data"]
    assert saved["reminderSettingId"] == first.json()["data"]["reminderSettingId"]
    assert saved["daysBefore"] == 14
    assert saved["timeOfDay"] == "07:30:00"
    assert saved["isEnabled"] is True
    assert missing.status_code == 400
    assert missing.json()["missingFields"] == ["reminderType"]
    assert bad_type.status_code == 400
    assert bad_days.status_code == 400


def _expiring_policy(client, agent_id, client_id, days_left=20):
    today = local_today()
    response = client.post(
        f"/api/policies/{agent_id}",
        json={
            "clientId": client_id,
            "policyName": "Motor comprehensive",
            "startDate": (today - timedelta(days=300)).isoformat(),
            "endDate": (today + timedelta(days=days_left)).isoformat(),
        },
    )
    assert response.status_code == 201
    return response.json()["data"]


def test_generate_policy_expiry_reminders_once(client, agent_id, client_id):
    policy = _expiring_policy(client, agent_id, client_id)
    url = f"/api/reminders/{agent_id}/generate/policy-expiry"

    first = client.post(url)
    second = client.post(url)

    assert first.status_code == 201
    assert first.json()["data"] == {"created": 1}
    assert second.json()["data"] == {"created": 0}
    reminders = client.get(f"/api/reminders/{agent_id}").json()["data"]["reminders"]
    assert len(reminders) == 1
    reminder = reminders[0]
    assert reminder["title"] == "Policy Expiry: Motor comprehensive"
    assert reminder["reminderType"] == "Policy Expiry"
    assert reminder["clientId"] == client_id
    assert reminder["reminderDate"] == (local_today() + timedelta(days=13)).isoformat()
    assert reminder["reminderTime"] == "09:00:00"
    assert policy["endDate"] in reminder["description"]


def test_disabled_setting_skips_generation(client, agent_id, client_id):
    _expiring_policy(client, agent_id, client_id)
    client.put(f"/api/reminders/{agent_id}/settings", json={"reminderType": "Policy Expiry", "isEnabled": False})

    response = client.post(f"/api/reminders/{agent_id}/generate/policy-expiry")

    assert response.json()["data"] == {"created": 0}
    assert client.get(f"/api/reminders/{agent_id}").json()["data"]["reminders"] == []


def test_generate_birthday_reminders(client, agent_id, client_id):
    today = local_today()
    client.put(
        f"/api/clients/{agent_id}/{client_id}",
        json={"dateOfBirth": today.replace(year=today.year - 40).isoformat()},
    )

    response = client.post(f"/api/reminders/{agent_id}/generate/birthdays")

    assert response.json()["data"] == {"created": 1}
    reminder = client.get(f"/api/reminders/{agent_id}").json()["data"]["reminders"][0]
    assert reminder["title"] == "Birthday: John Kamau Otieno"
    assert reminder["reminderDate"] == today.isoformat()


def test_generate_for_all_agents(client, db_session, agent_id, client_id):
    _expiring_policy(client, agent_id, client_id)

    first = generate_reminders_for_all_agents(db_session)
    second = generate_reminders_for_all_agents(db_session)

    assert first["policyExpiry"] == 1
    assert second == {"birthdays": 0, "policyExpiry": 0}
