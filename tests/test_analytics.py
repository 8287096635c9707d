from datetime import datetime, timedelta

from aminius.models import DashboardViewCache
from aminius.shared.dates import local_today


def test_activity_log_create_and_list(client, agent_id):
    response = client.post(
        "/api/analytics/activity-log",
        json={
            "agentId": agent_id,
            "activityType": "client_called",
            "entityType": "client",
            "description": "Followed up on quote",
            "additionalData": {"durationMinutes": 12},
        },
    )

    assert response.status_code == 201
    activities = client.get(f"/api/analytics/activity-log/{agent_id}").json()["data"]
    assert [a["activityType"] for a in activities] == ["client_called"]
    assert activities[0]["additionalData"] == {"durationMinutes": 12}


def test_activity_log_requires_type(client, agent_id):
    response = client.post("/api/analytics/activity-log", json={"agentId": agent_id})

    assert response.status_code == 400
    assert response.json()["missingFields"] == ["activityType"]


def test_activity_log_date_range(client, agent_id):
    client.post("/api/analytics/activity-log", json={"agentId": agent_id, "activityType": "quote_sent"})
    today = local_today()
    url = f"/api/analytics/activity-log/{agent_id}/date-range"

    around_now = client.get(
        url,
        params={
            "startDate": (today - timedelta(days=1)).isoformat(),
            "endDate": (today + timedelta(days=1)).isoformat(),
        },
    )
    missing = client.get(url, params={"startDate": today.isoformat()})
    reversed_range = client.get(url, params={"startDate": "2024-06-02", "endDate": "2024-06-01"})
    long_ago = client.get(url, params={"startDate": "2000-01-01", "endDate": "2000-12-31"})

    assert [a["activityType"] for a in around_now.json()["data"]] == ["quote_sent"]
    assert missing.status_code == 400
    assert reversed_range.status_code == 400
    assert long_ago.json()["data"] == []


def test_dashboard_statistics_snapshot(client, agent_id, client_id):
    today = local_today().isoformat()
    client.post(
        f"/api/appointments/{agent_id}",
        json={
            "clientId": client_id,
            "title": "Policy review",
            "appointmentDate": today,
            "startTime": "09:00",
            "endTime": "09:30",
            "type": "Policy Review",
        },
    )
    client.post(f"/api/reminders/{agent_id}", json={"title": "Call", "reminderType": "Call", "reminderDate": today})

    first = client.get(f"/api/analytics/dashboard-statistics/{agent_id}").json()["data"]
    second = client.get(f"/api/analytics/dashboard-statistics/{agent_id}").json()["data"]

    assert first["statDate"] == today
    assert first["totalClients"] == 1
    assert first["totalProspects"] == 0
    assert first["todayAppointments"] == 1
    assert first["weekAppointments"] == 1
    assert first["pendingReminders"] == 1
    assert second["totalClients"] == first["totalClients"]


def test_cached_view_round_trip(client, agent_id):
    response = client.post(
        "/api/analytics/dashboard-cache",
        json={"agentId": agent_id, "viewName": "weekly", "cacheData": {"total": 3}, "expirationHours": 2},
    )

    assert response.status_code == 200
    cached = client.get(f"/api/analytics/dashboard-cache/{agent_id}/weekly").json()["data"]
    assert cached["cacheData"] == '{"total": 3}'
    assert client.get(f"/api/analytics/dashboard-cache/{agent_id}/monthly").status_code == 404


def test_expired_cache_is_hidden_and_cleared(client, agent_id, db_session):
    db_session.add(
        DashboardViewCache(
            agent_id=agent_id,
            view_name="stale",
            cache_date=local_today(),
            cache_data="{}",
            expires_at=datetime.utcnow() - timedelta(hours=1),
        )
    )
    db_session.commit()

    assert client.get(f"/api/analytics/dashboard-cache/{agent_id}/stale").status_code == 404
    assert client.delete("/api/analytics/dashboard-cache/expired").json()["data"] == {"deleted": 1}
    assert db_session.query(DashboardViewCache).count() == 0
