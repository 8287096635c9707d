import uuid

from aminius.domain.notifications import service as notification_service
from aminius.models import Notification

MISSING_ID = "3f2504e0-4f89-41d3-9a0c-0305e82c3301"


def _payload(client_id, **overrides):
    payload = {
        "clientId": client_id,
        "title": "Policy Review",
        "appointmentDate": "2024-06-01",
        "startTime": "14:00",
        "endTime": "15:00",
        "type": "Meeting",
    }
    payload.update(overrides)
    return payload


def _create(client, agent_id, client_id, **overrides):
    response = client.post(f"/api/appointments/{agent_id}", json=_payload(client_id, **overrides))
    assert response.status_code == 201, response.json()
    return response.json()["data"]["appointment"]


def test_create_returns_nested_success_envelope(client, agent_id, client_id):
    response = client.post(f"/api/appointments/{agent_id}", json=_payload(client_id))

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["success"] is True
    assert uuid.UUID(body["data"]["appointmentId"])
    assert body["data"]["appointment"]["status"] == "Scheduled"
    assert body["data"]["appointment"]["priority"] == "Medium"
    assert body["data"]["appointment"]["clientName"] == "John Kamau Otieno"


def test_create_queues_and_dispatches_confirmation_email(client, agent_id, client_id, fake_senders, db_session):
    _create(client, agent_id, client_id)

    emails = db_session.query(Notification).filter(Notification.channel == "Email").all()
    created = [n for n in emails if n.subject and n.subject.startswith("Appointment scheduled")]
    assert len(created) == 1
    assert created[0].recipient == "grace@example.com"
    assert created[0].status == "Sent"
    assert created[0].notification_id in fake_senders["Email"].delivered


def test_create_succeeds_when_email_cannot_be_built(client, agent_id, client_id, monkeypatch, db_session):
    def broken(_mjml):
        raise RuntimeError("template engine down")

    monkeypatch.setattr(notification_service, "compile_mjml_to_html", broken)

    response = client.post(f"/api/appointments/{agent_id}", json=_payload(client_id))

    assert response.status_code == 201
    assert db_session.query(Notification).count() == 0


def test_create_without_title_names_the_missing_field(client, agent_id, client_id):
    response = client.post(f"/api/appointments/{agent_id}", json=_payload(client_id, title=""))

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["missingFields"] == ["title"]
    assert "title" in body["message"]


def test_create_rejects_malformed_input(client, agent_id, client_id):
    bad_time = client.post(f"/api/appointments/{agent_id}", json=_payload(client_id, startTime="25:00"))
    bad_type = client.post(f"/api/appointments/{agent_id}", json=_payload(client_id, type="Lunch"))
    reversed_range = client.post(
        f"/api/appointments/{agent_id}", json=_payload(client_id, startTime="15:00", endTime="14:00")
    )
    bad_agent = client.post("/api/appointments/not-a-uuid", json=_payload(client_id))

    assert bad_time.status_code == 400
    assert bad_type.status_code == 400
    assert "Valid values are" in bad_type.json()["message"]
    assert reversed_range.status_code == 400
    assert bad_agent.status_code == 400
    assert bad_agent.json()["message"] == "Invalid Agent UUID format"


def test_create_requires_two_digit_hours(client, agent_id, client_id):
    response = client.post(f"/api/appointments/{agent_id}", json=_payload(client_id, startTime="9:00"))

    assert response.status_code == 400
    assert "HH:MM" in response.json()["message"]


def test_create_for_unknown_client_is_not_found(client, agent_id):
    response = client.post(f"/api/appointments/{agent_id}", json=_payload(MISSING_ID))

    assert response.status_code == 404
    assert response.json()["errorCode"] == "CLIENT_NOT_FOUND"


def test_create_does_not_block_overlaps(client, agent_id, client_id):
    _create(client, agent_id, client_id)
    _create(client, agent_id, client_id, startTime="14:30", endTime="15:30")


def test_update_does_not_recheck_conflicts(client, agent_id, client_id):
    _create(client, agent_id, client_id)
    later = _create(client, agent_id, client_id, startTime="16:00", endTime="17:00")

    response = client.put(
        f"/api/appointments/{agent_id}/{later['appointmentId']}", json={"startTime": "14:30", "endTime": "15:30"}
    )

    assert response.status_code == 200
    assert response.json()["data"]["startTime"] == "14:30:00"
    check = client.post(
        f"/api/appointments/{agent_id}/check-conflicts",
        json={"appointmentDate": "2024-06-01", "startTime": "15:00", "endTime": "15:30"},
    )
    assert check.json()["data"]["conflictCount"] == 1


def test_invalid_status_lists_valid_values(client, agent_id, client_id):
    appointment = _create(client, agent_id, client_id)

    response = client.patch(
        f"/api/appointments/{agent_id}/{appointment['appointmentId']}/status", json={"status": "Done"}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["errorCode"] == "INVALID_STATUS"
    assert "Completed" in body["validStatuses"]
    assert "Scheduled" in body["message"]


def test_status_update(client, agent_id, client_id):
    appointment = _create(client, agent_id, client_id)

    response = client.patch(
        f"/api/appointments/{agent_id}/{appointment['appointmentId']}/status", json={"status": "Confirmed"}
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "Confirmed"


def test_partial_update_keeps_other_fields(client, agent_id, client_id):
    appointment = _create(client, agent_id, client_id, location="Westlands office")

    response = client.put(
        f"/api/appointments/{agent_id}/{appointment['appointmentId']}",
        json={"title": "Annual review", "endTime": "16:00"},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["title"] == "Annual review"
    assert data["endTime"] == "16:00:00"
    assert data["location"] == "Westlands office"


def test_delete_nonexistent_returns_not_found_envelope(client, agent_id):
    response = client.delete(f"/api/appointments/{agent_id}/{MISSING_ID}")

    assert response.status_code == 404
    assert response.json()["success"] is False


def test_delete_is_soft_and_hides_the_appointment(client, agent_id, client_id):
    appointment = _create(client, agent_id, client_id)
    url = f"/api/appointments/{agent_id}/{appointment['appointmentId']}"

    assert client.delete(url).status_code == 200
    assert client.get(url).status_code == 404
    assert client.delete(url).status_code == 404


def test_list_paginates_and_filters(client, agent_id, client_id):
    _create(client, agent_id, client_id, appointmentDate="2024-06-01")
    _create(client, agent_id, client_id, appointmentDate="2024-06-02", type="Call")
    _create(client, agent_id, client_id, appointmentDate="2024-06-03", type="Call")

    response = client.get(f"/api/appointments/{agent_id}", params={"type": "Call", "pageSize": 1})

    data = response.json()["data"]
    assert data["total"] == 2
    assert data["totalPages"] == 2
    assert len(data["appointments"]) == 1
    assert data["appointments"][0]["appointmentDate"] == "2024-06-03"


def test_list_rejects_unknown_date_range(client, agent_id):
    response = client.get(f"/api/appointments/{agent_id}", params={"dateRange": "year"})

    assert response.status_code == 400


def test_week_view_spans_monday_to_sunday(client, agent_id, client_id):
    _create(client, agent_id, client_id, appointmentDate="2024-06-05")

    response = client.get(f"/api/appointments/{agent_id}/week-view", params={"weekStartDate": "2024-06-05"})

    data = response.json()["data"]
    assert data["weekStartDate"] == "2024-06-03"
    assert data["weekEndDate"] == "2024-06-09"
    assert [d["appointmentCount"] for d in data["days"]] == [0, 0, 1, 0, 0, 0, 0]


def test_calendar_counts_per_day(client, agent_id, client_id):
    _create(client, agent_id, client_id, appointmentDate="2024-02-29")

    response = client.get(f"/api/appointments/{agent_id}/calendar", params={"month": 2, "year": 2024})

    data = response.json()["data"]
    assert len(data["days"]) == 29
    assert data["days"][-1] == {"date": "2024-02-29", "appointmentCount": 1}


def test_search_matches_client_name(client, agent_id, client_id):
    _create(client, agent_id, client_id)

    response = client.get(f"/api/appointments/{agent_id}/search", params={"searchTerm": "kamau"})

    assert len(response.json()["data"]) == 1


def test_client_autocomplete(client, agent_id, client_id):
    response = client.get(f"/api/appointments/{agent_id}/clients/search", params={"q": "Joh"})

    assert [c["clientId"] for c in response.json()["data"]] == [client_id]


def test_statistics_count_cancelled_separately(client, agent_id, client_id):
    appointment = _create(client, agent_id, client_id)
    client.patch(
        f"/api/appointments/{agent_id}/{appointment['appointmentId']}/status", json={"status": "Cancelled"}
    )

    data = client.get(f"/api/appointments/{agent_id}/statistics").json()["data"]

    assert data["cancelledAppointments"] == 1
    assert data["completedAppointments"] == 0


def test_search_treats_wildcards_literally(client, agent_id, client_id):
    _create(client, agent_id, client_id, title="Renewal 50% discount")
    _create(client, agent_id, client_id, title="Renewal review")

    data = client.get(f"/api/appointments/{agent_id}/search", params={"searchTerm": "50%"}).json()["data"]
    everything = client.get(f"/api/appointments/{agent_id}/search", params={"searchTerm": "%"}).json()["data"]

    assert [a["title"] for a in data] == ["Renewal 50% discount"]
    assert [a["title"] for a in everything] == ["Renewal 50% discount"]
