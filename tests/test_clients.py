from aminius.models import ActivityLog
from aminius.shared.dates import local_today

NEW_PROSPECT = {
    "firstName": "Ann",
    "surname": "Njeri",
    "lastName": "Mwangi",
    "phoneNumber": "0722 000 111",
    "email": "Ann@Example.com",
    "insuranceType": "Health",
}


def _born_today(years):
    return local_today().replace(year=local_today().year - years).isoformat()


def test_create_prospect_records_activity(client, agent_id, db_session):
    response = client.post(f"/api/clients/{agent_id}", json=NEW_PROSPECT)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["isClient"] is False
    assert data["fullName"] == "Ann Njeri Mwangi"
    assert data["email"] == "ann@example.com"
    assert data["phoneNumber"] == "0722000111"

    activity = db_session.query(ActivityLog).filter(ActivityLog.entity_id == data["clientId"]).one()
    assert activity.activity_type == "prospect_created"


def test_create_requires_contact_fields(client, agent_id):
    response = client.post(f"/api/clients/{agent_id}", json={"firstName": "Ann"})

    assert response.status_code == 400
    assert response.json()["missingFields"] == ["surname", "lastName", "phoneNumber", "email"]


def test_list_filters_clients_and_prospects(client, agent_id, client_id):
    client.post(f"/api/clients/{agent_id}", json=NEW_PROSPECT)

    prospects = client.get(f"/api/clients/{agent_id}", params={"filterType": "prospects"}).json()["data"]
    clients = client.get(f"/api/clients/{agent_id}", params={"filterType": "clients"}).json()["data"]

    assert prospects["total"] == 1
    assert [c["clientId"] for c in clients["clients"]] == [client_id]


def test_details_include_related_records(client, agent_id, client_id):
    client.post(
        f"/api/appointments/{agent_id}",
        json={
            "clientId": client_id,
            "title": "Renewal chat",
            "appointmentDate": "2024-06-01",
            "startTime": "10:00",
            "endTime": "10:30",
            "type": "Call",
        },
    )

    data = client.get(f"/api/clients/{agent_id}/{client_id}").json()["data"]

    assert data["fullName"] == "John Kamau Otieno"
    assert [a["title"] for a in data["recentAppointments"]] == ["Renewal chat"]
    assert data["policies"] == []


def test_update_cannot_blank_required_columns(client, agent_id, client_id):
    response = client.put(f"/api/clients/{agent_id}/{client_id}", json={"email": ""})

    assert response.status_code == 400


def test_convert_prospect(client, agent_id):
    prospect = client.post(f"/api/clients/{agent_id}", json=NEW_PROSPECT).json()["data"]
    url = f"/api/clients/{agent_id}/{prospect['clientId']}/convert"

    first = client.put(url)
    second = client.put(url)

    assert first.json()["data"]["isClient"] is True
    assert second.status_code == 400


def test_birthdays_today(client, agent_id):
    client.post(f"/api/clients/{agent_id}", json={**NEW_PROSPECT, "dateOfBirth": _born_today(28)})

    data = client.get(f"/api/clients/{agent_id}/birthdays").json()["data"]

    assert len(data) == 1
    assert data[0]["age"] == 28


def test_statistics(client, agent_id, client_id):
    client.post(f"/api/clients/{agent_id}", json=NEW_PROSPECT)

    data = client.get(f"/api/clients/{agent_id}/statistics").json()["data"]

    assert data["totalContacts"] == 2
    assert data["totalClients"] == 1
    assert data["totalProspects"] == 1
    assert data["byInsuranceType"] == {"Motor": 1, "Health": 1}


def test_soft_delete_hides_client(client, agent_id, client_id):
    assert client.delete(f"/api/clients/{agent_id}/{client_id}").status_code == 200
    assert client.get(f"/api/clients/{agent_id}/{client_id}").status_code == 404
    assert client.get(f"/api/clients/{agent_id}/search", params={"q": "John"}).json()["data"] == []


def test_search_treats_wildcards_literally(client, agent_id, client_id):
    url = f"/api/clients/{agent_id}/search"

    assert client.get(url, params={"q": "%"}).json()["data"] == []
    assert client.get(url, params={"q": "john_kamau"}).json()["data"] == []
    assert [c["clientId"] for c in client.get(url, params={"q": "john.kamau"}).json()["data"]] == [client_id]
