from datetime import timedelta

from aminius.shared.dates import local_today

MISSING_ID = "3f2504e0-4f89-41d3-9a0c-0305e82c3301"


def _lookup_ids(client):
    company = client.get("/api/insurance-companies").json()["data"][0]
    policy_type = client.get("/api/policy-types").json()["data"][0]
    return company["companyId"], policy_type["typeId"]


def _create(client, agent_id, client_id, days_left=200, **overrides):
    company_id, type_id = _lookup_ids(client)
    today = local_today()
    payload = {
        "clientId": client_id,
        "policyName": "Comprehensive Motor",
        "policyNumber": "MTR-0001",
        "companyId": company_id,
        "typeId": type_id,
        "startDate": (today - timedelta(days=100)).isoformat(),
        "endDate": (today + timedelta(days=days_left)).isoformat(),
        "premium": 45000,
    }
    payload.update(overrides)
    response = client.post(f"/api/policies/{agent_id}", json=payload)
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def test_create_policy_includes_lookup_names(client, agent_id, client_id):
    policy = _create(client, agent_id, client_id)

    assert policy["status"] == "Active"
    assert policy["clientName"] == "John Kamau Otieno"
    assert policy["companyName"]
    assert policy["typeName"]
    assert policy["daysUntilExpiry"] == 200


def test_create_rejects_end_before_start(client, agent_id, client_id):
    response = client.post(
        f"/api/policies/{agent_id}",
        json={
            "clientId": client_id,
            "policyName": "Life Cover",
            "startDate": "2024-06-01",
            "endDate": "2024-05-01",
        },
    )

    assert response.status_code == 400
    assert response.json()["errorCode"] == "INVALID_DATE_RANGE"


def test_create_for_unknown_client(client, agent_id):
    response = client.post(
        f"/api/policies/{agent_id}",
        json={"clientId": MISSING_ID, "policyName": "Life", "startDate": "2024-01-01", "endDate": "2025-01-01"},
    )

    assert response.status_code == 404


def test_expiring_window(client, agent_id, client_id):
    soon = _create(client, agent_id, client_id, days_left=10)
    _create(client, agent_id, client_id, days_left=90, policyName="Home")

    default = client.get(f"/api/policies/{agent_id}/expiring").json()["data"]
    wide = client.get(f"/api/policies/{agent_id}/expiring", params={"daysAhead": 120}).json()["data"]

    assert [p["policyId"] for p in default] == [soon["policyId"]]
    assert len(wide) == 2


def test_statistics(client, agent_id, client_id):
    _create(client, agent_id, client_id, days_left=10)
    lapsed = _create(client, agent_id, client_id, policyName="Old cover")
    client.put(f"/api/policies/{agent_id}/{lapsed['policyId']}", json={"status": "Lapsed"})

    data = client.get(f"/api/policies/{agent_id}/statistics").json()["data"]

    assert data == {"total": 2, "active": 1, "inactive": 0, "expired": 0, "lapsed": 1, "expiringSoon": 1}


def test_list_filters_by_status(client, agent_id, client_id):
    _create(client, agent_id, client_id)
    expired = _create(client, agent_id, client_id, status="Expired")

    data = client.get(f"/api/policies/{agent_id}", params={"status": "Expired"}).json()["data"]
    bad = client.get(f"/api/policies/{agent_id}", params={"status": "Gone"})

    assert [p["policyId"] for p in data] == [expired["policyId"]]
    assert bad.status_code == 400


def test_renew_reactivates_with_new_end_date(client, agent_id, client_id):
    policy = _create(client, agent_id, client_id, status="Expired")
    new_end = (local_today() + timedelta(days=365)).isoformat()

    response = client.post(f"/api/policies/{agent_id}/{policy['policyId']}/renew", json={"newEndDate": new_end})

    data = response.json()["data"]
    assert data["status"] == "Active"
    assert data["endDate"] == new_end


def test_renew_requires_end_date(client, agent_id, client_id):
    policy = _create(client, agent_id, client_id)

    response = client.post(f"/api/policies/{agent_id}/{policy['policyId']}/renew", json={})

    assert response.status_code == 400
    assert response.json()["missingFields"] == ["newEndDate"]


def test_soft_delete(client, agent_id, client_id):
    policy = _create(client, agent_id, client_id)
    url = f"/api/policies/{agent_id}/{policy['policyId']}"

    assert client.delete(url).status_code == 200
    assert client.get(url).status_code == 404
