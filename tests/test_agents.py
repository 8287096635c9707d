from aminius.domain.agents import service as agent_service
from conftest import AGENT_PASSWORD

REGISTRATION = {
    "firstName": "Mary",
    "lastName": "Achieng",
    "email": "Mary.Achieng@Example.com",
    "phone": "+254 711 222 333",
    "password": "s3cure-pass",
}


def test_register_creates_agent_with_default_settings(client):
    response = client.post("/api/agent/register", json=REGISTRATION)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["email"] == "mary.achieng@example.com"
    assert data["phone"] == "+254711222333"
    assert data["settings"]["emailNotifications"] is True
    assert data["settings"]["darkMode"] is False
    assert "passwordHash" not in data


def test_register_duplicate_email_conflicts(client):
    client.post("/api/agent/register", json=REGISTRATION)

    response = client.post("/api/agent/register", json={**REGISTRATION, "email": "mary.achieng@example.com"})

    assert response.status_code == 409
    assert response.json()["errorCode"] == "EMAIL_EXISTS"


def test_register_requires_fields_and_password_length(client):
    missing = client.post("/api/agent/register", json={"firstName": "Mary"})
    short = client.post("/api/agent/register", json={**REGISTRATION, "password": "short"})

    assert missing.status_code == 400
    assert set(missing.json()["missingFields"]) == {"lastName", "email", "phone", "password"}
    assert short.status_code == 400


def test_login(client, agent_id):
    ok = client.post("/api/agent/login", json={"email": "GRACE@example.com", "password": AGENT_PASSWORD})
    wrong = client.post("/api/agent/login", json={"email": "grace@example.com", "password": "wrong-password"})

    assert ok.status_code == 200
    assert ok.json()["agentId"] == agent_id
    assert wrong.status_code == 401
    assert wrong.json()["errorCode"] == "INVALID_CREDENTIALS"


def test_profile_and_settings_update(client, agent_id):
    profile = client.put(f"/api/agent/{agent_id}", json={"firstName": "Gracie", "phone": ""})
    settings = client.put(f"/api/agent/{agent_id}/settings", json={"darkMode": True})

    assert profile.json()["data"]["firstName"] == "Gracie"
    assert profile.json()["data"]["phone"] == "+254712345678"
    assert settings.json()["data"]["settings"]["darkMode"] is True


def test_unknown_agent_is_not_found(client):
    response = client.get("/api/agent/3f2504e0-4f89-41d3-9a0c-0305e82c3301")

    assert response.status_code == 404


def test_change_password_checks_current_password(client, agent_id):
    url = f"/api/agent/{agent_id}/change-password"

    wrong = client.post(url, json={"oldPassword": "nope-nope", "newPassword": "another-pass"})
    ok = client.post(url, json={"oldPassword": AGENT_PASSWORD, "newPassword": "another-pass"})
    login = client.post("/api/agent/login", json={"email": "grace@example.com", "password": "another-pass"})

    assert wrong.status_code == 400
    assert ok.status_code == 200
    assert login.status_code == 200


def test_password_reset_flow(client, agent_id, monkeypatch):
    monkeypatch.setattr(agent_service, "generate_secure_token", lambda: "reset-token-123")

    unknown = client.post("/api/agent/password-reset/request", json={"email": "nobody@example.com"})
    known = client.post("/api/agent/password-reset/request", json={"email": "grace@example.com"})
    bad = client.post(
        "/api/agent/password-reset/confirm", json={"token": "guess", "newPassword": "brand-new-pass"}
    )
    good = client.post(
        "/api/agent/password-reset/confirm", json={"token": "reset-token-123", "newPassword": "brand-new-pass"}
    )
    reused = client.post(
        "/api/agent/password-reset/confirm", json={"token": "reset-token-123", "newPassword": "brand-new-pass"}
    )

    assert unknown.json()["message"] == known.json()["message"]
    assert bad.status_code == 400
    assert good.status_code == 200
    assert reused.status_code == 400
    assert client.post(
        "/api/agent/login", json={"email": "grace@example.com", "password": "brand-new-pass"}
    ).status_code == 200


def test_lookups_are_seeded(client):
    companies = client.get("/api/insurance-companies").json()["data"]
    types = client.get("/api/policy-types").json()["data"]

    assert "Britam" in [c["companyName"] for c in companies]
    assert "Motor" in [t["typeName"] for t in types]
