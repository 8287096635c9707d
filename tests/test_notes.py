def test_missing_day_returns_empty_notes(client, agent_id):
    response = client.get(f"/api/notes/{agent_id}/2024-06-01")

    assert response.status_code == 200
    assert response.json()["data"] == {"noteDate": "2024-06-01", "notes": ""}


def test_save_upserts_one_row_per_day(client, agent_id):
    url = f"/api/notes/{agent_id}/2024-06-01"

    first = client.post(url, json={"notes": "Call Britam about claim"}).json()["data"]
    second = client.post(url, json={"notes": "Claim approved"}).json()["data"]

    assert first["noteId"] == second["noteId"]
    assert client.get(url).json()["data"]["notes"] == "Claim approved"
    assert len(client.get(f"/api/notes/{agent_id}").json()["data"]) == 1


def test_invalid_date_is_rejected(client, agent_id):
    response = client.post(f"/api/notes/{agent_id}/2024-02-30", json={"notes": "x"})

    assert response.status_code == 400


def test_range_and_search(client, agent_id):
    for day, text in (("2024-06-01", "Renewals"), ("2024-06-05", "Motor quotes"), ("2024-07-01", "Leave")):
        client.post(f"/api/notes/{agent_id}/{day}", json={"notes": text})

    june = client.get(f"/api/notes/{agent_id}", params={"startDate": "2024-06-01", "endDate": "2024-06-30"})
    reversed_range = client.get(f"/api/notes/{agent_id}", params={"startDate": "2024-07-01", "endDate": "2024-06-01"})
    found = client.get(f"/api/notes/{agent_id}/search", params={"q": "motor"}).json()["data"]

    assert [n["noteDate"] for n in june.json()["data"]] == ["2024-06-05", "2024-06-01"]
    assert reversed_range.status_code == 400
    assert [n["notes"] for n in found] == ["Motor quotes"]


def test_delete(client, agent_id):
    url = f"/api/notes/{agent_id}/2024-06-01"
    client.post(url, json={"notes": "Temporary"})

    assert client.delete(url).status_code == 200
    assert client.delete(url).status_code == 404
