import pytest


@pytest.fixture()
def new_project(client, headers, client_record):
    def _create(**overrides) -> dict:
        payload = {"clientId": client_record["id"], "title": "Backyard deck", "budget": 12000}
        payload.update(overrides)
        res = client.post("/api/protected/projects", json=payload, headers=headers)
        assert res.status_code == 201, res.text
        return res.json()

    return _create


def test_create_project_defaults(new_project):
    project = new_project(startDate="", serviceType="deck")
    assert project["status"] == "pending"
    assert project["startDate"] is None
    assert project["budget"] == 12000


def test_create_project_for_foreign_client(client, other_headers, client_record):
    res = client.post(
        "/api/protected/projects",
        json={"clientId": client_record["id"], "title": "Sneaky"},
        headers=other_headers,
    )
    assert res.status_code == 404
    assert res.json()["detail"] == "Client not found"


def test_invalid_status_is_rejected(client, headers, client_record):
    res = client.post(
        "/api/protected/projects",
        json={"clientId": client_record["id"], "title": "Deck", "status": "finished"},
        headers=headers,
    )
    assert res.status_code == 400


def test_update_with_put_and_ai_description(client, headers, new_project):
    project = new_project()
    res = client.put(
        f"/api/protected/projects/{project['id']}",
        json={"aiGeneratedDescription": "A 400 sq ft composite deck", "title": None},
        headers=headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["title"] == "Backyard deck"
    assert body["aiGeneratedDescription"] == "A 400 sq ft composite deck"
    assert body["lastAiUpdate"] is not None


def test_cancel_project(client, headers, new_project):
    project = new_project(notes="Initial walkthrough done")
    res = client.post(
        f"/api/protected/projects/{project['id']}/cancel",
        json={"notes": "Client moved"},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json()["status"] == "cancelled"
    assert res.json()["notes"] == "Initial walkthrough done\n\nCancelled: Client moved"

    again = client.post(f"/api/protected/projects/{project['id']}/cancel", headers=headers)
    assert again.status_code == 400
    assert again.json()["detail"] == "Project is already cancelled"


def test_cancel_without_body(client, headers, new_project):
    project = new_project()
    res = client.post(f"/api/protected/projects/{project['id']}/cancel", headers=headers)
    assert res.status_code == 200
    assert res.json()["notes"] == "Project cancelled"


def test_reorder_projects(client, headers, new_project):
    first = new_project(title="First")
    second = new_project(title="Second")

    res = client.patch(
        "/api/protected/projects/reorder",
        json={
            "projectUpdates": [
                {"id": first["id"], "status": "in_progress", "position": 1},
                {"id": str(second["id"]), "status": "completed", "position": 0},
            ]
        },
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json() == {"success": True}

    by_id = {p["id"]: p for p in client.get("/api/protected/projects", headers=headers).json()}
    assert by_id[first["id"]]["status"] == "in_progress"
    assert by_id[first["id"]]["position"] == 1
    assert by_id[second["id"]]["status"] == "completed"


def test_reorder_rejects_bad_entry_without_writing(client, headers, new_project):
    project = new_project()
    res = client.patch(
        "/api/protected/projects/reorder",
        json={
            "projectUpdates": [
                {"id": project["id"], "status": "completed", "position": 0},
                {"id": project["id"], "status": "bogus", "position": 0},
            ]
        },
        headers=headers,
    )
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Invalid project update"

    current = client.get(f"/api/protected/projects/{project['id']}", headers=headers).json()
    assert current["status"] == "pending"


def test_reorder_requires_array(client, headers):
    res = client.patch(
        "/api/protected/projects/reorder", json={"projectUpdates": "nope"}, headers=headers
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "projectUpdates must be an array"


def test_project_estimates(client, headers, new_project, new_estimate):
    project = new_project()
    new_estimate(projectId=project["id"])
    new_estimate()

    res = client.get(f"/api/protected/projects/{project['id']}/estimates", headers=headers)
    assert res.status_code == 200
    assert len(res.json()) == 1
    assert res.json()[0]["projectId"] == project["id"]


def test_delete_project_detaches_estimates(client, headers, new_project, new_estimate):
    project = new_project()
    estimate = new_estimate(projectId=project["id"])

    assert client.delete(f"/api/protected/projects/{project['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/protected/projects/{project['id']}", headers=headers).status_code == 404

    refreshed = client.get(f"/api/protected/estimates/{estimate['id']}", headers=headers).json()
    assert refreshed["projectId"] is None


@pytest.mark.parametrize("position", ["NaN", "Infinity", "-Infinity", "1e400"])
def test_reorder_rejects_non_finite_position(client, headers, new_project, position):
    project = new_project()
    # Sent raw because JSON encoders refuse to write NaN and Infinity
    body = '{"projectUpdates": [{"id": %d, "status": "completed", "position": %s}]}' % (project["id"], position)
    res = client.patch(
        "/api/protected/projects/reorder",
        content=body,
        headers={**headers, "Content-Type": "application/json"},
    )
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Invalid project update"

    current = client.get(f"/api/protected/projects/{project['id']}", headers=headers).json()
    assert current["status"] == "pending"
    assert res.json()["detail"]["update"]["position"] in ("nan", "inf", "-inf")
