from remodra.models import Attachment, Client, ClientMessage


def test_create_and_list_clients(client, headers):
    res = client.post(
        "/api/protected/clients",
        json={"firstName": " Ana ", "lastName": "Lopez", "email": "ANA@Example.com", "zip": "33101"},
        headers=headers,
    )
    assert res.status_code == 201
    body = res.json()
    assert body["firstName"] == "Ana"
    assert body["email"] == "ana@example.com"
    assert body["zip"] == "33101"

    listed = client.get("/api/protected/clients", headers=headers)
    assert listed.status_code == 200
    assert [c["id"] for c in listed.json()] == [body["id"]]


def test_requires_authentication(client):
    assert client.get("/api/protected/clients").status_code == 401
    res = client.get("/api/protected/clients", headers={"Authorization": "Bearer not-a-token"})
    assert res.status_code == 401


def test_blank_name_is_rejected(client, headers):
    res = client.post(
        "/api/protected/clients", json={"firstName": "  ", "lastName": "Lopez"}, headers=headers
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "Validation error"


def test_clients_are_isolated_between_contractors(client, headers, other_headers, client_record):
    cid = client_record["id"]
    assert client.get(f"/api/protected/clients/{cid}", headers=other_headers).status_code == 404
    assert client.patch(
        f"/api/protected/clients/{cid}", json={"phone": "555"}, headers=other_headers
    ).status_code == 404
    assert client.delete(f"/api/protected/clients/{cid}", headers=other_headers).status_code == 404
    assert client.get("/api/protected/clients", headers=other_headers).json() == []


def test_update_client(client, headers, client_record):
    res = client.patch(
        f"/api/protected/clients/{client_record['id']}",
        json={"phone": "555-0100", "notes": "Gate code 1234"},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json()["phone"] == "555-0100"
    assert res.json()["lastName"] == "Doe"


def test_plan_client_limit(client, make_contractor, auth_for):
    basic = auth_for(make_contractor(plan="basic"))
    for i in range(10):
        res = client.post(
            "/api/protected/clients", json={"firstName": f"C{i}", "lastName": "X"}, headers=basic
        )
        assert res.status_code == 201

    res = client.post("/api/protected/clients", json={"firstName": "One", "lastName": "More"}, headers=basic)
    assert res.status_code == 403
    assert "plan limit of 10 clients" in res.json()["detail"]


def test_delete_blocked_by_projects(client, headers, client_record):
    client.post(
        "/api/protected/projects",
        json={"clientId": client_record["id"], "title": "New deck"},
        headers=headers,
    )
    res = client.delete(f"/api/protected/clients/{client_record['id']}", headers=headers)
    assert res.status_code == 400
    assert "1 projects" in res.json()["detail"]


def test_delete_removes_messages_and_attachments(client, headers, db, contractor, client_record):
    cid = client_record["id"]
    client.post(
        "/api/protected/client-messages",
        json={"clientId": cid, "subject": "Hello", "message": "Welcome aboard"},
        headers=headers,
    )
    client.post(
        "/api/protected/attachments",
        json={
            "entityType": "client",
            "entityId": cid,
            "fileName": "site.jpg",
            "fileUrl": "https://cdn.example.com/site.jpg",
        },
        headers=headers,
    )

    res = client.delete(f"/api/protected/clients/{cid}", headers=headers)
    assert res.status_code == 204

    db.expire_all()
    assert db.query(Client).filter(Client.id == cid).first() is None
    assert db.query(ClientMessage).filter(ClientMessage.client_id == cid).count() == 0
    assert (
        db.query(Attachment)
        .filter(Attachment.entity_type == "client", Attachment.entity_id == cid)
        .count()
        == 0
    )


def test_export_clients(client, headers, client_record):
    res = client.get("/api/protected/data/clients/export", headers=headers)
    assert res.status_code == 200
    assert "attachment; filename=\"clients_export_" in res.headers["content-disposition"]
    assert res.json()[0]["email"] == "jane@example.com"


def test_import_clients(client, headers, client_record):
    res = client.post(
        "/api/protected/data/clients/import",
        json={
            "clientsData": [
                {"firstName": "New", "lastName": "Person", "email": "new@example.com"},
                {"firstName": "Dup", "lastName": "Licate", "email": "jane@example.com"},
                {"firstName": "", "lastName": "Broken"},
            ]
        },
        headers=headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["imported"] == 1
    assert body["skipped"] == 1
    assert body["errors"][0]["index"] == 2

    assert len(client.get("/api/protected/clients", headers=headers).json()) == 2


def test_import_requires_a_list(client, headers):
    res = client.post(
        "/api/protected/data/clients/import", json={"clientsData": {"a": 1}}, headers=headers
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid client data provided"
