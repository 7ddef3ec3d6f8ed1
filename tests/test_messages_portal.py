import pytest

from remodra import config
from remodra.models import AiUsageLog


@pytest.fixture()
def message(client, headers, client_record):
    res = client.post(
        "/api/protected/client-messages",
        json={"clientId": client_record["id"], "subject": "Schedule", "message": "We start Monday", "sendEmail": True},
        headers=headers,
    )
    assert res.status_code == 201
    return res.json()


@pytest.fixture()
def portal_token(client, headers, client_record):
    res = client.post(
        "/api/protected/client-portal-token", json={"clientId": client_record["id"]}, headers=headers
    )
    assert res.status_code == 200
    body = res.json()
    assert body["url"].endswith(f"/client-portal/{body['token']}")
    return body["token"]


def test_create_and_list_messages(client, headers, message, new_client):
    assert message["isRead"] is False
    assert message["sentViaEmail"] is True
    assert message["emailSentAt"] is not None
    assert message["messageType"] == "general"

    other = new_client(firstName="Bob", email="bob@example.com")
    client.post(
        "/api/protected/client-messages",
        json={"clientId": other["id"], "subject": "Hi", "message": "Quote ready"},
        headers=headers,
    )

    assert len(client.get("/api/protected/client-messages", headers=headers).json()) == 2
    filtered = client.get(
        "/api/protected/client-messages", params={"clientId": message["clientId"]}, headers=headers
    ).json()
    assert [m["id"] for m in filtered] == [message["id"]]


def test_message_for_foreign_client(client, other_headers, client_record):
    res = client.post(
        "/api/protected/client-messages",
        json={"clientId": client_record["id"], "subject": "Hi", "message": "Hello"},
        headers=other_headers,
    )
    assert res.status_code == 404


def test_mark_read_and_reply(client, headers, other_headers, message):
    mid = message["id"]
    assert client.patch(f"/api/protected/client-messages/{mid}/read", headers=other_headers).status_code == 404
    assert client.patch(f"/api/protected/client-messages/{mid}/read", headers=headers).json() == {"success": True}

    res = client.post(
        f"/api/protected/client-messages/{mid}/reply", json={"reply": "<b>See you</b>"}, headers=headers
    )
    assert res.status_code == 201
    assert res.json()["senderType"] == "contractor"
    assert res.json()["reply"] == "&lt;b&gt;See you&lt;/b&gt;"

    assert client.post(
        f"/api/protected/client-messages/{mid}/reply", json={"reply": "   "}, headers=headers
    ).status_code == 400
    assert client.post(
        f"/api/protected/client-messages/{mid}/reply", json={"reply": "x" * 5001}, headers=headers
    ).status_code == 400

    listed = client.get("/api/protected/client-messages", headers=headers).json()
    assert listed[0]["isRead"] is True
    assert len(listed[0]["replies"]) == 1


def test_portal_view(client, portal_token, message, new_estimate, new_invoice):
    new_estimate()
    new_invoice()

    res = client.get(f"/api/client-portal/{portal_token}")
    assert res.status_code == 200
    body = res.json()
    assert body["client"]["email"] == "jane@example.com"
    assert [m["id"] for m in body["messages"]] == [message["id"]]
    assert len(body["estimates"]) == 1
    assert len(body["invoices"]) == 1
    assert body["projects"] == []


def test_portal_rejects_bad_token(client, message):
    assert client.get("/api/client-portal/not-a-token").status_code == 404
    res = client.post(f"/api/client-portal/not-a-token/reply/{message['id']}", json={"reply": "Hi"})
    assert res.status_code == 401


def test_portal_reply(client, headers, portal_token, message):
    res = client.post(f"/api/client-portal/{portal_token}/reply/{message['id']}", json={"reply": "Monday works"})
    assert res.status_code == 201
    assert res.json()["senderType"] == "client"
    assert res.json()["senderId"] == message["clientId"]

    assert client.post(
        f"/api/client-portal/{portal_token}/reply/99999", json={"reply": "Hello?"}
    ).status_code == 404


def test_portal_reply_only_to_own_messages(client, headers, portal_token, new_client):
    other = new_client(firstName="Bob", email="bob@example.com")
    foreign = client.post(
        "/api/protected/client-messages",
        json={"clientId": other["id"], "subject": "Private", "message": "For Bob"},
        headers=headers,
    ).json()
    res = client.post(f"/api/client-portal/{portal_token}/reply/{foreign['id']}", json={"reply": "Peek"})
    assert res.status_code == 404


def test_portal_data(client, headers, client_record):
    client.post(
        "/api/protected/agents",
        json={"firstName": "Sam", "lastName": "Rivera", "email": "sam@example.com"},
        headers=headers,
    )
    client.post(
        "/api/protected/events",
        json={
            "title": "Site visit",
            "startTime": "2026-04-01T10:00:00",
            "endTime": "2026-04-01T11:00:00",
            "clientId": client_record["id"],
        },
        headers=headers,
    )

    res = client.get(f"/api/client-portal/{client_record['id']}/data")
    assert res.status_code == 200
    body = res.json()
    assert body["client"]["name"] == "Jane Doe"
    assert [a["title"] for a in body["appointments"]] == ["Site visit"]
    assert body["agent"] == {"name": "Sam Rivera", "email": "sam@example.com", "phone": None, "role": "Field Agent"}

    assert client.get("/api/client-portal/99999/data").status_code == 404


def test_portal_ai_chat(client, db, client_record, fake_ai):
    fake_ai.reply = "  Your deck starts Monday.  "
    res = client.post(
        f"/api/client-portal/{client_record['id']}/ai-chat",
        json={
            "message": "When do you start?",
            "conversationHistory": [{"role": "user", "content": "Hi"}, {"role": "system", "content": "ignored"}],
        },
    )
    assert res.status_code == 200
    assert res.json() == {"response": "Your deck starts Monday.", "clientName": "Jane Doe"}

    roles = [m["role"] for m in fake_ai.calls[0]["messages"]]
    assert roles == ["system", "user", "user"]
    assert db.query(AiUsageLog).count() == 0


def test_portal_ai_chat_validation(client, client_record, fake_ai):
    url = f"/api/client-portal/{client_record['id']}/ai-chat"
    assert client.post(url, json={"message": " "}).status_code == 400
    assert client.post(url, json={"message": "x" * 1001}).status_code == 400
    assert client.post("/api/client-portal/99999/ai-chat", json={"message": "Hi"}).status_code == 404
    assert fake_ai.calls == []


def test_portal_ai_chat_without_key(client, client_record, monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", "")
    res = client.post(f"/api/client-portal/{client_record['id']}/ai-chat", json={"message": "Hi"})
    assert res.status_code == 503
