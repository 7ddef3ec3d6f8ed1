import json

from remodra import config
from remodra.models import AiUsageLog
from remodra.services import ai_service

MATERIALS = [
    {"name": "Composite boards", "quantity": 40, "unitPrice": 25},
    {"name": "Screws", "quantity": 2, "unitPrice": 12.5},
]


def test_analyze_job_cost(client, headers, db, fake_ai):
    fake_ai.reply = json.dumps(
        {
            "laborCost": "1200.5",
            "laborHours": 32,
            "recommendations": ["Use hidden fasteners"],
            "breakdown": {"permits": 150},
        }
    )
    res = client.post(
        "/api/protected/ai/analyze-job-cost",
        json={"serviceType": "deck", "materials": MATERIALS, "description": "12x16 deck"},
        headers=headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["materialCost"] == 1025
    assert body["laborCost"] == 1200.5
    assert body["totalCost"] == 2225.5
    assert body["breakdown"] == {"materials": 1025, "labor": 1200.5, "permits": 150}
    assert body["recommendations"] == ["Use hidden fasteners"]
    assert fake_ai.calls[0]["json_response"] is True

    log = db.query(AiUsageLog).one()
    assert log.feature == "analyze_job_cost"


def test_job_cost_validation(client, headers, fake_ai):
    url = "/api/protected/ai/analyze-job-cost"
    res = client.post(url, json={"materials": MATERIALS}, headers=headers)
    assert res.json()["detail"] == "Service type is required"

    res = client.post(url, json={"serviceType": "deck", "materials": []}, headers=headers)
    assert res.status_code == 400
    assert res.json()["detail"] == "At least one material is required"

    res = client.post(
        url, json={"serviceType": "deck", "materials": [{"name": "Boards", "quantity": "ten", "unitPrice": 3}]},
        headers=headers,
    )
    assert res.status_code == 400
    assert "numeric quantity" in res.json()["detail"]
    assert fake_ai.calls == []


def test_generate_descriptions(client, headers, db, fake_ai):
    fake_ai.reply = "  Install a composite deck.  "
    res = client.post(
        "/api/protected/ai/generate-job-description",
        json={"serviceType": "deck", "materials": MATERIALS},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json() == {"description": "Install a composite deck."}

    res = client.post(
        "/api/protected/ai/generate-professional-description", json={"appointmentNotes": ""}, headers=headers
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "Appointment notes are required"

    res = client.post(
        "/api/protected/ai/generate-professional-description",
        json={"appointmentNotes": "old deck rotten, wants composite", "serviceType": "deck"},
        headers=headers,
    )
    assert res.status_code == 200
    assert db.query(AiUsageLog).count() == 2


def test_analyze_project(client, headers, fake_ai):
    fake_ai.reply = '{"summary": "Solid plan", "risks": [], "suggestions": ["Order early"]}'
    res = client.post("/api/ai/analyze-project", json={"title": "Deck", "budget": 9000}, headers=headers)
    assert res.status_code == 200
    assert res.json()["summary"] == "Solid plan"


def test_sharing_content(client, headers, other_headers, client_record, fake_ai):
    project = client.post(
        "/api/protected/projects",
        json={"clientId": client_record["id"], "title": "Patio", "status": "completed"},
        headers=headers,
    ).json()
    fake_ai.reply = '{"title": "New patio", "description": "Done", "hashtags": ["#patio"]}'

    assert client.post(f"/api/ai/sharing-content/{project['id']}", headers=other_headers).status_code == 404

    res = client.post(
        f"/api/ai/sharing-content/{project['id']}", json={"settings": {"tone": "casual"}}, headers=headers
    )
    assert res.status_code == 200
    assert res.json()["hashtags"] == ["#patio"]
    assert '"tone": "casual"' in fake_ai.calls[0]["messages"][1]["content"]


def test_invalid_json_from_model(client, headers, fake_ai):
    fake_ai.reply = "not json"
    res = client.post("/api/ai/analyze-project", json={"title": "Deck"}, headers=headers)
    assert res.status_code == 502


def test_upstream_failure(client, headers, db, fake_ai):
    fake_ai.error = ai_service.AIServiceError("boom")
    res = client.post("/api/ai/analyze-project", json={"title": "Deck"}, headers=headers)
    assert res.status_code == 502
    assert res.json()["detail"] == "AI service failed to respond"
    assert db.query(AiUsageLog).count() == 0


def test_missing_api_key(client, headers, monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", "")
    res = client.post("/api/ai/analyze-project", json={"title": "Deck"}, headers=headers)
    assert res.status_code == 503
    assert res.json()["detail"] == "AI service is not configured"


def test_basic_plan_has_no_ai(client, make_contractor, auth_for, fake_ai):
    basic = auth_for(make_contractor(plan="basic"))
    res = client.post("/api/ai/analyze-project", json={"title": "Deck"}, headers=basic)
    assert res.status_code == 403
    assert "not included in your plan" in res.json()["detail"]
    assert fake_ai.calls == []


def test_monthly_allowance(client, headers, fake_ai):
    fake_ai.reply = "{}"
    for _ in range(10):
        assert client.post("/api/ai/analyze-project", json={"title": "Deck"}, headers=headers).status_code == 200

    res = client.post("/api/ai/analyze-project", json={"title": "Deck"}, headers=headers)
    assert res.status_code == 403
    assert "all 10 AI requests" in res.json()["detail"]
