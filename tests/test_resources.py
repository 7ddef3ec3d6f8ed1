"""Calendar, catalogue and record-keeping endpoints"""

import pytest

from remodra.models import Attachment

# ── Events ───────────────────────────────────────────────────────────────


def test_event_times_are_stored_as_utc(client, headers, client_record):
    res = client.post(
        "/api/protected/events",
        json={
            "title": "Walkthrough",
            "startTime": "2026-04-01T10:00:00-05:00",
            "endTime": "2026-04-01T11:30:00-05:00",
            "clientId": client_record["id"],
            "projectId": "",
        },
        headers=headers,
    )
    assert res.status_code == 201
    body = res.json()
    assert body["startTime"] == "2026-04-01T15:00:00"
    assert body["endTime"] == "2026-04-01T16:30:00"
    assert body["type"] == "meeting"
    assert body["status"] == "pending"
    assert body["projectId"] is None


def test_event_time_order(client, headers):
    res = client.post(
        "/api/protected/events",
        json={"title": "Backwards", "startTime": "2026-04-01T12:00:00", "endTime": "2026-04-01T11:00:00"},
        headers=headers,
    )
    assert res.status_code == 400

    event = client.post(
        "/api/protected/events",
        json={"title": "Call", "startTime": "2026-04-01T12:00:00", "endTime": "2026-04-01T12:30:00"},
        headers=headers,
    ).json()
    res = client.patch(
        f"/api/protected/events/{event['id']}", json={"endTime": "2026-04-01T09:00:00"}, headers=headers
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "End time must not be before start time"

    res = client.patch(
        f"/api/protected/events/{event['id']}", json={"status": "confirmed", "title": None}, headers=headers
    )
    assert res.status_code == 200
    assert res.json()["status"] == "confirmed"
    assert res.json()["title"] == "Call"


def test_events_are_sorted_and_scoped(client, headers, other_headers):
    for title, start in (("Later", "2026-04-02T09:00:00"), ("Sooner", "2026-04-01T09:00:00")):
        client.post(
            "/api/protected/events",
            json={"title": title, "startTime": start, "endTime": start},
            headers=headers,
        )
    titles = [e["title"] for e in client.get("/api/protected/events", headers=headers).json()]
    assert titles == ["Sooner", "Later"]
    assert client.get("/api/protected/events", headers=other_headers).json() == []

    event_id = client.get("/api/protected/events", headers=headers).json()[0]["id"]
    assert client.delete(f"/api/protected/events/{event_id}", headers=other_headers).status_code == 404
    assert client.delete(f"/api/protected/events/{event_id}", headers=headers).status_code == 204


# ── Materials ────────────────────────────────────────────────────────────


def test_material_crud(client, headers):
    res = client.post(
        "/api/protected/materials",
        json={"name": "Pressure-treated 2x6", "unit": "board", "unitPrice": 8.75, "supplier": "Lumber Co"},
        headers=headers,
    )
    assert res.status_code == 201
    material = res.json()
    assert material["inStock"] is True

    res = client.patch(
        f"/api/protected/materials/{material['id']}", json={"inStock": False, "name": None}, headers=headers
    )
    assert res.json()["inStock"] is False
    assert res.json()["name"] == "Pressure-treated 2x6"

    assert client.delete(f"/api/protected/materials/{material['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/protected/materials/{material['id']}", headers=headers).status_code == 404


def test_material_in_use_cannot_be_deleted(client, headers, new_estimate):
    material = client.post(
        "/api/protected/materials", json={"name": "Joist hangers", "unitPrice": 1.2}, headers=headers
    ).json()
    new_estimate(items=[{"description": "Hangers", "quantity": 40, "unitPrice": 1.2, "materialId": material["id"]}])

    res = client.delete(f"/api/protected/materials/{material['id']}", headers=headers)
    assert res.status_code == 400
    assert res.json()["detail"] == "Cannot delete material used by 1 estimate items"


# ── Attachments ──────────────────────────────────────────────────────────


def test_attachments(client, headers, other_headers, new_invoice):
    invoice = new_invoice()
    payload = {
        "entityType": "invoice",
        "entityId": invoice["id"],
        "fileName": "signed.pdf",
        "fileUrl": "https://cdn.example.com/signed.pdf",
        "fileType": "application/pdf",
    }
    assert client.post("/api/protected/attachments", json=payload, headers=other_headers).status_code == 404

    res = client.post("/api/protected/attachments", json=payload, headers=headers)
    assert res.status_code == 201
    attachment = res.json()

    listed = client.get(f"/api/protected/attachments/invoice/{invoice['id']}", headers=headers).json()
    assert [a["id"] for a in listed] == [attachment["id"]]

    assert client.delete(f"/api/protected/attachments/{attachment['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/protected/attachments/invoice/{invoice['id']}", headers=headers).json() == []


def test_attachment_entity_type(client, headers):
    res = client.post(
        "/api/protected/attachments",
        json={"entityType": "spaceship", "entityId": 1, "fileName": "a", "fileUrl": "b"},
        headers=headers,
    )
    assert res.status_code == 400
    assert res.json()["detail"].startswith("Invalid entity type")



def test_deleting_a_record_removes_its_attachments(client, headers, db, client_record):
    project = client.post(
        "/api/protected/projects", json={"clientId": client_record["id"], "title": "Patio"}, headers=headers
    ).json()
    event = client.post(
        "/api/protected/events",
        json={"title": "Pour", "startTime": "2026-05-01T08:00:00", "endTime": "2026-05-01T12:00:00"},
        headers=headers,
    ).json()
    for entity_type, entity_id in (("project", project["id"]), ("event", event["id"])):
        res = client.post(
            "/api/protected/attachments",
            json={
                "entityType": entity_type,
                "entityId": entity_id,
                "fileName": "plan.pdf",
                "fileUrl": "https://cdn.example.com/plan.pdf",
            },
            headers=headers,
        )
        assert res.status_code == 201

    assert client.delete(f"/api/protected/projects/{project['id']}", headers=headers).status_code == 204
    assert client.delete(f"/api/protected/events/{event['id']}", headers=headers).status_code == 204

    assert db.query(Attachment).count() == 0


# ── Follow-ups ───────────────────────────────────────────────────────────


def test_follow_up_completion(client, headers, client_record):
    res = client.post(
        "/api/protected/follow-ups",
        json={"title": "Call about stain color", "clientId": client_record["id"], "dueDate": ""},
        headers=headers,
    )
    assert res.status_code == 201
    follow_up = res.json()
    assert follow_up["dueDate"] is None
    assert follow_up["completedAt"] is None

    url = f"/api/protected/follow-ups/{follow_up['id']}"
    done = client.patch(url, json={"status": "completed"}, headers=headers).json()
    assert done["completedAt"] is not None

    reopened = client.patch(url, json={"status": "pending"}, headers=headers).json()
    assert reopened["completedAt"] is None

    assert client.patch(url, json={"status": "snoozed"}, headers=headers).status_code == 400
    assert client.delete(url, headers=headers).status_code == 204


# ── Property measurements ────────────────────────────────────────────────


def test_measurements(client, headers, client_record):
    res = client.post(
        "/api/protected/property-measurements",
        json={
            "clientId": client_record["id"],
            "propertyType": "backyard",
            "areaSqFt": 320,
            "perimeterFt": "",
            "measurements": {"sections": [{"width": 16, "length": 20}]},
        },
        headers=headers,
    )
    assert res.status_code == 201
    measurement = res.json()
    assert measurement["measuredAt"] is not None
    assert measurement["perimeterFt"] is None
    assert measurement["measurements"]["sections"][0]["width"] == 16

    url = f"/api/protected/property-measurements/{measurement['id']}"
    assert client.patch(url, json={"notes": "Slope on east side"}, headers=headers).json()["notes"] == (
        "Slope on east side"
    )
    assert client.patch(url, json={"projectId": 99999}, headers=headers).status_code == 404
    assert client.delete(url, headers=headers).status_code == 204


# ── Pricing ──────────────────────────────────────────────────────────────


@pytest.fixture()
def price_config(client, headers):
    def _create(**overrides) -> dict:
        payload = {"serviceType": "deck", "name": "Standard", "laborRate": 12}
        payload.update(overrides)
        res = client.post("/api/protected/price-configurations", json=payload, headers=headers)
        assert res.status_code == 201
        return res.json()

    return _create


def test_single_default_per_service(client, headers, price_config):
    first = price_config(name="Standard", isDefault=True)
    second = price_config(name="Premium", isDefault=True)
    price_config(serviceType="fence", name="Fence default", isDefault=True)

    res = client.get("/api/protected/price-configurations/service/deck/default", headers=headers)
    assert res.json()["id"] == second["id"]

    res = client.post(f"/api/protected/price-configurations/{first['id']}/set-default", headers=headers)
    assert res.json()["isDefault"] is True

    deck = client.get("/api/protected/price-configurations/service/deck", headers=headers).json()
    assert {c["name"]: c["isDefault"] for c in deck} == {"Standard": True, "Premium": False}

    fence = client.get("/api/protected/price-configurations/service/fence/default", headers=headers)
    assert fence.json()["isDefault"] is True


def test_missing_default(client, headers, price_config):
    price_config()
    res = client.get("/api/protected/price-configurations/service/deck/default", headers=headers)
    assert res.status_code == 404


def test_service_pricing(client, headers):
    res = client.post(
        "/api/protected/services",
        json={"serviceType": "fence", "name": "Wood fence", "unit": "ft", "laborRate": 18, "laborCalculationMethod": "by_length"},
        headers=headers,
    )
    assert res.status_code == 201

    res = client.post(
        "/api/update-service-price",
        json={"originalServiceType": "fence", "laborRate": 21.5, "name": "Cedar fence"},
        headers=headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["name"] == "Cedar fence"
    assert body["serviceType"] == "fence"
    assert body["unit"] == "unit"
    assert body["laborRate"] == 21.5
    assert body["laborMethod"] == "by_area"

    res = client.post(
        "/api/update-service-price", json={"originalServiceType": "roof", "laborRate": 5}, headers=headers
    )
    assert res.status_code == 404
    assert len(client.get("/api/protected/services", headers=headers).json()) == 1
