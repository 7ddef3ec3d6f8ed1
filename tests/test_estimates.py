from remodra.models_invoice import Estimate


def test_create_estimate_with_items(new_estimate):
    estimate = new_estimate()
    assert estimate["estimateNumber"].startswith("EST-")
    assert estimate["status"] == "draft"
    assert estimate["issueDate"] is not None
    assert estimate["appointmentDuration"] == 60
    amounts = sorted(item["amount"] for item in estimate["items"])
    assert amounts == [100, 900]


def test_estimate_number_is_assigned_by_server(client, headers, new_estimate):
    estimate = new_estimate(estimateNumber="MY-QUOTE")
    assert estimate["estimateNumber"].startswith("EST-")

    res = client.patch(
        f"/api/protected/estimates/{estimate['id']}", json={"estimateNumber": "MY-QUOTE"}, headers=headers
    )
    assert res.status_code == 200
    assert res.json()["estimateNumber"] == estimate["estimateNumber"]


def test_selected_services_become_items(new_estimate):
    estimate = new_estimate(
        items=None,
        selectedServices=[
            {
                "name": "Deck staining",
                "laborRate": 3,
                "measurements": {"squareFeet": 250},
            },
            {
                "name": "Fence",
                "professionalDescription": "Cedar privacy fence",
                "laborRate": 20,
                "laborCost": 1500,
                "measurements": {"linearFeet": 60, "squareFeet": 0},
            },
            {"name": "Haul away"},
        ],
    )
    items = {item["description"]: item for item in estimate["items"]}
    assert items["Deck staining"]["quantity"] == 250
    assert items["Deck staining"]["amount"] == 750
    assert items["Cedar privacy fence"]["quantity"] == 60
    assert items["Cedar privacy fence"]["amount"] == 1500
    assert items["Haul away"]["quantity"] == 1
    assert items["Haul away"]["amount"] == 0


def test_estimate_references_must_be_owned(client, other_headers, client_record):
    res = client.post(
        "/api/protected/estimates", json={"clientId": client_record["id"]}, headers=other_headers
    )
    assert res.status_code == 404


def test_accept_and_convert_to_invoice(client, headers, new_estimate, db):
    estimate = new_estimate(terms="50% upfront")
    eid = estimate["id"]

    accepted = client.post(f"/api/protected/estimates/{eid}/accept", headers=headers)
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"
    assert accepted.json()["acceptedDate"] is not None
    assert accepted.json()["notes"] == "Estimate accepted"

    res = client.post(f"/api/protected/estimates/{eid}/convert-to-invoice", headers=headers)
    assert res.status_code == 201
    invoice = res.json()
    assert invoice["status"] == "pending"
    assert invoice["estimateId"] == eid
    assert invoice["total"] == 1080
    assert invoice["amountPaid"] == 0
    assert invoice["terms"] == "50% upfront"
    assert len(invoice["items"]) == 2
    assert invoice["invoiceNumber"].startswith("OT-")

    db.expire_all()
    stored = db.query(Estimate).filter(Estimate.id == eid).one()
    assert stored.status == "converted"
    assert stored.notes.endswith(f"Converted to Invoice #{invoice['invoiceNumber']}")


def test_convert_requires_accepted(client, headers, new_estimate):
    estimate = new_estimate()
    res = client.post(f"/api/protected/estimates/{estimate['id']}/convert-to-invoice", headers=headers)
    assert res.status_code == 400
    assert "Only accepted estimates" in res.json()["detail"]


def test_reject_requires_reason(client, headers, new_estimate):
    estimate = new_estimate()
    res = client.post(f"/api/protected/estimates/{estimate['id']}/reject", json={}, headers=headers)
    assert res.status_code == 400
    assert res.json()["detail"] == "Rejection reason is required"

    res = client.post(
        f"/api/protected/estimates/{estimate['id']}/reject",
        json={"notes": "Too expensive"},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json()["status"] == "rejected"
    assert res.json()["rejectionNotes"] == "Too expensive"


def test_cannot_accept_rejected_estimate(client, headers, new_estimate):
    estimate = new_estimate(status="rejected")
    res = client.post(f"/api/protected/estimates/{estimate['id']}/accept", headers=headers)
    assert res.status_code == 400


def test_item_crud(client, headers, new_estimate):
    estimate = new_estimate(items=[])
    base = f"/api/protected/estimates/{estimate['id']}/items"

    created = client.post(base, json={"description": "Posts", "quantity": 8, "unitPrice": 25}, headers=headers)
    assert created.status_code == 201
    item = created.json()
    assert item["amount"] == 200

    updated = client.patch(f"{base}/{item['id']}", json={"amount": 180}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["amount"] == 180

    assert len(client.get(base, headers=headers).json()) == 1
    assert client.delete(f"{base}/{item['id']}", headers=headers).status_code == 204
    assert client.delete(f"{base}/{item['id']}", headers=headers).status_code == 404


def test_item_material_must_be_owned(client, headers, other_headers, new_estimate):
    material = client.post(
        "/api/protected/materials", json={"name": "Screws", "unitPrice": 9.5}, headers=other_headers
    ).json()
    estimate = new_estimate(items=[])
    res = client.post(
        f"/api/protected/estimates/{estimate['id']}/items",
        json={"description": "Screws", "materialId": material["id"]},
        headers=headers,
    )
    assert res.status_code == 404
    assert res.json()["detail"] == "Material not found"


def test_delete_estimate(client, headers, new_estimate):
    estimate = new_estimate()
    assert client.delete(f"/api/protected/estimates/{estimate['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/protected/estimates/{estimate['id']}", headers=headers).status_code == 404
