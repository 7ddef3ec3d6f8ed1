import pytest

from remodra.domain.projects.repository import ProjectRepository
from remodra.models import Project


@pytest.fixture()
def project_record(client, headers, client_record):
    res = client.post(
        "/api/protected/projects",
        json={"clientId": client_record["id"], "title": "Kitchen remodel"},
        headers=headers,
    )
    assert res.status_code == 201
    return res.json()


def pay(client, headers, invoice_id, amount, **extra):
    payload = {"amount": amount}
    payload.update(extra)
    return client.post(f"/api/protected/invoices/{invoice_id}/payment", json=payload, headers=headers)


def test_create_invoice(new_invoice):
    invoice = new_invoice(
        items=[{"description": "Labor", "quantity": 10, "unitPrice": 100}],
        dueDate="",
    )
    assert invoice["status"] == "pending"
    assert invoice["invoiceNumber"].startswith("OT-")
    assert invoice["amountPaid"] == 0
    assert invoice["dueDate"] is None
    assert invoice["items"][0]["amount"] == 1000


def test_invoice_number_is_assigned_by_server(client, headers, new_invoice):
    invoice = new_invoice(invoiceNumber="CUSTOM-1")
    assert invoice["invoiceNumber"].startswith("OT-")

    res = client.patch(
        f"/api/protected/invoices/{invoice['id']}", json={"invoiceNumber": "CUSTOM-2"}, headers=headers
    )
    assert res.status_code == 200
    assert res.json()["invoiceNumber"] == invoice["invoiceNumber"]


def test_invoices_are_isolated(client, other_headers, new_invoice):
    invoice = new_invoice()
    assert client.get(f"/api/protected/invoices/{invoice['id']}", headers=other_headers).status_code == 404
    assert pay(client, other_headers, invoice["id"], 10).status_code == 404


def test_update_invoice(client, headers, new_invoice):
    invoice = new_invoice()
    res = client.patch(
        f"/api/protected/invoices/{invoice['id']}",
        json={"terms": "Net 30", "status": None},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json()["terms"] == "Net 30"
    assert res.json()["status"] == "pending"


def test_partial_then_full_payment(client, headers, new_invoice, project_record, db):
    invoice = new_invoice(projectId=project_record["id"])

    res = pay(client, headers, invoice["id"], 400, paymentMethod="check")
    assert res.status_code == 200
    body = res.json()
    assert body["invoice"]["status"] == "partially_paid"
    assert body["payment"]["method"] == "check"
    assert body["totals"] == {
        "currentAmountPaid": 400,
        "totalAmount": 1000,
        "remainingBalance": 600,
        "paymentPercentage": 40,
    }
    assert body["projectUpdate"]["updated"] is True
    assert body["projectUpdate"]["newStatus"] == "In Progress"
    assert body["message"].startswith("Payment recorded successfully. Project automatically moved")

    db.expire_all()
    assert db.query(Project).filter(Project.id == project_record["id"]).one().status == "in_progress"

    res = pay(client, headers, invoice["id"], "600")
    assert res.status_code == 200
    body = res.json()
    assert body["invoice"]["status"] == "paid"
    assert body["payment"]["method"] == "cash"
    assert body["totals"]["remainingBalance"] == 0
    assert body["projectUpdate"]["updated"] is False
    assert body["message"] == "Payment recorded successfully"


def test_payment_creates_project_when_missing(client, headers, new_invoice, db):
    invoice = new_invoice()
    res = pay(client, headers, invoice["id"], 250)
    assert res.status_code == 200
    body = res.json()
    assert body["projectUpdate"]["newStatus"] == "Pending"
    project_id = body["invoice"]["projectId"]
    assert project_id is not None

    project = db.query(Project).filter(Project.id == project_id).one()
    assert project.status == "pending"
    assert project.budget == 1000
    assert project.title == f"Project for Invoice #{invoice['invoiceNumber']}"


def test_payment_survives_project_step_failure(client, headers, new_invoice, project_record, db, monkeypatch):
    def broken_update(*args, **kwargs):
        raise TypeError("bad project data")

    monkeypatch.setattr(ProjectRepository, "update_project", staticmethod(broken_update))
    invoice = new_invoice(projectId=project_record["id"])

    res = pay(client, headers, invoice["id"], 400)
    assert res.status_code == 200
    body = res.json()
    assert body["invoice"]["status"] == "partially_paid"
    assert body["invoice"]["amountPaid"] == 400
    assert body["projectUpdate"]["updated"] is False
    assert body["message"] == "Payment recorded successfully"

    db.expire_all()
    assert db.query(Project).filter(Project.id == project_record["id"]).one().status == "pending"


def test_overpayment_is_rejected(client, headers, new_invoice):
    invoice = new_invoice()
    pay(client, headers, invoice["id"], 900)
    res = pay(client, headers, invoice["id"], 200)
    assert res.status_code == 400
    detail = res.json()["detail"]
    assert detail["message"] == "Payment amount exceeds remaining balance"
    assert detail["currentAmountPaid"] == 900
    assert detail["remainingBalance"] == 100


@pytest.mark.parametrize("amount", [None, "abc", True, 0, -5, "nan"])
def test_invalid_payment_amounts(client, headers, new_invoice, amount):
    invoice = new_invoice()
    res = pay(client, headers, invoice["id"], amount)
    assert res.status_code == 400


def test_cancel_and_pay_cancelled(client, headers, new_invoice):
    invoice = new_invoice(notes="Deposit due")
    res = client.post(
        f"/api/protected/invoices/{invoice['id']}/cancel", json={"notes": "Job dropped"}, headers=headers
    )
    assert res.status_code == 200
    assert res.json()["status"] == "cancelled"
    assert res.json()["notes"] == "Deposit due\n\nCancelled: Job dropped"

    assert client.post(f"/api/protected/invoices/{invoice['id']}/cancel", headers=headers).status_code == 400
    res = pay(client, headers, invoice["id"], 100)
    assert res.status_code == 400
    assert res.json()["detail"] == "Cannot record a payment on a cancelled invoice"


def test_cannot_cancel_paid_invoice(client, headers, new_invoice):
    invoice = new_invoice()
    pay(client, headers, invoice["id"], 1000)
    res = client.post(f"/api/protected/invoices/{invoice['id']}/cancel", headers=headers)
    assert res.status_code == 400
    assert res.json()["detail"] == "Cannot cancel a paid invoice"


def test_delete_blocked_by_payments(client, headers, new_invoice):
    paid = new_invoice()
    pay(client, headers, paid["id"], 100)
    assert client.delete(f"/api/protected/invoices/{paid['id']}", headers=headers).status_code == 400

    unpaid = new_invoice()
    assert client.delete(f"/api/protected/invoices/{unpaid['id']}", headers=headers).status_code == 204


def test_invoice_items(client, headers, new_invoice):
    invoice = new_invoice()
    base = f"/api/protected/invoices/{invoice['id']}/items"
    item = client.post(base, json={"description": "Trim", "quantity": 4, "unitPrice": 12.5}, headers=headers)
    assert item.status_code == 201
    assert item.json()["amount"] == 50

    res = client.patch(f"{base}/{item.json()['id']}", json={"notes": "Primed"}, headers=headers)
    assert res.json()["notes"] == "Primed"
    assert client.delete(f"{base}/{item.json()['id']}", headers=headers).status_code == 204
    assert client.get(base, headers=headers).json() == []
