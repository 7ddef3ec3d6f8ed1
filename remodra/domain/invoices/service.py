"""Invoice service - Business logic for invoices, items and payments"""

import logging
import math
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Client, Contractor, Project
from ...models_invoice import Estimate, Invoice, InvoiceItem
from ...services.achievement_service import track_activity
from ...shared.numbering import generate_invoice_number
from ...shared.ownership import append_note, get_owned_or_404
from ...shared.validators import is_number
from ..projects.repository import ProjectRepository
from .repository import InvoiceRepository
from .schemas import (
    InvoiceCreate,
    InvoiceItemCreate,
    InvoiceItemUpdate,
    InvoiceUpdate,
    PaymentRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = "cash"


def _item_data(item: InvoiceItemCreate) -> dict:
    data = item.model_dump()
    if data.get("amount") is None:
        data["amount"] = round((data.get("quantity") or 0) * (data.get("unit_price") or 0), 2)
    return data


class InvoiceService:
    """Service layer for invoice business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InvoiceRepository()
        self.project_repo = ProjectRepository()

    def get_invoices(self, contractor: Contractor) -> list[Invoice]:
        return self.repo.get_invoices(self.db, contractor.id)

    def get_invoice(self, invoice_id: int, contractor: Contractor) -> Invoice:
        invoice = self.repo.get_invoice_by_id(self.db, invoice_id, contractor.id)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        return invoice

    def _check_references(self, data: dict, contractor: Contractor) -> None:
        if data.get("client_id") is not None:
            get_owned_or_404(self.db, Client, data["client_id"], contractor.id, "Client")
        if data.get("project_id") is not None:
            get_owned_or_404(self.db, Project, data["project_id"], contractor.id, "Project")
        if data.get("estimate_id") is not None:
            get_owned_or_404(self.db, Estimate, data["estimate_id"], contractor.id, "Estimate")

    def create_invoice(self, data: InvoiceCreate, contractor: Contractor) -> Invoice:
        invoice_data = data.model_dump(exclude={"items"})
        self._check_references(invoice_data, contractor)

        invoice_data["invoice_number"] = generate_invoice_number()
        invoice_data["issue_date"] = invoice_data.get("issue_date") or datetime.utcnow()
        for key in ("tax", "discount", "amount_paid"):
            invoice_data[key] = invoice_data.get(key) or 0

        items = [_item_data(item) for item in data.items or []]
        invoice = self.repo.create_invoice(self.db, contractor.id, items, **invoice_data)
        logger.info(f"✅ Created invoice {invoice.invoice_number} for contractor {contractor.id}")
        track_activity(self.db, contractor.id, "invoice")
        return invoice

    def update_invoice(self, invoice_id: int, data: InvoiceUpdate, contractor: Contractor) -> Invoice:
        invoice = self.get_invoice(invoice_id, contractor)
        updates = data.model_dump(exclude_unset=True)

        for key in ("client_id", "status"):
            if key in updates and updates[key] is None:
                del updates[key]

        self._check_references(updates, contractor)
        return self.repo.update_invoice(self.db, invoice, **updates)

    def delete_invoice(self, invoice_id: int, contractor: Contractor) -> None:
        invoice = self.get_invoice(invoice_id, contractor)
        if (invoice.amount_paid or 0) > 0:
            raise HTTPException(
                status_code=400, detail="Cannot delete an invoice with recorded payments"
            )
        self.repo.delete_invoice(self.db, invoice)
        logger.info(f"🗑️ Deleted invoice {invoice_id} for contractor {contractor.id}")

    def cancel_invoice(self, invoice_id: int, notes: Optional[str], contractor: Contractor) -> Invoice:
        invoice = self.get_invoice(invoice_id, contractor)
        if invoice.status == "cancelled":
            raise HTTPException(status_code=400, detail="Invoice is already cancelled")
        if invoice.status == "paid":
            raise HTTPException(status_code=400, detail="Cannot cancel a paid invoice")

        note = f"Cancelled: {notes}" if notes else "Invoice cancelled"
        invoice = self.repo.update_invoice(
            self.db, invoice, status="cancelled", notes=append_note(invoice.notes, note)
        )
        logger.info(f"🚫 Invoice {invoice.id} cancelled by contractor {contractor.id}")
        return invoice

    # ========================================================================
    # PAYMENTS
    # ========================================================================

    def record_payment(self, invoice_id: int, data: PaymentRequest, contractor: Contractor) -> dict:
        """
        Apply a payment to an invoice.

        The invoice moves pending -> partially_paid -> paid. Once money has
        come in, the linked project is promoted from pending to in_progress,
        or a pending project is created when the invoice has none. The project
        step runs after the payment is committed and never fails it.
        """
        invoice = self.get_invoice(invoice_id, contractor)

        if data.amount is None or not is_number(data.amount, allow_strings=True):
            raise HTTPException(status_code=400, detail="Valid payment amount is required")
        amount = float(data.amount)
        if not math.isfinite(amount) or amount <= 0:
            raise HTTPException(status_code=400, detail="Payment amount must be greater than zero")
        if invoice.status == "cancelled":
            raise HTTPException(status_code=400, detail="Cannot record a payment on a cancelled invoice")

        current_paid = invoice.amount_paid or 0
        total = invoice.total or 0
        new_paid = round(current_paid + amount, 2)

        if new_paid > total:
            raise HTTPException(
                status_code=400,
                detail={
                    "message": "Payment amount exceeds remaining balance",
                    "currentAmountPaid": current_paid,
                    "totalAmount": total,
                    "remainingBalance": round(total - current_paid, 2),
                },
            )

        updates = {"amount_paid": new_paid}
        if new_paid >= total:
            updates["status"] = "paid"
        elif new_paid > 0:
            updates["status"] = "partially_paid"

        invoice = self.repo.update_invoice(self.db, invoice, **updates)
        logger.info(
            f"💰 Payment of {amount:.2f} recorded on invoice {invoice.invoice_number} "
            f"({new_paid:.2f}/{total:.2f}, status={invoice.status})"
        )

        project_update = {"updated": False, "new_status": None, "message": None}
        if new_paid > 0:
            project_update = self._advance_project(invoice, contractor)

        track_activity(self.db, contractor.id, "invoice")

        message = "Payment recorded successfully"
        if project_update["message"]:
            message = f"{message}. {project_update['message']}"

        return {
            "invoice": invoice,
            "payment": {
                "amount": amount,
                "method": data.payment_method or DEFAULT_PAYMENT_METHOD,
                "notes": data.notes,
                "date": datetime.utcnow(),
            },
            "totals": {
                "current_amount_paid": new_paid,
                "total_amount": total,
                "remaining_balance": round(total - new_paid, 2),
                "payment_percentage": round(new_paid / total * 100) if total else 100,
            },
            "project_update": project_update,
            "message": message,
        }

    def _advance_project(self, invoice: Invoice, contractor: Contractor) -> dict:
        """Promote or create the invoice's project; failures are logged and swallowed"""
        result = {"updated": False, "new_status": None, "message": None}
        try:
            if invoice.project_id:
                project = self.project_repo.get_project_by_id(self.db, invoice.project_id, contractor.id)
                if project and project.status == "pending":
                    self.project_repo.update_project(self.db, project, status="in_progress")
                    result = {
                        "updated": True,
                        "new_status": "In Progress",
                        "message": "Project automatically moved to In Progress status after receiving payment.",
                    }
                    logger.info(f"🏗️ Project {project.id} moved to in_progress after payment")
                return result

            client = self.db.query(Client).filter(
                Client.id == invoice.client_id, Client.contractor_id == contractor.id
            ).first()
            if not client:
                return result

            now = datetime.utcnow()
            project = Project(
                contractor_id=contractor.id,
                client_id=client.id,
                title=f"Project for Invoice #{invoice.invoice_number}",
                description=f"Project created automatically from invoice #{invoice.invoice_number}",
                status="pending",
                budget=invoice.total,
                start_date=now,
                notes=f"Created after payment received on invoice #{invoice.invoice_number}",
            )
            self.db.add(project)
            self.db.flush()
            invoice.project_id = project.id
            self.db.commit()
            self.db.refresh(invoice)

            result = {
                "updated": True,
                "new_status": "Pending",
                "message": "New project created and added to pending status after receiving payment.",
            }
            logger.info(f"🏗️ Created project {project.id} for invoice {invoice.invoice_number}")
            track_activity(self.db, contractor.id, "project")
        except Exception as e:
            self.db.rollback()
            self.db.refresh(invoice)
            logger.warning(f"⚠️ Project update after payment failed for invoice {invoice.id}: {e}")
        return result

    # ========================================================================
    # LINE ITEMS
    # ========================================================================

    def get_items(self, invoice_id: int, contractor: Contractor) -> list[InvoiceItem]:
        return list(self.get_invoice(invoice_id, contractor).items)

    def _get_item(self, invoice_id: int, item_id: int, contractor: Contractor) -> InvoiceItem:
        self.get_invoice(invoice_id, contractor)
        item = self.repo.get_item(self.db, invoice_id, item_id)
        if not item:
            raise HTTPException(status_code=404, detail="Invoice item not found")
        return item

    def create_item(self, invoice_id: int, data: InvoiceItemCreate, contractor: Contractor) -> InvoiceItem:
        self.get_invoice(invoice_id, contractor)
        return self.repo.create_item(self.db, invoice_id, **_item_data(data))

    def update_item(
        self, invoice_id: int, item_id: int, data: InvoiceItemUpdate, contractor: Contractor
    ) -> InvoiceItem:
        item = self._get_item(invoice_id, item_id, contractor)
        updates = data.model_dump(exclude_unset=True)
        if updates.get("description") is None:
            updates.pop("description", None)
        return self.repo.update_item(self.db, item, **updates)

    def delete_item(self, invoice_id: int, item_id: int, contractor: Contractor) -> None:
        item = self._get_item(invoice_id, item_id, contractor)
        self.repo.delete_item(self.db, item)
