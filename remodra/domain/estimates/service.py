"""Estimate service - Business logic for estimates and conversion to invoices"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Agent, Client, Contractor, Material, Project
from ...models_invoice import Estimate, EstimateItem, Invoice
from ...services.achievement_service import track_activity
from ...shared.numbering import generate_estimate_number, generate_invoice_number
from ...shared.ownership import append_note, get_owned_or_404
from ..invoices.repository import InvoiceRepository
from .repository import EstimateRepository
from .schemas import (
    EstimateCreate,
    EstimateItemCreate,
    EstimateItemUpdate,
    EstimateUpdate,
)

logger = logging.getLogger(__name__)

# Statuses a contractor may still accept or reject from
OPEN_STATUSES = ("draft", "sent")
INVOICE_DUE_DAYS = 15


def _as_number(value: Any) -> Optional[float]:
    """Lenient numeric read for builder payloads; zero and blanks count as missing"""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number or None


def item_from_service(service: dict) -> dict:
    """
    Line item for a service chosen in the estimate builder.

    quantity = linear feet, else square feet, else 1
    unit_price = labor rate
    amount = labor cost, else quantity * unit_price
    """
    measurements = service.get("measurements") or {}
    quantity = (
        _as_number(measurements.get("linearFeet"))
        or _as_number(measurements.get("squareFeet"))
        or 1
    )
    unit_price = _as_number(service.get("laborRate")) or 0
    amount = _as_number(service.get("laborCost")) or quantity * unit_price
    return {
        "description": service.get("professionalDescription") or service.get("name") or "Service",
        "quantity": quantity,
        "unit_price": unit_price,
        "amount": round(amount, 2),
        "notes": service.get("notes"),
    }


def item_from_input(item: EstimateItemCreate) -> dict:
    data = item.model_dump()
    if data.get("amount") is None:
        data["amount"] = round((data.get("quantity") or 0) * (data.get("unit_price") or 0), 2)
    return data


class EstimateService:
    """Service layer for estimate business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EstimateRepository()
        self.invoice_repo = InvoiceRepository()

    def get_estimates(self, contractor: Contractor) -> list[Estimate]:
        return self.repo.get_estimates(self.db, contractor.id)

    def get_estimate(self, estimate_id: int, contractor: Contractor) -> Estimate:
        estimate = self.repo.get_estimate_by_id(self.db, estimate_id, contractor.id)
        if not estimate:
            raise HTTPException(status_code=404, detail="Estimate not found")
        return estimate

    def _check_references(self, data: dict, contractor: Contractor) -> None:
        """Linked client, project and agent must belong to the same contractor"""
        if data.get("client_id") is not None:
            get_owned_or_404(self.db, Client, data["client_id"], contractor.id, "Client")
        if data.get("project_id") is not None:
            get_owned_or_404(self.db, Project, data["project_id"], contractor.id, "Project")
        if data.get("agent_id") is not None:
            get_owned_or_404(self.db, Agent, data["agent_id"], contractor.id, "Agent")

    def _check_material(self, material_id: Optional[int], contractor: Contractor) -> None:
        if material_id is not None:
            get_owned_or_404(self.db, Material, material_id, contractor.id, "Material")

    def create_estimate(self, data: EstimateCreate, contractor: Contractor) -> Estimate:
        estimate_data = data.model_dump(exclude={"items", "selected_services"})
        self._check_references(estimate_data, contractor)

        estimate_data["estimate_number"] = generate_estimate_number()
        estimate_data["issue_date"] = datetime.utcnow()
        estimate_data["tax"] = estimate_data.get("tax") or 0
        estimate_data["discount"] = estimate_data.get("discount") or 0
        if estimate_data.get("appointment_duration") is None:
            estimate_data["appointment_duration"] = 60

        items = []
        for item in data.items or []:
            self._check_material(item.material_id, contractor)
            items.append(item_from_input(item))
        for service in data.selected_services or []:
            items.append(item_from_service(service))

        estimate = self.repo.create_estimate(self.db, contractor.id, items, **estimate_data)
        logger.info(
            f"✅ Created estimate {estimate.estimate_number} with {len(items)} items for contractor {contractor.id}"
        )
        track_activity(self.db, contractor.id, "estimate")
        return estimate

    def update_estimate(self, estimate_id: int, data: EstimateUpdate, contractor: Contractor) -> Estimate:
        estimate = self.get_estimate(estimate_id, contractor)
        updates = data.model_dump(exclude_unset=True)

        # Required columns cannot be cleared
        for key in ("client_id", "status"):
            if key in updates and updates[key] is None:
                del updates[key]

        self._check_references(updates, contractor)
        return self.repo.update_estimate(self.db, estimate, **updates)

    def delete_estimate(self, estimate_id: int, contractor: Contractor) -> None:
        estimate = self.get_estimate(estimate_id, contractor)
        self.repo.delete_estimate(self.db, estimate)

    # ========================================================================
    # STATUS CHANGES
    # ========================================================================

    def accept_estimate(self, estimate_id: int, notes: Optional[str], contractor: Contractor) -> Estimate:
        estimate = self.get_estimate(estimate_id, contractor)
        if estimate.status not in OPEN_STATUSES:
            raise HTTPException(
                status_code=400,
                detail=f"Estimate cannot be accepted from current status: {estimate.status}",
            )

        note = f"Accepted: {notes}" if notes else "Estimate accepted"
        estimate = self.repo.update_estimate(
            self.db,
            estimate,
            status="accepted",
            accepted_date=datetime.utcnow(),
            notes=append_note(estimate.notes, note),
        )
        logger.info(f"👍 Estimate {estimate.id} accepted by contractor {contractor.id}")
        track_activity(self.db, contractor.id, "estimate")
        return estimate

    def reject_estimate(self, estimate_id: int, notes: Optional[str], contractor: Contractor) -> Estimate:
        estimate = self.get_estimate(estimate_id, contractor)
        if estimate.status not in OPEN_STATUSES:
            raise HTTPException(
                status_code=400,
                detail=f"Estimate cannot be rejected from current status: {estimate.status}",
            )
        if not notes or not notes.strip():
            raise HTTPException(status_code=400, detail="Rejection reason is required")

        estimate = self.repo.update_estimate(
            self.db,
            estimate,
            status="rejected",
            rejection_notes=notes,
            rejected_date=datetime.utcnow(),
            notes=append_note(estimate.notes, f"Rejected: {notes}"),
        )
        logger.info(f"👎 Estimate {estimate.id} rejected by contractor {contractor.id}")
        return estimate

    def convert_to_invoice(self, estimate_id: int, contractor: Contractor) -> Invoice:
        """
        Create a pending invoice from an accepted estimate, copy every line item,
        then mark the estimate converted. Both writes share one commit.
        """
        estimate = self.get_estimate(estimate_id, contractor)
        if estimate.status != "accepted":
            raise HTTPException(
                status_code=400,
                detail=f"Only accepted estimates can be converted to invoices (current status: {estimate.status})",
            )

        now = datetime.utcnow()
        invoice_number = generate_invoice_number(now)
        items = [
            {
                "description": item.description,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "amount": item.amount,
                "notes": item.notes,
            }
            for item in estimate.items
        ]

        invoice = self.invoice_repo.create_invoice(
            self.db,
            contractor.id,
            items,
            commit=False,
            client_id=estimate.client_id,
            project_id=estimate.project_id,
            estimate_id=estimate.id,
            invoice_number=invoice_number,
            issue_date=now,
            due_date=now + timedelta(days=INVOICE_DUE_DAYS),
            status="pending",
            subtotal=estimate.subtotal,
            tax=estimate.tax,
            discount=estimate.discount,
            total=estimate.total,
            amount_paid=0,
            terms=estimate.terms,
            notes=estimate.notes,
            contractor_signature=estimate.contractor_signature,
        )

        estimate.status = "converted"
        estimate.notes = append_note(estimate.notes, f"Converted to Invoice #{invoice_number}")

        self.db.commit()
        self.db.refresh(invoice)
        logger.info(
            f"🔁 Estimate {estimate.id} converted to invoice {invoice_number} ({len(items)} items)"
        )

        track_activity(self.db, contractor.id, "estimate")
        track_activity(self.db, contractor.id, "invoice")
        return invoice

    # ========================================================================
    # LINE ITEMS
    # ========================================================================

    def get_items(self, estimate_id: int, contractor: Contractor) -> list[EstimateItem]:
        return list(self.get_estimate(estimate_id, contractor).items)

    def _get_item(self, estimate_id: int, item_id: int, contractor: Contractor) -> EstimateItem:
        self.get_estimate(estimate_id, contractor)
        item = self.repo.get_item(self.db, estimate_id, item_id)
        if not item:
            raise HTTPException(status_code=404, detail="Estimate item not found")
        return item

    def create_item(self, estimate_id: int, data: EstimateItemCreate, contractor: Contractor) -> EstimateItem:
        self.get_estimate(estimate_id, contractor)
        self._check_material(data.material_id, contractor)
        return self.repo.create_item(self.db, estimate_id, **item_from_input(data))

    def update_item(
        self, estimate_id: int, item_id: int, data: EstimateItemUpdate, contractor: Contractor
    ) -> EstimateItem:
        item = self._get_item(estimate_id, item_id, contractor)
        updates = data.model_dump(exclude_unset=True)
        if updates.get("description") is None:
            updates.pop("description", None)
        self._check_material(updates.get("material_id"), contractor)
        return self.repo.update_item(self.db, item, **updates)

    def delete_item(self, estimate_id: int, item_id: int, contractor: Contractor) -> None:
        item = self._get_item(estimate_id, item_id, contractor)
        self.repo.delete_item(self.db, item)
