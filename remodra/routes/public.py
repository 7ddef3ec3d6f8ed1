"""
Public document API

Client-facing estimate and invoice pages. No login: clients reach these
through links the contractor shares, so every route is rate-limited and all
client-supplied text is stripped of markup before it is stored.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..domain.clients.schemas import ClientResponse
from ..domain.estimates.repository import EstimateRepository
from ..domain.estimates.schemas import EstimateResponse
from ..domain.estimates.service import OPEN_STATUSES
from ..domain.invoices.repository import InvoiceRepository
from ..domain.invoices.schemas import InvoiceResponse
from ..domain.projects.schemas import ProjectResponse
from ..models import Client, Contractor, Project
from ..rate_limiter import create_rate_limiter
from ..services.achievement_service import track_activity
from ..shared.ownership import append_note
from ..shared.schemas import CamelModel
from ..utils.sanitization import strip_markup

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/public", tags=["Public Documents"])

rate_limit_public_read = create_rate_limiter(limit=60, window_seconds=60, key_prefix="public_read")
rate_limit_public_action = create_rate_limiter(limit=10, window_seconds=60, key_prefix="public_action")

ESTIMATE_ACTIONS = ("accept", "reject")


class PublicContractor(CamelModel):
    id: int
    company_name: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None


class PublicInvoiceResponse(InvoiceResponse):
    contractor: Optional[PublicContractor] = None
    client: Optional[ClientResponse] = None
    project: Optional[ProjectResponse] = None


class EstimateClientAction(CamelModel):
    action: Optional[str] = None
    client_id: Optional[Any] = None
    notes: Optional[str] = None


class EstimateActionResponse(CamelModel):
    success: bool
    message: str
    estimate: EstimateResponse


class InvoiceClientAction(CamelModel):
    action: Optional[str] = None
    signature: Optional[str] = None
    notes: Optional[str] = None


class InvoiceActionResponse(CamelModel):
    success: bool
    message: str
    invoice: InvoiceResponse


# ============================================================================
# ESTIMATES
# ============================================================================


@router.get("/estimates/{estimate_id}", response_model=EstimateResponse)
async def get_public_estimate(
    estimate_id: int,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_public_read),
):
    estimate = EstimateRepository.get_public_estimate(db, estimate_id)
    if not estimate:
        raise HTTPException(status_code=404, detail="Estimate not found")
    return estimate


@router.post("/estimates/{estimate_id}/client-action", response_model=EstimateActionResponse)
async def estimate_client_action(
    estimate_id: int,
    data: EstimateClientAction,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_public_action),
):
    """Client accepts or rejects an estimate from the shared link"""
    if not data.action or data.client_id in (None, ""):
        raise HTTPException(
            status_code=400,
            detail={"message": "Missing required fields", "required": ["action", "clientId"]},
        )
    if data.action not in ESTIMATE_ACTIONS:
        raise HTTPException(status_code=400, detail="Invalid action. Must be 'accept' or 'reject'")

    estimate = EstimateRepository.get_public_estimate(db, estimate_id)
    if not estimate:
        raise HTTPException(status_code=404, detail="Estimate not found")

    if str(estimate.client_id) != str(data.client_id).strip():
        logger.warning(f"⚠️ Client {data.client_id} tried to act on estimate {estimate_id}")
        raise HTTPException(status_code=403, detail="Estimate does not belong to this client")

    if estimate.status not in OPEN_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Estimate cannot be {data.action}ed from current status: {estimate.status}",
        )

    notes = strip_markup(data.notes) if data.notes else None
    now = datetime.utcnow()

    if data.action == "accept":
        estimate.status = "accepted"
        estimate.accepted_date = now
        estimate.notes = append_note(estimate.notes, "Estimate accepted by client")
        message = "Estimate has been accepted successfully"
    else:
        if not notes:
            raise HTTPException(status_code=400, detail="Rejection reason is required")
        estimate.status = "rejected"
        estimate.rejection_notes = notes
        estimate.rejected_date = now
        estimate.notes = append_note(estimate.notes, f"Client rejected: {notes}")
        message = "Estimate has been rejected successfully"

    db.commit()
    db.refresh(estimate)
    logger.info(f"📥 Client {estimate.client_id} {estimate.status} estimate {estimate.id}")

    if estimate.status == "accepted":
        track_activity(db, estimate.contractor_id, "estimate")
    return {"success": True, "message": message, "estimate": estimate}


# ============================================================================
# INVOICES
# ============================================================================


@router.get("/invoices/{invoice_id}", response_model=PublicInvoiceResponse)
async def get_public_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_public_read),
):
    invoice = InvoiceRepository.get_public_invoice(db, invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")

    data = InvoiceResponse.model_validate(invoice).model_dump()
    data["contractor"] = db.query(Contractor).filter(Contractor.id == invoice.contractor_id).first()
    data["client"] = (
        db.query(Client)
        .filter(Client.id == invoice.client_id, Client.contractor_id == invoice.contractor_id)
        .first()
    )
    data["project"] = None
    if invoice.project_id:
        data["project"] = (
            db.query(Project)
            .filter(Project.id == invoice.project_id, Project.contractor_id == invoice.contractor_id)
            .first()
        )
    return data


@router.post("/invoices/{invoice_id}/client-action", response_model=InvoiceActionResponse)
async def invoice_client_action(
    invoice_id: int,
    data: InvoiceClientAction,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_public_action),
):
    """Client signs a pending invoice"""
    if not data.action:
        raise HTTPException(status_code=400, detail="Action is required")

    invoice = InvoiceRepository.get_public_invoice(db, invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")

    if data.action != "sign":
        raise HTTPException(status_code=400, detail="Invalid action. Only 'sign' is supported.")

    signature = strip_markup(data.signature) if data.signature else ""
    if not signature:
        raise HTTPException(status_code=400, detail="Signature is required for signing")

    if invoice.status != "pending":
        raise HTTPException(
            status_code=400,
            detail=f'Cannot sign invoice in "{invoice.status}" status. Invoice must be in "pending" status.',
        )

    notes = strip_markup(data.notes) if data.notes else None
    invoice.status = "signed"
    invoice.client_signature = signature
    if notes:
        invoice.notes = append_note(invoice.notes, notes)

    db.commit()
    db.refresh(invoice)
    logger.info(f"✍️ Invoice {invoice.invoice_number} signed by client {invoice.client_id}")
    return {"success": True, "message": "Invoice has been signed successfully", "invoice": invoice}
