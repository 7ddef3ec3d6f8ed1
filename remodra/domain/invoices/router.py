"""Invoice router - FastAPI endpoints for invoices, items and payments"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...auth import get_current_contractor
from ...database import get_db
from ...models import Contractor
from .schemas import (
    InvoiceCancelRequest,
    InvoiceCreate,
    InvoiceItemCreate,
    InvoiceItemResponse,
    InvoiceItemUpdate,
    InvoiceResponse,
    InvoiceUpdate,
    PaymentRequest,
    PaymentResponse,
)
from .service import InvoiceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/protected/invoices", tags=["Invoices"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    return InvoiceService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[InvoiceResponse])
async def get_invoices(
    contractor: Contractor = Depends(get_current_contractor),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.get_invoices(contractor)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.get_invoice(invoice_id, contractor)


@router.post("", response_model=InvoiceResponse, status_code=201)
async def create_invoice(
    data: InvoiceCreate,
    contractor: Contractor = Depends(get_current_contractor),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.create_invoice(data, contractor)


@router.patch("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: int,
    data: InvoiceUpdate,
    contractor: Contractor = Depends(get_current_contractor),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.update_invoice(invoice_id, data, contractor)


@router.delete("/{invoice_id}", status_code=204)
async def delete_invoice(
    invoice_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Invoices with recorded payments cannot be deleted"""
    service.delete_invoice(invoice_id, contractor)
    return Response(status_code=204)


@router.post("/{invoice_id}/cancel", response_model=InvoiceResponse)
async def cancel_invoice(
    invoice_id: int,
    data: InvoiceCancelRequest | None = None,
    contractor: Contractor = Depends(get_current_contractor),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.cancel_invoice(invoice_id, data.notes if data else None, contractor)


# ============================================================================
# PAYMENTS
# ============================================================================


@router.post("/{invoice_id}/payment", response_model=PaymentResponse)
async def record_payment(
    invoice_id: int,
    data: PaymentRequest,
    contractor: Contractor = Depends(get_current_contractor),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Record a payment and advance the linked project"""
    return service.record_payment(invoice_id, data, contractor)


# ============================================================================
# LINE ITEMS
# ============================================================================


@router.get("/{invoice_id}/items", response_model=list[InvoiceItemResponse])
async def get_invoice_items(
    invoice_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.get_items(invoice_id, contractor)


@router.post("/{invoice_id}/items", response_model=InvoiceItemResponse, status_code=201)
async def create_invoice_item(
    invoice_id: int,
    data: InvoiceItemCreate,
    contractor: Contractor = Depends(get_current_contractor),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.create_item(invoice_id, data, contractor)


@router.patch("/{invoice_id}/items/{item_id}", response_model=InvoiceItemResponse)
async def update_invoice_item(
    invoice_id: int,
    item_id: int,
    data: InvoiceItemUpdate,
    contractor: Contractor = Depends(get_current_contractor),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.update_item(invoice_id, item_id, data, contractor)


@router.delete("/{invoice_id}/items/{item_id}", status_code=204)
async def delete_invoice_item(
    invoice_id: int,
    item_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: InvoiceService = Depends(get_invoice_service),
):
    service.delete_item(invoice_id, item_id, contractor)
    return Response(status_code=204)


__all__ = [
    "router",
    "get_invoices",
    "get_invoice",
    "create_invoice",
    "update_invoice",
    "delete_invoice",
    "cancel_invoice",
    "record_payment",
    "get_invoice_items",
    "create_invoice_item",
    "update_invoice_item",
    "delete_invoice_item",
]
