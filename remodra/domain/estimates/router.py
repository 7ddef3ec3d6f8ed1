"""Estimate router - FastAPI endpoints for estimates and their line items"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...auth import get_current_contractor
from ...database import get_db
from ...models import Contractor
from ..invoices.schemas import InvoiceResponse
from .schemas import (
    EstimateActionRequest,
    EstimateCreate,
    EstimateItemCreate,
    EstimateItemResponse,
    EstimateItemUpdate,
    EstimateResponse,
    EstimateUpdate,
)
from .service import EstimateService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/protected/estimates", tags=["Estimates"])


def get_estimate_service(db: Session = Depends(get_db)) -> EstimateService:
    """Dependency injection for EstimateService"""
    return EstimateService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[EstimateResponse])
async def get_estimates(
    contractor: Contractor = Depends(get_current_contractor),
    service: EstimateService = Depends(get_estimate_service),
):
    return service.get_estimates(contractor)


@router.get("/{estimate_id}", response_model=EstimateResponse)
async def get_estimate(
    estimate_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: EstimateService = Depends(get_estimate_service),
):
    return service.get_estimate(estimate_id, contractor)


@router.post("", response_model=EstimateResponse, status_code=201)
async def create_estimate(
    data: EstimateCreate,
    contractor: Contractor = Depends(get_current_contractor),
    service: EstimateService = Depends(get_estimate_service),
):
    """Create an estimate; selectedServices become line items"""
    return service.create_estimate(data, contractor)


@router.patch("/{estimate_id}", response_model=EstimateResponse)
async def update_estimate(
    estimate_id: int,
    data: EstimateUpdate,
    contractor: Contractor = Depends(get_current_contractor),
    service: EstimateService = Depends(get_estimate_service),
):
    return service.update_estimate(estimate_id, data, contractor)


@router.delete("/{estimate_id}", status_code=204)
async def delete_estimate(
    estimate_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: EstimateService = Depends(get_estimate_service),
):
    service.delete_estimate(estimate_id, contractor)
    return Response(status_code=204)


# ============================================================================
# STATUS CHANGES
# ============================================================================


@router.post("/{estimate_id}/accept", response_model=EstimateResponse)
async def accept_estimate(
    estimate_id: int,
    data: EstimateActionRequest | None = None,
    contractor: Contractor = Depends(get_current_contractor),
    service: EstimateService = Depends(get_estimate_service),
):
    return service.accept_estimate(estimate_id, data.notes if data else None, contractor)


@router.post("/{estimate_id}/reject", response_model=EstimateResponse)
async def reject_estimate(
    estimate_id: int,
    data: EstimateActionRequest | None = None,
    contractor: Contractor = Depends(get_current_contractor),
    service: EstimateService = Depends(get_estimate_service),
):
    return service.reject_estimate(estimate_id, data.notes if data else None, contractor)


@router.post("/{estimate_id}/convert-to-invoice", response_model=InvoiceResponse, status_code=201)
async def convert_estimate_to_invoice(
    estimate_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: EstimateService = Depends(get_estimate_service),
):
    """Turn an accepted estimate into a pending invoice"""
    return service.convert_to_invoice(estimate_id, contractor)


# ============================================================================
# LINE ITEMS
# ============================================================================


@router.get("/{estimate_id}/items", response_model=list[EstimateItemResponse])
async def get_estimate_items(
    estimate_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: EstimateService = Depends(get_estimate_service),
):
    return service.get_items(estimate_id, contractor)


@router.post("/{estimate_id}/items", response_model=EstimateItemResponse, status_code=201)
async def create_estimate_item(
    estimate_id: int,
    data: EstimateItemCreate,
    contractor: Contractor = Depends(get_current_contractor),
    service: EstimateService = Depends(get_estimate_service),
):
    return service.create_item(estimate_id, data, contractor)


@router.patch("/{estimate_id}/items/{item_id}", response_model=EstimateItemResponse)
async def update_estimate_item(
    estimate_id: int,
    item_id: int,
    data: EstimateItemUpdate,
    contractor: Contractor = Depends(get_current_contractor),
    service: EstimateService = Depends(get_estimate_service),
):
    return service.update_item(estimate_id, item_id, data, contractor)


@router.delete("/{estimate_id}/items/{item_id}", status_code=204)
async def delete_estimate_item(
    estimate_id: int,
    item_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: EstimateService = Depends(get_estimate_service),
):
    service.delete_item(estimate_id, item_id, contractor)
    return Response(status_code=204)


__all__ = [
    "router",
    "get_estimates",
    "get_estimate",
    "create_estimate",
    "update_estimate",
    "delete_estimate",
    "accept_estimate",
    "reject_estimate",
    "convert_estimate_to_invoice",
    "get_estimate_items",
    "create_estimate_item",
    "update_estimate_item",
    "delete_estimate_item",
]
