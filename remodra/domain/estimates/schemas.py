"""Estimate domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from ...shared.schemas import CamelModel
from ...shared.validators import empty_to_none, to_naive_utc

ESTIMATE_STATUSES = ("draft", "sent", "accepted", "rejected", "converted")


class EstimateItemCreate(CamelModel):
    description: str
    quantity: float = 1
    unit_price: float = 0
    amount: Optional[float] = None  # defaults to quantity * unit_price
    notes: Optional[str] = None
    material_id: Optional[int] = None


class EstimateItemUpdate(CamelModel):
    description: Optional[str] = None
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    amount: Optional[float] = None
    notes: Optional[str] = None
    material_id: Optional[int] = None


class EstimateItemResponse(CamelModel):
    id: int
    estimate_id: int
    material_id: Optional[int] = None
    description: str
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    amount: Optional[float] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class EstimateCreate(CamelModel):
    client_id: int
    project_id: Optional[int] = None
    agent_id: Optional[int] = None
    expiry_date: Optional[datetime] = None
    status: str = "draft"
    subtotal: float = 0
    tax: Optional[float] = 0
    discount: Optional[float] = 0
    total: float = 0
    terms: Optional[str] = None
    notes: Optional[str] = None
    contractor_signature: Optional[str] = None
    appointment_date: Optional[datetime] = None
    appointment_duration: Optional[int] = None
    estimate_type: Optional[str] = None
    items: Optional[list[EstimateItemCreate]] = None
    # Services picked in the estimate builder; each becomes a line item
    selected_services: Optional[list[dict]] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in ESTIMATE_STATUSES:
            raise ValueError(f"Invalid status. Must be one of: {', '.join(ESTIMATE_STATUSES)}")
        return v

    @field_validator(
        "project_id", "agent_id", "expiry_date", "appointment_date", "tax", "discount", mode="before"
    )
    @classmethod
    def blank_as_null(cls, v):
        return empty_to_none(v)

    @field_validator("expiry_date", "appointment_date")
    @classmethod
    def naive_utc(cls, v):
        return to_naive_utc(v)


class EstimateUpdate(CamelModel):
    client_id: Optional[int] = None
    project_id: Optional[int] = None
    agent_id: Optional[int] = None
    issue_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    status: Optional[str] = None
    subtotal: Optional[float] = None
    tax: Optional[float] = None
    discount: Optional[float] = None
    total: Optional[float] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    contractor_signature: Optional[str] = None
    appointment_date: Optional[datetime] = None
    appointment_duration: Optional[int] = None
    estimate_type: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in ESTIMATE_STATUSES:
            raise ValueError(f"Invalid status. Must be one of: {', '.join(ESTIMATE_STATUSES)}")
        return v

    @field_validator(
        "project_id", "agent_id", "issue_date", "expiry_date", "appointment_date", mode="before"
    )
    @classmethod
    def blank_as_null(cls, v):
        return empty_to_none(v)

    @field_validator("issue_date", "expiry_date", "appointment_date")
    @classmethod
    def naive_utc(cls, v):
        return to_naive_utc(v)


class EstimateResponse(CamelModel):
    id: int
    contractor_id: int
    client_id: int
    project_id: Optional[int] = None
    agent_id: Optional[int] = None
    estimate_number: str
    issue_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    status: str
    subtotal: Optional[float] = None
    tax: Optional[float] = None
    discount: Optional[float] = None
    total: Optional[float] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    contractor_signature: Optional[str] = None
    client_signature: Optional[str] = None
    rejection_notes: Optional[str] = None
    accepted_date: Optional[datetime] = None
    rejected_date: Optional[datetime] = None
    appointment_date: Optional[datetime] = None
    appointment_duration: Optional[int] = None
    estimate_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: list[EstimateItemResponse] = []


class EstimateActionRequest(CamelModel):
    notes: Optional[str] = None
