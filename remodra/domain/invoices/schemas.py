"""Invoice domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Optional

from pydantic import field_validator

from ...shared.schemas import CamelModel
from ...shared.validators import empty_to_none

INVOICE_STATUSES = ("pending", "partially_paid", "paid", "cancelled", "signed")


class InvoiceItemCreate(CamelModel):
    description: str
    quantity: float = 1
    unit_price: float = 0
    amount: Optional[float] = None  # defaults to quantity * unit_price
    notes: Optional[str] = None


class InvoiceItemUpdate(CamelModel):
    description: Optional[str] = None
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    amount: Optional[float] = None
    notes: Optional[str] = None


class InvoiceItemResponse(CamelModel):
    id: int
    invoice_id: int
    description: str
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    amount: Optional[float] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class InvoiceCreate(CamelModel):
    client_id: int
    project_id: Optional[int] = None
    estimate_id: Optional[int] = None
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    status: str = "pending"
    subtotal: float = 0
    tax: Optional[float] = 0
    discount: Optional[float] = 0
    total: float = 0
    amount_paid: Optional[float] = 0
    terms: Optional[str] = None
    notes: Optional[str] = None
    contractor_signature: Optional[str] = None
    items: Optional[list[InvoiceItemCreate]] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in INVOICE_STATUSES:
            raise ValueError(f"Invalid status. Must be one of: {', '.join(INVOICE_STATUSES)}")
        return v

    @field_validator(
        "project_id", "estimate_id", "issue_date", "due_date", "tax", "discount", "amount_paid",
        mode="before",
    )
    @classmethod
    def blank_as_null(cls, v):
        return empty_to_none(v)


class InvoiceUpdate(CamelModel):
    client_id: Optional[int] = None
    project_id: Optional[int] = None
    estimate_id: Optional[int] = None
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    status: Optional[str] = None
    subtotal: Optional[float] = None
    tax: Optional[float] = None
    discount: Optional[float] = None
    total: Optional[float] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    contractor_signature: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in INVOICE_STATUSES:
            raise ValueError(f"Invalid status. Must be one of: {', '.join(INVOICE_STATUSES)}")
        return v

    @field_validator("project_id", "estimate_id", "issue_date", "due_date", mode="before")
    @classmethod
    def blank_as_null(cls, v):
        return empty_to_none(v)


class InvoiceResponse(CamelModel):
    id: int
    contractor_id: int
    client_id: int
    project_id: Optional[int] = None
    estimate_id: Optional[int] = None
    invoice_number: str
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    status: str
    subtotal: Optional[float] = None
    tax: Optional[float] = None
    discount: Optional[float] = None
    total: Optional[float] = None
    amount_paid: Optional[float] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    contractor_signature: Optional[str] = None
    client_signature: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: list[InvoiceItemResponse] = []


class InvoiceCancelRequest(CamelModel):
    notes: Optional[str] = None


# ============================================================================
# PAYMENTS
# ============================================================================


class PaymentRequest(CamelModel):
    """amount is checked by the service so bad values get a payment-specific message"""

    amount: Any = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class PaymentInfo(CamelModel):
    amount: float
    method: str
    notes: Optional[str] = None
    date: datetime


class PaymentTotals(CamelModel):
    current_amount_paid: float
    total_amount: float
    remaining_balance: float
    payment_percentage: int


class ProjectUpdateInfo(CamelModel):
    updated: bool = False
    new_status: Optional[str] = None
    message: Optional[str] = None


class PaymentResponse(CamelModel):
    invoice: InvoiceResponse
    payment: PaymentInfo
    totals: PaymentTotals
    project_update: ProjectUpdateInfo
    message: str
