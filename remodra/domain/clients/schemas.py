"""Client domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Optional

from pydantic import field_validator

from ...shared.schemas import CamelModel
from ...shared.validators import empty_to_none


class ClientCreate(CamelModel):
    """Schema for creating a new client"""

    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    notes: Optional[str] = None
    cloudinary_folder: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        v = empty_to_none(v)
        if v is None:
            return v
        if "@" not in str(v):
            raise ValueError("Invalid email format")
        return str(v).strip().lower()


class ClientUpdate(CamelModel):
    """Schema for updating an existing client"""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    notes: Optional[str] = None
    cloudinary_folder: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        v = empty_to_none(v)
        if v is None:
            return v
        if "@" not in str(v):
            raise ValueError("Invalid email format")
        return str(v).strip().lower()


class ClientResponse(CamelModel):
    """Schema for client response"""

    id: int
    contractor_id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    notes: Optional[str] = None
    cloudinary_folder: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ClientImportRequest(CamelModel):
    """Bulk import payload; clientsData is checked by the service so a bad shape gets a clear message"""

    clients_data: Any = None


class ClientImportResponse(CamelModel):
    message: str
    imported: int
    skipped: int
    errors: list[dict]
