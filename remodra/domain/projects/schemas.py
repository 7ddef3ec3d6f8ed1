"""Project domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Optional

from pydantic import field_validator

from ...shared.schemas import CamelModel
from ...shared.validators import empty_to_none

PROJECT_STATUSES = ("pending", "in_progress", "completed", "cancelled", "on_hold")


def _check_status(v):
    if v is not None and v not in PROJECT_STATUSES:
        raise ValueError(f"Invalid status. Must be one of: {', '.join(PROJECT_STATUSES)}")
    return v


class ProjectCreate(CamelModel):
    client_id: int
    title: str
    description: Optional[str] = None
    service_type: Optional[str] = None
    status: str = "pending"
    budget: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    position: Optional[int] = 0
    ai_generated_description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _check_status(v)

    @field_validator("budget", "start_date", "end_date", mode="before")
    @classmethod
    def blank_as_null(cls, v):
        return empty_to_none(v)


class ProjectUpdate(CamelModel):
    client_id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    service_type: Optional[str] = None
    status: Optional[str] = None
    budget: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    position: Optional[int] = None
    ai_generated_description: Optional[str] = None
    last_ai_update: Optional[datetime] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _check_status(v)

    @field_validator("budget", "start_date", "end_date", mode="before")
    @classmethod
    def blank_as_null(cls, v):
        return empty_to_none(v)


class ProjectResponse(CamelModel):
    id: int
    contractor_id: int
    client_id: int
    title: str
    description: Optional[str] = None
    service_type: Optional[str] = None
    status: str
    budget: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    position: Optional[int] = None
    ai_generated_description: Optional[str] = None
    last_ai_update: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProjectReorderRequest(CamelModel):
    """Board drag-and-drop payload; entries are checked by the service"""

    project_updates: Any = None


class ProjectCancelRequest(CamelModel):
    notes: Optional[str] = None
