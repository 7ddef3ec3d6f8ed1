"""
Follow-up reminders API
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import field_validator
from sqlalchemy.orm import Session

from ..auth import get_current_contractor
from ..database import get_db
from ..models import Client, Contractor, FollowUp
from ..shared.ownership import apply_updates, get_owned_or_404
from ..shared.schemas import CamelModel
from ..shared.validators import empty_to_none

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/protected/follow-ups", tags=["Follow-ups"])

FOLLOW_UP_STATUSES = ("pending", "completed")


class FollowUpCreate(CamelModel):
    title: str
    client_id: Optional[int] = None
    notes: Optional[str] = None
    due_date: Optional[datetime] = None
    status: str = "pending"

    @field_validator("client_id", "due_date", mode="before")
    @classmethod
    def blank_as_null(cls, v):
        return empty_to_none(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in FOLLOW_UP_STATUSES:
            raise ValueError("Status must be pending or completed")
        return v


class FollowUpUpdate(CamelModel):
    title: Optional[str] = None
    client_id: Optional[int] = None
    notes: Optional[str] = None
    due_date: Optional[datetime] = None
    status: Optional[str] = None

    @field_validator("client_id", "due_date", mode="before")
    @classmethod
    def blank_as_null(cls, v):
        return empty_to_none(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in FOLLOW_UP_STATUSES:
            raise ValueError("Status must be pending or completed")
        return v


class FollowUpResponse(CamelModel):
    id: int
    contractor_id: int
    client_id: Optional[int] = None
    title: str
    notes: Optional[str] = None
    due_date: Optional[datetime] = None
    status: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@router.get("", response_model=list[FollowUpResponse])
async def get_follow_ups(
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    return (
        db.query(FollowUp)
        .filter(FollowUp.contractor_id == contractor.id)
        .order_by(FollowUp.due_date.asc(), FollowUp.id.asc())
        .all()
    )


@router.post("", response_model=FollowUpResponse, status_code=201)
async def create_follow_up(
    data: FollowUpCreate,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    if data.client_id is not None:
        get_owned_or_404(db, Client, data.client_id, contractor.id, "Client")

    follow_up = FollowUp(contractor_id=contractor.id, **data.model_dump())
    if follow_up.status == "completed":
        follow_up.completed_at = datetime.utcnow()
    db.add(follow_up)
    db.commit()
    db.refresh(follow_up)
    return follow_up


@router.patch("/{follow_up_id}", response_model=FollowUpResponse)
async def update_follow_up(
    follow_up_id: int,
    data: FollowUpUpdate,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    """Completing a follow-up stamps completed_at; reopening clears it"""
    follow_up = get_owned_or_404(db, FollowUp, follow_up_id, contractor.id, "Follow-up")
    updates = data.model_dump(exclude_unset=True)
    for key in ("title", "status"):
        if key in updates and updates[key] is None:
            del updates[key]
    if updates.get("client_id") is not None:
        get_owned_or_404(db, Client, updates["client_id"], contractor.id, "Client")

    if "status" in updates and updates["status"] != follow_up.status:
        updates["completed_at"] = datetime.utcnow() if updates["status"] == "completed" else None

    apply_updates(follow_up, updates)
    db.commit()
    db.refresh(follow_up)
    return follow_up


@router.delete("/{follow_up_id}", status_code=204)
async def delete_follow_up(
    follow_up_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    follow_up = get_owned_or_404(db, FollowUp, follow_up_id, contractor.id, "Follow-up")
    db.delete(follow_up)
    db.commit()
    return Response(status_code=204)
