"""
Calendar events API

Appointments, site visits and installations on the contractor's calendar.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import field_validator, model_validator
from sqlalchemy.orm import Session

from ..auth import get_current_contractor
from ..database import get_db
from ..models import Client, Contractor, Event, Project
from ..shared.ownership import apply_updates, delete_attachments, get_owned_or_404
from ..shared.schemas import CamelModel
from ..shared.validators import empty_to_none, to_naive_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/protected/events", tags=["Events"])

EVENT_STATUSES = ("pending", "confirmed", "completed", "cancelled")


class EventBase(CamelModel):
    client_id: Optional[int] = None
    project_id: Optional[int] = None
    description: Optional[str] = None
    location: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("client_id", "project_id", mode="before")
    @classmethod
    def blank_as_null(cls, v):
        return empty_to_none(v)

    @field_validator("start_time", "end_time", check_fields=False)
    @classmethod
    def naive_utc(cls, v):
        return to_naive_utc(v)

    @field_validator("status", check_fields=False)
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in EVENT_STATUSES:
            raise ValueError(f"Invalid status. Must be one of: {', '.join(EVENT_STATUSES)}")
        return v


class EventCreate(EventBase):
    title: str
    start_time: datetime
    end_time: datetime
    type: str = "meeting"
    status: str = "pending"

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_time < self.start_time:
            raise ValueError("End time must not be before start time")
        return self


class EventUpdate(EventBase):
    title: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    type: Optional[str] = None
    status: Optional[str] = None


class EventResponse(CamelModel):
    id: int
    contractor_id: int
    client_id: Optional[int] = None
    project_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    type: Optional[str] = None
    status: Optional[str] = None
    location: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def _check_links(db: Session, data: dict, contractor: Contractor) -> None:
    if data.get("client_id") is not None:
        get_owned_or_404(db, Client, data["client_id"], contractor.id, "Client")
    if data.get("project_id") is not None:
        get_owned_or_404(db, Project, data["project_id"], contractor.id, "Project")


@router.get("", response_model=list[EventResponse])
async def get_events(
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    return (
        db.query(Event)
        .filter(Event.contractor_id == contractor.id)
        .order_by(Event.start_time.asc())
        .all()
    )


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    return get_owned_or_404(db, Event, event_id, contractor.id, "Event")


@router.post("", response_model=EventResponse, status_code=201)
async def create_event(
    data: EventCreate,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    event_data = data.model_dump()
    _check_links(db, event_data, contractor)

    event = Event(contractor_id=contractor.id, **event_data)
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info(f"📅 Created event {event.id} ({event.type}) for contractor {contractor.id}")
    return event


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: int,
    data: EventUpdate,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    event = get_owned_or_404(db, Event, event_id, contractor.id, "Event")
    updates = data.model_dump(exclude_unset=True)
    for key in ("title", "start_time", "end_time", "type", "status"):
        if key in updates and updates[key] is None:
            del updates[key]
    _check_links(db, updates, contractor)

    start = updates.get("start_time", event.start_time)
    end = updates.get("end_time", event.end_time)
    if start and end and end < start:
        raise HTTPException(status_code=400, detail="End time must not be before start time")

    apply_updates(event, updates)
    db.commit()
    db.refresh(event)
    return event


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    event = get_owned_or_404(db, Event, event_id, contractor.id, "Event")
    delete_attachments(db, "event", event.id)
    db.delete(event)
    db.commit()
    return Response(status_code=204)
