"""
Attachments API

File references (photos, documents) hung off clients, projects, estimates,
invoices and calendar events. Files themselves live in external storage.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from ..auth import get_current_contractor
from ..database import get_db
from ..models import Attachment, Client, Contractor, Event, Project
from ..models_invoice import Estimate, Invoice
from ..shared.ownership import get_owned_or_404
from ..shared.schemas import CamelModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/protected/attachments", tags=["Attachments"])

ENTITY_MODELS = {
    "client": Client,
    "project": Project,
    "estimate": Estimate,
    "invoice": Invoice,
    "event": Event,
}


class AttachmentCreate(CamelModel):
    entity_type: str
    entity_id: int
    file_name: str
    file_url: str
    file_type: Optional[str] = None
    size: Optional[int] = None


class AttachmentResponse(CamelModel):
    id: int
    contractor_id: int
    entity_type: str
    entity_id: int
    file_name: str
    file_url: str
    file_type: Optional[str] = None
    size: Optional[int] = None
    created_at: Optional[datetime] = None


def verify_entity(db: Session, entity_type: str, entity_id: int, contractor: Contractor) -> None:
    """The attached-to record must exist and belong to the caller"""
    model = ENTITY_MODELS.get(entity_type)
    if model is None:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid entity type. Must be one of: {', '.join(ENTITY_MODELS)}",
        )
    get_owned_or_404(db, model, entity_id, contractor.id, entity_type.capitalize())


@router.get("/{entity_type}/{entity_id}", response_model=list[AttachmentResponse])
async def get_attachments(
    entity_type: str,
    entity_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    verify_entity(db, entity_type, entity_id, contractor)
    return (
        db.query(Attachment)
        .filter(
            Attachment.contractor_id == contractor.id,
            Attachment.entity_type == entity_type,
            Attachment.entity_id == entity_id,
        )
        .order_by(Attachment.created_at.desc(), Attachment.id.desc())
        .all()
    )


@router.post("", response_model=AttachmentResponse, status_code=201)
async def create_attachment(
    data: AttachmentCreate,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    verify_entity(db, data.entity_type, data.entity_id, contractor)

    attachment = Attachment(contractor_id=contractor.id, **data.model_dump())
    db.add(attachment)
    db.commit()
    db.refresh(attachment)
    logger.info(f"📎 Attached {attachment.file_name} to {data.entity_type} {data.entity_id}")
    return attachment


@router.delete("/{attachment_id}", status_code=204)
async def delete_attachment(
    attachment_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    attachment = get_owned_or_404(db, Attachment, attachment_id, contractor.id, "Attachment")
    db.delete(attachment)
    db.commit()
    return Response(status_code=204)
