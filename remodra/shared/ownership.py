"""Tenant scoping helpers

Every contractor-owned table carries contractor_id. Lookups for another
contractor's rows answer 404 so record ids never leak across tenants.
"""

from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ..models import Attachment


def get_owned(db: Session, model: Any, record_id: int, contractor_id: int) -> Optional[Any]:
    return (
        db.query(model)
        .filter(model.id == record_id, model.contractor_id == contractor_id)
        .first()
    )


def get_owned_or_404(
    db: Session, model: Any, record_id: int, contractor_id: int, label: Optional[str] = None
) -> Any:
    record = get_owned(db, model, record_id, contractor_id)
    if not record:
        raise HTTPException(status_code=404, detail=f"{label or model.__name__} not found")
    return record


def apply_updates(record: Any, updates: dict) -> Any:
    """Copy known attributes onto an ORM object; explicit nulls are kept"""
    for key, value in updates.items():
        if key in ("id", "contractor_id"):
            continue
        if hasattr(record, key):
            setattr(record, key, value)
    return record


def append_note(existing: Optional[str], note: str) -> str:
    """Append an audit line to a notes field, separated by a blank line"""
    if existing:
        return f"{existing}\n\n{note}"
    return note


def delete_attachments(db: Session, entity_type: str, entity_id: int) -> int:
    """Remove the files attached to a record that is being deleted; the caller commits"""
    return (
        db.query(Attachment)
        .filter(Attachment.entity_type == entity_type, Attachment.entity_id == entity_id)
        .delete(synchronize_session=False)
    )
