"""
Property measurements API

Site measurements (area, perimeter, per-section breakdown) taken for a client
or project.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import field_validator
from sqlalchemy.orm import Session

from ..auth import get_current_contractor
from ..database import get_db
from ..models import Client, Contractor, Project, PropertyMeasurement
from ..shared.ownership import apply_updates, get_owned_or_404
from ..shared.schemas import CamelModel
from ..shared.validators import empty_to_none

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/protected/property-measurements", tags=["Property Measurements"])


class MeasurementBase(CamelModel):
    client_id: Optional[int] = None
    project_id: Optional[int] = None
    property_type: Optional[str] = None
    area_sq_ft: Optional[float] = None
    perimeter_ft: Optional[float] = None
    measurements: Optional[Any] = None
    notes: Optional[str] = None
    measured_at: Optional[datetime] = None

    @field_validator("client_id", "project_id", "area_sq_ft", "perimeter_ft", "measured_at", mode="before")
    @classmethod
    def blank_as_null(cls, v):
        return empty_to_none(v)


class MeasurementResponse(MeasurementBase):
    id: int
    contractor_id: int
    created_at: Optional[datetime] = None


def _check_links(db: Session, data: dict, contractor: Contractor) -> None:
    if data.get("client_id") is not None:
        get_owned_or_404(db, Client, data["client_id"], contractor.id, "Client")
    if data.get("project_id") is not None:
        get_owned_or_404(db, Project, data["project_id"], contractor.id, "Project")


@router.get("", response_model=list[MeasurementResponse])
async def get_measurements(
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    return (
        db.query(PropertyMeasurement)
        .filter(PropertyMeasurement.contractor_id == contractor.id)
        .order_by(PropertyMeasurement.measured_at.desc(), PropertyMeasurement.id.desc())
        .all()
    )


@router.get("/{measurement_id}", response_model=MeasurementResponse)
async def get_measurement(
    measurement_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    return get_owned_or_404(db, PropertyMeasurement, measurement_id, contractor.id, "Measurement")


@router.post("", response_model=MeasurementResponse, status_code=201)
async def create_measurement(
    data: MeasurementBase,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    measurement_data = data.model_dump()
    _check_links(db, measurement_data, contractor)
    measurement_data["measured_at"] = measurement_data.get("measured_at") or datetime.utcnow()

    measurement = PropertyMeasurement(contractor_id=contractor.id, **measurement_data)
    db.add(measurement)
    db.commit()
    db.refresh(measurement)
    return measurement


@router.patch("/{measurement_id}", response_model=MeasurementResponse)
async def update_measurement(
    measurement_id: int,
    data: MeasurementBase,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    measurement = get_owned_or_404(db, PropertyMeasurement, measurement_id, contractor.id, "Measurement")
    updates = data.model_dump(exclude_unset=True)
    _check_links(db, updates, contractor)

    apply_updates(measurement, updates)
    db.commit()
    db.refresh(measurement)
    return measurement


@router.delete("/{measurement_id}", status_code=204)
async def delete_measurement(
    measurement_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    measurement = get_owned_or_404(db, PropertyMeasurement, measurement_id, contractor.id, "Measurement")
    db.delete(measurement)
    db.commit()
    return Response(status_code=204)
