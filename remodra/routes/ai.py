"""
AI assistant API

Job costing, job descriptions and project content generated through
ai_service. Every successful call counts against the contractor's monthly
AI allowance.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from ..auth import get_current_contractor
from ..database import get_db
from ..domain.projects.schemas import ProjectResponse
from ..models import Contractor, Project
from ..plan_limits import can_use_ai, record_ai_usage
from ..services import ai_service
from ..services.achievement_service import track_activity
from ..shared.ownership import get_owned_or_404
from ..shared.schemas import CamelModel
from ..shared.validators import validate_materials

logger = logging.getLogger(__name__)

router = APIRouter(tags=["AI"])


class JobCostRequest(CamelModel):
    service_type: Optional[str] = None
    materials: Optional[Any] = None
    description: Optional[str] = None


class ProfessionalDescriptionRequest(CamelModel):
    appointment_notes: Optional[str] = None
    service_type: Optional[str] = None


class SharingContentRequest(CamelModel):
    settings: Optional[dict[str, Any]] = None


class DescriptionResponse(CamelModel):
    description: str


def _job_params(data: JobCostRequest) -> dict:
    if not data.service_type or not data.service_type.strip():
        raise HTTPException(status_code=400, detail="Service type is required")
    try:
        materials = validate_materials(data.materials)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "serviceType": data.service_type.strip(),
        "materials": materials,
        "description": data.description,
    }


def _require_ai_allowance(contractor: Contractor, db: Session) -> None:
    allowed, message = can_use_ai(contractor, db)
    if not allowed:
        logger.info(f"🚫 AI request refused for contractor {contractor.id}: plan limit")
        raise HTTPException(status_code=403, detail=message)


async def _run(coro, contractor: Contractor, db: Session, feature: str):
    """Await an ai_service call, map its failures and count the usage"""
    try:
        result = await coro
    except ai_service.AIServiceUnavailable:
        raise HTTPException(status_code=503, detail="AI service is not configured")
    except ai_service.AIServiceError as e:
        logger.error(f"❌ AI {feature} failed for contractor {contractor.id}: {e}")
        raise HTTPException(status_code=502, detail="AI service failed to respond")

    record_ai_usage(contractor, db, feature)
    track_activity(db, contractor.id, "ai")
    logger.info(f"🤖 AI {feature} completed for contractor {contractor.id}")
    return result


# ============================================================================
# JOB COSTING
# ============================================================================


@router.post("/api/protected/ai/analyze-job-cost")
async def analyze_job_cost(
    data: JobCostRequest,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    params = _job_params(data)
    _require_ai_allowance(contractor, db)
    return await _run(ai_service.analyze_job_cost(params), contractor, db, "analyze_job_cost")


@router.post("/api/protected/ai/generate-job-description", response_model=DescriptionResponse)
async def generate_job_description(
    data: JobCostRequest,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    params = _job_params(data)
    _require_ai_allowance(contractor, db)
    description = await _run(
        ai_service.generate_job_description(params), contractor, db, "job_description"
    )
    return {"description": description.strip()}


@router.post("/api/protected/ai/generate-professional-description", response_model=DescriptionResponse)
async def generate_professional_description(
    data: ProfessionalDescriptionRequest,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    if not data.appointment_notes or not data.appointment_notes.strip():
        raise HTTPException(status_code=400, detail="Appointment notes are required")

    _require_ai_allowance(contractor, db)
    params = {"appointmentNotes": data.appointment_notes.strip(), "serviceType": data.service_type}
    description = await _run(
        ai_service.generate_professional_description(params), contractor, db, "professional_description"
    )
    return {"description": description.strip()}


# ============================================================================
# PROJECTS
# ============================================================================


@router.post("/api/ai/analyze-project")
async def analyze_project(
    project_data: dict[str, Any] = Body(...),
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    _require_ai_allowance(contractor, db)
    return await _run(ai_service.analyze_project(project_data), contractor, db, "analyze_project")


@router.post("/api/ai/sharing-content/{project_id}")
async def generate_sharing_content(
    project_id: int,
    data: Optional[SharingContentRequest] = None,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    """Social media copy for a finished project; request settings override the contractor's"""
    project = get_owned_or_404(db, Project, project_id, contractor.id, "Project")
    _require_ai_allowance(contractor, db)

    settings = (data.settings if data else None) or contractor.settings or {}
    project_data = ProjectResponse.model_validate(project).model_dump(mode="json", by_alias=True)
    return await _run(
        ai_service.generate_sharing_content(project_data, settings), contractor, db, "sharing_content"
    )


__all__ = ["router"]
