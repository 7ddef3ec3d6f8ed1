"""Project router - FastAPI endpoints for project operations"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...auth import get_current_contractor
from ...database import get_db
from ...models import Contractor
from ..estimates.schemas import EstimateResponse
from .schemas import (
    ProjectCancelRequest,
    ProjectCreate,
    ProjectReorderRequest,
    ProjectResponse,
    ProjectUpdate,
)
from .service import ProjectService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/protected/projects", tags=["Projects"])


def get_project_service(db: Session = Depends(get_db)) -> ProjectService:
    """Dependency injection for ProjectService"""
    return ProjectService(db)


# ============================================================================
# BOARD OPERATIONS
# ============================================================================


@router.patch("/reorder")
async def reorder_projects(
    data: ProjectReorderRequest,
    contractor: Contractor = Depends(get_current_contractor),
    service: ProjectService = Depends(get_project_service),
):
    """Persist drag-and-drop moves between status columns"""
    return service.reorder_projects(data.project_updates, contractor)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[ProjectResponse])
async def get_projects(
    contractor: Contractor = Depends(get_current_contractor),
    service: ProjectService = Depends(get_project_service),
):
    return service.get_projects(contractor)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: ProjectService = Depends(get_project_service),
):
    return service.get_project(project_id, contractor)


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    data: ProjectCreate,
    contractor: Contractor = Depends(get_current_contractor),
    service: ProjectService = Depends(get_project_service),
):
    return service.create_project(data, contractor)


@router.patch("/{project_id}", response_model=ProjectResponse)
@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    data: ProjectUpdate,
    contractor: Contractor = Depends(get_current_contractor),
    service: ProjectService = Depends(get_project_service),
):
    """Partial update (PUT behaves like PATCH)"""
    return service.update_project(project_id, data, contractor)


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: ProjectService = Depends(get_project_service),
):
    service.delete_project(project_id, contractor)
    return Response(status_code=204)


# ============================================================================
# STATUS AND RELATED RECORDS
# ============================================================================


@router.post("/{project_id}/cancel", response_model=ProjectResponse)
async def cancel_project(
    project_id: int,
    data: ProjectCancelRequest | None = None,
    contractor: Contractor = Depends(get_current_contractor),
    service: ProjectService = Depends(get_project_service),
):
    return service.cancel_project(project_id, data.notes if data else None, contractor)


@router.get("/{project_id}/estimates", response_model=list[EstimateResponse])
async def get_project_estimates(
    project_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: ProjectService = Depends(get_project_service),
):
    return service.get_project_estimates(project_id, contractor)


__all__ = [
    "router",
    "reorder_projects",
    "get_projects",
    "get_project",
    "create_project",
    "update_project",
    "delete_project",
    "cancel_project",
    "get_project_estimates",
]
