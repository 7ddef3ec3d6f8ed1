"""Project service - Business logic for project operations"""

import logging
import math
from datetime import datetime
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Client, Contractor, Project
from ...models_invoice import Estimate
from ...services.achievement_service import track_activity
from ...shared.ownership import append_note, get_owned_or_404
from ...shared.validators import is_number
from .repository import ProjectRepository
from .schemas import PROJECT_STATUSES, ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)

# Board positions are stored in an Integer column
MAX_POSITION = 2**31 - 1


def _valid_position(value: Any) -> bool:
    # NaN fails every comparison; inf and huge ints fall outside the range
    return is_number(value) and -MAX_POSITION <= value <= MAX_POSITION


def _json_safe(value: Any) -> Any:
    """Echo a rejected entry back; JSON responses cannot carry NaN or Infinity"""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_json_safe(item) for item in value]
    return value


class ProjectService:
    """Service layer for project business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProjectRepository()

    def get_projects(self, contractor: Contractor) -> list[Project]:
        return self.repo.get_projects(self.db, contractor.id)

    def get_project(self, project_id: int, contractor: Contractor) -> Project:
        project = self.repo.get_project_by_id(self.db, project_id, contractor.id)
        if not project:
            raise HTTPException(status_code=404, detail="Project not found")
        return project

    def create_project(self, data: ProjectCreate, contractor: Contractor) -> Project:
        get_owned_or_404(self.db, Client, data.client_id, contractor.id, "Client")

        project_data = data.model_dump()
        if project_data.get("ai_generated_description"):
            project_data["last_ai_update"] = datetime.utcnow()

        project = self.repo.create_project(self.db, contractor.id, **project_data)
        logger.info(f"✅ Created project {project.id} for contractor {contractor.id}")
        track_activity(self.db, contractor.id, "project")
        return project

    def update_project(self, project_id: int, data: ProjectUpdate, contractor: Contractor) -> Project:
        """Partial update; supplying an AI description stamps last_ai_update"""
        project = self.get_project(project_id, contractor)
        updates = data.model_dump(exclude_unset=True)

        # Required columns cannot be cleared
        for key in ("client_id", "title", "status"):
            if key in updates and updates[key] is None:
                del updates[key]

        if "client_id" in updates:
            get_owned_or_404(self.db, Client, updates["client_id"], contractor.id, "Client")

        if "ai_generated_description" in updates and not updates.get("last_ai_update"):
            updates["last_ai_update"] = datetime.utcnow()

        was_completed = project.status == "completed"
        project = self.repo.update_project(self.db, project, **updates)

        if project.status == "completed" and not was_completed:
            track_activity(self.db, contractor.id, "project")
        return project

    def delete_project(self, project_id: int, contractor: Contractor) -> None:
        project = self.get_project(project_id, contractor)
        self.repo.delete_project(self.db, project)

    def reorder_projects(self, project_updates: Any, contractor: Contractor) -> dict:
        """
        Apply board moves. Every entry is validated before anything is written,
        so a bad entry leaves the board untouched.
        """
        if not isinstance(project_updates, list):
            raise HTTPException(status_code=400, detail="projectUpdates must be an array")

        for update in project_updates:
            if (
                not isinstance(update, dict)
                or not str(update.get("id", "")).isdigit()
                or not update.get("status")
                or update.get("status") not in PROJECT_STATUSES
                or not _valid_position(update.get("position"))
            ):
                raise HTTPException(
                    status_code=400,
                    detail={"message": "Invalid project update", "update": _json_safe(update)},
                )

        projects = []
        for update in project_updates:
            project = self.get_project(int(update["id"]), contractor)
            projects.append((project, update))

        completed_any = False
        for project, update in projects:
            if update["status"] == "completed" and project.status != "completed":
                completed_any = True
            self.repo.update_project(
                self.db,
                project,
                commit=False,
                status=update["status"],
                position=int(update["position"]),
            )

        self.db.commit()
        logger.info(f"🔀 Reordered {len(projects)} projects for contractor {contractor.id}")

        if completed_any:
            track_activity(self.db, contractor.id, "project")
        return {"success": True}

    def cancel_project(self, project_id: int, notes: Optional[str], contractor: Contractor) -> Project:
        project = self.get_project(project_id, contractor)
        if project.status == "cancelled":
            raise HTTPException(status_code=400, detail="Project is already cancelled")

        note = f"Cancelled: {notes}" if notes else "Project cancelled"
        project = self.repo.update_project(
            self.db, project, status="cancelled", notes=append_note(project.notes, note)
        )
        logger.info(f"🚫 Project {project.id} cancelled by contractor {contractor.id}")
        return project

    def get_project_estimates(self, project_id: int, contractor: Contractor) -> list[Estimate]:
        self.get_project(project_id, contractor)
        return self.repo.get_project_estimates(self.db, project_id, contractor.id)
