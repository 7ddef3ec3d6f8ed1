"""Project repository - Database operations for projects"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Event, Project, PropertyMeasurement
from ...models_invoice import Estimate, Invoice
from ...shared.ownership import delete_attachments


class ProjectRepository:
    """Repository for project database operations"""

    @staticmethod
    def get_projects(db: Session, contractor_id: int) -> list[Project]:
        return (
            db.query(Project)
            .filter(Project.contractor_id == contractor_id)
            .order_by(Project.position.asc(), Project.created_at.desc(), Project.id.desc())
            .all()
        )

    @staticmethod
    def get_project_by_id(db: Session, project_id: int, contractor_id: int) -> Optional[Project]:
        return (
            db.query(Project)
            .filter(Project.id == project_id, Project.contractor_id == contractor_id)
            .first()
        )

    @staticmethod
    def create_project(db: Session, contractor_id: int, **project_data) -> Project:
        project = Project(contractor_id=contractor_id, **project_data)
        db.add(project)
        db.commit()
        db.refresh(project)
        return project

    @staticmethod
    def update_project(db: Session, project: Project, commit: bool = True, **updates) -> Project:
        for key, value in updates.items():
            if hasattr(project, key):
                setattr(project, key, value)

        if commit:
            db.commit()
            db.refresh(project)
        return project

    @staticmethod
    def delete_project(db: Session, project: Project) -> None:
        """Delete a project and its attachments; estimates, invoices and calendar rows are detached"""
        for model in (Estimate, Invoice, Event, PropertyMeasurement):
            db.query(model).filter(model.project_id == project.id).update(
                {model.project_id: None}, synchronize_session=False
            )
        delete_attachments(db, "project", project.id)
        db.delete(project)
        db.commit()

    @staticmethod
    def get_project_estimates(db: Session, project_id: int, contractor_id: int) -> list[Estimate]:
        return (
            db.query(Estimate)
            .filter(Estimate.project_id == project_id, Estimate.contractor_id == contractor_id)
            .order_by(Estimate.created_at.desc(), Estimate.id.desc())
            .all()
        )
