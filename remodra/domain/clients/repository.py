"""Client repository - Database operations for clients"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import (
    Client,
    ClientMessage,
    Event,
    FollowUp,
    Project,
    PropertyMeasurement,
)
from ...models_invoice import Estimate, Invoice
from ...shared.ownership import delete_attachments


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def get_clients(db: Session, contractor_id: int) -> list[Client]:
        """Get all clients for a contractor, newest first"""
        return (
            db.query(Client)
            .filter(Client.contractor_id == contractor_id)
            .order_by(Client.created_at.desc(), Client.id.desc())
            .all()
        )

    @staticmethod
    def get_client_by_id(db: Session, client_id: int, contractor_id: int) -> Optional[Client]:
        return (
            db.query(Client)
            .filter(Client.id == client_id, Client.contractor_id == contractor_id)
            .first()
        )

    @staticmethod
    def get_client_by_email(db: Session, email: str, contractor_id: int) -> Optional[Client]:
        return (
            db.query(Client)
            .filter(
                Client.contractor_id == contractor_id,
                func.lower(Client.email) == email.lower(),
            )
            .first()
        )

    @staticmethod
    def create_client(db: Session, contractor_id: int, commit: bool = True, **client_data) -> Client:
        client = Client(contractor_id=contractor_id, **client_data)
        db.add(client)
        if commit:
            db.commit()
            db.refresh(client)
        else:
            db.flush()
        return client

    @staticmethod
    def update_client(db: Session, client: Client, **updates) -> Client:
        for key, value in updates.items():
            if hasattr(client, key):
                setattr(client, key, value)

        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def delete_client(db: Session, client: Client) -> None:
        """Delete a client along with its messages and attachments; calendar rows are detached"""
        for message in db.query(ClientMessage).filter(ClientMessage.client_id == client.id).all():
            db.delete(message)
        delete_attachments(db, "client", client.id)
        for model in (Event, FollowUp, PropertyMeasurement):
            db.query(model).filter(model.client_id == client.id).update(
                {model.client_id: None}, synchronize_session=False
            )
        db.delete(client)
        db.commit()

    @staticmethod
    def count_dependents(db: Session, client_id: int) -> dict[str, int]:
        """Rows that still reference the client"""
        return {
            "projects": db.query(Project).filter(Project.client_id == client_id).count(),
            "estimates": db.query(Estimate).filter(Estimate.client_id == client_id).count(),
            "invoices": db.query(Invoice).filter(Invoice.client_id == client_id).count(),
        }
