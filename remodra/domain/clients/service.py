"""Client service - Business logic for client operations"""

import logging
from datetime import datetime

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ...models import Client, Contractor
from ...plan_limits import can_add_client
from ...services.achievement_service import track_activity
from .repository import ClientRepository
from .schemas import ClientCreate, ClientResponse, ClientUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_clients(self, contractor: Contractor) -> list[Client]:
        return self.repo.get_clients(self.db, contractor.id)

    def get_client(self, client_id: int, contractor: Contractor) -> Client:
        client = self.repo.get_client_by_id(self.db, client_id, contractor.id)
        if not client:
            raise HTTPException(status_code=404, detail="Client not found")
        return client

    def create_client(self, data: ClientCreate, contractor: Contractor) -> Client:
        """Create a new client with plan limit check"""
        logger.info(f"📥 Creating client for contractor_id: {contractor.id}")

        can_add, error_message = can_add_client(contractor, self.db)
        if not can_add:
            logger.warning(f"⚠️ Contractor {contractor.id} reached client limit: {error_message}")
            raise HTTPException(status_code=403, detail=error_message)

        client = self.repo.create_client(self.db, contractor.id, **data.model_dump())
        track_activity(self.db, contractor.id, "client")
        return client

    def update_client(self, client_id: int, data: ClientUpdate, contractor: Contractor) -> Client:
        client = self.get_client(client_id, contractor)
        return self.repo.update_client(self.db, client, **data.model_dump(exclude_unset=True))

    def delete_client(self, client_id: int, contractor: Contractor) -> None:
        """Delete a client unless projects, estimates or invoices still point at it"""
        client = self.get_client(client_id, contractor)

        dependents = self.repo.count_dependents(self.db, client.id)
        blocking = {name: count for name, count in dependents.items() if count}
        if blocking:
            summary = ", ".join(f"{count} {name}" for name, count in blocking.items())
            logger.warning(f"⚠️ Refusing to delete client {client.id}: still has {summary}")
            raise HTTPException(
                status_code=400,
                detail=f"Cannot delete client with existing {summary}. Remove them first.",
            )

        self.repo.delete_client(self.db, client)
        logger.info(f"🗑️ Deleted client {client_id} for contractor {contractor.id}")

    def export_clients(self, contractor: Contractor) -> JSONResponse:
        """All clients as a downloadable JSON document"""
        clients = self.repo.get_clients(self.db, contractor.id)
        logger.info(f"📊 Client export requested by contractor {contractor.id} ({len(clients)} clients)")

        payload = [
            ClientResponse.model_validate(c).model_dump(mode="json", by_alias=True) for c in clients
        ]
        filename = f"clients_export_{datetime.utcnow().strftime('%Y-%m-%d')}.json"
        return JSONResponse(
            content=payload,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    def import_clients(self, clients_data, contractor: Contractor) -> dict:
        """
        Import a list of client records.
        Entries whose email already exists are skipped; invalid entries are reported per index.
        """
        if not isinstance(clients_data, list):
            raise HTTPException(status_code=400, detail="Invalid client data provided")

        imported = 0
        skipped = 0
        errors = []

        for index, entry in enumerate(clients_data):
            try:
                data = ClientCreate.model_validate(entry)
            except ValidationError as e:
                errors.append({"index": index, "error": e.errors()[0].get("msg", "Invalid client")})
                continue

            if data.email and self.repo.get_client_by_email(self.db, data.email, contractor.id):
                skipped += 1
                continue

            can_add, error_message = can_add_client(contractor, self.db)
            if not can_add:
                errors.append({"index": index, "error": error_message})
                continue

            self.repo.create_client(self.db, contractor.id, commit=False, **data.model_dump())
            imported += 1

        self.db.commit()
        logger.info(
            f"✅ Imported {imported} clients for contractor {contractor.id} "
            f"(skipped={skipped}, errors={len(errors)})"
        )
        if imported:
            track_activity(self.db, contractor.id, "client")

        return {
            "message": f"Imported {imported} client(s)",
            "imported": imported,
            "skipped": skipped,
            "errors": errors,
        }
