"""Client router - FastAPI endpoints for client operations"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...auth import get_current_contractor
from ...database import get_db
from ...models import Contractor
from .schemas import (
    ClientCreate,
    ClientImportRequest,
    ClientImportResponse,
    ClientResponse,
    ClientUpdate,
)
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/protected/clients", tags=["Clients"])
data_router = APIRouter(prefix="/api/protected/data/clients", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[ClientResponse])
async def get_clients(
    contractor: Contractor = Depends(get_current_contractor),
    service: ClientService = Depends(get_client_service),
):
    """Get all clients for the current contractor"""
    return service.get_clients(contractor)


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: ClientService = Depends(get_client_service),
):
    return service.get_client(client_id, contractor)


@router.post("", response_model=ClientResponse, status_code=201)
async def create_client(
    data: ClientCreate,
    contractor: Contractor = Depends(get_current_contractor),
    service: ClientService = Depends(get_client_service),
):
    return service.create_client(data, contractor)


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    data: ClientUpdate,
    contractor: Contractor = Depends(get_current_contractor),
    service: ClientService = Depends(get_client_service),
):
    return service.update_client(client_id, data, contractor)


@router.delete("/{client_id}", status_code=204)
async def delete_client(
    client_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: ClientService = Depends(get_client_service),
):
    service.delete_client(client_id, contractor)
    return Response(status_code=204)


# ============================================================================
# IMPORT / EXPORT
# ============================================================================


@data_router.get("/export")
async def export_clients(
    contractor: Contractor = Depends(get_current_contractor),
    service: ClientService = Depends(get_client_service),
):
    """Download all clients as JSON"""
    return service.export_clients(contractor)


@data_router.post("/import", response_model=ClientImportResponse)
async def import_clients(
    data: ClientImportRequest,
    contractor: Contractor = Depends(get_current_contractor),
    service: ClientService = Depends(get_client_service),
):
    return service.import_clients(data.clients_data, contractor)


__all__ = [
    "router",
    "data_router",
    "get_clients",
    "get_client",
    "create_client",
    "update_client",
    "delete_client",
    "export_clients",
    "import_clients",
]
