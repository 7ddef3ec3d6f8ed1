"""Agent router - FastAPI endpoints for agents and appointment scheduling"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...auth import get_current_contractor
from ...database import get_db
from ...models import Contractor
from ..estimates.schemas import EstimateResponse
from .schemas import (
    AgentCreate,
    AgentResponse,
    AgentUpdate,
    AssignEstimateRequest,
    AvailabilityResponse,
    ScheduleResponse,
)
from .service import AgentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/protected/agents", tags=["Agents"])


def get_agent_service(db: Session = Depends(get_db)) -> AgentService:
    """Dependency injection for AgentService"""
    return AgentService(db)


# ============================================================================
# SCHEDULING
# ============================================================================


@router.get("/schedule/{day}", response_model=ScheduleResponse)
async def get_agent_schedule(
    day: str,
    contractor: Contractor = Depends(get_current_contractor),
    service: AgentService = Depends(get_agent_service),
):
    """Day overview (YYYY-MM-DD) of every active agent's appointments"""
    return service.get_schedule(day, contractor)


@router.post("/assign-estimate", response_model=EstimateResponse)
async def assign_estimate(
    data: AssignEstimateRequest,
    contractor: Contractor = Depends(get_current_contractor),
    service: AgentService = Depends(get_agent_service),
):
    """Assign an estimate appointment; 409 when the agent is already booked"""
    return service.assign_estimate(data, contractor)


@router.get("/availability/{agent_id}/{day}", response_model=AvailabilityResponse)
async def get_agent_availability(
    agent_id: int,
    day: str,
    contractor: Contractor = Depends(get_current_contractor),
    service: AgentService = Depends(get_agent_service),
):
    return service.get_availability(agent_id, day, contractor)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[AgentResponse])
async def get_agents(
    contractor: Contractor = Depends(get_current_contractor),
    service: AgentService = Depends(get_agent_service),
):
    return service.get_agents(contractor)


@router.post("", response_model=AgentResponse, status_code=201)
async def create_agent(
    data: AgentCreate,
    contractor: Contractor = Depends(get_current_contractor),
    service: AgentService = Depends(get_agent_service),
):
    return service.create_agent(data, contractor)


@router.get("/{agent_id}", response_model=AgentResponse)
async def get_agent(
    agent_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: AgentService = Depends(get_agent_service),
):
    return service.get_agent(agent_id, contractor)


@router.put("/{agent_id}", response_model=AgentResponse)
@router.patch("/{agent_id}", response_model=AgentResponse)
async def update_agent(
    agent_id: int,
    data: AgentUpdate,
    contractor: Contractor = Depends(get_current_contractor),
    service: AgentService = Depends(get_agent_service),
):
    return service.update_agent(agent_id, data, contractor)


@router.delete("/{agent_id}", status_code=204)
async def delete_agent(
    agent_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: AgentService = Depends(get_agent_service),
):
    service.delete_agent(agent_id, contractor)
    return Response(status_code=204)


__all__ = [
    "router",
    "get_agent_schedule",
    "assign_estimate",
    "get_agent_availability",
    "get_agents",
    "create_agent",
    "get_agent",
    "update_agent",
    "delete_agent",
]
