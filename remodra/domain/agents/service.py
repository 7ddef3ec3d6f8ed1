"""Agent service - Agents, daily schedules and appointment assignment"""

import logging
from datetime import date, datetime, time, timedelta

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Agent, Contractor
from ...models_invoice import Estimate
from ...shared.validators import parse_day, to_naive_utc
from ..estimates.schemas import EstimateResponse
from .repository import AgentRepository
from .schemas import DEFAULT_APPOINTMENT_MINUTES, AgentCreate, AgentUpdate, AssignEstimateRequest

logger = logging.getLogger(__name__)


def _duration(estimate: Estimate) -> int:
    return estimate.appointment_duration or DEFAULT_APPOINTMENT_MINUTES


def _booked_hours(estimates: list[Estimate]) -> float:
    return sum(_duration(e) for e in estimates) / 60


def overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """Half-open intervals [start, end) overlap"""
    return start < other_end and end > other_start


def find_conflicts(start: datetime, minutes: int, booked: list[Estimate]) -> list[Estimate]:
    end = start + timedelta(minutes=minutes)
    conflicts = []
    for other in booked:
        if other.appointment_date is None:
            continue
        other_end = other.appointment_date + timedelta(minutes=_duration(other))
        if overlaps(start, end, other.appointment_date, other_end):
            conflicts.append(other)
    return conflicts


class AgentService:
    """Service layer for agents and scheduling"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AgentRepository()

    def get_agents(self, contractor: Contractor) -> list[Agent]:
        return self.repo.get_agents(self.db, contractor.id)

    def get_agent(self, agent_id: int, contractor: Contractor) -> Agent:
        agent = self.repo.get_agent_by_id(self.db, agent_id, contractor.id)
        if not agent:
            raise HTTPException(status_code=404, detail="Agent not found")
        return agent

    def create_agent(self, data: AgentCreate, contractor: Contractor) -> Agent:
        agent = self.repo.create_agent(self.db, contractor.id, **data.model_dump())
        logger.info(f"✅ Created agent {agent.id} for contractor {contractor.id}")
        return agent

    def update_agent(self, agent_id: int, data: AgentUpdate, contractor: Contractor) -> Agent:
        agent = self.get_agent(agent_id, contractor)
        updates = data.model_dump(exclude_unset=True)
        for key in ("first_name", "last_name", "is_active"):
            if key in updates and updates[key] is None:
                del updates[key]
        return self.repo.update_agent(self.db, agent, **updates)

    def delete_agent(self, agent_id: int, contractor: Contractor) -> None:
        agent = self.get_agent(agent_id, contractor)
        if self.repo.count_agent_estimates(self.db, agent.id, contractor.id):
            raise HTTPException(
                status_code=400,
                detail="Cannot delete agent with active estimates. Please reassign or complete estimates first.",
            )
        self.repo.delete_agent(self.db, agent)
        logger.info(f"🗑️ Deleted agent {agent_id} for contractor {contractor.id}")

    # ========================================================================
    # SCHEDULING
    # ========================================================================

    @staticmethod
    def _day_bounds(day: str) -> tuple[date, datetime, datetime]:
        try:
            parsed = parse_day(day)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        start = datetime.combine(parsed, time.min)
        return parsed, start, start + timedelta(days=1)

    def get_schedule(self, day: str, contractor: Contractor) -> dict:
        """Appointments per active agent for one day, plus the ones nobody holds"""
        parsed, start, end = self._day_bounds(day)
        day_estimates = self.repo.get_estimates_between(self.db, contractor.id, start, end)
        agents = self.repo.get_agents(self.db, contractor.id, active_only=True)

        schedule = []
        for agent in agents:
            agent_estimates = [e for e in day_estimates if e.agent_id == agent.id]
            schedule.append(
                {
                    "agent": agent,
                    "estimates": agent_estimates,
                    "total_hours": _booked_hours(agent_estimates),
                    "is_available": not agent_estimates,
                }
            )

        return {
            "date": parsed.isoformat(),
            "schedule": schedule,
            "total_estimates": len(day_estimates),
            "unassigned_estimates": [e for e in day_estimates if not e.agent_id],
        }

    def get_availability(self, agent_id: int, day: str, contractor: Contractor) -> dict:
        parsed, start, end = self._day_bounds(day)
        estimates = self.repo.get_estimates_between(
            self.db, contractor.id, start, end, agent_id=agent_id
        )
        return {
            "agent_id": agent_id,
            "date": parsed.isoformat(),
            "estimates": estimates,
            "total_booked_hours": _booked_hours(estimates),
            "is_available": not estimates,
        }

    def assign_estimate(self, data: AssignEstimateRequest, contractor: Contractor) -> Estimate:
        """
        Book an estimate appointment with an agent.

        Raises:
            HTTPException: 404 for an unknown estimate or agent, 409 when the
                slot overlaps another appointment of the same agent
        """
        estimate = (
            self.db.query(Estimate)
            .filter(Estimate.id == data.estimate_id, Estimate.contractor_id == contractor.id)
            .first()
        )
        if not estimate:
            raise HTTPException(status_code=404, detail="Estimate not found")
        agent = self.get_agent(data.agent_id, contractor)

        start = to_naive_utc(data.appointment_date)
        minutes = data.appointment_duration or DEFAULT_APPOINTMENT_MINUTES

        booked = self.repo.get_booked_estimates(self.db, agent.id, contractor.id, estimate.id)
        conflicts = find_conflicts(start, minutes, booked)
        if conflicts:
            logger.warning(
                f"⚠️ Agent {agent.id} has {len(conflicts)} conflicting appointments at {start.isoformat()}"
            )
            raise HTTPException(
                status_code=409,
                detail={
                    "message": "Agent has a scheduling conflict at this time",
                    "conflict": True,
                    "conflicts": [
                        EstimateResponse.model_validate(c).model_dump(mode="json", by_alias=True)
                        for c in conflicts
                    ],
                },
            )

        estimate.agent_id = agent.id
        estimate.appointment_date = start
        estimate.appointment_duration = minutes
        estimate.estimate_type = "agent"
        self.db.commit()
        self.db.refresh(estimate)
        logger.info(f"📅 Estimate {estimate.id} assigned to agent {agent.id} at {start.isoformat()}")

        try:
            self.repo.create_event(
                self.db,
                contractor.id,
                client_id=estimate.client_id,
                project_id=estimate.project_id,
                title=f"Agent Estimate - {estimate.estimate_number}",
                description=f"Estimate appointment assigned to {agent.first_name} {agent.last_name}",
                start_time=start,
                end_time=start + timedelta(minutes=minutes),
                type="estimate",
                status="confirmed",
                location="",
            )
        except Exception as e:
            self.db.rollback()
            logger.warning(f"⚠️ Could not create calendar event for estimate {estimate.id}: {e}")

        return estimate
