"""Agent repository - Database operations for agents and their appointments"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Agent, Event
from ...models_invoice import Estimate


class AgentRepository:
    """Repository for agent database operations"""

    @staticmethod
    def get_agents(db: Session, contractor_id: int, active_only: bool = False) -> list[Agent]:
        query = db.query(Agent).filter(Agent.contractor_id == contractor_id)
        if active_only:
            query = query.filter(Agent.is_active.is_(True))
        return query.order_by(Agent.first_name, Agent.last_name).all()

    @staticmethod
    def get_agent_by_id(db: Session, agent_id: int, contractor_id: int) -> Optional[Agent]:
        return (
            db.query(Agent)
            .filter(Agent.id == agent_id, Agent.contractor_id == contractor_id)
            .first()
        )

    @staticmethod
    def create_agent(db: Session, contractor_id: int, **agent_data) -> Agent:
        agent = Agent(contractor_id=contractor_id, **agent_data)
        db.add(agent)
        db.commit()
        db.refresh(agent)
        return agent

    @staticmethod
    def update_agent(db: Session, agent: Agent, **updates) -> Agent:
        for key, value in updates.items():
            if hasattr(agent, key):
                setattr(agent, key, value)
        db.commit()
        db.refresh(agent)
        return agent

    @staticmethod
    def delete_agent(db: Session, agent: Agent) -> None:
        db.delete(agent)
        db.commit()

    @staticmethod
    def count_agent_estimates(db: Session, agent_id: int, contractor_id: int) -> int:
        return (
            db.query(Estimate)
            .filter(Estimate.agent_id == agent_id, Estimate.contractor_id == contractor_id)
            .count()
        )

    @staticmethod
    def get_estimates_between(
        db: Session,
        contractor_id: int,
        start: datetime,
        end: datetime,
        agent_id: Optional[int] = None,
    ) -> list[Estimate]:
        """Estimates with an appointment in [start, end), earliest first"""
        query = db.query(Estimate).filter(
            Estimate.contractor_id == contractor_id,
            Estimate.appointment_date >= start,
            Estimate.appointment_date < end,
        )
        if agent_id is not None:
            query = query.filter(Estimate.agent_id == agent_id)
        return query.order_by(Estimate.appointment_date).all()

    @staticmethod
    def get_booked_estimates(
        db: Session, agent_id: int, contractor_id: int, exclude_estimate_id: int
    ) -> list[Estimate]:
        """Every other appointment the agent holds"""
        return (
            db.query(Estimate)
            .filter(
                Estimate.agent_id == agent_id,
                Estimate.contractor_id == contractor_id,
                Estimate.id != exclude_estimate_id,
                Estimate.appointment_date.isnot(None),
            )
            .all()
        )

    @staticmethod
    def create_event(db: Session, contractor_id: int, **event_data) -> Event:
        event = Event(contractor_id=contractor_id, **event_data)
        db.add(event)
        db.commit()
        db.refresh(event)
        return event
