"""
Client portal data assembly

Gathers everything a client may see about their own jobs: projects,
estimates, invoices, appointments and the contractor's field agent.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ..models import Agent, Client, ClientMessage, Contractor, Event, Project
from ..models_invoice import Estimate, Invoice
from ..security_utils import verify_portal_token

logger = logging.getLogger(__name__)

DEFAULT_AGENT_ROLE = "Field Agent"


def resolve_portal_client(db: Session, token: str) -> Optional[Client]:
    """Client behind a portal token, or None when the token is bad or stale"""
    payload = verify_portal_token(token)
    if not payload:
        return None

    return (
        db.query(Client)
        .filter(
            Client.id == payload.get("client_id"),
            Client.contractor_id == payload.get("contractor_id"),
        )
        .first()
    )


def get_client_records(db: Session, client: Client) -> dict:
    projects = (
        db.query(Project)
        .filter(Project.client_id == client.id, Project.contractor_id == client.contractor_id)
        .order_by(Project.created_at.desc(), Project.id.desc())
        .all()
    )
    estimates = (
        db.query(Estimate)
        .options(selectinload(Estimate.items))
        .filter(Estimate.client_id == client.id, Estimate.contractor_id == client.contractor_id)
        .order_by(Estimate.created_at.desc(), Estimate.id.desc())
        .all()
    )
    invoices = (
        db.query(Invoice)
        .options(selectinload(Invoice.items))
        .filter(Invoice.client_id == client.id, Invoice.contractor_id == client.contractor_id)
        .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        .all()
    )
    return {"projects": projects, "estimates": estimates, "invoices": invoices}


def get_client_messages(db: Session, client: Client) -> list[ClientMessage]:
    return (
        db.query(ClientMessage)
        .options(selectinload(ClientMessage.replies))
        .filter(ClientMessage.client_id == client.id, ClientMessage.contractor_id == client.contractor_id)
        .order_by(ClientMessage.created_at.desc(), ClientMessage.id.desc())
        .all()
    )


def get_client_appointments(db: Session, client: Client) -> list[Event]:
    return (
        db.query(Event)
        .filter(Event.client_id == client.id, Event.contractor_id == client.contractor_id)
        .order_by(Event.start_time.asc())
        .all()
    )


def get_primary_agent(db: Session, contractor_id: int) -> Optional[dict]:
    """The contractor's first agent stands in as the client's contact"""
    agent = (
        db.query(Agent)
        .filter(Agent.contractor_id == contractor_id)
        .order_by(Agent.id.asc())
        .first()
    )
    if not agent:
        return None
    return {
        "name": f"{agent.first_name} {agent.last_name}",
        "email": agent.email,
        "phone": agent.phone,
        "role": agent.role or DEFAULT_AGENT_ROLE,
    }


def client_summary(client: Client) -> dict:
    return {
        "id": client.id,
        "name": f"{client.first_name} {client.last_name}",
        "first_name": client.first_name,
        "last_name": client.last_name,
        "email": client.email,
        "phone": client.phone,
        "address": client.address,
        "city": client.city,
        "state": client.state,
        "zip": client.zip,
        "join_date": client.created_at,
    }


def get_portal_data(db: Session, client: Client) -> dict:
    data = get_client_records(db, client)
    data.update(
        {
            "client": client_summary(client),
            "appointments": get_client_appointments(db, client),
            "agent": get_primary_agent(db, client.contractor_id),
        }
    )
    return data


def build_chat_context(db: Session, client: Client) -> dict:
    """Plain summary of the client's records handed to the portal assistant"""
    records = get_client_records(db, client)
    contractor = db.query(Contractor).filter(Contractor.id == client.contractor_id).first()
    address = " ".join(
        part for part in (client.address, client.city, client.state, client.zip) if part
    )

    return {
        "client": {
            "name": f"{client.first_name} {client.last_name}",
            "email": client.email,
            "phone": client.phone,
            "address": address,
        },
        "contractor": contractor.company_name if contractor else "your contractor",
        "agent": get_primary_agent(db, client.contractor_id),
        "projects": [
            {"title": p.title, "status": p.status, "startDate": p.start_date, "budget": p.budget}
            for p in records["projects"]
        ],
        "estimates": [
            {"number": e.estimate_number, "status": e.status, "total": e.total}
            for e in records["estimates"]
        ],
        "invoices": [
            {
                "number": i.invoice_number,
                "status": i.status,
                "total": i.total,
                "amountPaid": i.amount_paid,
                "dueDate": i.due_date,
            }
            for i in records["invoices"]
        ],
        "appointments": [
            {"title": ev.title, "start": ev.start_time, "status": ev.status}
            for ev in get_client_appointments(db, client)
        ],
    }
