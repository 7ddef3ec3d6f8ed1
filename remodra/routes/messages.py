"""
Client messages and client portal API

Contractors message their clients and hand out signed portal links. The
portal endpoints are public: access is granted by the signed token, or by
client id for the read-only dashboard and its assistant.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import field_validator
from sqlalchemy.orm import Session, selectinload

from .. import config
from ..auth import get_current_contractor
from ..database import get_db
from ..domain.clients.schemas import ClientResponse
from ..domain.estimates.schemas import EstimateResponse
from ..domain.invoices.schemas import InvoiceResponse
from ..domain.projects.schemas import ProjectResponse
from ..models import Client, ClientMessage, Contractor, MessageReply
from ..rate_limiter import create_rate_limiter
from ..security_utils import generate_portal_token
from ..services import ai_service, portal_service
from ..shared.ownership import get_owned_or_404
from ..shared.schemas import CamelModel
from ..utils.sanitization import escape_message_text
from .events import EventResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/protected", tags=["Client Messages"])
portal_router = APIRouter(prefix="/api/client-portal", tags=["Client Portal"])

rate_limit_portal = create_rate_limiter(limit=60, window_seconds=60, key_prefix="client_portal")
rate_limit_portal_chat = create_rate_limiter(limit=20, window_seconds=60, key_prefix="client_portal_chat")

MAX_REPLY_LENGTH = 5000
MAX_CHAT_MESSAGE_LENGTH = 1000


class MessageCreate(CamelModel):
    client_id: int
    subject: str
    message: str
    message_type: str = "general"
    priority: str = "normal"
    send_email: bool = False

    @field_validator("subject", "message")
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v


class ReplyCreate(CamelModel):
    reply: Optional[str] = None


class MessageReplyResponse(CamelModel):
    id: int
    message_id: int
    sender_type: str
    sender_id: int
    reply: str
    created_at: Optional[datetime] = None


class ClientMessageResponse(CamelModel):
    id: int
    contractor_id: int
    client_id: int
    subject: str
    message: str
    message_type: Optional[str] = None
    priority: Optional[str] = None
    is_read: bool
    sent_via_email: bool
    email_sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    replies: list[MessageReplyResponse] = []


class PortalTokenRequest(CamelModel):
    client_id: int


class PortalTokenResponse(CamelModel):
    token: str
    url: str
    expires_at: datetime


class PortalResponse(CamelModel):
    client: ClientResponse
    messages: list[ClientMessageResponse]
    projects: list[ProjectResponse]
    estimates: list[EstimateResponse]
    invoices: list[InvoiceResponse]


class PortalClient(CamelModel):
    id: int
    name: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    join_date: Optional[datetime] = None


class PortalAgent(CamelModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: str


class PortalDataResponse(CamelModel):
    client: PortalClient
    projects: list[ProjectResponse]
    estimates: list[EstimateResponse]
    invoices: list[InvoiceResponse]
    appointments: list[EventResponse]
    agent: Optional[PortalAgent] = None


class PortalChatRequest(CamelModel):
    message: Optional[str] = None
    conversation_history: Optional[list[Any]] = None


class PortalChatResponse(CamelModel):
    response: str
    client_name: str


def _sanitized_reply(reply: Optional[str]) -> str:
    try:
        text = escape_message_text(reply, MAX_REPLY_LENGTH)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not text:
        raise HTTPException(status_code=400, detail="Reply is required")
    return text


# ============================================================================
# CONTRACTOR MESSAGES
# ============================================================================


@router.get("/client-messages", response_model=list[ClientMessageResponse])
async def get_client_messages(
    client_id: Optional[int] = Query(None, alias="clientId"),
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    query = (
        db.query(ClientMessage)
        .options(selectinload(ClientMessage.replies))
        .filter(ClientMessage.contractor_id == contractor.id)
    )
    if client_id is not None:
        query = query.filter(ClientMessage.client_id == client_id)
    return query.order_by(ClientMessage.created_at.desc(), ClientMessage.id.desc()).all()


@router.post("/client-messages", response_model=ClientMessageResponse, status_code=201)
async def create_client_message(
    data: MessageCreate,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    """Email delivery is not wired up; sendEmail only records the request"""
    get_owned_or_404(db, Client, data.client_id, contractor.id, "Client")

    message = ClientMessage(
        contractor_id=contractor.id,
        **data.model_dump(exclude={"send_email"}),
    )
    if data.send_email:
        message.sent_via_email = True
        message.email_sent_at = datetime.utcnow()

    db.add(message)
    db.commit()
    db.refresh(message)
    logger.info(f"✉️ Message {message.id} created for client {data.client_id} (email={data.send_email})")
    return message


@router.patch("/client-messages/{message_id}/read")
async def mark_message_read(
    message_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    message = get_owned_or_404(db, ClientMessage, message_id, contractor.id, "Message")
    message.is_read = True
    db.commit()
    return {"success": True}


@router.post("/client-messages/{message_id}/reply", response_model=MessageReplyResponse, status_code=201)
async def reply_to_message(
    message_id: int,
    data: ReplyCreate,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    get_owned_or_404(db, ClientMessage, message_id, contractor.id, "Message")

    reply = MessageReply(
        message_id=message_id,
        sender_type="contractor",
        sender_id=contractor.id,
        reply=_sanitized_reply(data.reply),
    )
    db.add(reply)
    db.commit()
    db.refresh(reply)
    return reply


@router.post("/client-portal-token", response_model=PortalTokenResponse)
async def create_portal_token(
    data: PortalTokenRequest,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    client = get_owned_or_404(db, Client, data.client_id, contractor.id, "Client")
    token = generate_portal_token(contractor.id, client.id)
    logger.info(f"🔑 Portal token issued for client {client.id}")
    return {
        "token": token,
        "url": f"{config.FRONTEND_URL}/client-portal/{token}",
        "expires_at": datetime.utcnow() + timedelta(seconds=config.PORTAL_TOKEN_MAX_AGE),
    }


# ============================================================================
# PUBLIC PORTAL
# ============================================================================


@portal_router.get("/{token}", response_model=PortalResponse)
async def get_portal(
    token: str,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_portal),
):
    client = portal_service.resolve_portal_client(db, token)
    if not client:
        raise HTTPException(status_code=404, detail="Invalid or expired portal access")

    data = portal_service.get_client_records(db, client)
    data["client"] = client
    data["messages"] = portal_service.get_client_messages(db, client)
    return data


@portal_router.post("/{token}/reply/{message_id}", response_model=MessageReplyResponse, status_code=201)
async def portal_reply(
    token: str,
    message_id: int,
    data: ReplyCreate,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_portal),
):
    client = portal_service.resolve_portal_client(db, token)
    if not client:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    message = (
        db.query(ClientMessage)
        .filter(ClientMessage.id == message_id, ClientMessage.client_id == client.id)
        .first()
    )
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")

    reply = MessageReply(
        message_id=message.id,
        sender_type="client",
        sender_id=client.id,
        reply=_sanitized_reply(data.reply),
    )
    db.add(reply)
    db.commit()
    db.refresh(reply)
    logger.info(f"📥 Client {client.id} replied to message {message.id}")
    return reply


@portal_router.get("/{client_id}/data", response_model=PortalDataResponse)
async def get_portal_data(
    client_id: int,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_portal),
):
    client = db.query(Client).filter(Client.id == client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return portal_service.get_portal_data(db, client)


@portal_router.post("/{client_id}/ai-chat", response_model=PortalChatResponse)
async def portal_ai_chat(
    client_id: int,
    data: PortalChatRequest,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_portal_chat),
):
    """Short assistant answers grounded in the client's own records"""
    if not data.message or not data.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")
    if len(data.message) > MAX_CHAT_MESSAGE_LENGTH:
        raise HTTPException(status_code=400, detail="Message is too long")

    client = db.query(Client).filter(Client.id == client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    context = portal_service.build_chat_context(db, client)
    try:
        answer = await ai_service.client_portal_chat(
            data.message.strip(), context, data.conversation_history or []
        )
    except ai_service.AIServiceUnavailable:
        raise HTTPException(status_code=503, detail="AI assistant is not available")
    except ai_service.AIServiceError as e:
        logger.error(f"❌ Portal chat failed for client {client_id}: {e}")
        raise HTTPException(status_code=502, detail="AI assistant failed to respond")

    return {"response": answer.strip(), "client_name": f"{client.first_name} {client.last_name}"}
