"""
Authentication and account routes

Bearer-token login, the current contractor's profile, language preference
and super-admin contractor provisioning.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import field_validator
from sqlalchemy.orm import Session

from ..auth import authenticate_contractor, create_access_token, get_current_contractor, require_super_admin
from ..database import get_db
from ..models import Contractor
from ..plan_limits import VALID_PLANS
from ..rate_limiter import create_rate_limiter
from ..security_utils import hash_password
from ..shared.schemas import CamelModel
from ..shared.validators import validate_language

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])

rate_limit_login = create_rate_limiter(limit=10, window_seconds=60, key_prefix="login")

DEFAULT_PRIMARY_COLOR = "#1E40AF"


class ContractorResponse(CamelModel):
    """Public contractor fields; the password hash never leaves the API"""

    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    company_name: str
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    role: str
    plan: Optional[str] = None
    subscription_status: Optional[str] = None
    language: str
    settings: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None


class LoginRequest(CamelModel):
    username: str
    password: str


class LoginResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    contractor: ContractorResponse


class LanguageRequest(CamelModel):
    language: Optional[str] = None


class ContractorCreate(CamelModel):
    email: str
    password: str
    first_name: str
    last_name: str
    company_name: str
    username: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    plan: Optional[str] = None
    service_types: Optional[list[str]] = None
    allow_client_portal: Optional[bool] = None
    use_estimate_templates: Optional[bool] = None
    enabled_ai_assistant: Optional[bool] = None
    primary_color: Optional[str] = None
    logo_url: Optional[str] = None
    company_description: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v

    @field_validator("password")
    @classmethod
    def password_length(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @field_validator("plan")
    @classmethod
    def validate_plan(cls, v):
        if v is not None and v not in VALID_PLANS:
            raise ValueError("Invalid plan. Must be basic, pro, or business")
        return v


def _default(value: Optional[bool], fallback: bool = True) -> bool:
    return fallback if value is None else value


def build_settings(data: ContractorCreate) -> dict:
    return {
        "serviceTypes": data.service_types or ["deck"],
        "allowClientPortal": _default(data.allow_client_portal),
        "useEstimateTemplates": _default(data.use_estimate_templates),
        "enabledAIAssistant": _default(data.enabled_ai_assistant),
        "primaryColor": data.primary_color or DEFAULT_PRIMARY_COLOR,
        "logoUrl": data.logo_url,
        "companyDescription": data.company_description,
    }


# ============================================================================
# SESSION
# ============================================================================


@router.post("/api/auth/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_login),
):
    contractor = authenticate_contractor(db, data.username, data.password)
    if not contractor:
        raise HTTPException(status_code=401, detail="Invalid username or password")

    logger.info(f"✅ Contractor {contractor.id} logged in")
    return {"access_token": create_access_token(contractor), "contractor": contractor}


@router.get("/api/auth/me", response_model=ContractorResponse)
async def get_me(contractor: Contractor = Depends(get_current_contractor)):
    return contractor


@router.post("/api/protected/language", response_model=ContractorResponse)
async def update_language(
    data: LanguageRequest,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    try:
        contractor.language = validate_language(data.language)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    db.commit()
    db.refresh(contractor)
    return contractor


# ============================================================================
# SUPER ADMIN
# ============================================================================


@router.post("/api/super-admin/contractors", response_model=ContractorResponse, status_code=201)
async def create_contractor(
    data: ContractorCreate,
    admin: Contractor = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """Provision a contractor account"""
    if db.query(Contractor).filter(Contractor.email == data.email).first():
        raise HTTPException(status_code=400, detail="A contractor with this email already exists")

    username = (data.username or data.email).strip()
    if db.query(Contractor).filter(Contractor.username == username).first():
        raise HTTPException(status_code=400, detail="A contractor with this username already exists")

    contractor = Contractor(
        username=username,
        email=data.email,
        password=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        company_name=data.company_name,
        phone=data.phone or None,
        website=data.website or None,
        address=data.address or None,
        city=data.city or None,
        state=data.state or None,
        zip=data.zip_code or None,
        country=data.country or "USA",
        role="contractor",
        plan=data.plan or "pro",
        language="en",
        settings=build_settings(data),
    )
    db.add(contractor)
    db.commit()
    db.refresh(contractor)

    logger.info(f"✅ Super admin {admin.id} created contractor {contractor.id} ({contractor.email})")
    return contractor
