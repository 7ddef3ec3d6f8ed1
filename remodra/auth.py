import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models import Contractor
from .security_utils import decode_access_token, issue_access_token, verify_password

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def authenticate_contractor(db: Session, username: str, password: str) -> Contractor | None:
    """Look up a contractor by username (or email) and check the password"""
    contractor = (
        db.query(Contractor)
        .filter((Contractor.username == username) | (Contractor.email == username))
        .first()
    )
    if not contractor or not verify_password(password, contractor.password):
        logger.warning(f"⚠️ Failed login attempt for {username}")
        return None
    return contractor


def create_access_token(contractor: Contractor) -> str:
    return issue_access_token(contractor.id, contractor.role)


def get_current_contractor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Contractor:
    """Resolve the bearer token to a contractor, or 401"""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    try:
        contractor_id = int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=401, detail="Invalid token subject") from e

    contractor = db.query(Contractor).filter(Contractor.id == contractor_id).first()
    if not contractor:
        logger.warning(f"⚠️ Token for unknown contractor {contractor_id}")
        raise HTTPException(status_code=401, detail="Contractor not found")

    return contractor


def require_super_admin(contractor: Contractor = Depends(get_current_contractor)) -> Contractor:
    if contractor.role != "super_admin":
        logger.warning(f"⚠️ Contractor {contractor.id} attempted super admin access")
        raise HTTPException(status_code=403, detail="Super admin access required")
    return contractor
