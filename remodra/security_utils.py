"""
Credentials for the two kinds of callers: contractors log in and carry a
JWT bearer token, clients reach their portal through a signed link.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import ACCESS_TOKEN_EXPIRE_MINUTES, PORTAL_TOKEN_MAX_AGE, SECRET_KEY

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
portal_serializer = URLSafeTimedSerializer(SECRET_KEY, salt="client-portal")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError as e:
        # Stored value is not a bcrypt hash
        logger.error(f"Password verification error: {e}")
        return False


def issue_access_token(contractor_id: int, role: str) -> str:
    expires = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {"sub": str(contractor_id), "role": role, "exp": expires}
    return jwt.encode(claims, SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict[str, Any]]:
    """Claims of a valid token, None when the signature or expiry check fails"""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


def generate_portal_token(contractor_id: int, client_id: int) -> str:
    return portal_serializer.dumps({"contractor_id": contractor_id, "client_id": client_id})


def verify_portal_token(token: str, max_age: int = PORTAL_TOKEN_MAX_AGE) -> Optional[dict[str, Any]]:
    try:
        return portal_serializer.loads(token, max_age=max_age)
    except SignatureExpired:
        logger.warning("Portal token expired")
    except BadSignature:
        logger.warning("Invalid portal token signature")
    return None
