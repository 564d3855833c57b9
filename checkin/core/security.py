from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from jose import JWTError, jwt
from checkin.core.config import settings
import logging

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"
ROLE_LIMITED = "limited"


def resolve_role(password: str) -> Optional[str]:
    """Map a shared-secret password to the role it grants, or None."""
    if not password:
        return None
    if password in (settings.ADMIN_PASSWORD, settings.SYSTEM_PASSWORD):
        return ROLE_ADMIN
    if password == settings.LIMITED_PASSWORD:
        return ROLE_LIMITED
    return None


def create_session_token(role: str, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)

    to_encode = {"exp": expire, "sub": "session", "role": role}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected session token: {str(e)}")
        return None
