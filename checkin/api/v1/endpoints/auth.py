# File: checkin/api/v1/endpoints/auth.py
from datetime import timedelta
from typing import Optional
from fastapi import APIRouter, Cookie, HTTPException, Response, status
from checkin import schemas
from checkin.core import security
from checkin.core.config import settings
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


def _set_session_cookies(response: Response, role: str) -> None:
    max_age = settings.SESSION_EXPIRE_MINUTES * 60
    token = security.create_session_token(
        role, expires_delta=timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)
    )
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    # Readable by the UI for navigation only; authorization never looks at it
    response.set_cookie(
        settings.ROLE_COOKIE_NAME,
        role,
        max_age=max_age,
        secure=settings.is_production,
        samesite="lax",
    )


@router.post("/login", response_model=schemas.LoginResponse)
def login(login_data: schemas.LoginRequest, response: Response):
    """Exchange a shared-secret password for a session."""
    role = security.resolve_role(login_data.password)
    if role is None:
        logger.warning("Login rejected: invalid password")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid password",
        )

    _set_session_cookies(response, role)
    logger.info(f"Login succeeded with role {role}")
    return {"success": True, "role": role}


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    response.delete_cookie(settings.ROLE_COOKIE_NAME)
    return {"success": True}


@router.get("/session", response_model=schemas.SessionInfo)
def read_session(
    session: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME),
):
    payload = security.decode_token(session) if session else None
    if not payload or not payload.get("role"):
        return {"authenticated": False, "role": None}
    return {"authenticated": True, "role": payload["role"]}
