from typing import Optional
from fastapi import Cookie, Depends, HTTPException, status
from checkin.core.config import settings
from checkin.core.email_service import EmailService
from checkin.core.security import ROLE_ADMIN, decode_token
from checkin.db.sheets import RowStore, get_store
from checkin.services.badge_email_service import BadgeEmailDispatcher
from checkin.services.badge_service import BadgeService
from checkin.services.ticket_service import TicketService


def get_current_role(
    session: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME),
) -> str:
    """Role from the signed session cookie; the plain role cookie is never trusted."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
    )

    if not session:
        raise credentials_exception

    payload = decode_token(session)
    if payload is None:
        raise credentials_exception

    role: Optional[str] = payload.get("role")
    if role is None:
        raise credentials_exception

    return role


def require_admin(role: str = Depends(get_current_role)) -> str:
    if role != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return role


def get_ticket_service(store: RowStore = Depends(get_store)) -> TicketService:
    return TicketService(store)


def get_badge_service(store: RowStore = Depends(get_store)) -> BadgeService:
    return BadgeService(store)


def get_email_service() -> EmailService:
    return EmailService()


def get_badge_email_dispatcher(
    email_service: EmailService = Depends(get_email_service),
) -> BadgeEmailDispatcher:
    return BadgeEmailDispatcher(email_service)
