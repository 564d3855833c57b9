# File: checkin/api/v1/api.py
from fastapi import APIRouter
from checkin.api.v1.endpoints import auth, badge_emails, badges, tickets

api_router = APIRouter()

api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    tickets.router,
    prefix="/tickets",
    tags=["tickets"]
)

# Registered ahead of /badges/{badge_id} routes
api_router.include_router(
    badge_emails.router,
    prefix="/badges",
    tags=["badge-emails"]
)

api_router.include_router(
    badges.router,
    prefix="/badges",
    tags=["badges"]
)
