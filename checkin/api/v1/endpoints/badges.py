# File: checkin/api/v1/endpoints/badges.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from checkin import schemas
from checkin.core.deps import get_badge_service, get_current_role, require_admin
from checkin.core.exceptions import NotFoundError
from checkin.services.badge_service import BadgeService
from checkin.services.codes import SVG_MEDIA_TYPE, render_code_svg

router = APIRouter()


@router.get("", response_model=List[schemas.Badge])
def list_badges(
    badge_type: Optional[schemas.BadgeType] = Query(None, alias="type"),
    service: BadgeService = Depends(get_badge_service),
    _: str = Depends(require_admin),
):
    return service.list_badges(badge_type)


@router.post("", response_model=schemas.Badge, status_code=status.HTTP_201_CREATED)
def create_badge(
    badge_in: schemas.BadgeCreate,
    service: BadgeService = Depends(get_badge_service),
    _: str = Depends(require_admin),
):
    return service.create_badge(badge_in)


@router.get("/{badge_id}", response_model=schemas.Badge)
def get_badge(
    badge_id: str,
    service: BadgeService = Depends(get_badge_service),
    _: str = Depends(get_current_role),
):
    badge = service.get_badge(badge_id)
    if not badge:
        raise NotFoundError("Badge not found")
    return badge


@router.patch("/{badge_id}", response_model=schemas.Badge)
def badge_action(
    badge_id: str,
    action_in: schemas.BadgeActionRequest,
    service: BadgeService = Depends(get_badge_service),
    _: str = Depends(get_current_role),
):
    """Check in, reset or view a badge."""
    if action_in.action == schemas.BadgeAction.CHECK_IN:
        return service.check_in(badge_id, action_in.selected_day)
    if action_in.action == schemas.BadgeAction.RESET:
        return service.reset_badge(badge_id)

    badge = service.get_badge(badge_id)
    if not badge:
        raise NotFoundError("Badge not found")
    return badge


@router.put("/{badge_id}", response_model=schemas.Badge)
def update_badge(
    badge_id: str,
    badge_in: schemas.BadgeUpdate,
    service: BadgeService = Depends(get_badge_service),
    _: str = Depends(require_admin),
):
    return service.update_badge_details(badge_id, badge_in)


@router.get("/{badge_id}/code.svg")
def badge_code(
    badge_id: str,
    service: BadgeService = Depends(get_badge_service),
    _: str = Depends(get_current_role),
):
    if not service.get_badge(badge_id):
        raise NotFoundError("Badge not found")
    return Response(content=render_code_svg(badge_id), media_type=SVG_MEDIA_TYPE)
