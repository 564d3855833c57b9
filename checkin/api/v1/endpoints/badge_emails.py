# File: checkin/api/v1/endpoints/badge_emails.py
from fastapi import APIRouter, Depends
from checkin import schemas
from checkin.core.deps import get_badge_email_dispatcher, get_badge_service, require_admin
from checkin.core.exceptions import InvalidInputError, NotFoundError
from checkin.services.badge_email_service import BadgeEmailDispatcher
from checkin.services.badge_service import BadgeService
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/email", response_model=schemas.BadgeEmailResponse)
def email_badges(
    email_in: schemas.BadgeEmailRequest,
    service: BadgeService = Depends(get_badge_service),
    dispatcher: BadgeEmailDispatcher = Depends(get_badge_email_dispatcher),
    _: str = Depends(require_admin),
):
    """Email each requested badge to its holder and report per-badge outcomes."""
    by_id = {}
    for badge in service.list_badges():
        by_id.setdefault(badge.badge_id, badge)

    found = []
    not_found = []
    for badge_id in email_in.badge_ids:
        if badge_id in by_id:
            found.append(by_id[badge_id])
        else:
            not_found.append(badge_id)

    if not found:
        raise NotFoundError("No valid badges found")

    with_email = [b for b in found if b.has_valid_email]
    without_email = [
        schemas.BadgeContact(badge_id=b.badge_id, name=b.name, email=b.email)
        for b in found if not b.has_valid_email
    ]

    if not with_email:
        raise InvalidInputError(
            "No badges have valid email addresses",
            badgesWithoutEmail=[{"badgeId": c.badge_id, "name": c.name} for c in without_email],
        )

    logger.info(
        f"Emailing {len(with_email)} badges ({len(not_found)} not found, {len(without_email)} without email)"
    )
    results = dispatcher.send_badge_emails(with_email)
    sent = [r for r in results if r.success]
    failed = [r for r in results if not r.success]

    return schemas.BadgeEmailResponse(
        summary=schemas.BadgeEmailSummary(
            total=len(email_in.badge_ids),
            sent=len(sent),
            failed=len(failed),
            not_found=len(not_found),
            no_email=len(without_email),
        ),
        results=schemas.BadgeEmailResults(
            sent=sent,
            failed=failed,
            not_found=not_found,
            no_email=without_email,
        ),
    )
