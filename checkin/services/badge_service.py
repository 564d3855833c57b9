"""
Badge lifecycle: registration, detail edits and check-in scanning.

Regular badges admit on any day and may be scanned repeatedly. Multiday
badges admit only on their listed days and only once per day.
"""
import logging
import secrets
from datetime import datetime, timezone
from typing import List, Optional

from checkin import crud
from checkin.core.config import settings
from checkin.core.exceptions import (
    AlreadyScannedError,
    GenerationExhaustedError,
    InvalidDayError,
    NotFoundError,
)
from checkin.db.sheets import RowStore
from checkin.schemas.badge import Badge, BadgeDetails, BadgeType, CheckIn

logger = logging.getLogger(__name__)

BADGE_ID_PREFIX = "BDG-"


def random_badge_id() -> str:
    return f"{BADGE_ID_PREFIX}{secrets.randbelow(10 ** 6):06d}"


class BadgeService:
    def __init__(self, store: RowStore):
        self.store = store

    def generate_badge_id(self) -> str:
        for _ in range(settings.ID_GENERATION_ATTEMPTS):
            candidate = random_badge_id()
            if not crud.badge.exists(self.store, candidate):
                return candidate
        logger.error(f"Gave up generating a badge ID after {settings.ID_GENERATION_ATTEMPTS} attempts")
        raise GenerationExhaustedError("Could not generate a unique badge ID, please retry")

    def create_badge(self, obj_in: BadgeDetails) -> Badge:
        badge_id = self.generate_badge_id()
        badge = crud.badge.create(self.store, badge_id=badge_id, obj_in=obj_in)
        logger.info(f"Created {badge.type.value} {badge_id} for {badge.name}")
        return badge

    def get_badge(self, badge_id: str) -> Optional[Badge]:
        return crud.badge.get(self.store, badge_id)

    def list_badges(self, badge_type: Optional[BadgeType] = None) -> List[Badge]:
        badges = crud.badge.get_all(self.store)
        if badge_type is not None:
            badges = [b for b in badges if b.type == badge_type]
        return badges

    def _load(self, badge_id: str):
        found = crud.badge.find(self.store, badge_id)
        if not found:
            raise NotFoundError("Badge not found")
        row_number, snapshot = found
        return row_number, snapshot, crud.badge.to_model(snapshot)

    def _save(self, row_number: int, badge: Badge, snapshot: List[str]) -> Badge:
        row = crud.badge.to_row(badge)
        crud.badge.write_row(self.store, row_number, row, snapshot)
        # Re-read from the written row so scan history is rebuilt
        return crud.badge.to_model(row)

    def update_badge_details(self, badge_id: str, obj_in: BadgeDetails) -> Badge:
        row_number, snapshot, current = self._load(badge_id)
        updated = crud.badge.apply_details(current, obj_in)
        logger.info(f"Updated details of badge {badge_id}")
        return self._save(row_number, updated, snapshot)

    def check_in(self, badge_id: str, selected_day: Optional[int] = None) -> Badge:
        row_number, snapshot, badge = self._load(badge_id)

        if badge.is_multiday:
            if selected_day is None or selected_day not in badge.days:
                logger.warning(f"Rejected check-in of {badge_id} on day {selected_day}: valid days {badge.days}")
                raise InvalidDayError(
                    f"Badge is not valid for day {selected_day}",
                    badgeValidDays=badge.days,
                )
            if any((entry.day or 1) == selected_day for entry in badge.check_in_history):
                logger.warning(f"Rejected check-in of {badge_id}: day {selected_day} already scanned")
                raise AlreadyScannedError(
                    f"Badge already checked in for day {selected_day}",
                    day=selected_day,
                )

        entry = CheckIn(timestamp=datetime.now(timezone.utc), day=selected_day)
        updated = badge.model_copy(update={"check_in_history": badge.check_in_history + [entry]})
        saved = self._save(row_number, updated, snapshot)
        logger.info(f"Checked in badge {badge_id}" + (f" for day {selected_day}" if selected_day else ""))
        return saved

    def reset_badge(self, badge_id: str) -> Badge:
        row_number, snapshot, badge = self._load(badge_id)
        updated = badge.model_copy(update={"check_in_history": []})
        logger.info(f"Reset check-in history of badge {badge_id}")
        return self._save(row_number, updated, snapshot)
