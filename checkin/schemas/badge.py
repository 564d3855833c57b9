"""Pydantic schemas for badges and badge emails."""
from pydantic import Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime
from enum import Enum

from checkin.core.config import settings
from checkin.schemas.base import CamelModel

EVENT_DAYS = [1, 2, 3, 4]


class BadgeType(str, Enum):
    """Regular badges admit on every day; multiday badges on listed days, once each."""
    BADGE = "Badge"
    MULTIDAY = "Multiday Badge"


class BadgeAction(str, Enum):
    CHECK_IN = "check-in"
    RESET = "reset"
    VIEW = "view"


class CheckIn(CamelModel):
    timestamp: datetime
    day: Optional[int] = None


class ScanDay(CamelModel):
    day: int
    timestamps: List[datetime]


class Badge(CamelModel):
    badge_id: str
    name: str = ""
    department: str = ""
    email: Optional[str] = None
    type: BadgeType = BadgeType.BADGE
    days: List[int] = Field(default_factory=lambda: list(EVENT_DAYS))
    companion: Optional[str] = None
    check_in_history: List[CheckIn] = Field(default_factory=list)
    scan_history: List[ScanDay] = Field(default_factory=list)

    @property
    def is_multiday(self) -> bool:
        return self.type == BadgeType.MULTIDAY

    @property
    def has_valid_email(self) -> bool:
        return bool(self.email) and "@" in self.email


class BadgeDetails(CamelModel):
    """Editable badge fields, used for creation and full replacement."""
    name: str = Field(..., min_length=1, max_length=255)
    department: str = Field("", max_length=255)
    email: Optional[str] = None
    type: BadgeType = BadgeType.BADGE
    days: Optional[List[int]] = None
    companion: Optional[str] = None

    @field_validator("name", "department", mode="before")
    @classmethod
    def strip_text(cls, v):
        # Stripped before the length check so a blank name is rejected
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", "companion")
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return v
        v = v.strip()
        return v or None

    @field_validator("days")
    @classmethod
    def validate_days(cls, v):
        if v is None:
            return v
        if not v:
            raise ValueError("At least one day must be selected")
        invalid = [day for day in v if day not in EVENT_DAYS]
        if invalid:
            raise ValueError(f"Days must be between 1 and 4, got {invalid}")
        return sorted(set(v))

    @model_validator(mode="after")
    def default_days(self):
        if self.days is None:
            if self.type == BadgeType.MULTIDAY:
                raise ValueError("Multiday badges must list at least one day")
            self.days = list(EVENT_DAYS)
        return self


class BadgeCreate(BadgeDetails):
    pass


class BadgeUpdate(BadgeDetails):
    pass


class BadgeActionRequest(CamelModel):
    action: BadgeAction
    selected_day: Optional[int] = None


class BadgeEmailRequest(CamelModel):
    badge_ids: List[str] = Field(..., min_length=1)

    @field_validator("badge_ids")
    @classmethod
    def validate_batch_size(cls, v):
        if len(v) > settings.MAX_BADGE_EMAILS_PER_REQUEST:
            raise ValueError(f"Cannot send more than {settings.MAX_BADGE_EMAILS_PER_REQUEST} emails at once")
        return v


class EmailResult(CamelModel):
    success: bool
    email: Optional[str] = None
    badge_id: Optional[str] = None
    error: Optional[str] = None


class BadgeContact(CamelModel):
    badge_id: str
    name: str
    email: Optional[str] = None


class BadgeEmailSummary(CamelModel):
    total: int
    sent: int
    failed: int
    not_found: int
    no_email: int


class BadgeEmailResults(CamelModel):
    sent: List[EmailResult]
    failed: List[EmailResult]
    not_found: List[str]
    no_email: List[BadgeContact]


class BadgeEmailResponse(CamelModel):
    success: bool = True
    summary: BadgeEmailSummary
    results: BadgeEmailResults
