"""Pydantic schemas for tickets."""
from pydantic import Field, field_validator
from typing import Dict, List, Optional
from datetime import datetime
from enum import Enum

from checkin.core.config import settings
from checkin.schemas.base import CamelModel


class TicketStatus(str, Enum):
    """Redemption state of a ticket."""
    UNREDEEMED = "unredeemed"
    REDEEMED = "redeemed"


class ValidDay(str, Enum):
    """Event day a ticket admits on."""
    DAY1 = "day1"
    DAY2 = "day2"
    DAY3 = "day3"
    DAY4 = "day4"


class TicketAction(str, Enum):
    """Actions a scanner can apply to a ticket."""
    REDEEM = "redeem"
    RESET = "reset"
    VIEW = "view"


class TicketHistoryAction(str, Enum):
    """Entries recorded in a ticket's audit history."""
    CREATED = "created"
    REDEEMED = "redeemed"
    RESET = "reset"
    VIEWED = "viewed"


# Older rows recorded the request verb instead of the event
LEGACY_HISTORY_ACTIONS = {
    "redeem": TicketHistoryAction.REDEEMED.value,
    "view": TicketHistoryAction.VIEWED.value,
}

HISTORY_ACTION_FOR = {
    TicketAction.REDEEM: TicketHistoryAction.REDEEMED,
    TicketAction.RESET: TicketHistoryAction.RESET,
    TicketAction.VIEW: TicketHistoryAction.VIEWED,
}


class TicketHistoryEntry(CamelModel):
    action: TicketHistoryAction
    timestamp: datetime

    @field_validator("action", mode="before")
    @classmethod
    def normalize_legacy_action(cls, v):
        if isinstance(v, str):
            return LEGACY_HISTORY_ACTIONS.get(v, v)
        return v


class Ticket(CamelModel):
    id: str
    status: TicketStatus = TicketStatus.UNREDEEMED
    created_at: Optional[datetime] = None
    redeemed_at: Optional[datetime] = None
    reset_at: Optional[datetime] = None
    valid_day: ValidDay = ValidDay.DAY1
    history: List[TicketHistoryEntry] = Field(default_factory=list)


class TicketCreateRequest(CamelModel):
    quantity: int = Field(..., ge=1)
    valid_day: ValidDay = ValidDay.DAY1

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v):
        if v > settings.MAX_TICKETS_PER_REQUEST:
            raise ValueError(f"Cannot create more than {settings.MAX_TICKETS_PER_REQUEST} tickets at once")
        return v


class TicketCreateResponse(CamelModel):
    tickets: List[str]


class TicketUpdateRequest(CamelModel):
    action: TicketAction
    selected_day: Optional[ValidDay] = None


class TicketStats(CamelModel):
    total: int
    redeemed: int
    unredeemed: int
    by_valid_day: Dict[str, int]
