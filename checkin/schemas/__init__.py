# File: checkin/schemas/__init__.py
from .ticket import (
    TicketStatus, ValidDay, TicketAction, TicketHistoryAction, TicketHistoryEntry,
    Ticket, TicketCreateRequest, TicketCreateResponse, TicketUpdateRequest, TicketStats,
)
from .badge import (
    EVENT_DAYS, BadgeType, BadgeAction, CheckIn, ScanDay, Badge,
    BadgeDetails, BadgeCreate, BadgeUpdate, BadgeActionRequest,
    BadgeEmailRequest, EmailResult, BadgeContact,
    BadgeEmailSummary, BadgeEmailResults, BadgeEmailResponse,
)
from .auth import LoginRequest, LoginResponse, SessionInfo
