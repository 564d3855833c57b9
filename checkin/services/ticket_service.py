"""
Ticket lifecycle: bulk creation with unique random IDs, lookup and the
redeem / reset / view scan actions. Every scan action is recorded in the
ticket's history and written back to its row.
"""
import logging
import secrets
import string
from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Set

from checkin import crud
from checkin.core.config import settings
from checkin.core.exceptions import GenerationExhaustedError, InvalidDayError, NotFoundError
from checkin.db.sheets import RowStore
from checkin.schemas.ticket import (
    HISTORY_ACTION_FOR,
    Ticket,
    TicketAction,
    TicketHistoryEntry,
    TicketStats,
    TicketStatus,
    ValidDay,
)

logger = logging.getLogger(__name__)

TICKET_ID_PREFIX = "TKT-"
TICKET_ID_ALPHABET = string.ascii_uppercase + string.digits
TICKET_ID_LENGTH = 8


def random_ticket_id() -> str:
    suffix = "".join(secrets.choice(TICKET_ID_ALPHABET) for _ in range(TICKET_ID_LENGTH))
    return f"{TICKET_ID_PREFIX}{suffix}"


class TicketService:
    def __init__(self, store: RowStore):
        self.store = store

    def generate_ticket_ids(self, quantity: int, existing: Iterable[str]) -> List[str]:
        """Draw `quantity` IDs unique against `existing` and each other."""
        taken: Set[str] = set(existing)
        ids: List[str] = []
        for _ in range(quantity):
            for _attempt in range(settings.ID_GENERATION_ATTEMPTS):
                candidate = random_ticket_id()
                if candidate not in taken:
                    break
            else:
                logger.error(f"Gave up generating a ticket ID after {settings.ID_GENERATION_ATTEMPTS} attempts")
                raise GenerationExhaustedError("Could not generate a unique ticket ID, please retry")
            taken.add(candidate)
            ids.append(candidate)
        return ids

    def create_tickets(self, quantity: int, valid_day: ValidDay = ValidDay.DAY1) -> List[Ticket]:
        ids = self.generate_ticket_ids(quantity, crud.ticket.existing_ids(self.store))
        tickets = crud.ticket.create_many(
            self.store, ids=ids, valid_day=valid_day, created_at=datetime.now(timezone.utc)
        )
        logger.info(f"Created {len(tickets)} tickets valid on {valid_day.value}")
        return tickets

    def get_ticket(self, ticket_id: str) -> Optional[Ticket]:
        return crud.ticket.get(self.store, ticket_id)

    def list_tickets(self) -> List[Ticket]:
        return crud.ticket.get_all(self.store)

    def ticket_stats(self) -> TicketStats:
        tickets = self.list_tickets()
        redeemed = sum(1 for t in tickets if t.status == TicketStatus.REDEEMED)
        by_day = Counter(t.valid_day.value for t in tickets)
        return TicketStats(
            total=len(tickets),
            redeemed=redeemed,
            unredeemed=len(tickets) - redeemed,
            by_valid_day={day.value: by_day.get(day.value, 0) for day in ValidDay},
        )

    def update_ticket(
        self, ticket_id: str, action: TicketAction, selected_day: Optional[ValidDay] = None
    ) -> Ticket:
        found = crud.ticket.find(self.store, ticket_id)
        if not found:
            raise NotFoundError("Ticket not found")
        row_number, snapshot = found
        ticket = crud.ticket.to_model(snapshot)

        if action == TicketAction.REDEEM and selected_day and selected_day != ticket.valid_day:
            logger.warning(
                f"Rejected redeem of {ticket_id}: valid on {ticket.valid_day.value}, scanned on {selected_day.value}"
            )
            raise InvalidDayError(
                f"Ticket is only valid for {ticket.valid_day.value}",
                ticketValidDay=ticket.valid_day.value,
            )

        now = datetime.now(timezone.utc)
        update = {}
        if action == TicketAction.REDEEM:
            update = {"status": TicketStatus.REDEEMED, "redeemed_at": now}
        elif action == TicketAction.RESET:
            update = {"status": TicketStatus.UNREDEEMED, "reset_at": now}
        update["history"] = ticket.history + [
            TicketHistoryEntry(action=HISTORY_ACTION_FOR[action], timestamp=now)
        ]
        updated = ticket.model_copy(update=update)

        row = crud.ticket.to_row(updated)
        crud.ticket.write_row(self.store, row_number, row, snapshot)
        logger.info(f"Ticket {ticket_id}: {action.value} -> {updated.status.value}")
        # Same precision as later reads of the row
        return crud.ticket.to_model(row)
