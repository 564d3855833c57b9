from datetime import datetime
from typing import List

from checkin.crud.base import (
    SheetCRUDBase,
    dump_json,
    format_timestamp,
    load_json_list,
    parse_entries,
    parse_enum,
    parse_timestamp,
)
from checkin.db.sheets import RowStore
from checkin.schemas.ticket import Ticket, TicketHistoryAction, TicketHistoryEntry, TicketStatus, ValidDay

TICKET_HEADER = ["Ticket ID", "Status", "Created At", "Redeemed At", "Reset At", "History", "Valid Day"]
TICKET_DEFAULTS = ["", "", "", "", "", "", ValidDay.DAY1.value]


class CRUDTicket(SheetCRUDBase[Ticket]):
    def to_model(self, row: List[str]) -> Ticket:
        row = self.pad(row)
        return Ticket(
            id=row[0],
            status=parse_enum(TicketStatus, row[1], TicketStatus.UNREDEEMED),
            created_at=parse_timestamp(row[2]),
            redeemed_at=parse_timestamp(row[3]),
            reset_at=parse_timestamp(row[4]),
            history=parse_entries(TicketHistoryEntry, load_json_list(row[5]), "ticket history"),
            valid_day=parse_enum(ValidDay, row[6], ValidDay.DAY1),
        )

    def to_row(self, obj: Ticket) -> List[str]:
        history = [
            {"action": entry.action.value, "timestamp": format_timestamp(entry.timestamp)}
            for entry in obj.history
        ]
        return [
            obj.id,
            obj.status.value,
            format_timestamp(obj.created_at),
            format_timestamp(obj.redeemed_at),
            format_timestamp(obj.reset_at),
            dump_json(history),
            obj.valid_day.value,
        ]

    def create_many(
        self, store: RowStore, *, ids: List[str], valid_day: ValidDay, created_at: datetime
    ) -> List[Ticket]:
        tickets = [
            Ticket(
                id=ticket_id,
                status=TicketStatus.UNREDEEMED,
                created_at=created_at,
                valid_day=valid_day,
                history=[{"action": TicketHistoryAction.CREATED, "timestamp": created_at}],
            )
            for ticket_id in ids
        ]
        rows = [self.to_row(ticket) for ticket in tickets]
        self.append(store, rows)
        return [self.to_model(row) for row in rows]


ticket = CRUDTicket(Ticket, TICKET_HEADER, TICKET_DEFAULTS)
