import re

import pytest

from checkin.core.exceptions import GenerationExhaustedError, InvalidDayError, NotFoundError
from checkin.schemas import TicketAction, TicketHistoryAction, TicketStatus, ValidDay
from checkin.services import ticket_service
from checkin.services.ticket_service import TicketService


@pytest.fixture
def service(store):
    return TicketService(store)


def test_create_tickets_returns_unique_well_formed_ids(service, store):
    tickets = service.create_tickets(25, ValidDay.DAY3)

    ids = [t.id for t in tickets]
    assert len(set(ids)) == 25
    assert all(re.fullmatch(r"TKT-[A-Z0-9]{8}", ticket_id) for ticket_id in ids)
    assert len(store.read_all("A:A")) == 26

    stored = service.get_ticket(ids[0])
    assert stored.status == TicketStatus.UNREDEEMED
    assert stored.valid_day == ValidDay.DAY3
    assert stored.redeemed_at is None
    assert [entry.action for entry in stored.history] == [TicketHistoryAction.CREATED]


def test_redeem_appends_history(service):
    ticket = service.create_tickets(1)[0]

    redeemed = service.update_ticket(ticket.id, TicketAction.REDEEM)

    assert redeemed.status == TicketStatus.REDEEMED
    assert redeemed.redeemed_at is not None
    assert [e.action for e in redeemed.history] == [TicketHistoryAction.CREATED, TicketHistoryAction.REDEEMED]
    assert service.get_ticket(ticket.id).status == TicketStatus.REDEEMED


def test_redeem_twice_is_last_write_wins(service):
    ticket = service.create_tickets(1)[0]
    service.update_ticket(ticket.id, TicketAction.REDEEM)

    again = service.update_ticket(ticket.id, TicketAction.REDEEM)

    assert again.status == TicketStatus.REDEEMED
    assert len(again.history) == 3


def test_reset_keeps_redeemed_at(service):
    ticket = service.create_tickets(1)[0]
    service.update_ticket(ticket.id, TicketAction.REDEEM)
    redeemed_at = service.get_ticket(ticket.id).redeemed_at

    reset = service.update_ticket(ticket.id, TicketAction.RESET)

    assert reset.status == TicketStatus.UNREDEEMED
    assert reset.reset_at is not None
    assert redeemed_at is not None
    assert service.get_ticket(ticket.id).redeemed_at == redeemed_at
    assert reset.history[-1].action == TicketHistoryAction.RESET


def test_view_only_appends_history(service):
    ticket = service.create_tickets(1)[0]

    viewed = service.update_ticket(ticket.id, TicketAction.VIEW)

    assert viewed.status == TicketStatus.UNREDEEMED
    assert viewed.redeemed_at is None
    assert viewed.history[-1].action == TicketHistoryAction.VIEWED
    assert len(service.get_ticket(ticket.id).history) == 2


def test_redeem_on_wrong_day_is_rejected(service):
    ticket = service.create_tickets(1, ValidDay.DAY2)[0]

    with pytest.raises(InvalidDayError) as exc_info:
        service.update_ticket(ticket.id, TicketAction.REDEEM, ValidDay.DAY1)

    assert exc_info.value.to_dict()["ticketValidDay"] == "day2"
    assert service.get_ticket(ticket.id).status == TicketStatus.UNREDEEMED

    redeemed = service.update_ticket(ticket.id, TicketAction.REDEEM, ValidDay.DAY2)
    assert redeemed.status == TicketStatus.REDEEMED


def test_update_missing_ticket(service):
    with pytest.raises(NotFoundError):
        service.update_ticket("TKT-MISSING0", TicketAction.REDEEM)


def test_list_and_stats(service):
    service.create_tickets(2, ValidDay.DAY1)
    day4 = service.create_tickets(1, ValidDay.DAY4)[0]
    service.update_ticket(day4.id, TicketAction.REDEEM)

    assert len(service.list_tickets()) == 3
    stats = service.ticket_stats()
    assert stats.total == 3
    assert stats.redeemed == 1
    assert stats.unredeemed == 2
    assert stats.by_valid_day == {"day1": 2, "day2": 0, "day3": 0, "day4": 1}


def test_generation_skips_ids_already_drawn(service, monkeypatch):
    draws = iter(["TKT-AAAAAAAA", "TKT-AAAAAAAA", "TKT-BBBBBBBB"])
    monkeypatch.setattr(ticket_service, "random_ticket_id", lambda: next(draws))

    assert service.generate_ticket_ids(2, existing=[]) == ["TKT-AAAAAAAA", "TKT-BBBBBBBB"]


def test_generation_exhausted_after_bounded_attempts(service, monkeypatch):
    calls = []

    def always_taken():
        calls.append(1)
        return "TKT-TAKEN000"

    monkeypatch.setattr(ticket_service, "random_ticket_id", always_taken)

    with pytest.raises(GenerationExhaustedError):
        service.generate_ticket_ids(1, existing=["TKT-TAKEN000"])
    assert len(calls) == 10


def test_update_returns_what_is_stored(service):
    ticket = service.create_tickets(1)[0]
    assert service.get_ticket(ticket.id) == ticket

    redeemed = service.update_ticket(ticket.id, TicketAction.REDEEM)

    assert service.get_ticket(ticket.id) == redeemed
