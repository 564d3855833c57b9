# File: checkin/api/v1/endpoints/tickets.py
from typing import List
from fastapi import APIRouter, Depends, Response, status
from checkin import schemas
from checkin.core.deps import get_current_role, get_ticket_service, require_admin
from checkin.core.exceptions import NotFoundError
from checkin.services.codes import SVG_MEDIA_TYPE, render_code_svg
from checkin.services.ticket_service import TicketService

router = APIRouter()


@router.get("", response_model=List[schemas.Ticket])
def list_tickets(
    service: TicketService = Depends(get_ticket_service),
    _: str = Depends(require_admin),
):
    return service.list_tickets()


@router.post("", response_model=schemas.TicketCreateResponse, status_code=status.HTTP_201_CREATED)
def create_tickets(
    ticket_in: schemas.TicketCreateRequest,
    service: TicketService = Depends(get_ticket_service),
    _: str = Depends(require_admin),
):
    """Create a batch of unredeemed tickets for one event day."""
    tickets = service.create_tickets(ticket_in.quantity, ticket_in.valid_day)
    return {"tickets": [ticket.id for ticket in tickets]}


@router.get("/stats", response_model=schemas.TicketStats)
def ticket_stats(
    service: TicketService = Depends(get_ticket_service),
    _: str = Depends(require_admin),
):
    return service.ticket_stats()


@router.get("/{ticket_id}", response_model=schemas.Ticket)
def get_ticket(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service),
    _: str = Depends(get_current_role),
):
    ticket = service.get_ticket(ticket_id)
    if not ticket:
        raise NotFoundError("Ticket not found")
    return ticket


@router.patch("/{ticket_id}", response_model=schemas.Ticket)
def update_ticket(
    ticket_id: str,
    update_in: schemas.TicketUpdateRequest,
    service: TicketService = Depends(get_ticket_service),
    _: str = Depends(get_current_role),
):
    """Apply a scan action (redeem, reset or view) to a ticket."""
    return service.update_ticket(ticket_id, update_in.action, update_in.selected_day)


@router.get("/{ticket_id}/code.svg")
def ticket_code(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service),
    _: str = Depends(get_current_role),
):
    if not service.get_ticket(ticket_id):
        raise NotFoundError("Ticket not found")
    return Response(content=render_code_svg(ticket_id), media_type=SVG_MEDIA_TYPE)
