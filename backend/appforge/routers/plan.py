"""Plan board: the ticket backlog derived from the finished wizard.

Endpoints:
  GET   /api/plan/                      → board state
  POST  /api/plan/generate              → derive tickets from the wizard
  GET   /api/plan/status/{status}       → tickets in one column (filtered, ordered)
  PATCH /api/plan/tickets/{id}          → edit ticket fields
  POST  /api/plan/tickets/{id}/status   → move a ticket between columns
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from appforge.deps import get_event_bus, get_plan_board, get_wizard_store
from appforge.middleware.exceptions import ResourceNotFoundError
from appforge.schemas.plan import (
    PlanState,
    PlanTicket,
    TicketStatus,
    TicketStatusChange,
    TicketUpdate,
)
from appforge.services.events import EventBus
from appforge.services.plan import (
    PlanBoard,
    TicketNotFoundError,
    get_tickets_by_status,
    set_plan_project,
    set_tickets,
    update_ticket,
    update_ticket_status,
)
from appforge.services.store import WizardStore
from appforge.services.tickets import generate_tickets, project_key_for

logger = logging.getLogger(__name__)

router = APIRouter()


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/", response_model=PlanState)
async def get_plan(board: PlanBoard = Depends(get_plan_board)):
    return board.get()


@router.post("/generate", response_model=PlanState)
async def generate_plan(
    store: WizardStore = Depends(get_wizard_store),
    board: PlanBoard = Depends(get_plan_board),
):
    """Replace the board's tickets with a fresh derivation of the wizard."""
    state = store.get()
    tickets = generate_tickets(state, generated_at=_utcnow())
    set_plan_project(board, state.project_id, project_key_for(state), board.get().prd_url)
    set_tickets(board, tickets)
    logger.info(f"Generated {len(tickets)} tickets for {project_key_for(state)}")
    return board.get()


@router.get("/status/{status}", response_model=list[PlanTicket])
async def tickets_by_status(status: TicketStatus, board: PlanBoard = Depends(get_plan_board)):
    return get_tickets_by_status(board, status)


@router.patch("/tickets/{ticket_id}", response_model=PlanTicket)
async def edit_ticket(
    ticket_id: str,
    body: TicketUpdate,
    board: PlanBoard = Depends(get_plan_board),
):
    try:
        return update_ticket(board, ticket_id, body, updated_at=_utcnow())
    except TicketNotFoundError:
        raise ResourceNotFoundError("Ticket", ticket_id)


@router.post("/tickets/{ticket_id}/status", response_model=PlanTicket)
async def change_ticket_status(
    ticket_id: str,
    body: TicketStatusChange,
    board: PlanBoard = Depends(get_plan_board),
    events: EventBus = Depends(get_event_bus),
):
    try:
        return update_ticket_status(board, ticket_id, body.status, events, updated_at=_utcnow())
    except TicketNotFoundError:
        raise ResourceNotFoundError("Ticket", ticket_id)
