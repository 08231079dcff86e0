"""Plan board: the work-ticket backlog derived from a finished wizard.

Board rules:
  - At most one ticket is in progress; starting a ticket sends any other
    in-progress ticket back to todo.
  - Moving a ticket to in-progress publishes ``TicketActivated`` with the
    coding prompt; moving it to testing publishes ``TicketReadyForQA``.
  - Default ordering everywhere is ``orderIndex``.
"""

import logging
from typing import Any

from appforge.schemas.plan import (
    PlanState,
    PlanTicket,
    TicketFilter,
    TicketStatus,
    TicketUpdate,
)
from appforge.services.events import EventBus, TicketActivated, TicketReadyForQA
from appforge.services.store import PersistentStore
from appforge.services.storage import WizardStorage

logger = logging.getLogger(__name__)

DEFAULT_PLAN_STORAGE_KEY = "appforge_plan_state"

# Ticket fields an edit may set back to null
CLEARABLE_TICKET_FIELDS = frozenset({"estimated_hours", "assigned_to"})


class TicketNotFoundError(LookupError):
    def __init__(self, ticket_id: str):
        self.ticket_id = ticket_id
        super().__init__(f"Ticket not found: {ticket_id}")


class PlanBoard(PersistentStore[PlanState]):
    def __init__(self, storage: WizardStorage | None = None, storage_key: str = DEFAULT_PLAN_STORAGE_KEY):
        super().__init__(storage, storage_key)

    def default_state(self) -> PlanState:
        return PlanState()

    def deserialize(self, raw: Any) -> PlanState:
        return PlanState.model_validate(raw)


# ── Project / tickets ───────────────────────────────────────

def set_plan_project(board: PlanBoard, project_id: str | None, project_key: str, prd_url: str | None = None) -> None:
    board.set(board.get().model_copy(update={
        "project_id": project_id,
        "project_key": project_key,
        "prd_url": prd_url,
    }))


def set_tickets(board: PlanBoard, tickets: list[PlanTicket]) -> None:
    board.set(board.get().model_copy(update={"tickets": list(tickets)}))


def add_ticket(board: PlanBoard, ticket: PlanTicket) -> None:
    state = board.get()
    board.set(state.model_copy(update={"tickets": [*state.tickets, ticket]}))


def get_ticket_by_id(board: PlanBoard, ticket_id: str) -> PlanTicket | None:
    return next((t for t in board.get().tickets if t.id == ticket_id), None)


def _replace_ticket(board: PlanBoard, ticket_id: str, changes: dict, updated_at: str | None) -> PlanTicket:
    state = board.get()
    if get_ticket_by_id(board, ticket_id) is None:
        raise TicketNotFoundError(ticket_id)

    if updated_at is not None:
        changes = {**changes, "updated_at": updated_at}
    tickets = [
        PlanTicket.model_validate({**t.model_dump(), **changes}) if t.id == ticket_id else t
        for t in state.tickets
    ]
    board.set(state.model_copy(update={"tickets": tickets}))
    return get_ticket_by_id(board, ticket_id)


def update_ticket(
    board: PlanBoard,
    ticket_id: str,
    updates: TicketUpdate,
    updated_at: str | None = None,
) -> PlanTicket:
    """Apply the explicitly-set fields of ``updates``.

    ``None`` clears only the nullable fields (estimate, assignee); for the
    rest it means "unchanged".
    """
    changes = {
        name: getattr(updates, name)
        for name in updates.model_fields_set
        if getattr(updates, name) is not None or name in CLEARABLE_TICKET_FIELDS
    }
    return _replace_ticket(board, ticket_id, changes, updated_at)


def update_ticket_status(
    board: PlanBoard,
    ticket_id: str,
    status: TicketStatus,
    events: EventBus | None = None,
    updated_at: str | None = None,
) -> PlanTicket:
    if get_ticket_by_id(board, ticket_id) is None:
        raise TicketNotFoundError(ticket_id)

    if status == "in-progress":
        for other in board.get().tickets:
            if other.status == "in-progress" and other.id != ticket_id:
                logger.info(f"Moving {other.key} back to todo, {ticket_id} started")
                _replace_ticket(board, other.id, {"status": "todo"}, updated_at)

    ticket = _replace_ticket(board, ticket_id, {"status": status}, updated_at)

    if events is not None:
        if status == "in-progress":
            events.publish(TicketActivated(ticket=ticket, prompt=generate_coding_prompt(ticket)))
        elif status == "testing":
            events.publish(TicketReadyForQA(ticket=ticket, prompt=generate_qa_prompt(ticket)))
    return ticket


# ── View state ──────────────────────────────────────────────

def set_current_ticket(board: PlanBoard, ticket_id: str | None) -> None:
    board.set(board.get().model_copy(update={"current_ticket": ticket_id}))


def set_view_mode(board: PlanBoard, mode: str) -> None:
    board.set(PlanState.model_validate({**board.get().model_dump(), "view_mode": mode}))


def set_filter(board: PlanBoard, filter_by: TicketFilter) -> None:
    board.set(board.get().model_copy(update={"filter_by": filter_by}))


def reset_plan(board: PlanBoard) -> None:
    board.set(PlanState())


def get_tickets_by_status(board: PlanBoard, status: TicketStatus) -> list[PlanTicket]:
    """Tickets in one board column, narrowed by the board filter.

    The column's ``status`` takes the place of ``filter_by.status``, which
    only chooses the columns a view shows.
    """
    state = board.get()
    filter_by = state.filter_by
    tickets = [t for t in state.tickets if t.status == status]
    if filter_by.priority:
        tickets = [t for t in tickets if t.priority in filter_by.priority]
    if filter_by.type:
        tickets = [t for t in tickets if t.type in filter_by.type]
    if filter_by.assigned_to:
        tickets = [t for t in tickets if t.assigned_to in filter_by.assigned_to]
    return sorted(tickets, key=lambda t: t.order_index)


# ── Prompts ─────────────────────────────────────────────────

def _numbered(items: list[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, start=1))


def generate_coding_prompt(ticket: PlanTicket) -> str:
    sections = [
        f"# [{ticket.priority.upper()}] {ticket.key}: {ticket.title}",
        f"**Type**: {ticket.type.upper()}\n**Priority**: {ticket.priority}",
        f"## Description\n{ticket.description}",
        f"## Acceptance Criteria\n{_numbered(ticket.acceptance_criteria)}",
    ]
    if ticket.related_screens:
        sections.append(
            "## Related Screens\n"
            + ", ".join(ticket.related_screens)
            + "\n> Please reference the design mockups for these screens in the PRD."
        )
    if ticket.related_data_models:
        sections.append(
            "## Related Data Models\n"
            + ", ".join(ticket.related_data_models)
            + "\n> Ensure data models are implemented according to the schema defined in the PRD."
        )
    if ticket.labels:
        sections.append("## Labels\n" + ", ".join(f"`{label}`" for label in ticket.labels))
    sections.append(
        "---\n\n"
        f"Please implement this {ticket.type} following best practices, ensuring all acceptance "
        "criteria are met. Write clean, maintainable code with proper error handling and TypeScript types."
    )
    return "\n\n".join(sections)


def generate_qa_prompt(ticket: PlanTicket) -> str:
    return "\n".join([
        f"# QA Request: {ticket.key} - {ticket.title}",
        "",
        "Please QA the changes for this ticket against the following acceptance criteria:",
        "",
        "## Acceptance Criteria",
        _numbered(ticket.acceptance_criteria),
        "",
        "**Instructions**:",
        "1. Review the code changes made in the previous turns.",
        "2. Verify that each acceptance criterion is met.",
        '3. If everything is correct, clearly state "QA Pass" and output the following action:',
        f'   <boltAction type="qa-pass" ticketId="{ticket.id}" />',
        "4. If there are issues, list them and do not output the action.",
    ])
