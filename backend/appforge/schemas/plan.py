"""Pydantic schemas for the derived work-ticket backlog (plan board)."""

from typing import Literal

from appforge.schemas.common import CamelModel

TicketPriority = Literal["highest", "high", "medium", "low", "lowest"]
TicketStatus = Literal["todo", "in-progress", "testing", "done"]
TicketType = Literal["epic", "story", "task", "bug"]


class PlanTicket(CamelModel):
    id: str
    key: str
    title: str
    description: str = ""
    type: TicketType = "task"
    acceptance_criteria: list[str] = []
    priority: TicketPriority = "medium"
    status: TicketStatus = "todo"
    estimated_hours: float | None = None
    assigned_to: str | None = None
    related_screens: list[str] = []
    related_data_models: list[str] = []
    dependencies: list[str] = []
    labels: list[str] = []
    parallel: bool = False
    order_index: int = 0
    created_at: str | None = None
    updated_at: str | None = None


class TicketUpdate(CamelModel):
    """Partial ticket edit. Only explicitly-set fields are applied."""
    title: str | None = None
    description: str | None = None
    type: TicketType | None = None
    acceptance_criteria: list[str] | None = None
    priority: TicketPriority | None = None
    estimated_hours: float | None = None
    assigned_to: str | None = None
    labels: list[str] | None = None


class TicketFilter(CamelModel):
    status: list[TicketStatus] = []
    priority: list[TicketPriority] = []
    type: list[TicketType] = []
    assigned_to: list[str] = []


class PlanState(CamelModel):
    project_id: str | None = None
    project_key: str = "PROJ"
    prd_url: str | None = None
    tickets: list[PlanTicket] = []
    current_ticket: str | None = None
    view_mode: Literal["board", "list"] = "board"
    filter_by: TicketFilter = TicketFilter()


class TicketStatusChange(CamelModel):
    status: TicketStatus
