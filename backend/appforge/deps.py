"""FastAPI dependencies: the stores and clients owned by the running app."""

from fastapi import Request

from appforge.middleware.exceptions import BusinessLogicError
from appforge.services.events import EventBus
from appforge.services.plan import PlanBoard
from appforge.services.projects import ProjectClient
from appforge.services.store import WizardStore


def get_wizard_store(request: Request) -> WizardStore:
    return request.app.state.wizard_store


def get_plan_board(request: Request) -> PlanBoard:
    return request.app.state.plan_board


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus


def get_project_client(request: Request) -> ProjectClient:
    client = request.app.state.project_client
    if client is None:
        raise BusinessLogicError("Project API is not configured", error_code="PROJECT_API_DISABLED")
    return client
