"""Client for the remote project API that stores finalized designs."""

import logging
from typing import Any

import httpx

from appforge.schemas.common import CamelModel
from appforge.services.prd import generate_prd
from appforge.services.steps import set_project_id
from appforge.services.store import WizardStore
from appforge.services.tickets import generate_tickets

logger = logging.getLogger(__name__)

SAVE_PROJECT_PATH = "/api/save-wizard-project"


class ProjectSaveResult(CamelModel):
    success: bool
    project_id: str | None = None
    error: str | None = None


class ProjectClient:
    """
    Thin async client for the project API.

    ``transport`` lets tests plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def save(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}{SAVE_PROJECT_PATH}"
        logger.info("Saving project to %s", url)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()

        return response.json()


def build_save_payload(store: WizardStore, generated_at: str | None = None) -> dict[str, Any]:
    state = store.get()
    tickets = generate_tickets(state, generated_at=generated_at)
    return {
        "projectId": state.project_id,
        "wizardData": state.model_dump(mode="json", by_alias=True),
        "prd": generate_prd(state),
        "tickets": [ticket.model_dump(mode="json", by_alias=True) for ticket in tickets],
    }


async def save_project(
    store: WizardStore,
    client: ProjectClient,
    generated_at: str | None = None,
) -> ProjectSaveResult:
    """Send the current design to the project API.

    On success the returned project id is recorded on the wizard state. Any
    failure comes back as an unsuccessful result and leaves the state as is.
    """
    epoch = store.epoch
    payload = build_save_payload(store, generated_at)

    try:
        body = await client.save(payload)
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Project save failed: %s", exc)
        return ProjectSaveResult(success=False, error=str(exc) or type(exc).__name__)

    if not isinstance(body, dict):
        body = {}
    project = body.get("project")
    project_id = project.get("id") if isinstance(project, dict) else None
    if not body.get("success") or not project_id:
        error = body.get("error") or "Project API returned no project id"
        logger.warning("Project save rejected: %s", error)
        return ProjectSaveResult(success=False, error=str(error))

    project_id = str(project_id)
    if store.is_current(epoch):
        set_project_id(store, project_id)
    else:
        logger.info("Wizard state was replaced during save; project id %s not recorded", project_id)
    return ProjectSaveResult(success=True, project_id=project_id)
