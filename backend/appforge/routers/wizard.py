"""Design wizard: 7-step progressive app design with save/resume.

Endpoints:
  GET   /api/wizard/            → current state + per-step completion
  PATCH /api/wizard/step/{n}    → partial update of one step
  POST  /api/wizard/next        → complete the current step and advance
  POST  /api/wizard/previous    → go back one step
  POST  /api/wizard/goto/{n}    → jump to a visited step
  POST  /api/wizard/restore     → load a previously-saved project
  POST  /api/wizard/reset       → start a fresh session
  GET   /api/wizard/summary     → design summary
  GET   /api/wizard/prd         → PRD markdown
  GET   /api/wizard/tickets     → preview of the derived backlog
  POST  /api/wizard/save        → send the design to the project API

Design:
  - The wizard store is the single writer; every PATCH is one write.
  - Navigation rejections come back as 422 with the state unchanged.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends, Path
from fastapi.responses import PlainTextResponse

from appforge.deps import get_project_client, get_wizard_store
from appforge.middleware.exceptions import BusinessLogicError, ExternalServiceError
from appforge.schemas.plan import PlanTicket
from appforge.schemas.wizard import TOTAL_STEPS, DesignSummary, WizardProgress
from appforge.services.navigation import (
    can_proceed_to_next_step,
    go_to_next_step,
    go_to_previous_step,
    go_to_step,
    step_completion,
)
from appforge.services.prd import generate_prd, get_design_summary
from appforge.services.projects import ProjectClient, ProjectSaveResult, save_project
from appforge.services.steps import update_step_data
from appforge.services.store import WizardStore
from appforge.services.tickets import generate_tickets

logger = logging.getLogger(__name__)

router = APIRouter()

STEP_NAMES = {
    1: "App information",
    2: "Style guide",
    3: "Brand assets",
    4: "Screen flow",
    5: "Screen generation",
    6: "Integrations",
    7: "Review & packaging",
}


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _make_progress(store: WizardStore) -> WizardProgress:
    state = store.get()
    return WizardProgress(
        state=state,
        step_completion=step_completion(state),
        can_proceed=can_proceed_to_next_step(state),
    )


# ── GET /api/wizard/ ─────────────────────────────────────────

@router.get("/", response_model=WizardProgress)
async def get_progress(store: WizardStore = Depends(get_wizard_store)):
    return _make_progress(store)


# ── PATCH /api/wizard/step/{step} ────────────────────────────

@router.patch("/step/{step}", response_model=WizardProgress)
async def update_step(
    step: int = Path(ge=1, le=TOTAL_STEPS),
    body: dict[str, Any] = Body(...),
    store: WizardStore = Depends(get_wizard_store),
):
    """Merge the given fields into one step; other steps are untouched."""
    update_step_data(store, step, body)
    return _make_progress(store)


# ── Navigation ───────────────────────────────────────────────

@router.post("/next", response_model=WizardProgress)
async def next_step(store: WizardStore = Depends(get_wizard_store)):
    current = store.get().current_step
    if not go_to_next_step(store):
        raise BusinessLogicError(
            f"Complete step {current} ({STEP_NAMES[current]}) first",
            error_code="STEP_INCOMPLETE",
        )
    return _make_progress(store)


@router.post("/previous", response_model=WizardProgress)
async def previous_step(store: WizardStore = Depends(get_wizard_store)):
    if not go_to_previous_step(store):
        raise BusinessLogicError("Already at the first step", error_code="NAVIGATION_REJECTED")
    return _make_progress(store)


@router.post("/goto/{step}", response_model=WizardProgress)
async def goto_step(step: int, store: WizardStore = Depends(get_wizard_store)):
    if not go_to_step(store, step):
        raise BusinessLogicError(
            f"Step {step} has not been reached yet", error_code="NAVIGATION_REJECTED"
        )
    return _make_progress(store)


# ── Session ──────────────────────────────────────────────────

@router.post("/restore", response_model=WizardProgress)
async def restore_project(
    body: dict[str, Any] = Body(...),
    store: WizardStore = Depends(get_wizard_store),
):
    """Replace the session with saved wizard data (any schema version)."""
    store.load(body)
    logger.info(f"Restored wizard project {store.get().project_id}")
    return _make_progress(store)


@router.post("/reset", response_model=WizardProgress)
async def reset_wizard(store: WizardStore = Depends(get_wizard_store)):
    store.reset()
    return _make_progress(store)


# ── Derived artifacts ────────────────────────────────────────

@router.get("/summary", response_model=DesignSummary)
async def design_summary(store: WizardStore = Depends(get_wizard_store)):
    return get_design_summary(store.get())


@router.get("/prd", response_class=PlainTextResponse)
async def product_requirements(store: WizardStore = Depends(get_wizard_store)):
    return PlainTextResponse(generate_prd(store.get()), media_type="text/markdown")


@router.get("/tickets", response_model=list[PlanTicket])
async def preview_tickets(store: WizardStore = Depends(get_wizard_store)):
    return generate_tickets(store.get())


@router.post("/save", response_model=ProjectSaveResult)
async def save(
    store: WizardStore = Depends(get_wizard_store),
    client: ProjectClient = Depends(get_project_client),
):
    result = await save_project(store, client, generated_at=_utcnow())
    if not result.success:
        raise ExternalServiceError("Project save", result.error or "unknown error")
    return result
