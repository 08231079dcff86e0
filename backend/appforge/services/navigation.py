"""Wizard navigation and step validation.

Completion predicates are pure functions over ``WizardState``; they are
evaluated on demand and never cached. Navigation functions return ``True``
when they changed the state and ``False`` when a precondition rejected the
move. A rejection is not an error: nothing is written and nothing is raised.
"""

from typing import Callable

from appforge.schemas.wizard import TOTAL_STEPS, WizardState
from appforge.services.store import WizardStore

MIN_SCREENS = 3


# ── Completion predicates ───────────────────────────────────

def is_step1_complete(state: WizardState) -> bool:
    step1 = state.step1
    return bool(step1.app_name.strip() and step1.description.strip())


def is_step2_complete(state: WizardState) -> bool:
    # Manual style entry on step 3 bypasses the mood board
    return bool(state.step2.reference_images) or state.step3.entry_mode == "manual"


def is_step3_complete(state: WizardState) -> bool:
    return state.step3.logo is not None


def is_step4_complete(state: WizardState) -> bool:
    step4 = state.step4
    return len(step4.screens) >= MIN_SCREENS and bool(step4.initial_screen)


def is_step5_complete(state: WizardState) -> bool:
    # Count-based: selected generated screens vs screens defined on step 4
    selected = sum(1 for screen in state.step5.generated_screens if screen.selected)
    return selected >= len(state.step4.screens)


def is_step6_complete(state: WizardState) -> bool:
    return True


def is_step7_complete(state: WizardState) -> bool:
    return bool(state.step7.project_name.strip())


STEP_VALIDATORS: dict[int, Callable[[WizardState], bool]] = {
    1: is_step1_complete,
    2: is_step2_complete,
    3: is_step3_complete,
    4: is_step4_complete,
    5: is_step5_complete,
    6: is_step6_complete,
    7: is_step7_complete,
}


def is_step_complete(state: WizardState, step: int) -> bool:
    validator = STEP_VALIDATORS.get(step)
    return validator(state) if validator else False


def can_proceed_to_next_step(state: WizardState) -> bool:
    return is_step_complete(state, state.current_step)


def step_completion(state: WizardState) -> dict[int, bool]:
    return {step: validator(state) for step, validator in STEP_VALIDATORS.items()}


def can_go_to_step(state: WizardState, step: int) -> bool:
    """A jump is allowed to any visited step or any step up to the current one."""
    if not 1 <= step <= TOTAL_STEPS:
        return False
    return step in state.completed_steps or step <= state.current_step


# ── Navigation ──────────────────────────────────────────────

def _with_completed(state: WizardState, step: int) -> list[int]:
    return sorted(set(state.completed_steps) | {step})


def mark_step_complete(store: WizardStore, step: int) -> bool:
    state = store.get()
    if not 1 <= step <= TOTAL_STEPS or step in state.completed_steps:
        return False
    store.set(state.model_copy(update={"completed_steps": _with_completed(state, step)}))
    return True


def go_to_next_step(store: WizardStore) -> bool:
    """Mark the current step complete and advance (step 7 is terminal)."""
    state = store.get()
    if not can_proceed_to_next_step(state):
        return False
    store.set(state.model_copy(update={
        "completed_steps": _with_completed(state, state.current_step),
        "current_step": min(state.current_step + 1, TOTAL_STEPS),
    }))
    return True


def go_to_previous_step(store: WizardStore) -> bool:
    state = store.get()
    if state.current_step <= 1:
        return False
    store.set(state.model_copy(update={"current_step": state.current_step - 1}))
    return True


def go_to_step(store: WizardStore, step: int) -> bool:
    state = store.get()
    if not can_go_to_step(state, step):
        return False
    if step != state.current_step:
        store.set(state.model_copy(update={"current_step": step}))
    return True
