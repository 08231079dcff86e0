"""Tests for step validation and wizard navigation."""

import random

import pytest

from appforge.schemas.wizard import (
    GeneratedScreen,
    Logo,
    ReferenceImage,
    Step1Data,
    Step2Data,
    Step3Data,
    Step4Data,
    Step5Data,
    Step7Data,
    WizardState,
)
from appforge.services.navigation import (
    can_go_to_step,
    can_proceed_to_next_step,
    go_to_next_step,
    go_to_previous_step,
    go_to_step,
    is_step1_complete,
    is_step2_complete,
    is_step3_complete,
    is_step4_complete,
    is_step5_complete,
    is_step6_complete,
    is_step7_complete,
    mark_step_complete,
    step_completion,
)
from appforge.services.steps import update_step1_data, update_step4_data

from conftest import make_screens


@pytest.mark.unit
class TestStepPredicates:
    """Test per-step completion rules."""

    def test_step1_requires_name_and_description(self):
        assert not is_step1_complete(WizardState(step1=Step1Data(app_name="", description="")))
        assert not is_step1_complete(WizardState(step1=Step1Data(app_name="   ", description="x")))
        assert is_step1_complete(
            WizardState(step1=Step1Data(app_name="FitTracker", description="Track workouts"))
        )

    def test_step2_needs_images_or_manual_entry(self):
        assert not is_step2_complete(WizardState())
        assert is_step2_complete(WizardState(
            step2=Step2Data(reference_images=[ReferenceImage(id="a", url="data:image/png;base64,a")])
        ))
        assert is_step2_complete(WizardState(step3=Step3Data(entry_mode="manual")))

    def test_step3_needs_logo(self):
        assert not is_step3_complete(WizardState())
        assert is_step3_complete(WizardState(step3=Step3Data(logo=Logo(url="data:image/png;base64,a"))))

    def test_step4_needs_three_screens_and_initial_screen(self, store):
        update_step4_data(store, Step4Data(screens=make_screens(2), initial_screen="s1"))
        assert not is_step4_complete(store.get())

        update_step4_data(store, Step4Data(screens=make_screens(3), initial_screen=""))
        assert not is_step4_complete(store.get())

        update_step4_data(store, Step4Data(initial_screen="s1"))
        assert is_step4_complete(store.get())

    def test_step5_counts_selected_screens(self):
        screens = make_screens(3)
        generated = [GeneratedScreen(screen_id=s.id, selected=i < 2) for i, s in enumerate(screens)]
        state = WizardState(step4=Step4Data(screens=screens), step5=Step5Data(generated_screens=generated))
        assert not is_step5_complete(state)

        generated[2] = generated[2].model_copy(update={"selected": True})
        state = state.model_copy(update={"step5": Step5Data(generated_screens=generated)})
        assert is_step5_complete(state)

    def test_step5_counts_orphaned_selections(self):
        """Selections are counted, not matched against step 4 ids."""
        state = WizardState(
            step4=Step4Data(screens=make_screens(1)),
            step5=Step5Data(generated_screens=[GeneratedScreen(screen_id="stale", selected=True)]),
        )
        assert is_step5_complete(state)

    def test_step6_is_optional(self):
        assert is_step6_complete(WizardState())

    def test_step7_needs_project_name(self):
        assert not is_step7_complete(WizardState())
        assert is_step7_complete(WizardState(step7=Step7Data(project_name="Trail Mix")))

    def test_step_completion_map(self, complete_state):
        assert step_completion(complete_state) == {step: True for step in range(1, 8)}
        assert step_completion(WizardState()) == {
            1: False, 2: False, 3: False, 4: False, 5: True, 6: True, 7: False,
        }


@pytest.mark.unit
class TestNavigation:
    """Test advance / retreat / jump."""

    def test_advance_is_gated_on_current_step(self, store):
        before = store.get()
        assert not can_proceed_to_next_step(before)

        assert go_to_next_step(store) is False
        assert store.get().current_step == before.current_step
        assert store.get().completed_steps == before.completed_steps

    def test_advance_from_step1(self, store):
        update_step1_data(store, Step1Data(app_name="FitTracker", description="Track workouts"))

        assert go_to_next_step(store) is True
        assert store.get().current_step == 2
        assert store.get().completed_steps == [1]

    def test_rejected_advance_does_not_write(self, store, storage):
        seen = []
        store.subscribe(seen.append)
        go_to_next_step(store)
        assert seen == []
        assert storage.items == {}

    def test_step7_is_terminal(self, store, complete_state):
        store.load(complete_state.model_dump(by_alias=True))
        assert go_to_next_step(store) is True
        assert store.get().current_step == 7
        assert 7 in store.get().completed_steps

    def test_previous_step(self, store):
        assert go_to_previous_step(store) is False

        update_step1_data(store, Step1Data(app_name="A", description="B"))
        go_to_next_step(store)
        assert go_to_previous_step(store) is True
        assert store.get().current_step == 1
        assert store.get().completed_steps == [1]

    def test_jump_only_to_reached_steps(self, store, complete_state):
        assert go_to_step(store, 3) is False
        assert go_to_step(store, 1) is True

        store.load(complete_state.model_dump(by_alias=True))
        assert go_to_step(store, 2) is True
        assert store.get().current_step == 2
        assert go_to_step(store, 6) is True
        assert go_to_step(store, 8) is False
        assert go_to_step(store, 0) is False

    def test_can_go_to_visited_step_ahead_of_current(self):
        state = WizardState(current_step=2, completed_steps=[1, 2, 3, 4])
        assert can_go_to_step(state, 4)
        assert not can_go_to_step(state, 5)

    def test_mark_step_complete(self, store):
        assert mark_step_complete(store, 3) is True
        assert mark_step_complete(store, 3) is False
        assert mark_step_complete(store, 9) is False
        assert store.get().completed_steps == [3]

    def test_completed_steps_only_grow(self, store, complete_state):
        """Random advance/retreat/jump sequences never drop a completed step."""
        store.load(complete_state.model_copy(update={"current_step": 1, "completed_steps": []}))
        moves = [
            lambda: go_to_next_step(store),
            lambda: go_to_previous_step(store),
            lambda: go_to_step(store, rng.randint(0, 8)),
        ]
        rng = random.Random(7)
        seen: set[int] = set()

        for _ in range(200):
            rng.choice(moves)()
            completed = store.get().completed_steps
            assert len(completed) == len(set(completed))
            assert seen <= set(completed)
            seen = set(completed)
