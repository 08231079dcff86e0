"""Backlog derivation: turn a finished wizard into ordered work tickets.

Emission order is part of the contract (board views sort by ``orderIndex``
by default):

    1. setup epic                 (always, orderIndex 0)
    2. design-system story        (depends on setup)
    3. one task per selected generated screen (parallel, depends on design system)
    4. navigation story           (when step 4 has screens; depends on every screen ticket)
    5. one task per data model    (parallel)
    6. one task per enabled integration
    7. testing story              (when the packaging settings ask for tests)

Keys are ``{PREFIX}-{n}`` numbered from 1 in that same order.
"""

import re

from appforge.schemas.plan import PlanTicket, TicketPriority, TicketType
from appforge.schemas.wizard import WizardState

FALLBACK_PROJECT_KEY = "PROJ"
PROJECT_KEY_LENGTH = 4

AUTH_SCREEN_TYPES = {"signin", "signup"}
HOME_SCREEN_TYPE = "home"


def project_key_for(state: WizardState) -> str:
    name = state.step7.project_name or state.step1.app_name or "Project"
    key = re.sub(r"[^A-Z0-9]", "", name.upper())[:PROJECT_KEY_LENGTH]
    return key or FALLBACK_PROJECT_KEY


class _TicketSequence:
    """Hands out strictly increasing keys and order indexes."""

    def __init__(self, project_key: str, generated_at: str | None):
        self.project_key = project_key
        self.generated_at = generated_at
        self.tickets: list[PlanTicket] = []

    def emit(
        self,
        title: str,
        description: str,
        ticket_type: TicketType,
        priority: TicketPriority,
        acceptance_criteria: list[str],
        *,
        related_screens: list[str] | None = None,
        related_data_models: list[str] | None = None,
        dependencies: list[str] | None = None,
        labels: list[str] | None = None,
        estimated_hours: float | None = None,
        parallel: bool = False,
    ) -> PlanTicket:
        order_index = len(self.tickets)
        key = f"{self.project_key}-{order_index + 1}"
        ticket = PlanTicket(
            id=key,
            key=key,
            title=title,
            description=description,
            type=ticket_type,
            acceptance_criteria=acceptance_criteria,
            priority=priority,
            status="todo",
            estimated_hours=estimated_hours,
            related_screens=related_screens or [],
            related_data_models=related_data_models or [],
            dependencies=dependencies or [],
            labels=labels or [],
            parallel=parallel,
            order_index=order_index,
            created_at=self.generated_at,
            updated_at=self.generated_at,
        )
        self.tickets.append(ticket)
        return ticket


def _splash_url(state: WizardState) -> str | None:
    screen_types = {screen.id: screen.type for screen in state.step4.screens}
    for generated in state.step5.generated_screens:
        if generated.selected and generated.url and screen_types.get(generated.screen_id, generated.type) == "splash":
            return generated.url
    return state.step3.logo.url if state.step3.logo else None


def _screen_priority(screen_type: str) -> TicketPriority:
    if screen_type == HOME_SCREEN_TYPE:
        return "highest"
    if screen_type in AUTH_SCREEN_TYPES:
        return "high"
    return "medium"


def generate_tickets(state: WizardState, *, generated_at: str | None = None) -> list[PlanTicket]:
    """Derive the backlog for ``state``. Pure: same input, same tickets."""
    seq = _TicketSequence(project_key_for(state), generated_at)
    app_name = state.step1.app_name or "the app"
    logo_url = state.step3.logo.url if state.step3.logo else "N/A"
    splash_url = _splash_url(state) or "N/A"

    setup = seq.emit(
        "Project Setup & Configuration",
        f"Initialize {app_name} Expo project with all dependencies and configuration files.",
        "epic",
        "highest",
        [
            "Expo project initialized with SDK version specified",
            "All required dependencies installed",
            "Project runs successfully on both iOS and Android",
            "Git repository initialized with .gitignore",
            "Assets folder created at `assets/images/`",
            f"Download logo from {logo_url} and save to `assets/images/logo.png`",
            f"Download splash screen from {splash_url} and save to `assets/images/splash.png`",
            "Reuse logo for `icon.png`, `favicon.png`, and `adaptive-icon.png` in `assets/images/`",
        ],
        labels=["setup", "infrastructure"],
        estimated_hours=2,
    )

    design_system = seq.emit(
        "Implement Design System & Theme",
        "Create a design system with brand colors, typography, spacing, and reusable component styles.",
        "story",
        "highest",
        [
            "Theme file created with all brand colors from design",
            "Typography scale implemented (h1, h2, h3, body, caption)",
            "Spacing constants defined",
            "Border radius constants defined",
            "Base component styles created (Button, Input, Card)",
        ],
        dependencies=[setup.id],
        labels=["design-system", "ui"],
        estimated_hours=4,
    )

    screens_by_id = {screen.id: screen for screen in state.step4.screens}
    screen_tickets: list[PlanTicket] = []
    for generated in state.step5.generated_screens:
        if not generated.selected:
            continue
        screen = screens_by_id.get(generated.screen_id)
        screen_type = screen.type if screen else generated.type
        name = generated.name or (screen.name if screen else generated.screen_id)
        purpose = screen.purpose if screen else ""
        screen_tickets.append(seq.emit(
            f"Build {name} Screen",
            f"Implement the {name} screen matching the design mockup. {purpose}".strip(),
            "task",
            _screen_priority(screen_type),
            [
                "Screen layout matches design mockup exactly",
                "All UI components implemented and styled",
                "Navigation integrated correctly",
                "Responsive design verified on multiple screen sizes",
                "Loading and error states handled",
            ],
            related_screens=[generated.screen_id],
            dependencies=[design_system.id],
            labels=["screen", screen_type],
            estimated_hours=6,
            parallel=True,
        ))

    if state.step4.screens:
        router = "Expo Router" if state.step7.code_generation_settings.expo_router else "React Navigation"
        seq.emit(
            "Setup App Navigation",
            f"Configure {router} with all screens and navigation flows.",
            "story",
            "highest",
            [
                "Navigation structure implemented",
                "All screens accessible via navigation",
                "Bottom tab bar implemented"
                if state.step4.navigation.type == "bottom"
                else "Navigation type configured",
                "Deep linking configured",
                "Navigation transitions smooth",
            ],
            related_screens=[screen.id for screen in state.step4.screens],
            dependencies=[ticket.id for ticket in screen_tickets],
            labels=["navigation", "routing"],
            estimated_hours=3,
        )

    for model in state.step1.data_models:
        seq.emit(
            f"Implement {model.name} Data Model",
            model.description,
            "task",
            "medium",
            [
                "Data model schema defined with all fields",
                "CRUD operations implemented",
                "Field validation added",
                "Integration with backend tested",
                "Error handling implemented",
            ],
            related_data_models=[model.id],
            labels=["backend", "data-model"],
            estimated_hours=4,
            parallel=True,
        )

    for integration in state.step6.integrations:
        if not integration.enabled:
            continue
        seq.emit(
            f"Setup {integration.id} Integration",
            f"Configure and integrate {integration.id} into the application.",
            "task",
            "medium",
            [
                "Integration SDK/library installed",
                "API keys and configuration set up",
                "Core functionality implemented",
                "Error handling added",
                "Integration tested end-to-end",
            ],
            labels=["integration", integration.id],
            estimated_hours=3,
            parallel=state.step1.parallel_ready,
        )

    if state.step7.code_generation_settings.include_tests:
        seq.emit(
            "Write Unit & Integration Tests",
            "Create a test suite for components and features.",
            "story",
            "low",
            [
                "Component tests written for all major components",
                "Integration tests written for critical flows",
                "All tests passing",
                "Code coverage > 70%",
                "Test documentation added",
            ],
            labels=["testing", "quality"],
            estimated_hours=8,
        )

    return seq.tickets
