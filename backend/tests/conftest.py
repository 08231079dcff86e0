"""Pytest configuration and fixtures for AppForge tests.

Every test gets fresh in-memory storage, so stores never share state.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from appforge.config import Settings
from appforge.main import create_app
from appforge.schemas.wizard import (
    CodeGenerationSettings,
    DataModel,
    DataModelField,
    GeneratedScreen,
    Integration,
    Logo,
    Navigation,
    ReferenceImage,
    Screen,
    Step1Data,
    Step2Data,
    Step3Data,
    Step4Data,
    Step5Data,
    Step6Data,
    Step7Data,
    WizardState,
)
from appforge.services.events import EventBus
from appforge.services.plan import PlanBoard
from appforge.services.storage import MemoryStorage
from appforge.services.store import WizardStore


# ── Store Fixtures ───────────────────────────────────────────────

@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(storage: MemoryStorage) -> WizardStore:
    return WizardStore(storage)


@pytest.fixture
def board(storage: MemoryStorage) -> PlanBoard:
    return PlanBoard(storage)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


# ── Wizard Data Fixtures ─────────────────────────────────────────

def make_screens(count: int) -> list[Screen]:
    types = ["splash", "home", "signin", "profile", "settings"]
    return [
        Screen(id=f"s{i + 1}", name=f"Screen {i + 1}", type=types[i % len(types)])
        for i in range(count)
    ]


@pytest.fixture
def complete_state() -> WizardState:
    """A wizard that has been filled in through step 7."""
    screens = [
        Screen(id="s1", name="Splash", type="splash", purpose="Brand intro"),
        Screen(id="s2", name="Home", type="home", purpose="Trail feed"),
        Screen(id="s3", name="Sign In", type="signin", purpose="Account access"),
    ]
    return WizardState(
        step1=Step1Data(
            app_name="Trail Mix",
            description="A hiking companion",
            category="outdoors",
            target_audience="Hikers",
            primary_goal="Plan hikes",
            data_models=[
                DataModel(
                    id="dm-1",
                    name="Trail",
                    description="A hiking trail",
                    fields=[DataModelField(name="title", type="string", required=True)],
                ),
            ],
        ),
        step2=Step2Data(
            reference_images=[ReferenceImage(id="img-1", url="https://project.supabase.co/a.png")],
            ui_style="modern",
        ),
        step3=Step3Data(logo=Logo(url="https://project.supabase.co/logo.png", prompt="mountain")),
        step4=Step4Data(
            screens=screens,
            initial_screen="s1",
            navigation=Navigation(type="bottom", items=["Home", "Profile"]),
        ),
        step5=Step5Data(
            generated_screens=[
                GeneratedScreen(
                    screen_id=s.id,
                    type=s.type,
                    name=s.name,
                    url=f"https://project.supabase.co/{s.id}.png",
                    selected=True,
                    credits_used=2,
                )
                for s in screens
            ],
            total_credits_used=6,
        ),
        step6=Step6Data(
            integrations=[
                Integration(id="supabase", enabled=True),
                Integration(id="stripe", enabled=False),
            ]
        ),
        step7=Step7Data(
            selected_package="complete",
            project_name="Trail Mix",
            code_generation_settings=CodeGenerationSettings(include_tests=True),
        ),
        current_step=7,
        completed_steps=[1, 2, 3, 4, 5, 6],
    )


# ── API Fixtures ─────────────────────────────────────────────────

@pytest.fixture
def test_settings() -> Settings:
    return Settings(storage_backend="memory", project_api_url="", log_level="WARNING")


@pytest.fixture
def app(test_settings: Settings, storage: MemoryStorage):
    return create_app(settings=test_settings, storage=storage)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP API tests")
    config.addinivalue_line("markers", "storage: Storage backend tests")
