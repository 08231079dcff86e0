import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from appforge.config import Settings, settings as default_settings
from appforge.middleware.exceptions import register_exception_handlers
from appforge.routers import health, plan, wizard
from appforge.services.events import EventBus, TicketActivated, TicketReadyForQA
from appforge.services.plan import PlanBoard
from appforge.services.projects import ProjectClient
from appforge.services.storage import WizardStorage, build_storage
from appforge.services.store import WizardStore

logger = logging.getLogger("appforge")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("appforge").setLevel(level.upper())


def _log_ticket_event(event: TicketActivated | TicketReadyForQA) -> None:
    logger.info(f"{type(event).__name__}: {event.ticket.key} {event.ticket.title}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    bus: EventBus = app.state.event_bus
    unsubscribers = [
        bus.subscribe(TicketActivated, _log_ticket_event),
        bus.subscribe(TicketReadyForQA, _log_ticket_event),
    ]
    logger.info(f"AppForge started (storage={app.state.settings.storage_backend})")
    yield
    for unsubscribe in unsubscribers:
        unsubscribe()
    logger.info("AppForge stopped")


def create_app(
    settings: Settings | None = None,
    storage: WizardStorage | None = None,
    project_client: ProjectClient | None = None,
) -> FastAPI:
    """Build the API with its own wizard store, plan board and event bus.

    ``storage`` overrides the backend named in settings; ``project_client``
    overrides the one built from ``project_api_url`` (none when unset).
    """
    settings = settings or default_settings
    configure_logging(settings.log_level)

    if storage is None:
        storage = build_storage(settings)
    if project_client is None and settings.project_api_url:
        project_client = ProjectClient(settings.project_api_url, timeout=settings.project_api_timeout)

    app = FastAPI(
        title="AppForge",
        description="Design wizard and work-ticket planning for generated mobile apps",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.wizard_store = WizardStore(storage, settings.storage_key)
    app.state.plan_board = PlanBoard(storage, settings.plan_storage_key)
    app.state.event_bus = EventBus()
    app.state.project_client = project_client

    # ── Exception Handlers ───────────────────────────────────
    register_exception_handlers(app)

    # ── Middleware ───────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ──────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(wizard.router, prefix="/api/wizard", tags=["wizard"])
    app.include_router(plan.router, prefix="/api/plan", tags=["plan"])

    return app


app = create_app()
