"""Management CLI for persisted wizard state.

Usage:
    python -m appforge.cli migrate-state    # Rewrite stored state at the current schema
    python -m appforge.cli show-state       # Print a summary of the stored design
    python -m appforge.cli reset-state      # Clear the stored wizard session
    python -m appforge.cli serve            # Run the API with uvicorn
"""

import json
import sys

import uvicorn

from appforge.config import settings
from appforge.migrations.runner import migrate, stored_version
from appforge.services.prd import get_design_summary
from appforge.services.storage import WizardStorage, build_storage
from appforge.services.store import WizardStore


def migrate_state(storage: WizardStorage, key: str = settings.storage_key) -> bool:
    """Migrate the stored state in place. Returns False when nothing is stored."""
    raw = storage.get(key)
    if not raw:
        print("No stored wizard state.")
        return False

    data = json.loads(raw)
    version = stored_version(data) if isinstance(data, dict) else 0
    state = migrate(data).model_copy(update={"is_processing": False})
    storage.set(key, state.model_dump_json(by_alias=True))
    print(f"  Migrated {key}: schema {version} -> {state.schema_version}")
    return True


def show_state(storage: WizardStorage, key: str = settings.storage_key) -> None:
    store = WizardStore(storage, key)
    state = store.get()
    summary = get_design_summary(state)
    print(f"  App:        {summary.app_name or '(unnamed)'}")
    print(f"  Step:       {state.current_step} (completed {state.completed_steps})")
    print(f"  Screens:    {summary.total_screens}")
    print(f"  Credits:    {summary.credits_used}")
    print(f"  Progress:   {summary.completion_percentage}%")


def reset_state(storage: WizardStorage, key: str = settings.storage_key) -> None:
    WizardStore(storage, key).reset()
    print(f"  Cleared {key}")


def serve() -> None:
    uvicorn.run("appforge.main:app", host="0.0.0.0", port=8000, reload=settings.debug)


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    if cmd == "migrate-state":
        migrate_state(build_storage(settings))
    elif cmd == "show-state":
        show_state(build_storage(settings))
    elif cmd == "reset-state":
        reset_state(build_storage(settings))
    elif cmd == "serve":
        serve()
    else:
        print("Usage: python -m appforge.cli [migrate-state|show-state|reset-state|serve]")
