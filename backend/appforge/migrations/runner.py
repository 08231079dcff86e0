"""Wizard state migration runner.

Every persisted state passes through ``migrate`` before it is trusted:

    1. structural backfill  - missing slices / nested containers get empty defaults
    2. version dispatch     - each registered revision newer than the stored
                              ``schemaVersion`` is applied in order; repeatable
                              revisions (idempotent normalizers) run on every load
    3. typed validation     - each slice is validated on its own; a field that
                              fails falls back to its schema default

``migrate`` is pure (no I/O, no clock, no randomness) and never raises:
a returning user with an odd cached state gets a usable wizard, not a crash.
"""

import copy
import logging
from typing import Any, Callable

from pydantic import BaseModel

from appforge.migrations.versions import (
    v0001_relocate_data_models,
    v0002_proxy_image_urls,
    v0003_prune_deprecated_integrations,
    v0004_link_selected_assets,
)
from appforge.schemas.common import coerce_model
from appforge.schemas.wizard import CURRENT_SCHEMA_VERSION, STEP_MODELS, WizardState

logger = logging.getLogger(__name__)

_REVISION_MODULES = (
    v0001_relocate_data_models,
    v0002_proxy_image_urls,
    v0003_prune_deprecated_integrations,
    v0004_link_selected_assets,
)

# revision -> upgrade step, applied in ascending order
MIGRATIONS: dict[int, Callable[[dict], dict]] = {
    module.revision: module.upgrade for module in _REVISION_MODULES
}

# Revisions that normalize rather than relocate; safe to re-run at any version
REPEATABLE: frozenset[int] = frozenset(
    module.revision for module in _REVISION_MODULES if module.repeatable
)

# Containers later steps rely on: (slice, key, empty value)
_BACKFILL: list[tuple[str, str, Callable[[], Any]]] = [
    ("step1", "dataModels", list),
    ("step3", "lastExtractedImageIds", list),
    ("step4", "navigation", dict),
    ("step6", "integrations", list),
]


def head_revision() -> int:
    return max(MIGRATIONS)


def stored_version(data: dict) -> int:
    """Return the schemaVersion recorded in ``data`` (0 when absent or invalid)."""
    version = data.get("schemaVersion", data.get("schema_version"))
    if isinstance(version, bool) or not isinstance(version, int) or version < 0:
        return 0
    return version


def backfill(data: dict) -> dict:
    """Inject empty containers for every missing slice and nested container."""
    for slice_name, _ in STEP_MODELS.values():
        if not isinstance(data.get(slice_name), dict):
            data[slice_name] = {}
    for slice_name, key, empty in _BACKFILL:
        if not isinstance(data[slice_name].get(key), (list, dict)):
            data[slice_name][key] = empty()
    return data


def apply_migrations(data: dict, from_version: int) -> dict:
    """Run every revision newer than ``from_version``, plus every repeatable one."""
    if from_version > head_revision():
        logger.warning(
            "Stored wizard schemaVersion %d is newer than %d; treating as current",
            from_version, head_revision(),
        )

    for revision in sorted(MIGRATIONS):
        if revision <= from_version and revision not in REPEATABLE:
            continue
        snapshot = copy.deepcopy(data)
        try:
            data = MIGRATIONS[revision](data)
        except Exception:
            logger.warning("Wizard migration %04d failed, skipping", revision, exc_info=True)
            data = snapshot
    return data


def migrate(raw: Any) -> WizardState:
    """Transform persisted (possibly stale) wizard state into the current schema."""
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(by_alias=True)
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning(f"Ignoring persisted wizard state of type {type(raw).__name__}")
        return WizardState()

    data = backfill(copy.deepcopy(raw))
    data = apply_migrations(data, stored_version(data))

    slices = {
        slice_name: coerce_model(model_cls, data.get(slice_name))
        for slice_name, model_cls in STEP_MODELS.values()
    }
    top_level = {key: value for key, value in data.items() if key not in slices}
    top_level["schemaVersion"] = CURRENT_SCHEMA_VERSION
    top_level.pop("schema_version", None)

    state = coerce_model(WizardState, top_level)
    return state.model_copy(update=slices)
