"""Step mutators: partial updates scoped to exactly one wizard step.

``update_stepN_data(store, partial)`` shallow-merges the explicitly-set
fields of ``partial`` into step N's slice and writes the result back
through the store (one persistence write). ``partial`` is either a slice
model built with only the fields to change, or a dict validated against it.

Mutators never touch another step. A caller that needs a derived update on
a second step issues a second mutator call.
"""

import logging
from typing import Any

from appforge.schemas.common import CamelModel
from appforge.schemas.wizard import (
    STEP_MODELS,
    ReferenceImage,
    Step1Data,
    Step2Data,
    Step3Data,
    Step4Data,
    Step5Data,
    Step6Data,
    Step7Data,
)
from appforge.services.images import SLICE_URL_REWRITES
from appforge.services.store import WizardStore

logger = logging.getLogger(__name__)

MAX_REFERENCE_IMAGES = 8
SUPPORTED_IMAGE_FORMATS = ("image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp")


class ReferenceImageLimitError(ValueError):
    """Raised when adding a mood-board image beyond the allowed maximum."""


def _as_partial(model_cls: type[CamelModel], partial: CamelModel | dict[str, Any]) -> CamelModel:
    if isinstance(partial, model_cls):
        return partial
    return model_cls.model_validate(partial)


def _with_proxied_urls(slice_name: str, model: CamelModel) -> CamelModel:
    rewrite = SLICE_URL_REWRITES.get(slice_name)
    if rewrite is None:
        return model
    data = rewrite(model.model_dump(by_alias=True))
    return type(model).model_validate(data)


def update_step_data(store: WizardStore, step: int, partial: CamelModel | dict[str, Any]) -> None:
    slice_name, model_cls = STEP_MODELS[step]
    partial = _as_partial(model_cls, partial)
    changes = {name: getattr(partial, name) for name in partial.model_fields_set}

    current = store.get()
    merged = getattr(current, slice_name).model_copy(update=changes)
    merged = _with_proxied_urls(slice_name, merged)
    store.set(current.model_copy(update={slice_name: merged}))


def update_step1_data(store: WizardStore, partial: Step1Data | dict[str, Any]) -> None:
    update_step_data(store, 1, partial)


def update_step2_data(store: WizardStore, partial: Step2Data | dict[str, Any]) -> None:
    update_step_data(store, 2, partial)


def update_step3_data(store: WizardStore, partial: Step3Data | dict[str, Any]) -> None:
    update_step_data(store, 3, partial)


def update_step4_data(store: WizardStore, partial: Step4Data | dict[str, Any]) -> None:
    update_step_data(store, 4, partial)


def update_step5_data(store: WizardStore, partial: Step5Data | dict[str, Any]) -> None:
    update_step_data(store, 5, partial)


def update_step6_data(store: WizardStore, partial: Step6Data | dict[str, Any]) -> None:
    update_step_data(store, 6, partial)


def update_step7_data(store: WizardStore, partial: Step7Data | dict[str, Any]) -> None:
    update_step_data(store, 7, partial)


# ── Session fields ──────────────────────────────────────────

def set_project_id(store: WizardStore, project_id: str | None) -> None:
    store.set(store.get().model_copy(update={"project_id": project_id}))


def set_session_id(store: WizardStore, session_id: str) -> None:
    store.set(store.get().model_copy(update={"session_id": session_id}))


def mark_design_complete(store: WizardStore) -> None:
    store.set(store.get().model_copy(update={"is_complete": True}))


def set_is_processing(store: WizardStore, is_processing: bool) -> None:
    store.set(store.get().model_copy(update={"is_processing": is_processing}))


# ── Step 2: reference images ────────────────────────────────

def add_reference_image(store: WizardStore, image: ReferenceImage | dict[str, Any]) -> None:
    if not isinstance(image, ReferenceImage):
        image = ReferenceImage.model_validate(image)
    images = store.get().step2.reference_images
    if len(images) >= MAX_REFERENCE_IMAGES:
        raise ReferenceImageLimitError(f"Maximum {MAX_REFERENCE_IMAGES} images allowed")
    update_step2_data(store, Step2Data(reference_images=[*images, image]))


def remove_reference_image(store: WizardStore, image_id: str) -> None:
    images = store.get().step2.reference_images
    update_step2_data(
        store, Step2Data(reference_images=[img for img in images if img.id != image_id])
    )


def get_remaining_image_slots(store: WizardStore) -> int:
    return max(MAX_REFERENCE_IMAGES - len(store.get().step2.reference_images), 0)


def can_add_more_images(store: WizardStore) -> bool:
    return get_remaining_image_slots(store) > 0


def is_image_format_supported(mime_type: str) -> bool:
    return mime_type in SUPPORTED_IMAGE_FORMATS
