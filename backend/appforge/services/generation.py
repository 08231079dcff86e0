"""Recording results from the external image and style generators.

The generators themselves live outside this package; what comes back is a
``GenerationResult`` (or a ``StyleExtractionResult``) that these helpers
fold into the right step slice through the step mutators, so every stored
URL goes through the image proxy.

A failed result raises ``ExternalServiceError`` before anything is written.
Callers that awaited the generator may pass the store ``epoch`` they
captured beforehand: a result that arrives after a restore or reset is
dropped and the helper returns ``False``.
"""

import logging

from appforge.middleware.exceptions import ExternalServiceError
from appforge.schemas.common import CamelModel
from appforge.schemas.wizard import (
    GeneratedScreen,
    Logo,
    LogoVariation,
    NavBar,
    NavBarVariation,
    PaletteOption,
    ScreenVariation,
    StyleDirection,
    TypographyOption,
    WizardState,
)
from appforge.services.steps import update_step3_data, update_step4_data, update_step5_data
from appforge.services.store import WizardStore

logger = logging.getLogger(__name__)


class GenerationResult(CamelModel):
    success: bool
    image_url: str | None = None
    credits_used: int = 0
    error: str | None = None


class StyleExtractionResult(CamelModel):
    success: bool = True
    palette_options: list[PaletteOption] = []
    typography_options: list[TypographyOption] = []
    style_directions: list[StyleDirection] = []
    error: str | None = None


def _check_result(service: str, result: GenerationResult) -> str:
    if not result.success or not result.image_url:
        raise ExternalServiceError(service, result.error or "no image returned")
    return result.image_url


def _is_stale(store: WizardStore, epoch: int | None, what: str) -> bool:
    if epoch is not None and not store.is_current(epoch):
        logger.info(f"Discarding late {what} result: wizard state was replaced")
        return True
    return False


# ── Step 3: logo ────────────────────────────────────────────

def record_logo_variation(
    store: WizardStore,
    result: GenerationResult,
    *,
    variation_id: str,
    prompt: str = "",
    epoch: int | None = None,
) -> bool:
    url = _check_result("Logo generation", result)
    if _is_stale(store, epoch, "logo"):
        return False

    variations = store.get().step3.logo_variations
    variation = LogoVariation(id=variation_id, url=url, prompt=prompt)
    update_step3_data(store, {
        "logoVariations": [*variations, variation],
        "logoProcessStatus": "complete",
    })
    return True


def select_logo(store: WizardStore, variation_id: str) -> bool:
    variations = store.get().step3.logo_variations
    for index, variation in enumerate(variations):
        if variation.id == variation_id:
            logo = Logo(
                url=variation.url,
                prompt=variation.prompt,
                selected_variation=index,
                variation_id=variation.id,
            )
            update_step3_data(store, {"logo": logo})
            return True
    return False


# ── Step 4: navigation bar ──────────────────────────────────

def record_nav_bar_variation(
    store: WizardStore,
    result: GenerationResult,
    *,
    variation_id: str,
    prompt: str = "",
    provider: str = "",
    model: str = "",
    created_at: str = "",
    epoch: int | None = None,
) -> bool:
    url = _check_result("Navigation bar generation", result)
    if _is_stale(store, epoch, "navigation bar"):
        return False

    navigation = store.get().step4.navigation
    variation = NavBarVariation(
        id=variation_id,
        url=url,
        prompt=prompt,
        provider=provider,
        model=model,
        created_at=created_at,
    )
    update_step4_data(store, {
        "navigation": navigation.model_copy(
            update={"nav_bar_variations": [*navigation.nav_bar_variations, variation]}
        ),
    })
    return True


def select_nav_bar_variation(store: WizardStore, variation_id: str) -> bool:
    navigation = store.get().step4.navigation
    variation = next((v for v in navigation.nav_bar_variations if v.id == variation_id), None)
    if variation is None:
        return False

    nav_bar = NavBar(
        url=variation.url,
        prompt=variation.prompt,
        provider=variation.provider,
        model=variation.model,
    )
    update_step4_data(store, {
        "navigation": navigation.model_copy(
            update={"generated_nav_bar": nav_bar, "selected_variation_id": variation.id}
        ),
    })
    return True


# ── Step 5: screens ─────────────────────────────────────────

def _generated_screen_for(state: WizardState, screen_id: str) -> GeneratedScreen:
    for generated in state.step5.generated_screens:
        if generated.screen_id == screen_id:
            return generated
    screen = next((s for s in state.step4.screens if s.id == screen_id), None)
    if screen is None:
        return GeneratedScreen(screen_id=screen_id)
    return GeneratedScreen(screen_id=screen_id, type=screen.type, name=screen.name)


def _write_screen(store: WizardStore, screen: GeneratedScreen, extra: dict | None = None) -> None:
    screens = store.get().step5.generated_screens
    if any(s.screen_id == screen.screen_id for s in screens):
        screens = [screen if s.screen_id == screen.screen_id else s for s in screens]
    else:
        screens = [*screens, screen]
    update_step5_data(store, {"generatedScreens": screens, **(extra or {})})


def record_screen_variation(
    store: WizardStore,
    screen_id: str,
    result: GenerationResult,
    *,
    variation_id: str,
    prompt: str = "",
    provider: str = "",
    model: str = "",
    created_at: str = "",
    epoch: int | None = None,
) -> bool:
    """Append a variation to ``screen_id`` and add its credits to the totals.

    The first variation recorded for a screen also becomes its current URL.
    """
    url = _check_result("Screen generation", result)
    if _is_stale(store, epoch, "screen"):
        return False

    state = store.get()
    screen = _generated_screen_for(state, screen_id)
    variation = ScreenVariation(
        id=variation_id,
        url=url,
        prompt=prompt,
        provider=provider,
        model=model,
        credits_used=result.credits_used,
        created_at=created_at,
    )
    changes = {
        "variations": [*screen.variations, variation],
        "credits_used": screen.credits_used + result.credits_used,
    }
    if not screen.url:
        changes.update(url=url, prompt=prompt, provider=provider, model=model)

    _write_screen(
        store,
        screen.model_copy(update=changes),
        {"totalCreditsUsed": state.step5.total_credits_used + result.credits_used},
    )
    return True


def select_screen_variation(store: WizardStore, screen_id: str, variation_id: str) -> bool:
    screen = next(
        (s for s in store.get().step5.generated_screens if s.screen_id == screen_id), None
    )
    if screen is None:
        return False
    variation = next((v for v in screen.variations if v.id == variation_id), None)
    if variation is None:
        return False

    _write_screen(store, screen.model_copy(update={
        "url": variation.url,
        "prompt": variation.prompt,
        "provider": variation.provider,
        "model": variation.model,
        "selected": True,
        "selected_variation_id": variation.id,
    }))
    return True


# ── Step 3: style extraction ────────────────────────────────

def needs_style_extraction(state: WizardState) -> bool:
    """True when the mood board changed since the last extraction."""
    current = {image.id for image in state.step2.reference_images}
    if not current:
        return False
    return current != set(state.step3.last_extracted_image_ids)


def apply_style_extraction(
    store: WizardStore,
    result: StyleExtractionResult,
    image_ids: list[str],
    extracted_at: str,
    *,
    epoch: int | None = None,
) -> bool:
    if not result.success:
        raise ExternalServiceError("Style extraction", result.error or "no styles returned")
    if _is_stale(store, epoch, "style extraction"):
        return False

    update_step3_data(store, {
        "paletteOptions": result.palette_options,
        "typographyOptions": result.typography_options,
        "styleDirections": result.style_directions,
        "lastExtractedImageIds": list(image_ids),
        "lastExtractedAt": extracted_at,
        "extractionStatus": "complete",
        "extractionError": None,
    })
    return True
