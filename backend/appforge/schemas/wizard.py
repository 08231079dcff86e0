"""Pydantic schemas for the 7-step design wizard.

Every field carries an explicit default so a partial merge can never leave
a slice with a missing value. The persisted JSON layout uses the camelCase
aliases (``projectId``, ``currentStep``, ``appName``, ...).
"""

from typing import Any, Literal

from pydantic import Field, field_validator

from appforge.schemas.common import CamelModel

CURRENT_SCHEMA_VERSION = 4
TOTAL_STEPS = 7

ScreenType = Literal[
    "splash",
    "signin",
    "signup",
    "home",
    "profile",
    "settings",
    "custom",
    "scanner",
    "onboarding",
]


# ── Step 1: App information ─────────────────────────────────

class DataModelField(CamelModel):
    name: str
    type: Literal["string", "number", "boolean", "date", "array", "object", "reference"] = "string"
    required: bool = False
    description: str = ""
    reference_model: str | None = None


class DataModel(CamelModel):
    id: str
    name: str
    description: str = ""
    fields: list[DataModelField] = []


class Step1Data(CamelModel):
    app_name: str = ""
    description: str = ""
    category: str = ""
    target_audience: str = ""
    platform: Literal["ios", "android", "both"] = "both"
    primary_goal: str = ""
    data_description: str = ""
    parallel_ready: bool = False
    additional_details: str = ""
    data_models: list[DataModel] = []


# ── Step 2: Style & personality (mood board) ────────────────

class ReferenceImage(CamelModel):
    id: str
    url: str
    source: Literal["upload", "paste"] = "upload"


class ColorPreferences(CamelModel):
    primary: str = ""
    secondary: str = ""
    use_auto_generate: bool = True


class Step2Data(CamelModel):
    reference_images: list[ReferenceImage] = []
    typography: Literal["", "serif", "sans-serif", "monospace", "handwritten"] = ""
    ui_style: Literal["", "minimal", "modern", "playful", "elegant", "bold"] = ""
    personality: Literal["", "professional", "friendly", "energetic", "calm", "luxurious"] = ""
    components: Literal["", "rounded", "sharp", "mixed"] = ""
    color_preferences: ColorPreferences = ColorPreferences()
    additional_notes: str = ""


# ── Step 3: Brand assets ────────────────────────────────────

class Logo(CamelModel):
    url: str
    prompt: str = ""
    format: Literal["png", "svg"] = "png"
    selected_variation: int = 0
    # Id of the logo variation this selection came from
    variation_id: str | None = None


class LogoVariation(CamelModel):
    id: str
    url: str
    original_url: str | None = None
    prompt: str = ""


class TextColors(CamelModel):
    primary: str = ""
    secondary: str = ""
    disabled: str = ""


class ColorPalette(CamelModel):
    primary: str = ""
    secondary: str = ""
    accent: str = ""
    background: str = ""
    surface: str = ""
    text: TextColors = TextColors()
    error: str = ""
    success: str = ""
    warning: str = ""


class TypeStyle(CamelModel):
    size: float = 16
    weight: str = "normal"
    line_height: float = 1.4


class TypographyScale(CamelModel):
    h1: TypeStyle = TypeStyle(size=32, weight="bold", line_height=1.2)
    h2: TypeStyle = TypeStyle(size=24, weight="bold", line_height=1.25)
    h3: TypeStyle = TypeStyle(size=20, weight="600", line_height=1.3)
    body: TypeStyle = TypeStyle()
    caption: TypeStyle = TypeStyle(size=12, weight="normal", line_height=1.3)


class Typography(CamelModel):
    font_family: str = "Inter"
    scale: TypographyScale = TypographyScale()


class PaletteColor(CamelModel):
    role: str
    hex: str
    description: str | None = None
    usage: str | None = None


class PaletteOption(CamelModel):
    id: str
    name: str
    summary: str = ""
    colors: list[PaletteColor] = []
    keywords: list[str] = []


class TypographyOption(CamelModel):
    id: str
    name: str
    heading_font: str = ""
    body_font: str = ""
    vibe: str = ""
    description: str = ""
    sample_text: str = ""
    scale: TypographyScale = TypographyScale()
    tags: list[str] = []


class StyleDirection(CamelModel):
    id: str
    name: str
    description: str = ""
    ui_style: str = ""
    keywords: list[str] = []
    personality: list[str] = []


ProcessStatus = Literal["idle", "extracting", "generating", "error", "complete"]


class Step3Data(CamelModel):
    logo: Logo | None = None
    logo_variations: list[LogoVariation] = []
    entry_mode: Literal["ai", "manual"] = "ai"
    logo_text_mode: Literal["symbol-only", "with-text"] = "symbol-only"
    last_extracted_image_ids: list[str] = []
    color_palette: ColorPalette | None = None
    typography: Typography | None = None
    palette_options: list[PaletteOption] = []
    typography_options: list[TypographyOption] = []
    style_directions: list[StyleDirection] = []
    selected_palette_id: str | None = None
    selected_typography_id: str | None = None
    selected_style_id: str | None = None
    last_extracted_at: str | None = None
    extraction_status: ProcessStatus = "idle"
    extraction_error: str | None = None
    logo_process_status: ProcessStatus = "idle"


# ── Step 4: Screen flow ─────────────────────────────────────

class Position(CamelModel):
    x: float = 0
    y: float = 0


class Screen(CamelModel):
    id: str
    name: str
    type: ScreenType = "custom"
    purpose: str = ""
    key_elements: list[str] = []
    position: Position = Position()


class Connection(CamelModel):
    from_screen: str = Field(alias="from")
    to: str


class NavBar(CamelModel):
    url: str
    prompt: str = ""
    provider: str = ""
    model: str = ""


class NavBarVariation(CamelModel):
    id: str
    url: str
    # URL before proxy rewriting, kept for editing
    original_url: str | None = None
    prompt: str = ""
    provider: str = ""
    model: str = ""
    created_at: str = ""


class Navigation(CamelModel):
    type: Literal["bottom", "none"] = "bottom"
    items: list[str] = []
    confirmed: bool = False
    generated_nav_bar: NavBar | None = None
    nav_bar_variations: list[NavBarVariation] = []
    selected_variation_id: str | None = None


class Step4Data(CamelModel):
    screens: list[Screen] = []
    connections: list[Connection] = []
    initial_screen: str = ""
    auth_required: bool = False
    navigation: Navigation = Navigation()


# ── Step 5: Screen generation ───────────────────────────────

class ScreenVariation(CamelModel):
    id: str
    url: str
    original_url: str | None = None
    prompt: str = ""
    provider: str = ""
    model: str = ""
    credits_used: int = 0
    created_at: str = ""


class GeneratedScreen(CamelModel):
    screen_id: str
    type: ScreenType = "custom"
    name: str = ""
    url: str | None = None
    prompt: str = ""
    provider: str = ""
    model: str = ""
    credits_used: int = 0
    selected: bool = False
    selected_variation_id: str | None = None
    variations: list[ScreenVariation] = []


class StudioFrame(CamelModel):
    id: str
    title: str | None = None
    html: str = ""
    x: float | None = None
    y: float | None = None


class Step5Data(CamelModel):
    generated_screens: list[GeneratedScreen] = []
    total_credits_used: int = 0
    studio_frames: list[StudioFrame] = []
    studio_snapshot: str | None = None


# ── Step 6: Integrations ────────────────────────────────────

class Integration(CamelModel):
    id: str
    enabled: bool = False
    config: dict[str, Any] | None = None


class Step6Data(CamelModel):
    integrations: list[Integration] = []


# ── Step 7: Review & packaging ──────────────────────────────

class CodeGenerationSettings(CamelModel):
    framework: Literal["expo"] = "expo"
    expo_router: bool = True
    typescript: bool = True
    styling_method: Literal["stylesheet", "nativewind"] = "stylesheet"
    include_tests: bool = False
    include_eslint: bool = True
    include_prettier: bool = True


class Step7Data(CamelModel):
    selected_package: Literal["", "basic", "complete", "premium"] = ""
    code_generation_settings: CodeGenerationSettings = CodeGenerationSettings()
    project_name: str = ""
    bundle_identifier: str = ""


# ── Wizard state ────────────────────────────────────────────

class WizardState(CamelModel):
    schema_version: int = CURRENT_SCHEMA_VERSION
    project_id: str | None = None
    session_id: str | None = None
    step1: Step1Data = Step1Data()
    step2: Step2Data = Step2Data()
    step3: Step3Data = Step3Data()
    step4: Step4Data = Step4Data()
    step5: Step5Data = Step5Data()
    step6: Step6Data = Step6Data()
    step7: Step7Data = Step7Data()
    current_step: int = 1
    completed_steps: list[int] = []
    is_complete: bool = False
    # Transient busy flag; never persisted as true
    is_processing: bool = False

    @field_validator("current_step")
    @classmethod
    def _clamp_step(cls, value: int) -> int:
        return min(max(value, 1), TOTAL_STEPS)

    @field_validator("completed_steps")
    @classmethod
    def _normalize_completed(cls, value: list[int]) -> list[int]:
        return sorted({step for step in value if 1 <= step <= TOTAL_STEPS})


# Step number -> (state attribute, slice model)
STEP_MODELS: dict[int, tuple[str, type[CamelModel]]] = {
    1: ("step1", Step1Data),
    2: ("step2", Step2Data),
    3: ("step3", Step3Data),
    4: ("step4", Step4Data),
    5: ("step5", Step5Data),
    6: ("step6", Step6Data),
    7: ("step7", Step7Data),
}


# ── API responses ───────────────────────────────────────────

class WizardProgress(CamelModel):
    state: WizardState
    step_completion: dict[int, bool]
    can_proceed: bool


class DesignSummary(CamelModel):
    app_name: str
    category: str
    total_screens: int
    credits_used: int
    selected_package: str
    completion_percentage: int
