"""Product requirements document rendered from a finished wizard."""

from appforge.schemas.wizard import TOTAL_STEPS, DesignSummary, WizardState

INTEGRATION_INSTRUCTIONS = {
    "supabase": "Implement Supabase for the backend (Database, Auth, Storage). Use @supabase/supabase-js.",
    "supabase-auth": "Enable Supabase Authentication (Email/Password, Social).",
    "ai-features": "Implement AI-powered features using the provided LLM context.",
}


def get_design_summary(state: WizardState) -> DesignSummary:
    return DesignSummary(
        app_name=state.step1.app_name,
        category=state.step1.category,
        total_screens=len(state.step4.screens),
        credits_used=state.step5.total_credits_used,
        selected_package=state.step7.selected_package,
        completion_percentage=round(len(state.completed_steps) / TOTAL_STEPS * 100),
    )


def _integration_instruction(integration_id: str) -> str:
    return INTEGRATION_INSTRUCTIONS.get(integration_id, f"Implement {integration_id} integration.")


def _data_models_section(state: WizardState) -> str:
    models = state.step1.data_models
    if not models:
        return "No data models defined."
    blocks = []
    for model in models:
        lines = [f"#### {model.name}", model.description or "N/A", ""]
        for field in model.fields:
            marker = " (required)" if field.required else ""
            ref = f" -> {field.reference_model}" if field.reference_model else ""
            desc = f": {field.description}" if field.description else ""
            lines.append(f"- `{field.name}` ({field.type}{ref}){marker}{desc}")
        blocks.append("\n".join(lines).rstrip())
    return "\n\n".join(blocks)


def generate_prd(state: WizardState) -> str:
    step1, step2, step3, step4, step7 = state.step1, state.step2, state.step3, state.step4, state.step7
    selected_screens = [s for s in state.step5.generated_screens if s.selected]
    enabled = [i for i in state.step6.integrations if i.enabled]
    palette = step3.color_palette
    typography = step3.typography
    logo_url = step3.logo.url if step3.logo else None
    bottom_nav = step4.navigation.type == "bottom"

    screen_inventory = "\n\n".join(
        f"#### {s.name or 'Untitled Screen'} ({s.type})\n"
        f"- **Purpose:** {s.purpose or 'N/A'}\n"
        f"- **Key Elements:** {', '.join(s.key_elements)}"
        for s in step4.screens
    )
    prototypes = "\n\n".join(
        f"### {s.name}\n- **Design URL:** {s.url}\n- **Prompt:** {s.prompt}" for s in selected_screens
    )
    screen_assets = "\n".join(f"  - {s.name}: {s.url}" for s in selected_screens)
    integrations = "\n".join(_integration_instruction(i.id) for i in enabled) or "None."
    routing = (
        "Expo Router (File-based)"
        if step7.code_generation_settings.expo_router
        else "React Navigation"
    )
    styling = (
        "NativeWind (Tailwind CSS for React Native)"
        if step7.code_generation_settings.styling_method == "nativewind"
        else "React Native StyleSheet"
    )

    sections = [
        f"# {step1.app_name or 'Untitled App'} - Product Requirements Document",
        "## 1. Overview\n"
        f"**Project Name:** {step1.app_name}\n"
        f"**Category:** {step1.category or 'N/A'}\n"
        f"**Target Audience:** {step1.target_audience}\n"
        f"**Primary Goal:** {step1.primary_goal}\n"
        f"**Platform:** {step1.platform.upper()}\n\n"
        f"### Description\n{step1.description}\n\n"
        f"**Additional Context & Requirements:**\n{step1.additional_details or 'None provided.'}",
        "## 2. Brand Identity & Design System\n\n"
        "### 2.1 Brand Personality\n"
        f"- **Typography Style:** {step2.typography}\n"
        f"- **UI Style:** {step2.ui_style}\n"
        f"- **Personality:** {step2.personality}\n"
        f"- **Component Style:** {step2.components} corners\n\n"
        "### 2.2 Visual Assets\n"
        f"- **Logo:** {logo_url or 'Pending'}\n"
        "- **Color Palette:**\n"
        f"  - Primary: {palette.primary if palette else ''}\n"
        f"  - Secondary: {palette.secondary if palette else ''}\n"
        f"  - Accent: {palette.accent if palette else ''}\n"
        f"  - Background: {palette.background if palette else ''}\n"
        f"  - Surface: {palette.surface if palette else ''}\n\n"
        "### 2.3 Typography Scale\n"
        f"- **Font Family:** {typography.font_family if typography else 'Inter'}\n"
        f"- **H1:** {_type_style(typography, 'h1')}\n"
        f"- **Body:** {_type_style(typography, 'body')}",
        "## 3. Application Architecture\n\n"
        f"### 3.1 Screen Inventory\nTotal screens: {len(step4.screens)}\n\n"
        f"{screen_inventory}\n\n"
        "### 3.2 Navigation\n"
        f"- **Navigation Type:** {'Bottom Tab Bar' if bottom_nav else 'None'}"
        + (f"\n- **Tabs:** {', '.join(step4.navigation.items)}" if step4.navigation.items else ""),
        "## 4. UI Prototypes (Generated Screens)\n"
        "The following screen designs match the visual style guide:\n\n"
        f"{prototypes}",
        "## 5. Data Models\n\n" + _data_models_section(state),
        "## 6. Technical Configuration & Integrations\n\n"
        "### 6.1 Project Settings\n"
        "- **Framework:** Expo (Managed Workflow)\n"
        f"- **Routing:** {routing}\n"
        f"- **Styling:** {styling}\n"
        f"- **Project Name:** {step7.project_name}\n"
        f"- **Bundle Identifier:** {step7.bundle_identifier}\n"
        f"- **Typescript:** {'Enabled' if step7.code_generation_settings.typescript else 'Disabled'}\n\n"
        f"### 6.2 Integrations\n{integrations}",
        "## 7. Development Prompt\n"
        "*Use this prompt to initialize the project in the code generator:*\n\n"
        f'Build a mobile application called "{step1.app_name}" using Expo React Native.\n\n'
        f"**App Context:**\n{step1.description}\n\n"
        "**Specific Requirements & Logic:**\n"
        f"{step1.additional_details or 'Synthesize logic based on description.'}\n\n"
        "**Asset Management (CRITICAL):**\n"
        "Download the following remote assets into **assets/images/** before using them:\n"
        f"- **Logo**: {logo_url or 'N/A'} (Save as **assets/images/logo.png**)\n"
        f"- **Generated Screens (Reference)**:\n{screen_assets}\n\n"
        "**Structure & Navigation:**\n"
        f"The app should include {len(step4.screens)} screens: {', '.join(s.name for s in step4.screens)}."
        + (
            f"\nImplement a bottom navigation bar with: {', '.join(step4.navigation.items)}."
            if bottom_nav
            else ""
        ),
    ]
    return "\n\n---\n\n".join(sections) + "\n"


def _type_style(typography, level: str) -> str:
    if typography is None:
        return "32px / bold" if level == "h1" else "16px / normal"
    style = getattr(typography.scale, level)
    size = int(style.size) if float(style.size).is_integer() else style.size
    return f"{size}px / {style.weight}"
