"""Tests for PRD rendering and the design summary."""

import pytest

from appforge.schemas.wizard import WizardState
from appforge.services.prd import generate_prd, get_design_summary


@pytest.mark.unit
class TestDesignSummary:

    def test_summary(self, complete_state):
        summary = get_design_summary(complete_state)
        assert summary.app_name == "Trail Mix"
        assert summary.category == "outdoors"
        assert summary.total_screens == 3
        assert summary.credits_used == 6
        assert summary.selected_package == "complete"
        assert summary.completion_percentage == 86

    def test_empty_summary(self):
        summary = get_design_summary(WizardState())
        assert summary.total_screens == 0
        assert summary.completion_percentage == 0


@pytest.mark.unit
class TestGeneratePrd:

    def test_sections(self, complete_state):
        prd = generate_prd(complete_state)
        assert prd.startswith("# Trail Mix - Product Requirements Document")
        for heading in (
            "## 1. Overview",
            "## 2. Brand Identity & Design System",
            "## 3. Application Architecture",
            "## 4. UI Prototypes (Generated Screens)",
            "## 5. Data Models",
            "## 6. Technical Configuration & Integrations",
            "## 7. Development Prompt",
        ):
            assert heading in prd

    def test_content(self, complete_state):
        prd = generate_prd(complete_state)
        assert "**Platform:** BOTH" in prd
        assert "#### Home (home)" in prd
        assert "- **Tabs:** Home, Profile" in prd
        assert "- `title` (string) (required)" in prd
        assert "Implement Supabase for the backend" in prd
        assert "stripe" not in prd
        assert "- Splash: https://project.supabase.co/s1.png" in prd
        assert "Implement a bottom navigation bar with: Home, Profile." in prd

    def test_empty_state_renders(self):
        prd = generate_prd(WizardState())
        assert prd.startswith("# Untitled App - Product Requirements Document")
        assert "No data models defined." in prd
        assert "- **Logo:** Pending" in prd
        assert "- **H1:** 32px / bold" in prd
