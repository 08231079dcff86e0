"""Tests for wizard state migration."""

import pytest

from appforge.migrations.runner import (
    MIGRATIONS,
    REPEATABLE,
    apply_migrations,
    backfill,
    head_revision,
    migrate,
)
from appforge.schemas.wizard import CURRENT_SCHEMA_VERSION, WizardState
from appforge.services.images import ensure_proxy_url, extract_original_url


@pytest.mark.unit
class TestMigrate:
    """Test the migrate() pipeline."""

    def test_current_state_is_fixed_point(self, complete_state):
        """A valid current-schema state survives migration unchanged, twice."""
        once = migrate(complete_state)
        twice = migrate(once)
        assert once.model_dump() == complete_state.model_dump()
        assert twice.model_dump() == once.model_dump()

    def test_default_state_is_fixed_point(self):
        assert migrate(WizardState()).model_dump() == WizardState().model_dump()

    def test_serialized_state_is_fixed_point(self, complete_state):
        """The persisted camelCase layout migrates back to the same state."""
        raw = complete_state.model_dump(mode="json", by_alias=True)
        assert migrate(raw).model_dump() == complete_state.model_dump()

    @pytest.mark.parametrize("raw", [None, "garbage", 42, [], {}])
    def test_unusable_input_yields_default(self, raw):
        assert migrate(raw).model_dump() == WizardState().model_dump()

    def test_backfills_missing_slices(self):
        """Every slice is present with all its schema defaults."""
        state = migrate({"step1": {"appName": "Solo"}})
        default = WizardState()

        assert state.step1.app_name == "Solo"
        assert state.step1.data_models == []
        for name in ("step2", "step3", "step4", "step5", "step6", "step7"):
            assert getattr(state, name).model_dump() == getattr(default, name).model_dump()

    def test_null_navigation_is_backfilled(self):
        state = migrate({"step4": {"screens": [], "navigation": None}})
        assert state.step4.navigation.type == "bottom"
        assert state.step4.navigation.items == []

    def test_records_current_schema_version(self):
        assert migrate({"schemaVersion": 1}).schema_version == CURRENT_SCHEMA_VERSION
        assert migrate({}).schema_version == CURRENT_SCHEMA_VERSION

    def test_invalid_field_falls_back_to_default(self):
        """A bad value drops only that field, the rest of the slice is kept."""
        state = migrate({
            "step1": {"appName": "Keep", "platform": "windows-phone"},
            "currentStep": 3,
        })
        assert state.step1.app_name == "Keep"
        assert state.step1.platform == "both"
        assert state.current_step == 3

    def test_invalid_list_item_is_dropped(self):
        state = migrate({
            "step6": {"integrations": [{"id": "supabase", "enabled": True}, {"enabled": True}]},
        })
        assert [i.id for i in state.step6.integrations] == ["supabase"]

    def test_keeps_is_processing_as_stored(self):
        """migrate itself is pure; the store is what clears isProcessing."""
        assert migrate({"isProcessing": True}).is_processing is True


@pytest.mark.unit
class TestRevisions:
    """Test the individual schema revisions."""

    def test_revisions_are_contiguous(self):
        assert sorted(MIGRATIONS) == list(range(1, CURRENT_SCHEMA_VERSION + 1))
        assert head_revision() == CURRENT_SCHEMA_VERSION

    def test_relocates_data_models_from_step6(self):
        models = [{"id": "dm-1", "name": "Trail"}]
        state = migrate({"step6": {"dataModels": models, "integrations": []}})
        assert [m.id for m in state.step1.data_models] == ["dm-1"]

    def test_relocation_never_clobbers_step1(self):
        state = migrate({
            "step1": {"dataModels": [{"id": "new", "name": "New"}]},
            "step6": {"dataModels": [{"id": "old", "name": "Old"}]},
        })
        assert [m.id for m in state.step1.data_models] == ["new"]

    def test_proxies_external_logo_url(self):
        state = migrate({"step3": {"logo": {"url": "https://cdn.example.com/logo.png"}}})
        assert state.step3.logo.url == "/api/image-proxy?url=https%3A%2F%2Fcdn.example.com%2Flogo.png"

    def test_already_proxied_url_is_unchanged(self):
        url = "/api/image-proxy?url=https%3A%2F%2Fcdn.example.com%2Flogo.png"
        state = migrate({"step3": {"logo": {"url": url}}})
        assert state.step3.logo.url == url

    def test_proxies_variations_and_keeps_original(self):
        state = migrate({
            "schemaVersion": 1,
            "step5": {"generatedScreens": [{
                "screenId": "s1",
                "url": "https://img.example.com/s1.png",
                "variations": [{"id": "v1", "url": "https://img.example.com/v1.png"}],
            }]},
        })
        screen = state.step5.generated_screens[0]
        assert screen.url.startswith("/api/image-proxy?url=")
        assert screen.variations[0].original_url == "https://img.example.com/v1.png"
        assert extract_original_url(screen.variations[0].url) == "https://img.example.com/v1.png"

    def test_current_version_still_proxies_urls(self):
        """Normalizing revisions run even when the state is tagged current."""
        url = "https://cdn.example.com/logo.png"
        state = migrate({"schemaVersion": CURRENT_SCHEMA_VERSION, "step3": {"logo": {"url": url}}})
        assert state.step3.logo.url == ensure_proxy_url(url)

    def test_current_version_still_prunes_integrations(self):
        state = migrate({
            "schemaVersion": CURRENT_SCHEMA_VERSION,
            "step6": {"integrations": [{"id": "convex", "enabled": True}, {"id": "supabase"}]},
        })
        assert [i.id for i in state.step6.integrations] == ["supabase"]

    def test_current_version_skips_relocation(self):
        """Relocating revisions are applied once, by stored version."""
        state = migrate({
            "schemaVersion": CURRENT_SCHEMA_VERSION,
            "step6": {"dataModels": [{"id": "dm-1", "name": "Trail"}]},
        })
        assert state.step1.data_models == []

    def test_repeatable_revisions_are_normalizers(self):
        assert 1 not in REPEATABLE
        assert {2, 3, 4} <= REPEATABLE

    def test_prunes_deprecated_integrations(self):
        state = migrate({"step6": {"integrations": [
            {"id": "convex", "enabled": True},
            {"id": "convex-auth", "enabled": True},
            {"id": "supabase", "enabled": True},
        ]}})
        ids = [i.id for i in state.step6.integrations]
        assert "convex" not in ids
        assert "convex-auth" not in ids
        assert ids == ["supabase"]

    def test_links_selected_logo_and_nav_bar(self):
        logo_url = "/api/image-proxy?url=https%3A%2F%2Fcdn.example.com%2Fl2.png"
        nav_url = "/api/image-proxy?url=https%3A%2F%2Fcdn.example.com%2Fn1.png"
        state = migrate({
            "schemaVersion": 3,
            "step3": {
                "logo": {"url": logo_url},
                "logoVariations": [
                    {"id": "l1", "url": "/api/image-proxy?url=https%3A%2F%2Fcdn.example.com%2Fl1.png"},
                    {"id": "l2", "url": logo_url},
                ],
            },
            "step4": {"navigation": {
                "generatedNavBar": {"url": nav_url},
                "navBarVariations": [{"id": "n1", "url": nav_url}],
            }},
        })
        assert state.step3.logo.variation_id == "l2"
        assert state.step4.navigation.selected_variation_id == "n1"

    def test_newer_version_is_still_normalized(self):
        state = migrate({"schemaVersion": 99, "step6": {"integrations": [{"id": "convex"}]}})
        assert state.step6.integrations == []
        assert state.schema_version == CURRENT_SCHEMA_VERSION

    def test_failing_revision_is_skipped(self, monkeypatch):
        def broken(data):
            data["step1"]["appName"] = "half-written"
            raise RuntimeError("boom")

        monkeypatch.setitem(MIGRATIONS, 1, broken)
        data = apply_migrations(backfill({"step1": {"appName": "Intact"}}), 0)
        assert data["step1"]["appName"] == "Intact"


@pytest.mark.unit
class TestImageUrls:
    """Test image proxy URL normalization."""

    @pytest.mark.parametrize("url", [
        "/api/image-proxy?url=https%3A%2F%2Fa.example.com%2Fx.png",
        "data:image/png;base64,AAAA",
        "blob:http://localhost/123",
        "https://xyz.supabase.co/storage/v1/object/public/logo.png",
        "",
        None,
    ])
    def test_passthrough(self, url):
        assert ensure_proxy_url(url) == url

    def test_external_url_is_encoded(self):
        url = "https://cdn.example.com/a b.png?size=2&fmt=png"
        assert ensure_proxy_url(url) == (
            "/api/image-proxy?url=https%3A%2F%2Fcdn.example.com%2Fa%20b.png%3Fsize%3D2%26fmt%3Dpng"
        )

    def test_lookalike_host_is_not_trusted(self):
        assert ensure_proxy_url("https://evilsupabase.co/x.png").startswith("/api/image-proxy")

    def test_extract_original_url_inverts_proxy(self):
        url = "https://cdn.example.com/a b.png?size=2"
        assert extract_original_url(ensure_proxy_url(url)) == url
