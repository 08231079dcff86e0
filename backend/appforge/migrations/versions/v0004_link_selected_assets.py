"""Denormalize the ids of the selected logo and nav bar.

Revision ID: 0004
Revises: 0003
Create Date: 2026-01-20

The selected logo and the generated nav bar are referenced by URL. This
revision records the id of the matching variation next to the URL so the
two stay link-consistent when variations are regenerated.
"""

revision = 4
down_revision = 3
repeatable = True


def _variation_id_for(url, variations) -> str | None:
    if not isinstance(url, str) or not isinstance(variations, list):
        return None
    for variation in variations:
        if isinstance(variation, dict) and variation.get("url") == url:
            return variation.get("id")
    return None


def upgrade(data: dict) -> dict:
    step3 = data["step3"]
    logo = step3.get("logo")
    if isinstance(logo, dict) and not logo.get("variationId"):
        variation_id = _variation_id_for(logo.get("url"), step3.get("logoVariations"))
        if variation_id:
            logo["variationId"] = variation_id

    navigation = data["step4"].get("navigation")
    if isinstance(navigation, dict) and not navigation.get("selectedVariationId"):
        nav_bar = navigation.get("generatedNavBar")
        if isinstance(nav_bar, dict):
            variation_id = _variation_id_for(nav_bar.get("url"), navigation.get("navBarVariations"))
            if variation_id:
                navigation["selectedVariationId"] = variation_id
    return data
