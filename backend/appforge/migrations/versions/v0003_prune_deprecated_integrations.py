"""Drop integrations that are no longer offered.

Revision ID: 0003
Revises: 0002
Create Date: 2025-12-09
"""

revision = 3
down_revision = 2
repeatable = True

DEPRECATED_INTEGRATIONS = frozenset({"convex", "convex-auth"})


def upgrade(data: dict) -> dict:
    integrations = data["step6"].get("integrations")
    if isinstance(integrations, list):
        data["step6"]["integrations"] = [
            item for item in integrations
            if not (isinstance(item, dict) and item.get("id") in DEPRECATED_INTEGRATIONS)
        ]
    return data
