"""Move data models from step 6 to step 1.

Revision ID: 0001
Revises: None
Create Date: 2025-11-14

Data models used to be collected on the integrations step. They now belong
to the app-information step. Stored step-6 models are only carried over
when step 1 holds none, so newer data is never clobbered.
"""

revision = 1
down_revision = None
repeatable = False


def upgrade(data: dict) -> dict:
    step1 = data["step1"]
    step6 = data["step6"]

    stale = step6.pop("dataModels", None)
    if isinstance(stale, list) and stale and not step1.get("dataModels"):
        step1["dataModels"] = stale
    return data
