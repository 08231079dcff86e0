"""Route stored image URLs through the image proxy.

Revision ID: 0002
Revises: 0001
Create Date: 2025-11-28

Nav-bar and screen variations keep the upstream URL in ``originalUrl``.
"""

from appforge.services.images import SLICE_URL_REWRITES

revision = 2
down_revision = 1
repeatable = True


def upgrade(data: dict) -> dict:
    for slice_name, rewrite in SLICE_URL_REWRITES.items():
        data[slice_name] = rewrite(data[slice_name])
    return data
