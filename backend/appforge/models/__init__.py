"""Aggregate model imports for metadata creation."""

from appforge.models.storage_entry import StorageEntry  # noqa: F401
