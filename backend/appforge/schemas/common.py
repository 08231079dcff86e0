"""Common schema base and lenient validation helpers."""

import copy
import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class CamelModel(BaseModel):
    """Base for every persisted shape.

    Attributes are snake_case in Python; JSON (storage and HTTP) uses the
    camelCase aliases, e.g. ``app_name`` <-> ``appName``.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _field_keys(model_cls: type[BaseModel]) -> dict[str, tuple[str, ...]]:
    """Map both alias and attribute name of each field to all its spellings."""
    keys: dict[str, tuple[str, ...]] = {}
    for name, info in model_cls.model_fields.items():
        spellings = (name,) if not info.alias else (info.alias, name)
        for spelling in spellings:
            keys[spelling] = spellings
    return keys


def _drop_invalid(data: dict, errors: list[dict], keys: dict[str, tuple[str, ...]]) -> bool:
    """Remove the offending fields (or list items) named in ``errors``.

    Returns True if anything was removed.
    """
    changed = False
    bad_items: dict[str, set[int]] = {}
    bad_fields: set[str] = set()

    for error in errors:
        loc = error.get("loc") or ()
        if not loc or not isinstance(loc[0], str):
            continue
        present = [k for k in keys.get(loc[0], (loc[0],)) if k in data]
        if not present:
            continue
        key = present[0]
        if len(loc) >= 2 and isinstance(loc[1], int) and isinstance(data[key], list):
            bad_items.setdefault(key, set()).add(loc[1])
        else:
            bad_fields.add(key)

    for key in bad_fields:
        for spelling in keys.get(key, (key,)):
            if spelling in data:
                data.pop(spelling)
                changed = True

    for key, indexes in bad_items.items():
        if key in bad_fields or key not in data:
            continue
        data[key] = [item for i, item in enumerate(data[key]) if i not in indexes]
        changed = True

    return changed


def coerce_model(model_cls: type[M], data: Any) -> M:
    """Validate ``data`` as ``model_cls`` without ever raising.

    Fields that fail validation are dropped so they fall back to their
    defaults; invalid items of list fields are dropped individually.
    """
    if isinstance(data, model_cls):
        data = data.model_dump(by_alias=True)
    if not isinstance(data, dict):
        return model_cls()

    data = copy.deepcopy(data)
    keys = _field_keys(model_cls)
    while True:
        try:
            return model_cls.model_validate(data)
        except ValidationError as exc:
            if not _drop_invalid(data, exc.errors(), keys):
                logger.warning(
                    "Could not repair %s, using defaults: %s",
                    model_cls.__name__, exc.error_count(),
                )
                return model_cls()
            logger.debug(f"Dropped invalid fields while validating {model_cls.__name__}")
