"""
Settings resolution: default fallback and partial merge.
"""

from typing import Any, Mapping, Optional, Union

from .models import CalendarSettings, SettingsUpdate
from .validation import parse_model

DEFAULT_SETTINGS = CalendarSettings()


def resolve_settings(stored: Optional[CalendarSettings]) -> CalendarSettings:
    """Stored record if there is one, otherwise the defaults."""
    return stored if stored is not None else DEFAULT_SETTINGS


def merge_settings(
    base: CalendarSettings,
    update: Union[SettingsUpdate, Mapping[str, Any]],
) -> CalendarSettings:
    """
    Apply the fields present in ``update`` on top of ``base``.

    Omitted fields, and fields sent as null, keep their current value.
    Raw mappings are validated first, so bad enum values raise
    ValidationError instead of being coerced.
    """
    if not isinstance(update, SettingsUpdate):
        update = parse_model(SettingsUpdate, update)

    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    return base.model_copy(update=changes)
