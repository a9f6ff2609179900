"""
Boundary validation: turns raw payloads into domain models or ValidationError.
"""

from typing import Any, Mapping, Optional, Type, TypeVar

import pendulum
import pydantic
from pendulum import DateTime

from .exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def format_errors(exc: pydantic.ValidationError) -> list[str]:
    """Flatten pydantic errors into ``"field: message"`` strings."""
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "body"
        details.append(f"{location}: {error.get('msg', 'invalid value')}")
    return details


def parse_model(
    model: Type[ModelT],
    data: Mapping[str, Any],
    timezone: Optional[str] = None,
) -> ModelT:
    """
    Validate a payload against a boundary model.

    Datetimes without an offset are read in ``timezone`` (UTC if omitted).

    Raises:
        ValidationError: With one detail line per offending field
    """
    try:
        context = {"timezone": timezone} if timezone else None
        return model.model_validate(dict(data), context=context)
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid {model.__name__} data", format_errors(exc)) from exc


def parse_datetime(value: str, tz: str = "UTC") -> DateTime:
    """
    Parse an ISO-8601 string into an aware pendulum DateTime.

    Strings without an offset are read in ``tz``.

    Raises:
        ValidationError: If the string is not a valid date or datetime
    """
    try:
        parsed = pendulum.parse(value, tz=tz)
    except (ValueError, TypeError) as exc:
        raise ValidationError(f"Invalid date format: {value!r}") from exc

    if isinstance(parsed, DateTime):
        return parsed
    if isinstance(parsed, pendulum.Date):
        return pendulum.datetime(parsed.year, parsed.month, parsed.day, tz=tz)

    raise ValidationError(f"Invalid date format: {value!r}")
