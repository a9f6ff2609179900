"""
Domain-specific exception hierarchy for the calendar application.
"""


class CalendarError(Exception):
    """Base class for all application-level errors."""


class ValidationError(CalendarError, ValueError):
    """Raised when input is rejected at the boundary (bad dates, empty title, bad enum)."""

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class StorageError(CalendarError):
    """Raised when the persistence layer cannot complete an operation."""


class RemoteStoreError(StorageError):
    """Raised when the remote calendar API cannot be reached or answers with an error."""
