"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .calendar_service import CalendarService, CalendarStoreProtocol, CalendarView

__all__ = ["CalendarService", "CalendarStoreProtocol", "CalendarView"]
