"""
Adapters layer - Storage backends (local SQLite, remote calendar API).
"""

from .http_store import HttpCalendarStore
from .sqlite_store import SqliteCalendarStore

__all__ = ["HttpCalendarStore", "SqliteCalendarStore"]
