"""HTTP API over the calendar service."""
