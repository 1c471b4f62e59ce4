"""
Formatting helpers shared across services/routers.
"""

from __future__ import annotations

from datetime import date, datetime

MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def format_date(value: str | date | None) -> str:
    """
    Render an ISO date/datetime as "October 19, 2026".
    Free-form values (ex.: "Spring 2024") are returned unchanged.
    """
    if value is None:
        return ""
    if isinstance(value, date):
        parsed = value
    elif not isinstance(value, str):
        return str(value)
    else:
        text = value.strip()
        if not text:
            return ""
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return value
    return f"{MONTHS[parsed.month - 1]} {parsed.day}, {parsed.year}"


def format_size(num_bytes: int) -> str:
    """Human readable size using the bytes/KB/MB steps."""
    if num_bytes < 1024:
        return f"{num_bytes} bytes"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.2f} KB"
    return f"{num_bytes / (1024 * 1024):.2f} MB"
