from datetime import date, datetime, timezone
from typing import Optional


def coerce_date(value) -> Optional[date]:
    """
    Reduce a stored date value to a calendar date.

    Accepts date, datetime (aware values are converted to UTC first) and
    ISO-8601 strings. Returns None when the value cannot be read as a date.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return coerce_date(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def parse_iso_date(text: str) -> date:
    """Parse YYYY-MM-DD, raising ValueError on anything else"""
    return datetime.strptime(text, "%Y-%m-%d").date()
