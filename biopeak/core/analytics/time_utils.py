from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, datetime, str]


def to_date(value: Optional[DateLike]) -> Optional[date]:
    """Coerce a date, datetime or ISO string ("2025-01-31", "2025-01-31T08:00:00Z") to a date.

    Returns None if the value is missing or cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        s = str(value).strip()
        if not s:
            return None
        if s.endswith('Z'):
            s = s[:-1] + '+00:00'
        if len(s) == 10:
            return date.fromisoformat(s)
        return datetime.fromisoformat(s).date()
    except (ValueError, TypeError):
        return None


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end (negative when start is after end)."""
    return (end - start).days
