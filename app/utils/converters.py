"""Type conversion helpers for values coming back from the database.

Supabase returns numbers that may be null and dates as ISO strings.
"""

from datetime import date, datetime
from typing import Any


def safe_int(val: Any, default: int = 0) -> int:
    """Safely convert a value to int.

    Examples:
        >>> safe_int("42")
        42
        >>> safe_int(3.7)
        3
        >>> safe_int(None)
        0
    """
    if val is None or val == "":
        return default
    try:
        return int(float(val))  # Handle "3.0" -> 3
    except (ValueError, TypeError):
        return default


def to_date(val: Any) -> date | None:
    """Convert an ISO date/datetime string (or date) to a date.

    Examples:
        >>> to_date("2024-03-01")
        datetime.date(2024, 3, 1)
        >>> to_date("2024-03-01T10:15:00+00:00")
        datetime.date(2024, 3, 1)
        >>> to_date("") is None
        True
    """
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    try:
        return date.fromisoformat(str(val)[:10])
    except ValueError:
        return None
