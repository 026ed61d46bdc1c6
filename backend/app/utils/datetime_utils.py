"""
Datetime utilities
Provides timezone-aware helpers used for upstream date windows
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple


def utc_now() -> datetime:
    """
    Get current UTC time (replacement for deprecated datetime.utcnow())

    Returns:
        datetime: Current UTC time with timezone awareness
    """
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Get current UTC time as ISO format string"""
    return utc_now().isoformat()


def utc_today() -> date:
    return utc_now().date()


def date_window(
    days_back: int = 0,
    days_ahead: int = 0,
    today: Optional[date] = None
) -> Tuple[str, str]:
    """
    Build a (from, to) pair of YYYY-MM-DD strings around today

    Example:
        >>> date_window(days_ahead=14, today=date(2025, 1, 1))
        ('2025-01-01', '2025-01-15')
    """
    today = today or utc_today()
    start = today - timedelta(days=days_back)
    end = today + timedelta(days=days_ahead)
    return start.isoformat(), end.isoformat()
