"""DateTime utilities for timezone-aware timestamp handling.

All timestamps are stored offset-naive in UTC; calendar dates (transaction
dates, snapshot dates, expense months) are derived from the UTC clock.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Get current UTC datetime without timezone info (offset-naive).

    Returns offset-naive datetime compatible with TIMESTAMP WITHOUT TIME ZONE columns.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    """Current calendar date in UTC."""
    return utc_now().date()


def window_start(days: int, today: Optional[date] = None) -> date:
    """
    First date of an N-day window ending today, inclusive of today.

    Example:
        >>> window_start(7, date(2024, 3, 10))
        datetime.date(2024, 3, 4)
    """
    today = today or utc_today()
    return today - timedelta(days=days - 1)


# Lambda version for SQLAlchemy default/onupdate parameters
utc_now_lambda = lambda: datetime.now(timezone.utc).replace(tzinfo=None)
