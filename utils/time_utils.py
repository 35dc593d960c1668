"""
utils/time_utils.py

Purpose: Time helpers

- Store timestamps (strictly increasing on update)
- Relative dates and month buckets for reports
"""

from datetime import datetime, timedelta
from typing import Optional


def utcnow() -> datetime:
    """
    Current UTC time, naive, microsecond precision.
    """
    return datetime.utcnow()


def next_timestamp(previous: Optional[datetime] = None) -> datetime:
    """
    Returns the current time, bumped past `previous` when the clock has not
    advanced since it was taken.
    """
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def days_ago(days: int) -> datetime:
    return utcnow() - timedelta(days=days)


def month_key(dt: datetime) -> str:
    """
    Returns the `YYYY-MM` bucket of a timestamp.
    """
    return dt.strftime("%Y-%m")
