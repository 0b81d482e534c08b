"""
Standardized Date/Time Handling Utilities

CRITICAL RULES:
- Always store datetimes in DB as UTC
- Never mix naive and aware datetimes
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")


def now_utc() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is in UTC (for database queries and comparisons)

    Args:
        dt: Datetime (can be None, naive, or aware)

    Returns:
        Datetime in UTC, or None if input was None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Assume UTC for naive datetimes
        logger.warning(f"Received naive datetime, assuming UTC: {dt}")
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def format_remaining(delta: timedelta) -> str:
    """Human-readable remaining time, e.g. '3h 05m'"""
    total_minutes = max(0, int(delta.total_seconds()) // 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"
