# shared/common/utils.py
"""
Common Utility Functions
"""

import re
import uuid
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Any, Optional

from dateutil import parser as date_parser
from django.utils import timezone


# =============================================================================
# UUID UTILITIES
# =============================================================================

def is_valid_uuid(value: Any) -> bool:
    """Check if value is a valid UUID"""
    try:
        uuid.UUID(str(value))
        return True
    except (ValueError, AttributeError, TypeError):
        return False


# =============================================================================
# STRING UTILITIES
# =============================================================================

def slugify_words(text: str) -> str:
    """Lowercase and join whitespace-separated words with '-'."""
    return re.sub(r'\s+', '-', text.lower())


def slugify_strict(text: str) -> str:
    """Lowercase, collapse non-alphanumeric runs into '-', trim edge dashes."""
    slug = re.sub(r'[^a-z0-9]+', '-', text.lower())
    return re.sub(r'^-|-$', '', slug)


# =============================================================================
# DATE/TIME UTILITIES
# =============================================================================

EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


def utc_now() -> datetime:
    """Get current UTC datetime"""
    return timezone.now()


def start_of_day(dt: datetime = None) -> datetime:
    """Get start of day for given datetime"""
    dt = dt or utc_now()
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(dt: datetime = None) -> datetime:
    """Get end of day for given datetime"""
    dt = dt or utc_now()
    return dt.replace(hour=23, minute=59, second=59, microsecond=999999)


def start_of_week(dt: datetime = None) -> datetime:
    """Get start of week (Sunday) for given datetime"""
    dt = dt or utc_now()
    days_since_sunday = (dt.weekday() + 1) % 7
    return start_of_day(dt - timedelta(days=days_since_sunday))


def start_of_month(dt: datetime = None) -> datetime:
    """Get start of month for given datetime"""
    dt = dt or utc_now()
    return start_of_day(dt.replace(day=1))


def timeframe_start(timeframe: Optional[str], now: datetime = None) -> datetime:
    """
    Lower bound of a reporting window.

    daily -> today 00:00, weekly -> last Sunday 00:00,
    monthly -> the 1st 00:00, anything else -> the epoch.
    """
    now = now or utc_now()
    if timeframe == 'daily':
        return start_of_day(now)
    if timeframe == 'weekly':
        return start_of_week(now)
    if timeframe == 'monthly':
        return start_of_month(now)
    return EPOCH


def parse_datetime_value(value: Any) -> Optional[datetime]:
    """Parse an ISO string (or pass through a datetime) into an aware datetime."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = date_parser.isoparse(str(value))
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed
