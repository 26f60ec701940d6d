# Trackr_app/utils.py

from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

import pytz
from flask import current_app, has_app_context

CENTS = Decimal('0.01')


def get_app_timezone():
    """Configured APP_TIMEZONE as a pytz zone, or None for server local time"""
    if not has_app_context():
        return None
    tz_name = current_app.config.get('APP_TIMEZONE')
    if not tz_name:
        return None
    return pytz.timezone(tz_name)


def local_now() -> datetime:
    """Naive wall-clock time used for every stored timestamp"""
    tz = get_app_timezone()
    if tz is None:
        return datetime.now()
    return datetime.now(tz).replace(tzinfo=None)


def day_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime, datetime]:
    """Return (yesterday, today, tomorrow) as midnights around ``now``"""
    now = now or local_now()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return today - timedelta(days=1), today, today + timedelta(days=1)


def round2(value) -> float:
    """Round half-up to two decimals and return a float"""
    return float(Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP))


def format_decimal(value: Optional[Decimal]) -> Optional[str]:
    if value is None:
        return None
    return str(Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP))


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive wall time on the app clock; naive values pass through"""
    if value.tzinfo is None:
        return value
    tz = get_app_timezone()
    if tz is None:
        return value.astimezone().replace(tzinfo=None)
    return value.astimezone(tz).replace(tzinfo=None)


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO 8601 query value; aware values are converted to local naive time"""
    return to_local_naive(datetime.fromisoformat(value.strip().replace('Z', '+00:00')))
