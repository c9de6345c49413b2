"""Date parsing and arithmetic helpers shared by the analytics services."""

import logging
import math
from datetime import UTC, date, datetime, time, timedelta

from dateutil import parser as dateutil_parser


logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_aware(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes; aware datetimes are returned unchanged."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def parse_datetime(value: object) -> datetime | None:
    """Parse a date-like value into an aware datetime.

    Accepts datetimes, dates and ISO-8601 strings (falling back to dateutil's
    free-form parser). Empty or unparsable values return None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=UTC)
    if not isinstance(value, str):
        return None

    try:
        return ensure_aware(dateutil_parser.isoparse(value))
    except (ValueError, OverflowError):
        pass
    try:
        return ensure_aware(dateutil_parser.parse(value))
    except (ValueError, OverflowError):
        logger.debug("Unparsable date value: %r", value)
        return None


def start_of_day(dt: datetime) -> datetime:
    """Return midnight at the start of dt's calendar day."""
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(dt: datetime) -> datetime:
    """Return the last representable instant of dt's calendar day."""
    return dt.replace(hour=23, minute=59, second=59, microsecond=999_999)


def ceil_days(start: datetime, end: datetime) -> int:
    """Whole days between start and end, partial days rounded up."""
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


def utc_date_key(dt: datetime) -> str:
    """Return the UTC calendar date of dt as YYYY-MM-DD."""
    return dt.astimezone(UTC).date().isoformat()


def add_months(dt: datetime, months: int) -> datetime:
    """Shift dt to the first day of the month `months` away."""
    month_index = dt.year * 12 + (dt.month - 1) + months
    return dt.replace(year=month_index // 12, month=month_index % 12 + 1, day=1)


def last_day_of_month(dt: datetime) -> datetime:
    """Return the last calendar day of dt's month (time preserved)."""
    return add_months(dt, 1) - timedelta(days=1)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return math.floor(value + 0.5)
