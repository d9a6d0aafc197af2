# File: utils/dt_utils.py
"""Date and time utilities for the Fuel Points engine.

Pure Python date/time functions with no collaborator access. Every function
takes the reference timezone explicitly; nothing here reads the host timezone,
so results are identical on any machine.

Functions:
    - dt_now_utc: Current instant in UTC
    - require_aware: Reject naive datetimes
    - as_utc / as_local: Timezone conversion
    - local_date: Calendar date of an instant in the reference timezone
    - start_of_local_day: DST-safe local midnight for a calendar date
    - next_local_midnight: Start of the next calendar day after an instant
    - dt_parse: Normalize ISO strings, dates and datetimes
    - days_until: Whole days (rounded up) until a target instant
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
import logging
import math
from typing import TYPE_CHECKING

from dateutil.relativedelta import relativedelta

from ..exceptions import InvalidInputError

if TYPE_CHECKING:
    from datetime import tzinfo

_LOGGER = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


# ==============================================================================
# Current Date/Time
# ==============================================================================


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


# ==============================================================================
# Conversion
# ==============================================================================


def require_aware(dt_obj: datetime, name: str = "datetime") -> datetime:
    """Return dt_obj unchanged, raising if it carries no timezone.

    Naive datetimes are ambiguous across hosts, so they are a contract error
    rather than something to guess at.

    Raises:
        InvalidInputError: dt_obj is naive
    """
    if dt_obj.tzinfo is None or dt_obj.utcoffset() is None:
        raise InvalidInputError(f"{name} must be timezone-aware, got {dt_obj!r}")
    return dt_obj


def as_utc(dt_obj: datetime) -> datetime:
    """Convert an aware datetime to UTC."""
    return require_aware(dt_obj).astimezone(UTC)


def as_local(dt_obj: datetime, tz: tzinfo) -> datetime:
    """Convert an aware datetime to the reference timezone."""
    return require_aware(dt_obj).astimezone(tz)


def local_date(dt_obj: datetime, tz: tzinfo) -> date:
    """Return the calendar date of an instant in the reference timezone.

    Example:
        2025-03-10T03:30:00+00:00 in America/New_York → date(2025, 3, 9)
    """
    return as_local(dt_obj, tz).date()


# ==============================================================================
# Day Boundaries
# ==============================================================================


def start_of_local_day(day: date | datetime, tz: tzinfo) -> datetime:
    """Get 00:00 local time for a calendar date, as an aware datetime.

    DST-safe: the wall-clock midnight is built first and the offset is
    resolved by the timezone for that specific date, so the result carries
    -05:00 in January and -04:00 in July for America/New_York.

    Args:
        day: Calendar date, or an aware datetime whose local date is used
        tz: Reference timezone

    Returns:
        Aware datetime at local midnight
    """
    if isinstance(day, datetime):
        day = local_date(day, tz)
    local_midnight = datetime.combine(day, time.min, tzinfo=tz)
    # Round-trip through UTC so a nonexistent wall time normalizes to a real instant
    return local_midnight.astimezone(UTC).astimezone(tz)


def next_local_midnight(now: datetime, tz: tzinfo) -> datetime:
    """Return the start of the calendar day after `now` in the reference timezone.

    Always strictly after `now`. Uses calendar arithmetic rather than adding
    24 hours, which would land at 23:00 or 01:00 across a DST change.

    Example:
        2025-03-08T23:59:30-05:00 → 2025-03-09T00:00:00-05:00
        2025-03-09T23:59:30-04:00 → 2025-03-10T00:00:00-04:00
    """
    tomorrow = local_date(now, tz) + relativedelta(days=1)
    return start_of_local_day(tomorrow, tz)


# ==============================================================================
# Parsing
# ==============================================================================


def dt_parse(
    dt_input: str | date | datetime | None,
    tz: tzinfo,
) -> datetime | None:
    """Normalize an ISO string, date or datetime to an aware datetime.

    Naive values are interpreted in the reference timezone; plain dates map
    to local midnight.

    Args:
        dt_input: Value to normalize, or None
        tz: Reference timezone for naive values

    Returns:
        Aware datetime, or None if the input is empty or unparseable

    Example:
        >>> dt_parse("2025-04-15", ZoneInfo("America/New_York"))
        datetime.datetime(2025, 4, 15, 0, 0, tzinfo=zoneinfo.ZoneInfo(key='America/New_York'))
    """
    if not dt_input:
        return None

    if isinstance(dt_input, datetime):
        result = dt_input
    elif isinstance(dt_input, date):
        return start_of_local_day(dt_input, tz)
    elif isinstance(dt_input, str):
        try:
            result = datetime.fromisoformat(dt_input)
        except ValueError:
            _LOGGER.warning("Unparseable datetime string: %s", dt_input)
            return None
    else:
        return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=tz)
    return result


# ==============================================================================
# Durations
# ==============================================================================


def days_until(target: datetime, now: datetime) -> int:
    """Whole days until target, rounded up; 0 once target has passed.

    Matches the "N Days Until Available" display: 29 days and one hour
    remaining reads as 30 days.

    Examples:
        days_until(now + timedelta(days=6, hours=1), now) → 7
        days_until(now + timedelta(days=7), now) → 7
        days_until(now - timedelta(seconds=1), now) → 0
    """
    remaining = as_utc(target) - as_utc(now)
    if remaining <= timedelta():
        return 0
    return math.ceil(remaining.total_seconds() / SECONDS_PER_DAY)
