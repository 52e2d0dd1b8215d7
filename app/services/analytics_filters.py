"""
Analytics Filters

Turns the dashboard's date-range token, optional explicit dates and course
list into the concrete window every analytics query is scoped by.
"""

import calendar
import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class DateRange(str, enum.Enum):
    """Date-range tokens accepted by the analytics endpoints."""
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    LAST_6_MONTHS = "6m"
    LAST_YEAR = "1y"
    CUSTOM = "custom"


DEFAULT_DATE_RANGE = DateRange.LAST_30_DAYS


@dataclass(frozen=True)
class AnalyticsFilter:
    """Resolved query constraints shared by every fetch of one request."""
    start: datetime
    end: datetime
    course_ids: Tuple[str, ...] = ()

    @property
    def has_course_filter(self) -> bool:
        return len(self.course_ids) > 0


def _shift_months(moment: datetime, months: int) -> datetime:
    """Move ``moment`` back by whole calendar months, clamping the day."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def window_start(token: Optional[str], end: datetime) -> datetime:
    """
    Compute the start of the window ending at ``end`` for a range token.

    Unknown tokens, ``custom`` without explicit dates, and missing tokens all
    fall back to the 30-day window without raising.
    """
    try:
        date_range = DateRange(token) if token else DEFAULT_DATE_RANGE
    except ValueError:
        logger.debug(f"Unknown date range token {token!r}, using {DEFAULT_DATE_RANGE.value}")
        date_range = DEFAULT_DATE_RANGE

    if date_range == DateRange.LAST_7_DAYS:
        return end - timedelta(days=7)
    if date_range == DateRange.LAST_90_DAYS:
        return end - timedelta(days=90)
    if date_range == DateRange.LAST_6_MONTHS:
        return _shift_months(end, 6)
    if date_range == DateRange.LAST_YEAR:
        return _shift_months(end, 12)
    return end - timedelta(days=30)


def parse_course_ids(courses: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    """Normalize a comma-separated string or list of ids into a tuple."""
    if not courses:
        return ()
    if isinstance(courses, str):
        courses = courses.split(",")
    return tuple(c.strip() for c in courses if c and c.strip())


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def parse_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp (date-only allowed) into an aware datetime.

    Unparseable input is ignored, as if the parameter had not been sent.
    """
    if value is None or isinstance(value, datetime):
        return _as_utc(value) if value else None
    value = value.strip()
    if not value:
        return None
    try:
        return _as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        logger.debug(f"Ignoring unparseable date {value!r}")
        return None


def resolve_filters(
    date_range: Optional[str] = None,
    start_date: Union[str, datetime, None] = None,
    end_date: Union[str, datetime, None] = None,
    courses: Union[str, Iterable[str], None] = None,
    now: Optional[datetime] = None,
) -> AnalyticsFilter:
    """
    Resolve request parameters into an ``AnalyticsFilter``.

    Explicit dates take precedence over the range token. Naive datetimes are
    treated as UTC.

    Args:
        date_range: One of the ``DateRange`` tokens (anything else means 30d).
        start_date: Explicit window start, ISO string or datetime.
        end_date: Explicit window end, defaults to ``now``.
        courses: Course ids, comma-separated or as a list.
        now: Reference time, defaults to the current UTC time.

    Returns:
        AnalyticsFilter: Immutable window and course scope.
    """
    now = _as_utc(now or datetime.now(timezone.utc))
    start = parse_datetime(start_date)
    end = parse_datetime(end_date) or now

    return AnalyticsFilter(
        start=start or window_start(date_range, end),
        end=end,
        course_ids=parse_course_ids(courses),
    )
