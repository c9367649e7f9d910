"""
Calendar bucket generation for time-windowed reports.

Produces ordered, contiguous, non-overlapping buckets for a date range:
- weekly: 7 daily buckets (Monday..Sunday of the current week by default)
- monthly: daily buckets for the month containing the start date
- annually: monthly buckets for the year containing the start date
- default: one daily bucket per day of a custom range

All datetimes are naive and interpreted in the host's local calendar.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)

# Zero-argument callable returning "now"; tests inject a fixed instant
Clock = Callable[[], datetime]

ONE_DAY = timedelta(days=1)
END_OF_DAY = ONE_DAY - timedelta(milliseconds=1)

MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

# Used by the "alltime" dashboard filter when the seller has no products
ALLTIME_FALLBACK_START = datetime(2020, 1, 1)


class Granularity(str, Enum):
    """How a report range is split into buckets."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ANNUALLY = "annually"
    DEFAULT = "default"

    @classmethod
    def parse(cls, value: "str | Granularity | None") -> "Granularity":
        """Unknown selectors fall back to DEFAULT (daily buckets over a custom range)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            logger.debug("Unknown granularity %r, using default", value)
            return cls.DEFAULT


@dataclass(frozen=True)
class TimeBucket:
    """A time sub-range with inclusive bounds."""

    start: datetime
    end: datetime
    label: str
    key: str

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    return start_of_day(moment) + END_OF_DAY


def start_of_week(moment: datetime) -> datetime:
    """Monday 00:00 of the week containing moment."""
    return start_of_day(moment) - timedelta(days=moment.weekday())


def end_of_month(year: int, month: int) -> datetime:
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, last_day) + END_OF_DAY


def day_label(moment: datetime) -> str:
    """'Jan 5'"""
    return f"{MONTH_ABBR[moment.month - 1]} {moment.day}"


def month_label(moment: datetime) -> str:
    """'Jan 2024'"""
    return f"{MONTH_ABBR[moment.month - 1]} {moment.year}"


def _day_bucket(day_start: datetime, end: datetime) -> TimeBucket:
    return TimeBucket(
        start=day_start,
        end=min(day_start + END_OF_DAY, end),
        label=day_label(day_start),
        key=day_start.strftime("%Y-%m-%d"),
    )


def _now(clock: Clock | None) -> datetime:
    return (clock or datetime.now)()


def resolve_date_range(
    granularity: "str | Granularity",
    start: datetime | None = None,
    end: datetime | None = None,
    clock: Clock | None = None,
) -> tuple[datetime, datetime]:
    """
    Fill in missing range bounds for a granularity.

    - weekly: Monday 00:00 of the current week to the end of the 7th day
    - annually: the current calendar year
    - monthly / default: the current calendar month

    Explicit bounds always win; only missing ones are computed from the clock.
    """
    granularity = Granularity.parse(granularity)
    now = _now(clock)

    if granularity is Granularity.WEEKLY:
        start = start if start is not None else start_of_week(now)
        # End of Sunday, not Sunday 00:00, so the 7th bucket spans its whole day
        end = end if end is not None else end_of_day(start + 6 * ONE_DAY)
    elif granularity is Granularity.ANNUALLY:
        start = start if start is not None else datetime(now.year, 1, 1)
        end = end if end is not None else end_of_month(now.year, 12)
    else:
        start = start if start is not None else datetime(now.year, now.month, 1)
        end = end if end is not None else end_of_month(now.year, now.month)

    return start, end


def resolve_dashboard_range(
    date_filter: str | None,
    start: datetime | None = None,
    end: datetime | None = None,
    clock: Clock | None = None,
    earliest: datetime | None = None,
) -> tuple[datetime, datetime, str]:
    """
    Resolve the seller dashboard's range from a preset filter or custom bounds.

    Presets: last30days, last90days, alltime (from `earliest`, usually the
    seller's first product). An unrecognised preset means the current month.
    Returns (start, end, filter_label).
    """
    now = _now(clock)

    if date_filter:
        if date_filter == "last30days":
            return now - timedelta(days=30), now, date_filter
        if date_filter == "last90days":
            return now - timedelta(days=90), now, date_filter
        if date_filter == "alltime":
            return earliest or ALLTIME_FALLBACK_START, now, date_filter
        return datetime(now.year, now.month, 1), end_of_month(now.year, now.month), date_filter

    start = start if start is not None else datetime(now.year, now.month, 1)
    end = end if end is not None else end_of_month(now.year, now.month)
    return start, end, "custom"


def _weekly(start: datetime, end: datetime) -> list[TimeBucket]:
    buckets = []
    first = start_of_day(start)
    for offset in range(7):
        day_start = first + offset * ONE_DAY
        if day_start > end:
            break
        buckets.append(_day_bucket(day_start, end))
    return buckets


def _monthly(start: datetime, end: datetime) -> list[TimeBucket]:
    buckets = []
    days_in_month = calendar.monthrange(start.year, start.month)[1]
    for day in range(1, days_in_month + 1):
        day_start = datetime(start.year, start.month, day)
        # Only days whose start lies inside the range
        if start <= day_start <= end:
            buckets.append(_day_bucket(day_start, end))
    return buckets


def _annually(start: datetime, end: datetime) -> list[TimeBucket]:
    buckets = []
    for month in range(1, 13):
        month_start = datetime(start.year, month, 1)
        month_end = end_of_month(start.year, month)
        if month_end >= start and month_start <= end:
            buckets.append(
                TimeBucket(
                    start=max(month_start, start),
                    end=min(month_end, end),
                    label=month_label(month_start),
                    key=month_start.strftime("%Y-%m"),
                )
            )
    return buckets


def _daily(start: datetime, end: datetime) -> list[TimeBucket]:
    buckets = []
    current = start
    while current <= end:
        buckets.append(_day_bucket(start_of_day(current), end))
        current += ONE_DAY
    return buckets


_GENERATORS = {
    Granularity.WEEKLY: _weekly,
    Granularity.MONTHLY: _monthly,
    Granularity.ANNUALLY: _annually,
    Granularity.DEFAULT: _daily,
}


def generate_periods(
    start: datetime | None,
    end: datetime | None,
    granularity: "str | Granularity" = Granularity.DEFAULT,
    clock: Clock | None = None,
) -> list[TimeBucket]:
    """
    Split [start, end] into buckets for the given granularity.

    Missing bounds are resolved with resolve_date_range(). A range whose
    start is after its end yields no buckets rather than an error.
    """
    granularity = Granularity.parse(granularity)
    start, end = resolve_date_range(granularity, start, end, clock)

    if start > end:
        return []

    return _GENERATORS[granularity](start, end)
