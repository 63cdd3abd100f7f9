"""
Report date range resolution

Turns a named report range ("this_month", "last_quarter", ...) or a custom
start/end pair into concrete datetimes. Day, week and month boundaries are
resolved in the store's reporting timezone; the resulting bounds are naive UTC,
matching how order timestamps are stored. Both bounds are inclusive. A missing
bound means the range is open on that side.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

import pytz

from taxonomy_reports.config import get_settings

DateLike = Union[date, datetime]

RANGE_NAMES = (
    "today",
    "yesterday",
    "this_week",
    "last_week",
    "last_30_days",
    "this_month",
    "last_month",
    "this_quarter",
    "last_quarter",
    "this_year",
    "last_year",
    "all_time",
    "other",
)


class InvalidDateRange(ValueError):
    """Raised for unknown range names or a start that falls after the end"""


@dataclass(frozen=True)
class DateRange:
    """Resolved report window in naive UTC. None on either side means unbounded."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    range_name: str = "other"

    @property
    def is_all_time(self) -> bool:
        return self.start is None and self.end is None

    def to_dict(self) -> dict:
        return {
            "range": self.range_name,
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
        }


def _start_of_day(d: date) -> datetime:
    return datetime.combine(d, time.min)


def _end_of_day(d: date) -> datetime:
    return datetime.combine(d, time.max)


def _month_start(year: int, month: int) -> date:
    # Normalizes month overflow/underflow (e.g. month 0 -> December of the previous year)
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return date(year, month, 1)


def _month_span(year: int, month: int, months: int = 1) -> tuple[datetime, datetime]:
    first = _month_start(year, month)
    after = _month_start(year, month + months)
    return _start_of_day(first), _end_of_day(after - timedelta(days=1))


def _to_local(value: datetime, tz) -> datetime:
    """Naive wall-clock time in tz. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = pytz.UTC.localize(value)
    return value.astimezone(tz).replace(tzinfo=None)


def _to_utc(value: Optional[datetime], tz) -> Optional[datetime]:
    """Naive UTC for a datetime; naive values are wall-clock time in tz"""
    if value is None:
        return None
    if value.tzinfo is None:
        value = tz.localize(value)
    return value.astimezone(pytz.UTC).replace(tzinfo=None)


def _coerce_bound(value: Optional[DateLike], is_end: bool, tz) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return _to_utc(value, tz)
    # A bare end date covers that whole day
    return _to_utc(_end_of_day(value) if is_end else _start_of_day(value), tz)


def parse_dates_for_range(
    range_name: str,
    now: Optional[datetime] = None,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
    tz_name: Optional[str] = None,
) -> DateRange:
    """
    Resolve a report range into a DateRange.

    Args:
        range_name: One of RANGE_NAMES. "other" uses start/end as given.
        now: Reference moment (defaults to the current time). A naive value
            is taken as UTC.
        start: Custom range start, only used with "other". Naive datetimes
            are wall-clock time in the reporting timezone.
        end: Custom range end, only used with "other". A date (not datetime)
            is extended to the end of that day.
        tz_name: Reporting timezone override.

    Raises:
        InvalidDateRange: Unknown range name, or start after end.
    """
    range_name = (range_name or "").strip().lower()
    if range_name not in RANGE_NAMES:
        raise InvalidDateRange(f"Unknown report range: {range_name!r}")

    tz = pytz.timezone(tz_name or get_settings().report_timezone)
    current = _to_local(now or datetime.now(pytz.UTC), tz)
    today = current.date()

    if range_name == "today":
        range_start, range_end = _start_of_day(today), _end_of_day(today)
    elif range_name == "yesterday":
        yesterday = today - timedelta(days=1)
        range_start, range_end = _start_of_day(yesterday), _end_of_day(yesterday)
    elif range_name in ("this_week", "last_week"):
        monday = today - timedelta(days=today.weekday())
        if range_name == "last_week":
            monday -= timedelta(days=7)
        range_start, range_end = _start_of_day(monday), _end_of_day(monday + timedelta(days=6))
    elif range_name == "last_30_days":
        range_start, range_end = _start_of_day(today - timedelta(days=30)), _end_of_day(today)
    elif range_name == "this_month":
        range_start, range_end = _month_span(today.year, today.month)
    elif range_name == "last_month":
        range_start, range_end = _month_span(today.year, today.month - 1)
    elif range_name in ("this_quarter", "last_quarter"):
        quarter_month = 3 * ((today.month - 1) // 3) + 1
        if range_name == "last_quarter":
            quarter_month -= 3
        range_start, range_end = _month_span(today.year, quarter_month, months=3)
    elif range_name == "this_year":
        range_start, range_end = _month_span(today.year, 1, months=12)
    elif range_name == "last_year":
        range_start, range_end = _month_span(today.year - 1, 1, months=12)
    elif range_name == "all_time":
        range_start, range_end = None, None
    else:
        range_start = _coerce_bound(start, is_end=False, tz=tz)
        range_end = _coerce_bound(end, is_end=True, tz=tz)

    if range_name != "other":
        # Named boundaries above are local wall-clock times
        range_start, range_end = _to_utc(range_start, tz), _to_utc(range_end, tz)

    if range_start is not None and range_end is not None and range_start > range_end:
        raise InvalidDateRange(
            f"Range start {range_start.isoformat()} is after end {range_end.isoformat()}"
        )

    return DateRange(start=range_start, end=range_end, range_name=range_name)
