"""Report windows and the small numeric conventions shared by every report section.

Windows are built on UTC calendar days. A window always ends at 23:59:59.999
of the reference day. A daily window starts at 00:00 of that day. The other
windows start at 00:00 one period before the reference day, so a weekly report
ending on Tuesday 2025-06-10 runs from Tuesday 2025-06-03 00:00.
"""

import datetime
import math
import numbers
from enum import Enum
from typing import Callable, NamedTuple, Optional, Sequence, Union

from dateutil.relativedelta import relativedelta

ONE_MILLISECOND = datetime.timedelta(milliseconds=1)

Clock = Callable[[], datetime.datetime]
ReferenceDate = Union[datetime.date, datetime.datetime]


class ReportPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


PERIOD_LENGTHS = {
    ReportPeriod.DAILY: relativedelta(days=1),
    ReportPeriod.WEEKLY: relativedelta(days=7),
    ReportPeriod.MONTHLY: relativedelta(months=1),
    ReportPeriod.YEARLY: relativedelta(years=1),
}


class DateRange(NamedTuple):
    start: datetime.datetime
    end: datetime.datetime

    @property
    def duration(self) -> datetime.timedelta:
        return self.end - self.start


def system_clock() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def parse_period(value: Union[str, ReportPeriod]) -> ReportPeriod:
    if isinstance(value, ReportPeriod):
        return value
    try:
        return ReportPeriod(value)
    except ValueError:
        raise ValueError(
            f"Invalid period {value!r}. Use: daily, weekly, monthly, yearly"
        ) from None


def as_utc(value: ReferenceDate) -> datetime.datetime:
    """Naive datetimes and plain dates are taken to be UTC already."""
    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=datetime.timezone.utc)
        return value.astimezone(datetime.timezone.utc)
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time.min, tzinfo=datetime.timezone.utc)
    raise TypeError(
        f"Reference date must be a date or datetime, got {type(value).__name__}"
    )


def resolve_range(
    period: Union[str, ReportPeriod],
    reference_date: Optional[ReferenceDate] = None,
    clock: Clock = system_clock,
) -> DateRange:
    """
    Resolves the current report window.

    Args:
        period: daily, weekly, monthly or yearly.
        reference_date: The day the window ends on. Defaults to clock().
        clock: Source of "now" when no reference date is given.

    Returns:
        DateRange: start at 00:00:00.000 and end at 23:59:59.999, both UTC.
        Apart from daily, the start day is one period before the reference day.
    """
    period = parse_period(period)
    anchor = as_utc(reference_date if reference_date is not None else clock())
    day = anchor.date()
    if period != ReportPeriod.DAILY:
        day = day - PERIOD_LENGTHS[period]
    start = datetime.datetime.combine(day, datetime.time.min, tzinfo=datetime.timezone.utc)
    next_midnight = datetime.datetime.combine(
        anchor.date() + datetime.timedelta(days=1),
        datetime.time.min,
        tzinfo=datetime.timezone.utc,
    )
    return DateRange(start=start, end=next_midnight - ONE_MILLISECOND)


def resolve_previous_range(
    period: Union[str, ReportPeriod], current_range: DateRange
) -> DateRange:
    """The comparison window: same duration, ending 1ms before the current one starts."""
    parse_period(period)
    end = current_range.start - ONE_MILLISECOND
    return DateRange(start=end - current_range.duration, end=end)


def _require_number(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise TypeError(f"{name} must be a number, got {type(value).__name__}")


def half_up(value: float) -> int:
    """Rounds .5 towards positive infinity, the way Math.round does in browsers."""
    return int(math.floor(value + 0.5))


def calculate_change(current: float, previous: float) -> int:
    """Percentage change against the previous period.

    A previous value of zero yields 100 when anything happened now, else 0.
    """
    _require_number("current", current)
    _require_number("previous", previous)
    if previous == 0:
        return 100 if current > 0 else 0
    return half_up((current - previous) / previous * 100)


def median_value(values: Sequence[float]) -> float:
    """Element at floor(n/2) of the sorted values, i.e. the upper middle for even n."""
    if not values:
        return 0
    ordered = sorted(values)
    return ordered[len(ordered) // 2]
