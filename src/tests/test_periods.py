import datetime

import pytest
from dateutil.relativedelta import relativedelta

from webshop.features.reports.periods import (
    ONE_MILLISECOND, PERIOD_LENGTHS, ReportPeriod, as_utc, calculate_change,
    half_up, median_value, parse_period, resolve_previous_range, resolve_range,
)

UTC = datetime.timezone.utc


def utc(*args) -> datetime.datetime:
    return datetime.datetime(*args, tzinfo=UTC)


def test_daily_range_covers_reference_day():
    window = resolve_range("daily", datetime.date(2025, 6, 10))
    assert window.start == utc(2025, 6, 10)
    assert window.end == utc(2025, 6, 10, 23, 59, 59, 999000)


def test_weekly_range_ends_on_reference_day():
    window = resolve_range(ReportPeriod.WEEKLY, utc(2025, 6, 11, 15, 30))
    assert window.start == utc(2025, 6, 4)
    assert window.end == utc(2025, 6, 11, 23, 59, 59, 999000)


def test_weekly_range_starts_one_week_before_reference_day():
    window = resolve_range("weekly", datetime.date(2025, 6, 10))
    assert window.start == utc(2025, 6, 3)
    assert window.end == utc(2025, 6, 10, 23, 59, 59, 999000)


def test_monthly_range_follows_calendar_months():
    window = resolve_range("monthly", datetime.date(2025, 4, 15))
    assert window.start == utc(2025, 3, 15)
    assert window.end + ONE_MILLISECOND == utc(2025, 4, 16)


def test_monthly_range_clamps_short_months():
    window = resolve_range("monthly", datetime.date(2025, 3, 31))
    assert window.start == utc(2025, 2, 28)
    assert window.end + ONE_MILLISECOND == utc(2025, 4, 1)


def test_yearly_range_over_leap_day():
    window = resolve_range("yearly", datetime.date(2024, 2, 29))
    assert window.start == utc(2023, 2, 28)
    assert window.end + ONE_MILLISECOND == utc(2024, 3, 1)


@pytest.mark.parametrize("period", list(ReportPeriod))
@pytest.mark.parametrize(
    "reference",
    [datetime.date(2025, 1, 1), datetime.date(2024, 2, 29), datetime.date(2025, 12, 31), utc(2025, 7, 4, 23, 59)],
)
def test_range_starts_one_period_before_reference_day(period, reference):
    window = resolve_range(period, reference)
    reference_day = as_utc(reference).date()
    if period == ReportPeriod.DAILY:
        expected_start = reference_day
    else:
        expected_start = reference_day - PERIOD_LENGTHS[period]

    assert window.start == utc(expected_start.year, expected_start.month, expected_start.day)
    assert window.start.time() == datetime.time.min
    assert window.end.date() == reference_day
    assert window.end.time() == datetime.time(23, 59, 59, 999000)


@pytest.mark.parametrize("period", list(ReportPeriod))
def test_previous_range_is_adjacent_with_same_duration(period):
    current = resolve_range(period, datetime.date(2025, 3, 15))
    previous = resolve_previous_range(period, current)
    assert previous.end == current.start - ONE_MILLISECOND
    assert previous.duration == current.duration
    assert previous.end < current.start


def test_range_uses_injected_clock():
    window = resolve_range("daily", clock=lambda: utc(2030, 1, 2, 8, 0))
    assert window.start == utc(2030, 1, 2)


def test_range_converts_aware_reference_to_utc():
    budapest_morning = datetime.datetime(2025, 6, 10, 1, 30, tzinfo=datetime.timezone(datetime.timedelta(hours=2)))
    window = resolve_range("daily", budapest_morning)
    assert window.start == utc(2025, 6, 9)


def test_naive_reference_is_taken_as_utc():
    assert as_utc(datetime.datetime(2025, 6, 10, 12)) == utc(2025, 6, 10, 12)


def test_invalid_period_is_rejected():
    with pytest.raises(ValueError, match="Use: daily, weekly, monthly, yearly"):
        parse_period("hourly")


def test_invalid_reference_date_is_rejected():
    with pytest.raises(TypeError):
        resolve_range("daily", "2025-06-10")


@pytest.mark.parametrize(
    "current, previous, expected",
    [
        (150, 100, 50),
        (50, 100, -50),
        (10, 0, 100),
        (0, 0, 0),
        (1, 3, -67),
        (100.5, 100, 1),
    ],
)
def test_calculate_change(current, previous, expected):
    assert calculate_change(current, previous) == expected


@pytest.mark.parametrize("bad", ["100", None, True])
def test_calculate_change_rejects_non_numbers(bad):
    with pytest.raises(TypeError):
        calculate_change(bad, 100)


def test_half_up_rounds_like_the_dashboard():
    assert half_up(2.5) == 3
    assert half_up(-2.5) == -2
    assert half_up(2.4) == 2


def test_median_takes_upper_middle_for_even_lengths():
    assert median_value([4000, 1000, 3000, 2000]) == 3000
    assert median_value([5, 1, 3]) == 3
    assert median_value([]) == 0


def test_period_lengths_are_calendar_units():
    assert PERIOD_LENGTHS[ReportPeriod.MONTHLY] == relativedelta(months=1)
