"""Display helpers for reports. Output strings follow the hu-HU conventions the
admin dashboard has always shown, so callers compare them verbatim."""

import datetime
from typing import Union

from .periods import ReportPeriod, as_utc, parse_period

NO_BREAK_SPACE = "\u00a0"
MIN_GROUPED_DIGITS = 5

HUNGARIAN_MONTHS = (
    "január", "február", "március", "április", "május", "június",
    "július", "augusztus", "szeptember", "október", "november", "december",
)

PERIOD_LABELS = {
    ReportPeriod.DAILY: "Napi",
    ReportPeriod.WEEKLY: "Heti",
    ReportPeriod.MONTHLY: "Havi",
    ReportPeriod.YEARLY: "Éves",
}


def format_number(value: float) -> str:
    """12345.5 -> "12 345,5" (no-break space grouping, decimal comma, max 3 decimals).

    Four digit numbers stay ungrouped ("1234"), hu-HU only groups from five digits.
    """
    whole, _, fraction = f"{abs(value):.3f}".partition(".")
    fraction = fraction.rstrip("0")
    text = whole
    if len(whole) >= MIN_GROUPED_DIGITS:
        text = f"{int(whole):,}".replace(",", NO_BREAK_SPACE)
    if fraction:
        text = f"{text},{fraction}"
    if value < 0 and text != "0":
        text = "-" + text
    return text


def format_currency(value: float) -> str:
    return format_number(value) + " Ft"


def format_percent(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value}%"


def format_date(value: Union[datetime.date, datetime.datetime]) -> str:
    """Long Hungarian date, e.g. "2025. június 10."."""
    day = as_utc(value).date() if isinstance(value, datetime.datetime) else value
    return f"{day.year}. {HUNGARIAN_MONTHS[day.month - 1]} {day.day}."


def get_period_label(period: Union[str, ReportPeriod]) -> str:
    return PERIOD_LABELS[parse_period(period)]
