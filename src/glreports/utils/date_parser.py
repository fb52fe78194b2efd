"""Date parsing utilities."""

from datetime import date, timedelta

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIODS = (
    "this-month",
    "last-month",
    "this-quarter",
    "last-quarter",
    "this-year",
    "last-year",
)


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and a few
    relative ones: "today", "yesterday", "start of month", "end of month",
    "start of year" and "end of year".

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "start of month": today.replace(day=1),
        "end of month": today + relativedelta(day=31),
        "start of year": today.replace(month=1, day=1),
        "end of year": today.replace(month=12, day=31),
    }
    if text in relative_dates:
        return relative_dates[text]

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from e


def _quarter_start(day: date) -> date:
    return date(day.year, 3 * ((day.month - 1) // 3) + 1, 1)


def get_date_range(period: str, today: date | None = None) -> tuple[date, date]:
    """Get the full start and end dates of a named reporting period.

    Args:
        period: One of this-month, last-month, this-quarter, last-quarter,
            this-year, last-year
        today: Reference date (defaults to today)

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "this-month":
        start = today.replace(day=1)
        return start, start + relativedelta(day=31)
    if period == "last-month":
        start = today.replace(day=1) - relativedelta(months=1)
        return start, start + relativedelta(day=31)
    if period == "this-quarter":
        start = _quarter_start(today)
        return start, start + relativedelta(months=3) - timedelta(days=1)
    if period == "last-quarter":
        start = _quarter_start(today) - relativedelta(months=3)
        return start, start + relativedelta(months=3) - timedelta(days=1)
    if period == "this-year":
        return today.replace(month=1, day=1), today.replace(month=12, day=31)
    if period == "last-year":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
