"""Time-window calculation for report periods."""

import logging
from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta

from glreports.domain import errors
from glreports.domain.entities import ComparisonMode, LedgerSource, TimeWindow

logger = logging.getLogger(__name__)

CURRENT = "current"
ACCUMULATED = "accumulated"
PRIOR_YEAR = "prior_year"
BUDGET = "budget"
BROUGHT_FORWARD = "brought_forward"
TOTAL = "total"

MIN_FISCAL_YEAR = 1900
MAX_FISCAL_YEAR = 9998

COMPARISON_WINDOWS = {
    ComparisonMode.ACCUMULATED: ACCUMULATED,
    ComparisonMode.PRIOR_YEAR: PRIOR_YEAR,
    ComparisonMode.BUDGET: BUDGET,
}


def validate_range(start: date, end: date) -> None:
    """Raise InvalidRangeError if end is before start."""
    if start is None or end is None:
        raise errors.InvalidRangeError("Both a start and an end date are required")
    if end < start:
        raise errors.InvalidRangeError(errors.reversed_range(start, end))


def end_of_month(day: date) -> date:
    """Return the last day of the month containing day."""
    return day + relativedelta(day=31)


def is_end_of_month(day: date) -> bool:
    return day == end_of_month(day)


def fiscal_year_begin(for_date: date, start_month: int = 1) -> date:
    """Return the first day of the fiscal year containing for_date."""
    if not 1 <= start_month <= 12:
        raise errors.InvalidRangeError(f"Invalid fiscal year start month: {start_month}")
    begin = date(for_date.year, start_month, 1)
    if begin > for_date:
        begin -= relativedelta(years=1)
    return begin


def shift_prior_year(start: date, end: date) -> tuple[date, date]:
    """Shift a date range back twelve months.

    When end is the last day of its month the shifted end is snapped to the
    last day of the shifted month, so February month-ends line up across
    leap years.
    """
    validate_range(start, end)
    shifted_start = start - relativedelta(months=12)
    shifted_end = end - relativedelta(months=12)
    if is_end_of_month(end):
        shifted_end = end_of_month(shifted_end)
    return shifted_start, shifted_end


def rolling_month_boundaries(end_year: int, end_month: int) -> list[date]:
    """Return 13 month-start dates spanning the 12 months ending at end_year/end_month.

    Boundary i is the first day of month (end_month - 11 + i); the last
    boundary is the first day after the fiscal year end.
    """
    if not (MIN_FISCAL_YEAR <= end_year <= MAX_FISCAL_YEAR) or not 1 <= end_month <= 12:
        raise errors.InvalidRangeError(errors.fiscal_year_out_of_bounds(end_year, end_month))
    anchor = date(end_year, end_month, 1)
    return [anchor + relativedelta(months=i - 11) for i in range(13)]


def rolling_month_windows(end_year: int, end_month: int) -> tuple[TimeWindow, ...]:
    """Build 12 half-open monthly windows plus a 'total' window covering all of them."""
    boundaries = rolling_month_boundaries(end_year, end_month)
    windows = [
        TimeWindow(
            name=f"m{i:02d}",
            start=boundaries[i - 1],
            end=boundaries[i],
            end_inclusive=False,
            label=boundaries[i - 1].strftime("%b %Y"),
        )
        for i in range(1, 13)
    ]
    windows.append(
        TimeWindow(
            name=TOTAL,
            start=boundaries[0],
            end=boundaries[12],
            end_inclusive=False,
            label="Total",
        )
    )
    return tuple(windows)


def build_windows(
    mode: ComparisonMode,
    start: Optional[date] = None,
    end: Optional[date] = None,
    *,
    year_begin: Optional[date] = None,
    fiscal_start_month: int = 1,
    fiscal_year_end: Optional[tuple[int, int]] = None,
) -> tuple[TimeWindow, ...]:
    """Convert a report request into its ordered set of named windows.

    Args:
        mode: Comparison mode of the report
        start: Period start date (inclusive)
        end: Period end date (inclusive)
        year_begin: Fiscal year begin used by the accumulated window; derived
            from end and fiscal_start_month when omitted
        fiscal_start_month: First month of the fiscal year
        fiscal_year_end: (year, month) of the fiscal year end, required for
            rolling 12-month reports

    Raises:
        InvalidRangeError: If the range is reversed or the fiscal year is
            out of bounds
    """
    if mode == ComparisonMode.ROLLING_12_MONTH:
        if fiscal_year_end is None:
            if end is None:
                raise errors.InvalidRangeError("A fiscal year end is required for rolling reports")
            fiscal_year_end = (end.year, end.month)
        windows = rolling_month_windows(*fiscal_year_end)
        logger.debug("Built %d rolling windows ending %s", len(windows), fiscal_year_end)
        return windows

    validate_range(start, end)
    current = TimeWindow(name=CURRENT, start=start, end=end, label="Period")

    if mode == ComparisonMode.NONE:
        windows: tuple[TimeWindow, ...] = (current,)
    elif mode == ComparisonMode.ACCUMULATED:
        begin = year_begin or fiscal_year_begin(end, fiscal_start_month)
        if begin > end:
            raise errors.InvalidRangeError(errors.reversed_range(begin, end))
        windows = (
            current,
            TimeWindow(name=ACCUMULATED, start=begin, end=end, label="Accumulated"),
        )
    elif mode == ComparisonMode.PRIOR_YEAR:
        prior_start, prior_end = shift_prior_year(start, end)
        windows = (
            current,
            TimeWindow(name=PRIOR_YEAR, start=prior_start, end=prior_end, label="Period Y-1"),
        )
    elif mode == ComparisonMode.BUDGET:
        windows = (
            current,
            TimeWindow(
                name=BUDGET,
                start=start,
                end=end,
                source=LedgerSource.BUDGET,
                label="Budget",
            ),
        )
    elif mode == ComparisonMode.BALANCES:
        windows = (
            TimeWindow(
                name=BROUGHT_FORWARD,
                start=None,
                end=start,
                end_inclusive=False,
                label="Brought Forward",
            ),
            current,
            TimeWindow(name=TOTAL, start=None, end=end, label="Total"),
        )
    else:
        raise errors.ValidationError(f"Unknown comparison mode: {mode}")

    logger.debug("Built windows %s for %s..%s", [w.name for w in windows], start, end)
    return windows
