"""CLI helpers for date range resolution."""

from datetime import date

import click

from glreports.utils.date_parser import PERIODS, get_date_range, parse_date


def period_options(func):
    """Attach --start-date/--end-date and the named period flags to a command."""
    for period in reversed(PERIODS):
        func = click.option(
            f"--{period}",
            "period",
            flag_value=period,
            default=None,
            help=f"Report on {period.replace('-', ' ')}",
        )(func)
    func = click.option("--end-date", help="End date (YYYY-MM-DD or 'end of month')")(func)
    func = click.option("--start-date", help="Start date (YYYY-MM-DD or 'start of year')")(func)
    return func


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from a period flag or explicit dates."""
    if period and (start_date or end_date):
        click.echo(
            "Error: Period options (--this-month, --last-year, etc.) cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if period:
        return get_date_range(period)

    start = None
    end = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    if default_range is not None:
        if start is None and end is None:
            start, end = default_range
        elif start is None:
            start = default_range[0]
        elif end is None:
            end = default_range[1]

    return start, end
