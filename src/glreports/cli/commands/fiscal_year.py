"""Fiscal year commands."""

import click

from glreports.cli.error_handling import handle_domain_error
from glreports.domain.errors import DomainError
from glreports.utils.date_parser import parse_date


@click.group()
def fiscal_year_group():
    """Manage fiscal years."""
    pass


@fiscal_year_group.command("add")
@click.option("--begin", required=True, help="First day of the fiscal year (YYYY-MM-DD)")
@click.option("--end", required=True, help="Last day of the fiscal year (YYYY-MM-DD)")
@click.option("--closed", is_flag=True, help="Mark the fiscal year as closed")
@click.pass_context
def add_fiscal_year(ctx, begin: str, end: str, closed: bool):
    """Create a fiscal year."""
    db = ctx.obj["db"]
    try:
        begin_date = parse_date(begin)
        end_date = parse_date(end)
        fiscal_year_id = db.create_fiscal_year(begin_date, end_date, closed=closed)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created fiscal year {begin_date} to {end_date} (ID: {fiscal_year_id})")


def register_commands(cli):
    """Register fiscal year commands with main CLI."""
    cli.add_command(fiscal_year_group, name="fiscal-year")
