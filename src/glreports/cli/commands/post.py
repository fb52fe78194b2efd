"""Ledger posting command."""

import click

from glreports.cli.error_handling import handle_domain_error
from glreports.domain.errors import DomainError
from glreports.utils.amount_parser import parse_amount
from glreports.utils.date_parser import parse_date


@click.command("post")
@click.argument("account")
@click.option("--amount", required=True, help="Signed amount; positive is a debit (e.g. -40.00, '40 Cr')")
@click.option("--date", "date_str", default="today", help="Transaction date (default: today)")
@click.option("--type", "trans_type", type=int, default=0, help="Transaction type code")
@click.option("--type-no", type=int, default=0, help="Sequence number within the transaction type")
@click.option("--memo", default="", help="Line memo")
@click.option("--dimension", type=int, default=0, help="First dimension tag")
@click.option("--dimension2", type=int, default=0, help="Second dimension tag")
@click.option("--person", help="Counterparty identifier")
@click.option("--budget", is_flag=True, help="Post to the budget ledger instead")
@click.pass_context
def post(
    ctx,
    account: str,
    amount: str,
    date_str: str,
    trans_type: int,
    type_no: int,
    memo: str,
    dimension: int,
    dimension2: int,
    person: str | None,
    budget: bool,
):
    """Post an entry to the general ledger or the budget."""
    db = ctx.obj["db"]

    try:
        value = parse_amount(amount)
        tran_date = parse_date(date_str)
        if budget:
            db.post_budget_entry(
                tran_date,
                account,
                value,
                dimension_id=dimension,
                dimension2_id=dimension2,
            )
        else:
            db.post_entry(
                trans_type,
                type_no,
                tran_date,
                account,
                value,
                memo=memo,
                dimension_id=dimension,
                dimension2_id=dimension2,
                person_id=person,
            )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    ledger = "budget" if budget else "ledger"
    click.echo(f"Posted {value:,.2f} to {account} on {tran_date} ({ledger})")


def register_commands(cli):
    """Register post command with main CLI."""
    cli.add_command(post)
