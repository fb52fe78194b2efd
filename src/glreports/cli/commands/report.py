"""Report commands."""

import json
from dataclasses import asdict
from decimal import Decimal

import click

from glreports.cli.date_filters import period_options, resolve_cli_date_range
from glreports.cli.error_handling import handle_domain_error
from glreports.domain import assembler
from glreports.domain.assembler import ReportAssembler, ReportConfig
from glreports.domain.entities import (
    AggregateNode,
    ComparisonMode,
    DimensionFilter,
    NodeKind,
    ReportResult,
)
from glreports.domain.errors import DomainError
from glreports.domain.working_capital import WorkingCapitalMapping
from glreports.utils.date_parser import get_date_range, parse_date

INDENT_SIZE = 4
LABEL_WIDTH = 44
AMOUNT_WIDTH = 14


def _format_amount(value: Decimal) -> str:
    return f"{value:,.2f}"


def _print_nodes(nodes: tuple[AggregateNode, ...], window_names: list[str], indent: int = 0) -> None:
    """Recursively print an aggregated tree with one column per window."""
    for node in nodes:
        if indent == 0:
            click.echo()
        label = f"{node.code}  {node.label}" if node.kind == NodeKind.ACCOUNT else node.label
        indent_str = " " * (INDENT_SIZE * indent)
        label_width = max(LABEL_WIDTH - INDENT_SIZE * indent, len(label))
        columns = "".join(
            f"{_format_amount(node.amounts[name]):>{AMOUNT_WIDTH}}" for name in window_names
        )
        if node.achieved_percent is not None:
            columns += f"{_format_amount(node.achieved_percent) + '%':>{AMOUNT_WIDTH}}"
        click.echo(f"{indent_str}{label:<{label_width}}{columns}")
        _print_nodes(node.children, window_names, indent + 1)


def _print_hierarchy(result: ReportResult) -> None:
    window_names = [window.name for window in result.windows]
    header = "".join(f"{window.display_label:>{AMOUNT_WIDTH}}" for window in result.windows)
    if result.summary.achieved_percent is not None:
        header += f"{'Achieved':>{AMOUNT_WIDTH}}"
    click.echo(f"{'Account':<{LABEL_WIDTH}}{header}")

    if not result.tree:
        click.echo("\nNo balances found.")
    _print_nodes(result.tree, window_names)

    summary = result.summary
    totals = "".join(
        f"{_format_amount(summary.amounts[name]):>{AMOUNT_WIDTH}}" for name in window_names
    )
    if summary.achieved_percent is not None:
        totals += f"{_format_amount(summary.achieved_percent) + '%':>{AMOUNT_WIDTH}}"
    total_label = "Net change in cash" if result.cash_flow is not None else "Total"
    click.echo()
    click.echo(f"{total_label:<{LABEL_WIDTH}}{totals}")

    if result.report_key == "trial_balance":
        status = "balanced" if summary.is_balanced else "NOT balanced"
        click.echo(f"Accounts: {summary.account_count}  Ledger is {status}")
    elif result.report_key in ("profit_and_loss", "annual_expense_breakdown"):
        net = "".join(
            f"{_format_amount(summary.net_amounts[name]):>{AMOUNT_WIDTH}}" for name in window_names
        )
        click.echo(f"{'Net result':<{LABEL_WIDTH}}{net}")
    elif result.cash_flow is not None:
        _print_cash_position(result, window_names)


def _print_cash_position(result: ReportResult, window_names: list[str]) -> None:
    position = result.cash_flow
    for label, amounts in (
        ("Opening cash", position.opening_cash),
        ("Closing cash", position.closing_cash),
    ):
        row = "".join(f"{_format_amount(amounts[name]):>{AMOUNT_WIDTH}}" for name in window_names)
        click.echo(f"{label:<{LABEL_WIDTH}}{row}")
    if not position.is_reconciled:
        click.echo("Activities do NOT reconcile with the change in cash")
    for name, value in position.variance_percent.items():
        label = f"Variance {name.replace('_', ' ')}"
        click.echo(f"{label:<{LABEL_WIDTH}}{_format_amount(value) + '%':>{AMOUNT_WIDTH}}")


def _print_working_capital(result: ReportResult) -> None:
    analysis = result.working_capital
    rows = [("Working capital", _format_amount(analysis.working_capital))]
    rows.extend(
        (name.replace("_", " ").capitalize(), _format_amount(value))
        for name, value in asdict(analysis.liquidity).items()
    )
    rows.extend(
        (name.replace("_", " ").capitalize(), _format_amount(value))
        for name, value in asdict(analysis.efficiency).items()
    )
    click.echo()
    for label, value in rows:
        click.echo(f"{label:<{LABEL_WIDTH}}{value:>{AMOUNT_WIDTH}}")
    click.echo(f"Health status: {analysis.health_status}")


def _print_journal(result: ReportResult) -> None:
    if not result.transactions:
        click.echo("No transactions found.")
        return

    for txn in result.transactions:
        flag = "" if txn.is_balanced else f"  UNBALANCED by {_format_amount(txn.difference)}"
        click.echo(f"\n{txn.tran_date}  Type {txn.type} #{txn.type_no}{flag}")
        for line in txn.lines:
            debit = _format_amount(line.debit) if line.debit else ""
            credit = _format_amount(line.credit) if line.credit else ""
            name = f"{line.account}  {line.account_name}"
            click.echo(f"    {name:<40}{debit:>{AMOUNT_WIDTH}}{credit:>{AMOUNT_WIDTH}}  {line.memo}".rstrip())

    summary = result.journal_summary
    click.echo()
    click.echo(
        f"{'Total':<44}{_format_amount(summary.total_debit):>{AMOUNT_WIDTH}}"
        f"{_format_amount(summary.total_credit):>{AMOUNT_WIDTH}}"
    )
    click.echo(
        f"Transactions: {summary.transaction_count}  Unbalanced: {summary.unbalanced_count}"
    )
    if result.total_amount is not None:
        click.echo(f"Total amount: {_format_amount(result.total_amount)}")


def _print_account_ledgers(result: ReportResult) -> None:
    if not result.account_ledgers:
        click.echo("No account activity found.")
        return

    for ledger in result.account_ledgers:
        click.echo(f"\n{ledger.account}  {ledger.account_name}")
        click.echo(f"    {'Opening balance':<40}{_format_amount(ledger.opening_balance):>{AMOUNT_WIDTH * 2}}")
        for line in ledger.lines:
            reference = f"{line.tran_date}  Type {line.type} #{line.type_no}  {line.memo}".rstrip()
            click.echo(
                f"    {reference:<40}{_format_amount(line.amount):>{AMOUNT_WIDTH}}"
                f"{_format_amount(line.balance):>{AMOUNT_WIDTH}}"
            )
        click.echo(f"    {'Closing balance':<40}{_format_amount(ledger.closing_balance):>{AMOUNT_WIDTH * 2}}")


def render_result(result: ReportResult, as_json: bool) -> None:
    """Print a report result as JSON or indented text."""
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.echo(result.title)
    if result.start_date and result.end_date:
        click.echo(f"Period: {result.start_date} to {result.end_date}")

    if result.summary is not None:
        _print_hierarchy(result)
    elif result.journal_summary is not None:
        _print_journal(result)
    elif result.working_capital is not None:
        _print_working_capital(result)
    else:
        _print_account_ledgers(result)


def _run(ctx, config: ReportConfig, as_json: bool) -> None:
    db = ctx.obj["db"]
    try:
        result = ReportAssembler(db).generate(config)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    render_result(result, as_json)


def _dates(ctx, start_date, end_date, period):
    return resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period=period,
        default_range=get_date_range("this-month"),
    )


def dimension_options(func):
    """Attach dimension filter options to a command."""
    func = click.option("--dimension2", type=int, default=0, help="Second dimension tag (0 for all)")(func)
    func = click.option("--dimension", type=int, default=0, help="First dimension tag (0 for all)")(func)
    return func


json_option = click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")


@click.group()
def report_group():
    """Generate financial reports."""
    pass


@report_group.command("trial-balance")
@period_options
@dimension_options
@click.option("--include-zero", is_flag=True, help="Show accounts without material balances")
@json_option
@click.pass_context
def trial_balance(ctx, start_date, end_date, period, dimension, dimension2, include_zero, as_json):
    """Brought-forward, period and total balances of every account."""
    start, end = _dates(ctx, start_date, end_date, period)
    config = assembler.trial_balance(
        start, end, include_zero=include_zero, dimensions=DimensionFilter(dimension, dimension2)
    )
    _run(ctx, config, as_json)


@report_group.command("profit-loss")
@period_options
@dimension_options
@click.option(
    "--compare",
    type=click.Choice(["accumulated", "prior-year", "budget"], case_sensitive=False),
    default="accumulated",
    help="Comparison column (default: accumulated)",
)
@click.option("--fiscal-start-month", type=click.IntRange(1, 12), default=1, help="First month of the fiscal year")
@json_option
@click.pass_context
def profit_loss(
    ctx, start_date, end_date, period, dimension, dimension2, compare, fiscal_start_month, as_json
):
    """Income and expenses with an achievement column."""
    start, end = _dates(ctx, start_date, end_date, period)
    try:
        config = assembler.profit_and_loss(
            start,
            end,
            compare=ComparisonMode(compare.lower()),
            fiscal_start_month=fiscal_start_month,
            dimensions=DimensionFilter(dimension, dimension2),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    _run(ctx, config, as_json)


@report_group.command("balance-sheet")
@period_options
@dimension_options
@click.option("--include-zero", is_flag=True, help="Show accounts without material balances")
@json_option
@click.pass_context
def balance_sheet(ctx, start_date, end_date, period, dimension, dimension2, include_zero, as_json):
    """Opening, period and closing balances of the balance sheet classes."""
    start, end = _dates(ctx, start_date, end_date, period)
    config = assembler.balance_sheet(
        start, end, include_zero=include_zero, dimensions=DimensionFilter(dimension, dimension2)
    )
    _run(ctx, config, as_json)


@report_group.command("annual-expenses")
@click.option("--fiscal-year-id", type=int, help="Fiscal year to report on")
@click.option("--end-date", help="Any date in the last month of the 12 (default: today)")
@click.option("--in-thousands", is_flag=True, help="Divide amounts by 1000")
@dimension_options
@json_option
@click.pass_context
def annual_expenses(ctx, fiscal_year_id, end_date, in_thousands, dimension, dimension2, as_json):
    """Twelve monthly columns of income and expenses."""
    end = None
    if fiscal_year_id is None:
        try:
            end = parse_date(end_date or "today")
        except ValueError as e:
            handle_domain_error(ctx, e)
            return
    config = assembler.annual_expense_breakdown(
        fiscal_year_id=fiscal_year_id,
        end_date=end,
        in_thousands=in_thousands,
        dimensions=DimensionFilter(dimension, dimension2),
    )
    _run(ctx, config, as_json)


@report_group.command("journal")
@period_options
@dimension_options
@click.option("--type", "trans_type", type=int, help="Only this transaction type")
@json_option
@click.pass_context
def journal(ctx, start_date, end_date, period, dimension, dimension2, trans_type, as_json):
    """Ledger rows grouped into transactions."""
    start, end = _dates(ctx, start_date, end_date, period)
    config = assembler.journal_entries(
        start, end, trans_type=trans_type, dimensions=DimensionFilter(dimension, dimension2)
    )
    _run(ctx, config, as_json)


@report_group.command("audit-trail")
@period_options
@click.option("--type", "trans_type", type=int, help="Only this transaction type (adds a total)")
@json_option
@click.pass_context
def audit_trail(ctx, start_date, end_date, period, trans_type, as_json):
    """Transactions of a period, optionally for one transaction type."""
    start, end = _dates(ctx, start_date, end_date, period)
    _run(ctx, assembler.audit_trail(start, end, trans_type=trans_type), as_json)


@report_group.command("account-ledger")
@period_options
@dimension_options
@click.option("--from-account", help="First account code")
@click.option("--to-account", help="Last account code")
@click.option("--fiscal-start-month", type=click.IntRange(1, 12), default=1, help="First month of the fiscal year")
@json_option
@click.pass_context
def account_ledger(
    ctx,
    start_date,
    end_date,
    period,
    dimension,
    dimension2,
    from_account,
    to_account,
    fiscal_start_month,
    as_json,
):
    """Transactions per account with running balances."""
    start, end = _dates(ctx, start_date, end_date, period)
    config = assembler.account_transactions(
        start,
        end,
        from_account=from_account,
        to_account=to_account,
        fiscal_start_month=fiscal_start_month,
        dimensions=DimensionFilter(dimension, dimension2),
    )
    _run(ctx, config, as_json)


def type_ids_option(name: str, help_text: str, required: bool = False):
    """Repeatable account type ID option."""
    return click.option(name, type=int, multiple=True, required=required, help=help_text)


@report_group.command("cash-flow")
@period_options
@dimension_options
@type_ids_option("--cash-type", "Account type holding cash (repeatable)", required=True)
@type_ids_option("--operating-type", "Working-capital or non-cash type (repeatable)")
@type_ids_option("--investing-type", "Fixed asset or investment type (repeatable)")
@type_ids_option("--financing-type", "Loan or equity type (repeatable)")
@click.option("--compare-prior-year", is_flag=True, help="Add prior-year columns and variances")
@click.option("--include-zero", is_flag=True, help="Show accounts without material movements")
@json_option
@click.pass_context
def cash_flow(
    ctx,
    start_date,
    end_date,
    period,
    dimension,
    dimension2,
    cash_type,
    operating_type,
    investing_type,
    financing_type,
    compare_prior_year,
    include_zero,
    as_json,
):
    """Operating, investing and financing cash movements."""
    start, end = _dates(ctx, start_date, end_date, period)
    config = assembler.cash_flow_statement(
        start,
        end,
        cash_type_ids=cash_type,
        operating_type_ids=operating_type,
        investing_type_ids=investing_type,
        financing_type_ids=financing_type,
        compare_prior_year=compare_prior_year,
        include_zero=include_zero,
        dimensions=DimensionFilter(dimension, dimension2),
    )
    _run(ctx, config, as_json)


@report_group.command("working-capital")
@period_options
@dimension_options
@type_ids_option("--current-assets-type", "Current asset type (repeatable)", required=True)
@type_ids_option("--current-liabilities-type", "Current liability type (repeatable)", required=True)
@type_ids_option("--cash-type", "Cash and bank type (repeatable)")
@type_ids_option("--securities-type", "Marketable securities type (repeatable)")
@type_ids_option("--receivables-type", "Receivables type (repeatable)")
@type_ids_option("--inventory-type", "Inventory type (repeatable)")
@type_ids_option("--payables-type", "Payables type (repeatable)")
@type_ids_option("--revenue-type", "Revenue type (repeatable, default: all income classes)")
@type_ids_option("--cost-of-sales-type", "Cost of sales type (repeatable)")
@json_option
@click.pass_context
def working_capital(
    ctx,
    start_date,
    end_date,
    period,
    dimension,
    dimension2,
    current_assets_type,
    current_liabilities_type,
    cash_type,
    securities_type,
    receivables_type,
    inventory_type,
    payables_type,
    revenue_type,
    cost_of_sales_type,
    as_json,
):
    """Liquidity ratios and days outstanding from ledger balances."""
    start, end = _dates(ctx, start_date, end_date, period)
    mapping = WorkingCapitalMapping(
        current_asset_type_ids=current_assets_type,
        current_liability_type_ids=current_liabilities_type,
        cash_type_ids=cash_type,
        marketable_security_type_ids=securities_type,
        receivable_type_ids=receivables_type,
        inventory_type_ids=inventory_type,
        payable_type_ids=payables_type,
        revenue_type_ids=revenue_type,
        cost_of_sales_type_ids=cost_of_sales_type,
    )
    config = assembler.working_capital_analysis(
        start, end, mapping, dimensions=DimensionFilter(dimension, dimension2)
    )
    _run(ctx, config, as_json)


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
