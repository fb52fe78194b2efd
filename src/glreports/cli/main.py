"""Main CLI entry point."""

import logging

import click

from glreports.database.factories import DB_PATH_ENVVAR, open_ledger

# Import and register all commands at module level
from glreports.cli.commands import chart, fiscal_year, post, report


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides GLREPORTS_DB_PATH environment variable)",
    envvar=DB_PATH_ENVVAR,
)
@click.option("--verbose", "-v", is_flag=True, help="Log report generation details")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """glreports - General-ledger financial reports.

    Aggregate ledger entries over a chart of accounts into trial balances,
    profit and loss statements, balance sheets and transaction listings.
    """
    ctx.ensure_object(dict)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = open_ledger(db_path)
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
chart.register_commands(cli)
fiscal_year.register_commands(cli)
post.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
