"""CLI error handling helpers."""

import logging

import click

from glreports.domain.errors import CyclicHierarchyError, DomainError

logger = logging.getLogger(__name__)

# Exit status for errors in the stored chart of accounts rather than in the input.
DATA_INTEGRITY_EXIT_CODE = 3


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure.

    A cyclic account type hierarchy is reported as a data-integrity error
    with its own exit status; everything else is a plain input error.
    """
    logger.debug("Command failed with %s", type(error).__name__)
    if isinstance(error, CyclicHierarchyError):
        click.echo(f"Data integrity error: {error}", err=True)
        ctx.exit(DATA_INTEGRITY_EXIT_CODE)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
