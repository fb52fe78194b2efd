"""Chart of accounts commands."""

import click

from glreports.cli.error_handling import handle_domain_error
from glreports.domain.entities import ClassKind
from glreports.domain.errors import DomainError
from glreports.domain.hierarchy import ChartTypeNode, HierarchyWalker

KIND_CHOICES = [kind.name.lower() for kind in ClassKind]


def print_type_tree(type_nodes: list[ChartTypeNode], indent: int = 1) -> None:
    """Recursively print account types with their accounts."""
    for node in type_nodes:
        prefix = "  " * indent
        click.echo(f"{prefix}{node.account_type.name} (ID: {node.account_type.id})")
        for account in node.accounts:
            click.echo(f"{prefix}  {account.code}  {account.name}")
        print_type_tree(node.children, indent + 1)


@click.group()
def chart_group():
    """Manage the chart of accounts."""
    pass


@chart_group.command("add-class")
@click.argument("name")
@click.option(
    "--kind",
    type=click.Choice(KIND_CHOICES, case_sensitive=False),
    required=True,
    help="Class kind; determines the sign convention",
)
@click.pass_context
def add_class(ctx, name: str, kind: str):
    """Create an account class."""
    db = ctx.obj["db"]
    class_id = db.create_account_class(name, ClassKind[kind.upper()])
    click.echo(f"Created account class '{name}' (ID: {class_id})")


@chart_group.command("add-type")
@click.argument("name")
@click.option("--class-id", type=int, required=True, help="Owning account class ID")
@click.option("--parent-id", type=int, help="Parent account type ID for sub-types")
@click.pass_context
def add_type(ctx, name: str, class_id: int, parent_id: int | None):
    """Create an account type or sub-type."""
    db = ctx.obj["db"]
    try:
        type_id = db.create_account_type(name, class_id, parent_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created account type '{name}' (ID: {type_id})")


@chart_group.command("add-account")
@click.argument("code")
@click.argument("name")
@click.option("--type-id", type=int, required=True, help="Account type ID")
@click.pass_context
def add_account(ctx, code: str, name: str, type_id: int):
    """Create a ledger account."""
    db = ctx.obj["db"]
    try:
        db.create_account(code, name, type_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created account {code} '{name}'")


@chart_group.command("list")
@click.pass_context
def list_chart(ctx):
    """List the chart of accounts in tree format."""
    db = ctx.obj["db"]
    try:
        chart = HierarchyWalker(db).build_chart()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not chart:
        click.echo("No account classes found. Run 'chart add-class' to create one.")
        return

    click.echo("\nChart of accounts:")
    for class_node in chart:
        account_class = class_node.account_class
        click.echo(
            f"{account_class.name} (ID: {account_class.id}, {account_class.kind.name.lower()})"
        )
        print_type_tree(class_node.types)


def register_commands(cli):
    """Register chart commands with main CLI."""
    cli.add_command(chart_group, name="chart")
