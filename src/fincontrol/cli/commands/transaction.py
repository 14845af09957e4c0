"""Transaction management commands."""

from datetime import datetime, time

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.parsing import optional_enum, parse_allocation
from fincontrol.cli.user_resolution import resolve_user_or_exit, user_option
from fincontrol.domain.category import CategoryService
from fincontrol.domain.entities import TransactionSource, TransactionSubtype, TransactionType
from fincontrol.domain.errors import DomainError
from fincontrol.domain.responsible import ResponsibleService
from fincontrol.domain.transaction import TransactionService
from fincontrol.utils.amount_parser import parse_amount
from fincontrol.utils.date_parser import parse_cli_date

TYPE_CHOICES = [t.value.lower() for t in TransactionType]
SUBTYPE_CHOICES = [s.value.lower() for s in TransactionSubtype]
SOURCE_CHOICES = [s.value.lower() for s in TransactionSource]


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD)")
@click.option("--end-date", help="End date (YYYY-MM-DD)")
@click.option("--category", "category_id", type=int, help="Category ID")
@click.option("--type", "txn_type", type=click.Choice(TYPE_CHOICES, case_sensitive=False), help="Only income or only expenses")
@user_option
@click.pass_context
def list_transactions(ctx, start_date: str, end_date: str, category_id: int, txn_type: str, user: str | None):
    """View transactions with optional filters."""
    user_id = resolve_user_or_exit(ctx, user)
    db = ctx.obj["db"]
    service = TransactionService(db)
    category_service = CategoryService(db)

    try:
        start = parse_cli_date(start_date)
        end = parse_cli_date(end_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    transactions = service.list_transactions(
        user_id=user_id,
        start_date=datetime.combine(start, time.min) if start else None,
        end_date=datetime.combine(end, time.max) if end else None,
        category_id=category_id,
        type=optional_enum(TransactionType, txn_type),
    )

    if not transactions:
        click.echo("No transactions found.")
        return

    categories = {cat.id: cat.name for cat in category_service.list_categories()}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':<6} {'Date':<12} {'Type':<8} {'Amount':>12}  {'Category':<25} {'Description':<30}")
    click.echo("-" * 100)
    for txn in transactions:
        click.echo(
            f"{txn.id:<6} {txn.date.strftime('%Y-%m-%d'):<12} {txn.type.value:<8} {txn.amount:>12,.2f}  "
            f"{categories.get(txn.category_id, 'Unknown')[:25]:<25} {txn.description[:30]:<30}"
        )

    total_expenses = sum(txn.amount for txn in transactions if txn.type == TransactionType.EXPENSE)
    total_income = sum(txn.amount for txn in transactions if txn.type == TransactionType.INCOME)
    click.echo("-" * 100)
    click.echo(
        f"{'TOTAL':<6} Expenses: {total_expenses:,.2f} | "
        f"Income: {total_income:,.2f} | Count: {len(transactions)}"
    )


@transaction_group.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def show_transaction(ctx, transaction_id: int):
    """Show a transaction and how it is split."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    category = CategoryService(db).get_category(txn.category_id)
    responsible_service = ResponsibleService(db)

    click.echo(f"\nTransaction ID: {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Description: {txn.description}")
    click.echo(f"  Amount: {txn.amount:,.2f}")
    click.echo(f"  Type: {txn.type.value} / {txn.subtype.value}")
    click.echo(f"  Source: {txn.source.value}")
    click.echo(f"  Category: {category.name if category else txn.category_id}")
    if txn.external_reference:
        click.echo(f"  Reference: {txn.external_reference}")
    click.echo("  Split:")
    for share in txn.responsibilities:
        party = responsible_service.get_responsible(share.responsible_id)
        name = party.name if party else f"#{share.responsible_id}"
        notes = f" ({share.notes})" if share.notes else ""
        click.echo(f"    {name}: {share.percentage}% = {share.calculated_amount:,.2f}{notes}")
    if not txn.is_percentage_valid:
        click.echo("  Warning: split percentages do not total 100%")


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--date", help="Transaction date (YYYY-MM-DD)")
@click.option("--amount", help="Transaction amount (e.g., 123.45)")
@click.option("--description", help="Transaction description")
@click.option("--type", "txn_type", type=click.Choice(TYPE_CHOICES, case_sensitive=False))
@click.option("--subtype", type=click.Choice(SUBTYPE_CHOICES, case_sensitive=False))
@click.option("--source", type=click.Choice(SOURCE_CHOICES, case_sensitive=False))
@click.option("--category", "category_id", type=int, help="Category ID")
@click.option("--subcategory", "subcategory_id", type=int, help="Subcategory ID")
@click.option("--source-entity", "source_entity_id", type=int, help="Source entity ID")
@click.option("--responsible", "responsibles", multiple=True, help="New split as ID:PERCENT[:NOTES]; repeat per party")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    date: str | None,
    amount: str | None,
    description: str | None,
    txn_type: str | None,
    subtype: str | None,
    source: str | None,
    category_id: int | None,
    subcategory_id: int | None,
    source_entity_id: int | None,
    responsibles: tuple[str, ...],
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. Changing the amount or the
    split recalculates every party's share.

    Examples:
        fincontrol transaction update 1 --amount 75.00
        fincontrol transaction update 1 --responsible 1:50 --responsible 2:50
    """
    service = TransactionService(ctx.obj["db"])

    try:
        txn_date = parse_cli_date(date)
        txn_amount = parse_amount(amount) if amount is not None else None
        split = [parse_allocation(r) for r in responsibles] or None
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        service.update_transaction(
            transaction_id,
            description=description,
            date=datetime.combine(txn_date, time.min) if txn_date else None,
            amount=txn_amount,
            type=optional_enum(TransactionType, txn_type),
            subtype=optional_enum(TransactionSubtype, subtype),
            source=optional_enum(TransactionSource, source),
            category_id=category_id,
            subcategory_id=subcategory_id,
            source_entity_id=source_entity_id,
            responsibilities=split,
        )
        click.echo(f"Updated transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction and its split.

    Examples:
        fincontrol transaction delete 1 --yes
    """
    service = TransactionService(ctx.obj["db"])

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes:
        click.echo(f"Transaction {txn.id}: {txn.date.strftime('%Y-%m-%d')} {txn.amount:,.2f} {txn.description}")
        if not click.confirm("Delete this transaction?"):
            click.echo("Cancelled.")
            return

    try:
        service.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
