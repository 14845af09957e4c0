"""Category, subcategory and source entity management commands."""

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.user_resolution import resolve_user_or_exit, user_option
from fincontrol.domain.category import CategoryService
from fincontrol.domain.entities import TransactionSource
from fincontrol.domain.errors import DomainError

SOURCE_CHOICES = [s.value.lower() for s in TransactionSource]


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories with their subcategories."""
    service = CategoryService(ctx.obj["db"])

    categories = service.list_categories()
    if not categories:
        click.echo("No categories found. Use 'category create' to add one.")
        return

    click.echo("\nCategories:")
    for cat in categories:
        click.echo(f"{cat.name} (ID: {cat.id})")
        for sub in service.list_subcategories(category_id=cat.id):
            click.echo(f"  {sub.name} (ID: {sub.id})")


@category_group.command("create")
@click.argument("name")
@click.pass_context
def create_category(ctx, name: str):
    """Create a new category."""
    service = CategoryService(ctx.obj["db"])

    try:
        category_id = service.create_category(name=name)
        click.echo(f"Created category '{name.strip()}' (ID: {category_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@click.group()
def subcategory_group():
    """Manage subcategories."""
    pass


@subcategory_group.command("create")
@click.argument("name")
@click.option("--category", "category_id", type=int, required=True, help="Parent category ID")
@click.pass_context
def create_subcategory(ctx, name: str, category_id: int):
    """Create a new subcategory under a category."""
    service = CategoryService(ctx.obj["db"])

    try:
        subcategory_id = service.create_subcategory(name=name, category_id=category_id)
        click.echo(f"Created subcategory '{name.strip()}' (ID: {subcategory_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@click.group()
def source_entity_group():
    """Manage payment source entities (cards, bank accounts)."""
    pass


@source_entity_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "source_type",
    type=click.Choice(SOURCE_CHOICES, case_sensitive=False),
    required=True,
    help="Payment channel of this source",
)
@user_option
@click.pass_context
def create_source_entity(ctx, name: str, source_type: str, user: str | None):
    """Create a new source entity."""
    user_id = resolve_user_or_exit(ctx, user)
    service = CategoryService(ctx.obj["db"])

    try:
        source_entity_id = service.create_source_entity(
            user_id=user_id, name=name, source_type=TransactionSource[source_type.upper()]
        )
        click.echo(f"Created source entity '{name.strip()}' (ID: {source_entity_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
    cli.add_command(subcategory_group, name="subcategory")
    cli.add_command(source_entity_group, name="source-entity")
