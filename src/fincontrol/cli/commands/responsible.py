"""Responsible party management commands."""

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.user_resolution import resolve_user_or_exit, user_option
from fincontrol.domain.errors import DomainError
from fincontrol.domain.responsible import ResponsibleService


@click.group()
def responsible_group():
    """Manage the people transactions are split between."""
    pass


@responsible_group.command("create")
@click.argument("name")
@user_option
@click.pass_context
def create_responsible(ctx, name: str, user: str | None):
    """Create a new responsible party."""
    user_id = resolve_user_or_exit(ctx, user)
    service = ResponsibleService(ctx.obj["db"])

    try:
        responsible_id = service.create_responsible(user_id=user_id, name=name)
        click.echo(f"Created responsible '{name.strip()}' (ID: {responsible_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@responsible_group.command("list")
@user_option
@click.pass_context
def list_responsibles(ctx, user: str | None):
    """List responsible parties."""
    user_id = resolve_user_or_exit(ctx, user)
    service = ResponsibleService(ctx.obj["db"])

    responsibles = service.list_responsibles(user_id)
    if not responsibles:
        click.echo("No responsible parties found.")
        return

    click.echo("\nResponsible parties:")
    for r in responsibles:
        click.echo(f"  {r.name} (ID: {r.id})")


def register_commands(cli):
    """Register responsible commands with main CLI."""
    cli.add_command(responsible_group, name="responsible")
