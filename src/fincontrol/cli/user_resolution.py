"""CLI helpers for resolving the acting user."""

from __future__ import annotations

import click

from fincontrol.utils.user_resolver import USER_ENV_VAR, resolve_current_user

user_option = click.option(
    "--user",
    "user",
    help=f"User ID to act as (overrides {USER_ENV_VAR} environment variable)",
)


def resolve_user_or_exit(ctx: click.Context, user: str | None) -> int:
    """Resolve the acting user ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_current_user(user)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
