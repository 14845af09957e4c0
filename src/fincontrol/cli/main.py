"""Main CLI entry point."""

import logging

import click
from fincontrol.database.factories import DB_PATH_ENV_VAR, create_sqlite_database

# Import and register all commands at module level
from fincontrol.cli.commands import (
    responsible,
    category,
    transaction,
    import_cmd,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV_VAR} environment variable)",
    envvar=DB_PATH_ENV_VAR,
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Fincontrol - Shared expense tracking.

    Import bank and credit card statements (OFX or CSV) and split every
    transaction between the people responsible for it.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
responsible.register_commands(cli)
category.register_commands(cli)
transaction.register_commands(cli)
import_cmd.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
