"""Main CLI entry point."""

import click

from condogest.database.factories import create_database
from condogest.utils.log_config import configure_logging

# Import and register all commands at module level
from condogest.cli.commands import (
    auth,
    dashboard,
    packages,
    parking,
    people,
    permissions,
    roles,
    seed,
    units,
    vehicles,
)


@click.group()
@click.option(
    "--data-path",
    type=click.Path(),
    help="Directory of the local data file (overrides CONDOGEST_DATA_PATH environment variable)",
    envvar="CONDOGEST_DATA_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug log events on stderr")
@click.pass_context
def cli(ctx, data_path: str | None, verbose: bool):
    """Condogest - Condominium management.

    Manage units, residents and staff, vehicles, the parking garage, package
    deliveries, gate access logs and role permissions.

    Data is kept in a local file unless CONDOGEST_REMOTE_URL and
    CONDOGEST_REMOTE_KEY point at a relational database.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose)

    # Bind the database only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None and "db" not in ctx.obj:
        db = create_database(data_path=data_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
seed.register_commands(cli)
units.register_commands(cli)
people.register_commands(cli)
vehicles.register_commands(cli)
parking.register_commands(cli)
packages.register_commands(cli)
roles.register_commands(cli)
permissions.register_commands(cli)
auth.register_commands(cli)
dashboard.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
