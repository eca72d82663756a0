"""Demo data command."""

import click

from condogest.database.fixtures import seed_database


@click.command("seed")
@click.option("--force", is_flag=True, help="Seed even if the database already has units")
@click.pass_context
def seed(ctx, force: bool):
    """Load the demo condominium into the database.

    The local data file is seeded automatically on first use; this command
    is for an empty relational database.

    Examples:
        condogest seed
    """
    db = ctx.obj["db"]

    if db.list_units() and not force:
        click.echo("Database already has data. Use --force to seed anyway.")
        return

    try:
        count = seed_database(db)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(f"Seeded {count} records.")
    click.echo("Demo logins: admin / 123 and diana / 123")


def register_commands(cli):
    """Register seed command with main CLI."""
    cli.add_command(seed)
