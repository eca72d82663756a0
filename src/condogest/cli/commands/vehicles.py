"""Vehicle registration commands."""

import click

from condogest.cli.error_handling import handle_domain_error
from condogest.cli.resolution import resolve_person_or_exit
from condogest.domain.people import PersonService
from condogest.domain.vehicles import VehicleService


@click.group()
def vehicles_group():
    """Manage registered vehicles."""
    pass


@vehicles_group.command("list")
@click.pass_context
def list_vehicles(ctx):
    """List registered vehicles."""
    vehicles = VehicleService(ctx.obj["db"]).list_vehicles()
    if not vehicles:
        click.echo("No vehicles found.")
        return

    click.echo("\nVehicles:")
    click.echo("-" * 70)
    for v in vehicles:
        click.echo(f"{v.plate:10s} | {v.model:20s} | {v.color:10s} | Owner: {v.owner_name or '-'}")


@vehicles_group.command("add")
@click.argument("plate", metavar="PLATE")
@click.option("--model", required=True, help="Make and model")
@click.option("--color", default="", help="Colour")
@click.option("--owner", help="Owner username or person ID")
@click.pass_context
def add_vehicle(ctx, plate: str, model: str, color: str, owner: str | None):
    """Register a vehicle.

    Examples:
        condogest vehicles add abc-1234 --model "Toyota Corolla" --color Silver --owner p2
    """
    db = ctx.obj["db"]
    owner_id = resolve_person_or_exit(ctx, PersonService(db), owner).id if owner else None

    try:
        vehicle = VehicleService(db).add_vehicle(plate, model, color, owner_id=owner_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Registered vehicle {vehicle.plate}")


def register_commands(cli):
    """Register vehicle commands with main CLI."""
    cli.add_command(vehicles_group, name="vehicles")
