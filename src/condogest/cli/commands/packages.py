"""Package delivery commands."""

import click

from condogest.cli.error_handling import handle_domain_error
from condogest.cli.resolution import resolve_person_or_exit, resolve_unit_or_exit
from condogest.domain.packages import PackageService
from condogest.domain.people import PersonService
from condogest.domain.units import UnitService
from condogest.services.assistant import Assistant


@click.group()
def packages_group():
    """Receive packages and hand them out."""
    pass


@packages_group.command("list")
@click.option("--pending", is_flag=True, help="Only packages waiting for pickup")
@click.option("--unit", help="Only packages for this unit (label or ID)")
@click.pass_context
def list_packages(ctx, pending: bool, unit: str | None):
    """List packages."""
    db = ctx.obj["db"]
    service = PackageService(db)
    units = UnitService(db)

    unit_id = resolve_unit_or_exit(ctx, units, unit).id if unit else None
    if pending:
        packages = service.pending_packages(unit_id)
    else:
        packages = [p for p in service.list_packages() if unit_id is None or p.unit_id == unit_id]

    if not packages:
        click.echo("No packages found.")
        return

    labels = {u.id: u.label for u in units.list_units()}
    click.echo("\nPackages:")
    click.echo("-" * 90)
    for p in packages:
        click.echo(
            f"{p.tracking_code:12s} | {p.recipient_name:20s} | {labels.get(p.unit_id, '?'):8s} | "
            f"{p.location:20s} | {p.status.value} | {p.id}"
        )


@packages_group.command("register")
@click.argument("tracking_code", metavar="TRACKING_CODE")
@click.option("--recipient", required=True, help="Name on the package")
@click.option("--unit", required=True, help="Recipient unit (label or ID)")
@click.option("--location", required=True, help="Where the package is kept")
@click.option("--received-by", required=True, help="Staff username or person ID")
@click.pass_context
def register_package(
    ctx, tracking_code: str, recipient: str, unit: str, location: str, received_by: str
):
    """Register a package at the front desk.

    A notification for the resident is drafted and printed.

    Examples:
        condogest packages register AMZ-123 --recipient "Roberto Santos" --unit A-101 \\
            --location "Shelf B" --received-by diana
    """
    db = ctx.obj["db"]
    unit_obj = resolve_unit_or_exit(ctx, UnitService(db), unit)
    staff = resolve_person_or_exit(ctx, PersonService(db), received_by)
    service = PackageService(db, assistant=ctx.obj.get("assistant") or Assistant())

    try:
        registered = service.register_package(
            tracking_code=tracking_code,
            recipient_name=recipient,
            location=location,
            unit_id=unit_obj.id,
            received_by_staff_id=staff.id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Registered package {registered.package.tracking_code} for unit {unit_obj.label}")
    if registered.notification:
        click.echo("\nNotification:")
        click.echo(registered.notification)


@packages_group.command("pickup")
@click.argument("package", metavar="PACKAGE")
@click.pass_context
def pickup(ctx, package: str):
    """Mark a package as delivered to the resident.

    PACKAGE can be a package ID or tracking code.
    """
    service = PackageService(ctx.obj["db"])

    found = service.find_by_tracking_code(package)
    package_id = found.id if found is not None else package
    try:
        delivered = service.mark_picked_up(package_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Package {delivered.tracking_code} delivered at {delivered.picked_up_at:%Y-%m-%d %H:%M}"
    )


def register_commands(cli):
    """Register package commands with main CLI."""
    cli.add_command(packages_group, name="packages")
