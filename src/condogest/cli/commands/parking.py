"""Parking garage and gate commands."""

import click

from condogest.cli.error_handling import handle_domain_error
from condogest.cli.resolution import resolve_unit_or_exit
from condogest.domain.entities import EntryType, SpotType
from condogest.domain.gate import GateService
from condogest.domain.units import UnitService
from condogest.services.assistant import Assistant
from condogest.utils.date_parser import day_end, day_start, parse_day

SPOT_MARKS = {SpotType.RESIDENT: "R", SpotType.VISITOR: "V", SpotType.DISABLED: "D"}


@click.group()
def parking_group():
    """Gate entries and exits, spot map and access logs."""
    pass


@parking_group.command("map")
@click.pass_context
def spot_map(ctx):
    """Show every parking spot and who occupies it."""
    spots = ctx.obj["db"].list_parking_spots()
    if not spots:
        click.echo("No parking spots found.")
        return

    occupied = sum(1 for s in spots if s.is_occupied)
    click.echo(f"\nParking: {occupied}/{len(spots)} occupied")
    click.echo("-" * 40)
    for spot in spots:
        state = spot.current_vehicle_id if spot.is_occupied else "free"
        click.echo(f"{spot.code:6s} [{SPOT_MARKS[spot.type]}] {state}")


@parking_group.command("entry")
@click.argument("plate", metavar="PLATE")
@click.option("--unit", required=True, help="Unit being visited (label such as A-101, or ID)")
@click.option(
    "--type",
    "entry_type",
    type=click.Choice([t.value for t in EntryType], case_sensitive=False),
    default=EntryType.VISITOR.value,
    show_default=True,
    help="Who is entering",
)
@click.pass_context
def register_entry(ctx, plate: str, unit: str, entry_type: str):
    """Register a vehicle entering through the gate.

    A free spot of the matching type is assigned: resident spots for
    residents, visitor spots for visitors and service providers.

    Examples:
        condogest parking entry ABC-1234 --unit A-101 --type RESIDENT
        condogest parking entry QWE-0001 --unit B-101
    """
    db = ctx.obj["db"]
    unit_obj = resolve_unit_or_exit(ctx, UnitService(db), unit)

    try:
        result = GateService(db).register_entry(plate, unit_obj.id, EntryType(entry_type.upper()))
    except ValueError as e:
        handle_domain_error(ctx, e)

    registered = "registered" if result.log.is_registered else "unregistered"
    click.echo(f"Entry logged for {result.log.vehicle_plate} ({registered}) to unit {unit_obj.label}")
    if result.allocated:
        click.echo(f"Assigned spot {result.spot.code}")
    else:
        click.echo(
            f"Warning: no free {result.wanted_spot_type.value} spot available. "
            "No spot was assigned.",
            err=True,
        )


@parking_group.command("exit")
@click.argument("plate", metavar="PLATE")
@click.pass_context
def register_exit(ctx, plate: str):
    """Register a vehicle leaving through the gate."""
    try:
        result = GateService(ctx.obj["db"]).register_exit(plate)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Exit logged for {result.log.vehicle_plate}")
    for spot in result.released_spots:
        click.echo(f"Released spot {spot.code}")


@parking_group.command("release")
@click.argument("code", metavar="SPOT_CODE")
@click.pass_context
def release_spot(ctx, code: str):
    """Free a spot by code, logging the exit of the vehicle in it."""
    try:
        result = GateService(ctx.obj["db"]).release_spot(code)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Released spot {code.upper()} ({result.log.vehicle_plate} left)")


@parking_group.command("logs")
@click.option("--limit", type=int, default=20, show_default=True, help="Number of logs to show")
@click.option("--since", help="First day to show (e.g. yesterday, 2024-01-15)")
@click.option("--until", help="Last day to show")
@click.option("--plate", help="Only this plate")
@click.pass_context
def list_logs(ctx, limit: int, since: str | None, until: str | None, plate: str | None):
    """Show the most recent gate movements."""
    try:
        start = day_start(parse_day(since)) if since else None
        end = day_end(parse_day(until)) if until else None
    except ValueError as e:
        handle_domain_error(ctx, e)

    logs = GateService(ctx.obj["db"]).access_logs(since=start, until=end, plate=plate)[:limit]
    if not logs:
        click.echo("No access logs found.")
        return

    click.echo("\nAccess logs:")
    click.echo("-" * 80)
    for log in logs:
        flag = "registered" if log.is_registered else "unregistered"
        click.echo(
            f"{log.timestamp:%Y-%m-%d %H:%M} | {log.type.value:5s} | {log.vehicle_plate:10s} | "
            f"{flag:12s} | {log.notes or ''}"
        )


@parking_group.command("analyze")
@click.pass_context
def analyze_logs(ctx):
    """Ask the assistant for a summary of recent gate activity."""
    assistant = ctx.obj.get("assistant") or Assistant()
    logs = ctx.obj["db"].list_access_logs()
    click.echo(assistant.analyze_access_logs(logs))


def register_commands(cli):
    """Register parking commands with main CLI."""
    cli.add_command(parking_group, name="parking")
