"""Unit management commands."""

import click

from condogest.cli.error_handling import handle_domain_error
from condogest.cli.resolution import resolve_unit_or_exit
from condogest.domain.people import PersonService
from condogest.domain.units import UnitService


@click.group()
def units_group():
    """Manage blocks and units."""
    pass


@units_group.command("list")
@click.option("--block", help="Show only this block")
@click.pass_context
def list_units(ctx, block: str | None):
    """List units grouped by block and floor."""
    db = ctx.obj["db"]
    service = UnitService(db)
    residents = PersonService(db).list_residents()

    units = service.list_units()
    if block is not None:
        units = [u for u in units if u.block.upper() == block.strip().upper()]
    if not units:
        click.echo("No units found.")
        return

    for block_name, block_units in service.group_by_block(units).items():
        click.echo(f"\nBlock {block_name} ({len(block_units)} units)")
        click.echo("-" * 60)
        for floor, floor_units in service.floors_of_block(block_name, block_units).items():
            cells = []
            for unit in floor_units:
                count = sum(1 for p in residents if p.unit_id == unit.id)
                cells.append(f"{unit.number}{'*' if count else ''}")
            click.echo(f"Floor {floor:2d}: {'  '.join(cells)}")
    click.echo("\n* occupied by at least one resident")


@units_group.command("generate")
@click.argument("blocks", metavar="BLOCKS")
@click.option("--floors", type=int, required=True, help="Floors per block")
@click.option("--per-floor", type=int, required=True, help="Apartments per floor")
@click.pass_context
def generate_units(ctx, blocks: str, floors: int, per_floor: int):
    """Generate the units of one or more blocks.

    BLOCKS is a comma-separated list of block names. Apartments are numbered
    floor * 100 + position, so floor 2 apartment 3 is 203.

    Examples:
        condogest units generate "A, B" --floors 10 --per-floor 4
        condogest units generate "TOWER 1" --floors 3 --per-floor 2
    """
    service = UnitService(ctx.obj["db"])

    try:
        created = service.generate_units(blocks, floors, per_floor)
    except ValueError as e:
        handle_domain_error(ctx, e)

    blocks_done = sorted({u.block for u in created})
    click.echo(f"Created {len(created)} units in block(s) {', '.join(blocks_done)}")


@units_group.command("delete")
@click.argument("unit", metavar="UNIT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_unit(ctx, unit: str, yes: bool):
    """Delete a unit.

    UNIT can be a label such as A-101 or a unit ID.
    """
    service = UnitService(ctx.obj["db"])
    unit_obj = resolve_unit_or_exit(ctx, service, unit)

    if not yes and not click.confirm(f"Are you sure you want to delete unit {unit_obj.label}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_unit(unit_obj.id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted unit {unit_obj.label}")


@units_group.command("delete-block")
@click.argument("block", metavar="BLOCK")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_block(ctx, block: str, yes: bool):
    """Delete every unit of a block."""
    service = UnitService(ctx.obj["db"])

    if not yes and not click.confirm(f"Are you sure you want to delete block {block} and all its units?"):
        click.echo("Deletion cancelled.")
        return

    try:
        removed = service.delete_block(block)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted block {block} ({removed} units)")


def register_commands(cli):
    """Register unit commands with main CLI."""
    cli.add_command(units_group, name="units")
