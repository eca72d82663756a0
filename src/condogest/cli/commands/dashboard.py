"""Dashboard command."""

import click

from condogest.domain.dashboard import DashboardService


@click.command("dashboard")
@click.pass_context
def dashboard(ctx):
    """Show occupancy, packages, residents and gate activity."""
    db = ctx.obj["db"]
    stats = DashboardService(db).get_stats()

    click.echo(f"\nStorage: {db.storage_mode.value}")
    click.echo("-" * 50)
    click.echo(f"Pending packages:  {stats.pending_packages}")
    click.echo(
        f"Parking occupancy: {stats.occupancy_rate}% "
        f"({stats.occupied_spots} occupied, {stats.free_spots} free)"
    )
    click.echo(f"Residents:         {stats.total_residents}")
    click.echo(f"Visitors parked:   {stats.active_visitors}")

    click.echo("\nGate activity (last 24h):")
    for bucket in stats.activity:
        click.echo(f"  {bucket.label}: {bucket.entries:3d} in  {bucket.exits:3d} out")

    if stats.recent_logs:
        click.echo("\nRecent movements:")
        for log in stats.recent_logs:
            click.echo(f"  {log.timestamp:%H:%M} {log.type.value:5s} {log.vehicle_plate}")


def register_commands(cli):
    """Register dashboard command with main CLI."""
    cli.add_command(dashboard)
