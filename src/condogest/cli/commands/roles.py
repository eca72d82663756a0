"""Role definition commands."""

import click

from condogest.cli.error_handling import handle_domain_error
from condogest.cli.resolution import resolve_role_or_exit
from condogest.domain.roles import RoleService


@click.group()
def roles_group():
    """Manage roles."""
    pass


@roles_group.command("list")
@click.pass_context
def list_roles(ctx):
    """List role definitions."""
    roles = RoleService(ctx.obj["db"]).list_roles()
    if not roles:
        click.echo("No roles found.")
        return

    click.echo("\nRoles:")
    click.echo("-" * 60)
    for role in roles:
        click.echo(f"{role.name:12s} | {role.description or '':30s} | {role.id}")


@roles_group.command("create")
@click.argument("name", metavar="NAME")
@click.option("--description", help="What the role is for")
@click.pass_context
def create_role(ctx, name: str, description: str | None):
    """Create a role with every permission off."""
    try:
        role = RoleService(ctx.obj["db"]).create_role(name, description)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created role '{role.name}' (ID: {role.id})")


@roles_group.command("delete")
@click.argument("role", metavar="ROLE")
@click.pass_context
def delete_role(ctx, role: str):
    """Delete a role that nobody holds.

    ROLE can be a role name or ID.
    """
    service = RoleService(ctx.obj["db"])
    role_obj = resolve_role_or_exit(ctx, service, role)
    try:
        service.delete_role(role_obj.id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted role '{role_obj.name}'")


def register_commands(cli):
    """Register role commands with main CLI."""
    cli.add_command(roles_group, name="roles")
