"""Permission matrix commands."""

import click

from condogest.cli.error_handling import handle_domain_error
from condogest.cli.resolution import resolve_role_or_exit
from condogest.domain.entities import Capability, Resource
from condogest.domain.permissions import PermissionMatrix, PermissionService
from condogest.domain.roles import RoleService

CAPABILITIES = {
    "view": Capability.VIEW,
    "create": Capability.CREATE,
    "edit": Capability.EDIT,
    "delete": Capability.DELETE,
}


def _flag(value: bool) -> str:
    return "x" if value else "."


@click.group()
def permissions_group():
    """View and toggle role permissions."""
    pass


@permissions_group.command("list")
@click.option("--role", help="Only this role (name or ID)")
@click.pass_context
def list_permissions(ctx, role: str | None):
    """Show the permission matrix (V=view C=create E=edit D=delete)."""
    db = ctx.obj["db"]
    groups = PermissionService(db).group_by_role()
    if role is not None:
        role_id = resolve_role_or_exit(ctx, RoleService(db), role).id
        groups = {k: v for k, v in groups.items() if k == role_id}

    if not groups:
        click.echo("No permissions found.")
        return

    for rows in groups.values():
        click.echo(f"\n{rows[0].role_name or rows[0].role_id}")
        click.echo(f"  {'resource':16s} V C E D")
        for row in rows:
            click.echo(
                f"  {row.resource.value:16s} {_flag(row.can_view)} {_flag(row.can_create)} "
                f"{_flag(row.can_edit)} {_flag(row.can_delete)}"
            )


@permissions_group.command("toggle")
@click.argument("role", metavar="ROLE")
@click.argument("resource", type=click.Choice([r.value for r in Resource]))
@click.argument("capability", type=click.Choice(list(CAPABILITIES)))
@click.pass_context
def toggle_permission(ctx, role: str, resource: str, capability: str):
    """Flip one capability of a role on a resource.

    Examples:
        condogest permissions toggle STAFF packages delete
    """
    db = ctx.obj["db"]
    service = PermissionService(db)
    role_obj = resolve_role_or_exit(ctx, RoleService(db), role)

    row = service.find_permission(role_obj.id, Resource(resource))
    if row is None:
        click.echo(f"Error: Role '{role_obj.name}' has no '{resource}' permission row", err=True)
        ctx.exit(1)

    matrix = PermissionMatrix(service, rows=[row])
    try:
        updated = matrix.toggle(row.id, CAPABILITIES[capability])
    except ValueError as e:
        handle_domain_error(ctx, e)

    state = "granted" if updated.allows(CAPABILITIES[capability]) else "revoked"
    click.echo(f"{capability} on {resource} {state} for {role_obj.name}")


def register_commands(cli):
    """Register permission commands with main CLI."""
    cli.add_command(permissions_group, name="permissions")
