"""People management commands."""

import click

from condogest.cli.error_handling import handle_domain_error
from condogest.cli.resolution import (
    resolve_person_or_exit,
    resolve_role_or_exit,
    resolve_unit_or_exit,
)
from condogest.domain.auth import DEFAULT_PASSWORD, AuthService
from condogest.domain.people import PersonService
from condogest.domain.roles import RoleService
from condogest.domain.units import UnitService


@click.group()
def people_group():
    """Manage residents, staff and administrators."""
    pass


@people_group.command("list")
@click.option("--residents", "scope", flag_value="residents", help="Only residents")
@click.option("--staff", "scope", flag_value="staff", help="Only staff and administrators")
@click.option("--search", help="Filter by name, email or username")
@click.pass_context
def list_people(ctx, scope: str | None, search: str | None):
    """List people."""
    db = ctx.obj["db"]
    service = PersonService(db)

    if scope == "residents":
        people = service.list_residents()
    elif scope == "staff":
        people = service.list_staff()
    else:
        people = service.list_people()
    if search:
        matching = {p.id for p in service.search(search)}
        people = [p for p in people if p.id in matching]

    if not people:
        click.echo("No people found.")
        return

    labels = {u.id: u.label for u in UnitService(db).list_units()}
    click.echo("\nPeople:")
    click.echo("-" * 90)
    for person in people:
        unit = labels.get(person.unit_id, "-") if person.unit_id else "-"
        status = "active" if person.active else "INACTIVE"
        login = person.username or "-"
        click.echo(
            f"{person.name:24s} | {person.role_name or '?':10s} | Unit: {unit:8s} | "
            f"Login: {login:10s} | {status}"
        )


@people_group.command("add")
@click.argument("name", metavar="NAME")
@click.option("--email", required=True, help="Contact email")
@click.option("--role", required=True, help="Role name or ID")
@click.option("--phone", default="", help="Contact phone")
@click.option("--unit", help="Unit label (A-101) or ID, required for residents")
@click.option("--username", help="Login name; the person must change the password on first login")
@click.option("--password", help=f"Initial password (defaults to '{DEFAULT_PASSWORD}')")
@click.pass_context
def add_person(
    ctx,
    name: str,
    email: str,
    role: str,
    phone: str,
    unit: str | None,
    username: str | None,
    password: str | None,
):
    """Register a person.

    Examples:
        condogest people add "Maria Souza" --email maria@email.com --role RESIDENT --unit A-101
        condogest people add "Joao Lima" --email joao@condo.com --role STAFF --username joao
    """
    db = ctx.obj["db"]
    service = PersonService(db)
    role_obj = resolve_role_or_exit(ctx, RoleService(db), role)

    unit_id = None
    if unit is not None and role_obj.is_resident:
        unit_id = resolve_unit_or_exit(ctx, UnitService(db), unit).id

    try:
        person = service.add_person(
            name=name,
            email=email,
            role_id=role_obj.id,
            phone=phone,
            unit_id=unit_id,
            username=username,
            password=password,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Registered {person.name} as {person.role_name} (ID: {person.id})")
    if person.username:
        click.echo(f"Login '{person.username}' must change the password on first access")


@people_group.command("edit")
@click.argument("person", metavar="PERSON")
@click.option("--name", help="New name")
@click.option("--email", help="New email")
@click.option("--phone", help="New phone")
@click.option("--role", help="New role name or ID")
@click.option("--unit", help="New unit label or ID")
@click.pass_context
def edit_person(
    ctx,
    person: str,
    name: str | None,
    email: str | None,
    phone: str | None,
    role: str | None,
    unit: str | None,
):
    """Edit a person's details.

    PERSON can be a username or a person ID.
    """
    db = ctx.obj["db"]
    service = PersonService(db)
    person_obj = resolve_person_or_exit(ctx, service, person)

    role_id = resolve_role_or_exit(ctx, RoleService(db), role).id if role else None
    unit_id = resolve_unit_or_exit(ctx, UnitService(db), unit).id if unit else None

    try:
        updated = service.update_person(
            person_obj.id,
            name=name,
            email=email,
            phone=phone,
            role_id=role_id,
            unit_id=unit_id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated {updated.name}")


def _set_active(ctx, person: str, active: bool) -> None:
    service = PersonService(ctx.obj["db"])
    person_obj = resolve_person_or_exit(ctx, service, person)
    try:
        service.set_active(person_obj.id, active)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"{'Activated' if active else 'Deactivated'} {person_obj.name}")


@people_group.command("activate")
@click.argument("person", metavar="PERSON")
@click.pass_context
def activate(ctx, person: str):
    """Allow a person to log in again."""
    _set_active(ctx, person, True)


@people_group.command("deactivate")
@click.argument("person", metavar="PERSON")
@click.pass_context
def deactivate(ctx, person: str):
    """Block a person from logging in."""
    _set_active(ctx, person, False)


@people_group.command("reset-password")
@click.argument("person", metavar="PERSON")
@click.pass_context
def reset_password(ctx, person: str):
    """Reset a person's password to the default.

    The person must choose a new password on the next login.
    """
    db = ctx.obj["db"]
    person_obj = resolve_person_or_exit(ctx, PersonService(db), person)
    try:
        AuthService(db).reset_password(person_obj.id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Password of {person_obj.name} reset to '{DEFAULT_PASSWORD}'")


@people_group.command("grant-login")
@click.argument("person", metavar="PERSON")
@click.argument("username", metavar="USERNAME")
@click.option("--password", default=DEFAULT_PASSWORD, show_default=True, help="Temporary password")
@click.pass_context
def grant_login(ctx, person: str, username: str, password: str):
    """Give a person a login with a temporary password."""
    db = ctx.obj["db"]
    person_obj = resolve_person_or_exit(ctx, PersonService(db), person)
    try:
        AuthService(db).set_credentials(person_obj.id, username, password)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"{person_obj.name} can now log in as '{username.strip()}'")


def register_commands(cli):
    """Register people commands with main CLI."""
    cli.add_command(people_group, name="people")
