"""Login and password commands."""

import click

from condogest.cli.error_handling import handle_domain_error
from condogest.cli.resolution import resolve_person_or_exit
from condogest.domain.auth import AuthService
from condogest.domain.errors import InactiveUserError
from condogest.domain.people import PersonService

INACTIVE_EXIT_CODE = 2


def _choose_password(ctx, service: AuthService, person_id: str) -> None:
    new_password = click.prompt("New password", hide_input=True)
    confirmation = click.prompt("Confirm new password", hide_input=True)
    try:
        service.change_password(person_id, new_password, confirmation)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo("Password changed.")


@click.command("login")
@click.argument("username", metavar="USERNAME")
@click.password_option("--password", confirmation_prompt=False, help="Password (prompted if omitted)")
@click.pass_context
def login(ctx, username: str, password: str):
    """Check a user's credentials.

    On first access, or after a reset, a new password must be chosen before
    the login completes.
    """
    service = AuthService(ctx.obj["db"])

    try:
        person = service.login(username, password)
    except InactiveUserError as e:
        handle_domain_error(ctx, e, exit_code=INACTIVE_EXIT_CODE)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if service.requires_password_change(person):
        click.echo("First access: please choose a new password (at least 6 characters).")
        _choose_password(ctx, service, person.id)

    click.echo(f"Welcome, {person.name} ({person.role_name})")


@click.command("change-password")
@click.argument("person", metavar="PERSON")
@click.pass_context
def change_password(ctx, person: str):
    """Choose a new password for a person.

    PERSON can be a username or a person ID.
    """
    db = ctx.obj["db"]
    person_obj = resolve_person_or_exit(ctx, PersonService(db), person)
    _choose_password(ctx, AuthService(db), person_obj.id)


def register_commands(cli):
    """Register auth commands with main CLI."""
    cli.add_command(login)
    cli.add_command(change_password)
