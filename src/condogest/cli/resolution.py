"""CLI helpers for reference resolution."""

from __future__ import annotations

import click

from condogest.cli.error_handling import handle_domain_error
from condogest.domain.entities import Person, RoleDefinition, Unit
from condogest.domain.people import PersonService
from condogest.domain.roles import RoleService
from condogest.domain.units import UnitService
from condogest.utils.resolvers import resolve_person, resolve_role, resolve_unit


def resolve_unit_or_exit(ctx: click.Context, unit_service: UnitService, unit: str) -> Unit:
    """Resolve a unit label or ID, or exit with a CLI error."""
    try:
        return resolve_unit(unit_service, unit)
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def resolve_person_or_exit(
    ctx: click.Context, person_service: PersonService, person: str
) -> Person:
    """Resolve a username or person ID, or exit with a CLI error."""
    try:
        return resolve_person(person_service, person)
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def resolve_role_or_exit(ctx: click.Context, role_service: RoleService, role: str) -> RoleDefinition:
    """Resolve a role name or ID, or exit with a CLI error."""
    try:
        return resolve_role(role_service, role)
    except ValueError as exc:
        handle_domain_error(ctx, exc)
