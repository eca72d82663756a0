"""Resolve human references (unit labels, usernames, role names) to IDs."""

from condogest.domain.entities import Person, RoleDefinition, Unit
from condogest.domain.errors import NotFoundError, unit_not_found
from condogest.domain.people import PersonService
from condogest.domain.roles import RoleService
from condogest.domain.units import UnitService


def resolve_unit(unit_service: UnitService, unit: str) -> Unit:
    """Resolve a unit label or ID to a unit.

    Args:
        unit_service: UnitService instance
        unit: Label such as "A-101" (block, dash, number) or a unit ID

    Returns:
        Unit entity

    Raises:
        NotFoundError: If no unit matches
    """
    units = unit_service.list_units()
    for candidate in units:
        if candidate.id == unit:
            return candidate

    # Block names may themselves contain dashes, so split on the last one
    if "-" in unit:
        block, number = unit.rsplit("-", 1)
        found = unit_service.find_unit(block, number)
        if found is not None:
            return found

    raise NotFoundError(unit_not_found(unit))


def resolve_person(person_service: PersonService, person: str) -> Person:
    """Resolve a username or person ID to a person.

    Raises:
        NotFoundError: If no person matches
    """
    people = person_service.list_people()
    for candidate in people:
        if candidate.id == person:
            return candidate
    for candidate in people:
        if candidate.username is not None and candidate.username == person:
            return candidate

    raise NotFoundError(f"Person '{person}' not found")


def resolve_role(role_service: RoleService, role: str) -> RoleDefinition:
    """Resolve a role name (case-insensitive) or ID to a role.

    Raises:
        NotFoundError: If no role matches
    """
    for candidate in role_service.list_roles():
        if candidate.id == role:
            return candidate
    found = role_service.find_by_name(role)
    if found is None:
        raise NotFoundError(f"Role '{role}' not found")
    return found
