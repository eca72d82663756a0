"""People directory service."""

from typing import Any, Optional
from urllib.parse import quote_plus

import structlog

from condogest.database.base import Database
from condogest.domain.auth import DEFAULT_PASSWORD
from condogest.domain.entities import Person, RoleDefinition
from condogest.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    entity_not_found,
    unit_not_found,
)
from condogest.utils.ids import new_id
from condogest.utils.passwords import DEFAULT_ITERATIONS, hash_password

logger = structlog.get_logger(__name__)

AVATAR_URL = "https://ui-avatars.com/api/?name={name}&background=random"


def default_avatar(name: str) -> str:
    """Generated initials avatar for a person without a picture."""
    return AVATAR_URL.format(name=quote_plus(name))


class PersonService:
    """Service for managing residents, staff and administrators."""

    def __init__(self, db: Database, password_iterations: int = DEFAULT_ITERATIONS):
        """Initialize person service.

        Args:
            db: Database instance
            password_iterations: PBKDF2 rounds for initial passwords
        """
        self.db = db
        self.password_iterations = password_iterations

    def _get_role(self, role_id: str) -> RoleDefinition:
        for role in self.db.list_roles():
            if role.id == role_id:
                return role
        raise NotFoundError(entity_not_found("Role", role_id))

    def _check_unit(self, role: RoleDefinition, unit_id: Optional[str]) -> Optional[str]:
        """Unit kept for a person of ``role``.

        Residents must live in an existing unit; everyone else has none.
        """
        if not role.is_resident:
            return None
        if not unit_id:
            raise ValidationError("Residents must be linked to a unit")
        if not any(unit.id == unit_id for unit in self.db.list_units()):
            raise NotFoundError(unit_not_found(unit_id))
        return unit_id

    def _check_username(self, username: Optional[str], person_id: Optional[str] = None) -> None:
        if username is None:
            return
        existing = self.db.find_person_by_username(username)
        if existing is not None and existing.id != person_id:
            raise ConflictError(f"Username '{username}' is already taken")

    def add_person(
        self,
        name: str,
        email: str,
        role_id: str,
        phone: str = "",
        unit_id: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> Person:
        """Register a person.

        A person given a username can log in. Without an explicit password the
        default one is set, and either way the first login asks for a new one.

        Args:
            name: Full name
            email: Contact email
            role_id: Role definition ID
            phone: Contact phone
            unit_id: Unit, required for residents and ignored otherwise
            username: Login name
            password: Initial password
            avatar_url: Picture URL (defaults to a generated initials avatar)

        Returns:
            The stored person, role name resolved

        Raises:
            ValidationError: If name or email is missing, or a resident has no unit
            NotFoundError: If the role or unit does not exist
            ConflictError: If the username is taken
        """
        name = (name or "").strip()
        email = (email or "").strip()
        if not name or not email:
            raise ValidationError("Name and email are required")

        role = self._get_role(role_id)
        unit_id = self._check_unit(role, unit_id)

        username = username.strip() if username and username.strip() else None
        self._check_username(username)
        password_hash = None
        if username is not None:
            password_hash = hash_password(
                password or DEFAULT_PASSWORD, iterations=self.password_iterations
            )

        person = Person(
            id=new_id(),
            name=name,
            role_id=role.id,
            email=email,
            phone=phone.strip(),
            unit_id=unit_id,
            avatar_url=avatar_url or default_avatar(name),
            username=username,
            password_hash=password_hash,
            must_change_password=username is not None,
            active=True,
        )
        person_id = self.db.add_person(person)
        logger.info("person_added", person_id=person_id, role=role.name)
        return self.get_person(person_id)

    def get_person(self, person_id: str) -> Person:
        """Get person by ID.

        Raises:
            NotFoundError: If the person does not exist
        """
        person = self.db.get_person(person_id)
        if person is None:
            raise NotFoundError(entity_not_found("Person", person_id))
        return person

    def update_person(self, person_id: str, **changes: Any) -> Person:
        """Edit contact details, role or unit.

        Changing to a non-resident role clears the unit; changing to a
        resident role requires one.

        Raises:
            ValidationError: If name or email would become empty
            NotFoundError: If the person, role or unit does not exist
        """
        person = self.get_person(person_id)
        allowed = {"name", "email", "phone", "role_id", "unit_id", "avatar_url"}
        unknown = sorted(set(changes) - allowed)
        if unknown:
            raise ValidationError(f"Cannot edit {', '.join(unknown)}")

        updates = {key: value for key, value in changes.items() if value is not None}
        for key in ("name", "email"):
            if key in updates:
                updates[key] = updates[key].strip()
                if not updates[key]:
                    raise ValidationError("Name and email are required")

        if "role_id" in updates or "unit_id" in updates:
            role = self._get_role(updates.get("role_id", person.role_id))
            unit_id = self._check_unit(role, updates.get("unit_id", person.unit_id))
            if unit_id != person.unit_id:
                updates["unit_id"] = unit_id
            else:
                updates.pop("unit_id", None)

        if updates:
            self.db.update_person(person_id, updates)
        return self.get_person(person_id)

    def set_active(self, person_id: str, active: bool) -> Person:
        """Activate or deactivate a person's login."""
        self.get_person(person_id)
        self.db.update_person(person_id, {"active": active})
        logger.info("person_active_changed", person_id=person_id, active=active)
        return self.get_person(person_id)

    def list_people(self) -> list[Person]:
        return self.db.list_people()

    def list_residents(self) -> list[Person]:
        """People whose role is a resident role."""
        return [p for p in self.db.list_people() if p.is_resident]

    def list_staff(self) -> list[Person]:
        """Staff and administrators."""
        return [p for p in self.db.list_people() if not p.is_resident]

    def residents_of_unit(self, unit_id: str) -> list[Person]:
        return [p for p in self.db.list_people() if p.is_resident and p.unit_id == unit_id]

    def search(self, text: str) -> list[Person]:
        """Case-insensitive match on name, email or username."""
        needle = text.strip().lower()
        return [
            p
            for p in self.db.list_people()
            if needle in p.name.lower()
            or needle in p.email.lower()
            or (p.username is not None and needle in p.username.lower())
        ]
