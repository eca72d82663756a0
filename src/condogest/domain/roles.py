"""Role definition service."""

import structlog

from condogest.database.base import Database
from condogest.domain.entities import Resource, RoleDefinition, RolePermission
from condogest.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    entity_not_found,
    role_delete_blocked,
)
from condogest.utils.ids import new_id

logger = structlog.get_logger(__name__)


class RoleService:
    """Service for managing role definitions."""

    def __init__(self, db: Database):
        """Initialize role service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_roles(self) -> list[RoleDefinition]:
        return self.db.list_roles()

    def get_role(self, role_id: str) -> RoleDefinition:
        for role in self.db.list_roles():
            if role.id == role_id:
                return role
        raise NotFoundError(entity_not_found("Role", role_id))

    def find_by_name(self, name: str) -> RoleDefinition | None:
        name = name.strip().upper()
        for role in self.db.list_roles():
            if role.name.upper() == name:
                return role
        return None

    def create_role(self, name: str, description: str | None = None) -> RoleDefinition:
        """Create a role with no permissions.

        One permission row per resource is added with every flag off.

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a role with the same name exists
        """
        name = (name or "").strip().upper()
        if not name:
            raise ValidationError("Role name is required")
        if self.find_by_name(name) is not None:
            raise ConflictError(f"Role '{name}' already exists")

        role = RoleDefinition(id=new_id(), name=name, description=(description or None))
        self.db.add_role(role)
        for resource in Resource:
            self.db.add_permission(
                RolePermission(id=new_id(), role_id=role.id, resource=resource)
            )
        logger.info("role_created", role_id=role.id, name=name)
        return role

    def delete_role(self, role_id: str) -> int:
        """Delete a role and its permission rows.

        Returns:
            Number of permission rows removed

        Raises:
            NotFoundError: If the role does not exist
            DependencyError: If people still hold the role
        """
        role = self.get_role(role_id)
        holders = [p for p in self.db.list_people() if p.role_id == role_id]
        if holders:
            raise DependencyError(role_delete_blocked(role.name, len(holders)))

        removed = self.db.delete_permissions_for_role(role_id)
        self.db.delete_role(role_id)
        logger.info("role_deleted", role_id=role_id, permissions=removed)
        return removed
