"""Role permission matrix service.

A toggle flips one capability of one (role, resource) row and writes only
that field. ``PermissionMatrix`` keeps the caller's copy of the rows: a toggle
is applied there first as a tentative value and either confirmed once the
write succeeds or rolled back to the last confirmed row when it fails.
"""

from dataclasses import replace
from typing import Iterable, Optional

import structlog

from condogest.database.base import Database
from condogest.domain.entities import Capability, RecordState, Resource, RolePermission
from condogest.domain.errors import NotFoundError, entity_not_found

logger = structlog.get_logger(__name__)


def group_by_role(permissions: Iterable[RolePermission]) -> dict[str, list[RolePermission]]:
    """Group rows by role id, keeping first-seen role order and row order."""
    groups: dict[str, list[RolePermission]] = {}
    for permission in permissions:
        groups.setdefault(permission.role_id, []).append(permission)
    return groups


def toggled(permission: RolePermission, capability: Capability) -> RolePermission:
    """Copy of ``permission`` with one capability flipped."""
    capability = Capability(capability)
    return replace(permission, **{capability.value: not permission.allows(capability)})


class PermissionService:
    """Service for reading and toggling role permissions."""

    def __init__(self, db: Database):
        """Initialize permission service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_permissions(self) -> list[RolePermission]:
        return self.db.list_permissions()

    def group_by_role(self) -> dict[str, list[RolePermission]]:
        return group_by_role(self.db.list_permissions())

    def get_permission(self, permission_id: str) -> RolePermission:
        for permission in self.db.list_permissions():
            if permission.id == permission_id:
                return permission
        raise NotFoundError(entity_not_found("Permission", permission_id))

    def find_permission(self, role_id: str, resource: Resource) -> Optional[RolePermission]:
        """Row for a (role, resource) pair, if one exists."""
        resource = Resource(resource)
        for permission in self.db.list_permissions():
            if permission.role_id == role_id and permission.resource is resource:
                return permission
        return None

    def write_flag(self, permission_id: str, capability: Capability, value: bool) -> None:
        """Persist a single capability flag."""
        capability = Capability(capability)
        self.db.update_permission(permission_id, {capability.value: value})
        logger.info(
            "permission_updated",
            permission_id=permission_id,
            capability=capability.value,
            value=value,
        )

    def toggle(self, permission_id: str, capability: Capability) -> RolePermission:
        """Flip one capability of a stored row.

        Returns:
            The row as it is after the toggle

        Raises:
            NotFoundError: If the row does not exist
        """
        capability = Capability(capability)
        updated = toggled(self.get_permission(permission_id), capability)
        self.write_flag(permission_id, capability, updated.allows(capability))
        return updated

    def allows(self, role_id: str, resource: Resource, capability: Capability) -> bool:
        """Whether a role holds a capability on a resource. Missing rows deny."""
        permission = self.find_permission(role_id, resource)
        return permission is not None and permission.allows(Capability(capability))


class PermissionMatrix:
    """Caller-side copy of the permission rows with optimistic toggles."""

    def __init__(self, service: PermissionService, rows: Optional[list[RolePermission]] = None):
        self.service = service
        rows = service.list_permissions() if rows is None else rows
        self._confirmed: dict[str, RolePermission] = {row.id: row for row in rows}
        self._current: dict[str, RolePermission] = dict(self._confirmed)

    def rows(self) -> list[RolePermission]:
        return list(self._current.values())

    def row(self, permission_id: str) -> RolePermission:
        try:
            return self._current[permission_id]
        except KeyError:
            raise NotFoundError(entity_not_found("Permission", permission_id)) from None

    def state(self, permission_id: str) -> RecordState:
        self.row(permission_id)
        if self._current[permission_id] == self._confirmed[permission_id]:
            return RecordState.CONFIRMED
        return RecordState.TENTATIVE

    def by_role(self) -> dict[str, list[RolePermission]]:
        return group_by_role(self._current.values())

    def toggle(self, permission_id: str, capability: Capability) -> RolePermission:
        """Flip one capability locally, then persist it.

        If the write fails, the row goes back to its last confirmed value and
        the error is re-raised.
        """
        capability = Capability(capability)
        tentative = toggled(self.row(permission_id), capability)
        self._current[permission_id] = tentative
        try:
            self.service.write_flag(permission_id, capability, tentative.allows(capability))
        except Exception:
            self._current[permission_id] = self._confirmed[permission_id]
            logger.warning(
                "permission_toggle_rolled_back",
                permission_id=permission_id,
                capability=capability.value,
            )
            raise
        self._confirmed[permission_id] = tentative
        return tentative
