"""Abstract database interface."""

from abc import ABC, abstractmethod
from dataclasses import fields
from typing import Any, Mapping, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from condogest.domain.entities import (
    AccessLog,
    Package,
    ParkingSpot,
    Person,
    RoleDefinition,
    RolePermission,
    StorageMode,
    Unit,
    Vehicle,
)

# Fields that are resolved on read and can never be written.
DERIVED_FIELDS = frozenset({"role_name"})


def check_updates(entity_type: type, updates: Mapping[str, Any]) -> None:
    """Reject partial updates naming fields the entity does not have.

    Raises:
        ValueError: If ``updates`` is empty or names ``id``, a derived field
            or an unknown field
    """
    if not updates:
        raise ValueError("No fields to update")
    allowed = {f.name for f in fields(entity_type)} - {"id"} - DERIVED_FIELDS
    unknown = sorted(set(updates) - allowed)
    if unknown:
        raise ValueError(
            f"Cannot update {', '.join(unknown)} on {entity_type.__name__}"
        )


class Database(ABC):
    """Abstract database interface for condogest.

    Every implementation provides every operation, so callers never probe for
    optional methods. ``updates`` arguments are partial mappings of entity
    field names to new values.
    """

    storage_mode: StorageMode

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Prepare storage (create tables or seed the snapshot)."""
        pass

    # Unit operations
    @abstractmethod
    def list_units(self) -> list[Unit]:
        """List all units."""
        pass

    @abstractmethod
    def add_unit(self, unit: Unit) -> str:
        """Add a unit. Returns unit ID."""
        pass

    @abstractmethod
    def add_units(self, units: list[Unit]) -> list[str]:
        """Add many units in one write. Returns their IDs in order."""
        pass

    @abstractmethod
    def update_unit(self, unit_id: str, updates: Mapping[str, Any]) -> None:
        """Update unit fields."""
        pass

    @abstractmethod
    def delete_unit(self, unit_id: str) -> None:
        """Delete a unit."""
        pass

    @abstractmethod
    def delete_block(self, block: str) -> int:
        """Delete every unit of a block. Returns the number removed."""
        pass

    # Role operations
    @abstractmethod
    def list_roles(self) -> list[RoleDefinition]:
        """List all role definitions."""
        pass

    @abstractmethod
    def add_role(self, role: RoleDefinition) -> str:
        """Add a role definition. Returns role ID."""
        pass

    @abstractmethod
    def update_role(self, role_id: str, updates: Mapping[str, Any]) -> None:
        """Update role definition fields."""
        pass

    @abstractmethod
    def delete_role(self, role_id: str) -> None:
        """Delete a role definition."""
        pass

    # Person operations
    @abstractmethod
    def list_people(self) -> list[Person]:
        """List all people with role names resolved."""
        pass

    @abstractmethod
    def get_person(self, person_id: str) -> Optional[Person]:
        """Get person by ID."""
        pass

    @abstractmethod
    def find_person_by_username(self, username: str) -> Optional[Person]:
        """Get person by exact (case-sensitive) username."""
        pass

    @abstractmethod
    def add_person(self, person: Person) -> str:
        """Add a person. Returns person ID."""
        pass

    @abstractmethod
    def update_person(self, person_id: str, updates: Mapping[str, Any]) -> None:
        """Update person fields."""
        pass

    # Vehicle operations
    @abstractmethod
    def list_vehicles(self) -> list[Vehicle]:
        """List all vehicles."""
        pass

    @abstractmethod
    def add_vehicle(self, vehicle: Vehicle) -> str:
        """Add a vehicle. Returns vehicle ID."""
        pass

    @abstractmethod
    def update_vehicle(self, vehicle_id: str, updates: Mapping[str, Any]) -> None:
        """Update vehicle fields."""
        pass

    # Parking operations
    @abstractmethod
    def list_parking_spots(self) -> list[ParkingSpot]:
        """List parking spots in stored order."""
        pass

    @abstractmethod
    def add_parking_spot(self, spot: ParkingSpot) -> str:
        """Add a parking spot. Returns spot ID."""
        pass

    @abstractmethod
    def update_parking_spot(self, spot_id: str, updates: Mapping[str, Any]) -> None:
        """Update parking spot fields."""
        pass

    # Package operations
    @abstractmethod
    def list_packages(self) -> list[Package]:
        """List all packages."""
        pass

    @abstractmethod
    def add_package(self, package: Package) -> str:
        """Add a package. Returns package ID."""
        pass

    @abstractmethod
    def update_package(self, package_id: str, updates: Mapping[str, Any]) -> None:
        """Update package fields."""
        pass

    # Access log operations
    @abstractmethod
    def list_access_logs(self) -> list[AccessLog]:
        """List access logs, newest first."""
        pass

    @abstractmethod
    def add_access_log(self, log: AccessLog) -> str:
        """Append an access log. Returns log ID."""
        pass

    # Permission operations
    @abstractmethod
    def list_permissions(self) -> list[RolePermission]:
        """List permission rows with role names resolved."""
        pass

    @abstractmethod
    def add_permission(self, permission: RolePermission) -> str:
        """Add a permission row. Returns permission ID."""
        pass

    @abstractmethod
    def update_permission(self, permission_id: str, updates: Mapping[str, Any]) -> None:
        """Update permission flags."""
        pass

    @abstractmethod
    def delete_permissions_for_role(self, role_id: str) -> int:
        """Delete every permission row of a role. Returns the number removed."""
        pass
