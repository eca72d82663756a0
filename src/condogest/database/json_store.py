"""Local JSON snapshot implementation of the Database interface."""

import json
import os
import tempfile
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, TypeVar

import structlog

from condogest.database.base import Database, check_updates
from condogest.database.fixtures import generate_fixture_data
from condogest.database.snapshot import decode_snapshot, encode_snapshot
from condogest.domain.entities import (
    AccessLog,
    Package,
    ParkingSpot,
    Person,
    RoleDefinition,
    RolePermission,
    Snapshot,
    StorageMode,
    Unit,
    Vehicle,
)
from condogest.domain.errors import NotFoundError, entity_not_found
from condogest.utils.ids import new_id

logger = structlog.get_logger(__name__)

STORAGE_KEY = "condo_manager_db_v1"
DEFAULT_LATENCY = 0.3

E = TypeVar("E")


def _with_id(entity: E) -> E:
    if getattr(entity, "id"):
        return entity
    return replace(entity, id=new_id())


def _replace_by_id(
    items: list[E], entity_id: str, updates: Mapping[str, Any], kind: str
) -> list[E]:
    result = []
    found = False
    for item in items:
        if getattr(item, "id") == entity_id:
            item = replace(item, **updates)
            found = True
        result.append(item)
    if not found:
        raise NotFoundError(entity_not_found(kind, entity_id))
    return result


class LocalDatabase(Database):
    """Database stored as one JSON document on the local filesystem.

    Every call loads the whole document, changes one list and writes the whole
    document back. There is no partial write and no index. A fixed delay is
    applied to each call so callers see the same pacing as a networked store.
    """

    storage_mode = StorageMode.LOCAL

    def __init__(
        self,
        data_path: str | Path,
        latency: float = DEFAULT_LATENCY,
        seed_factory: Callable[[], Snapshot] = generate_fixture_data,
    ):
        """Initialize local database.

        Args:
            data_path: Directory holding the snapshot document
            latency: Seconds to wait on every call
            seed_factory: Builds the snapshot written when no document exists
        """
        self.data_path = Path(data_path)
        self.document_path = self.data_path / f"{STORAGE_KEY}.json"
        self.latency = latency
        self.seed_factory = seed_factory

    def _delay(self) -> None:
        if self.latency > 0:
            time.sleep(self.latency)

    def _load(self) -> Snapshot:
        """Read the snapshot, seeding it on first access."""
        if not self.document_path.exists():
            snapshot = self.seed_factory()
            self._save(snapshot)
            logger.info("local_store_seeded", path=str(self.document_path))
            return snapshot
        with open(self.document_path, encoding="utf-8") as fh:
            document = json.load(fh)
        return decode_snapshot(document)

    def _save(self, snapshot: Snapshot) -> None:
        """Rewrite the whole document atomically."""
        self.data_path.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.data_path, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(encode_snapshot(snapshot), fh, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.document_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    @staticmethod
    def _role_names(snapshot: Snapshot) -> dict[str, str]:
        return {role.id: role.name for role in snapshot.roles}

    def connect(self) -> None:
        """Connect to the database."""
        self.data_path.mkdir(parents=True, exist_ok=True)

    def disconnect(self) -> None:
        """Disconnect from the database."""
        # Nothing is held open between calls
        pass

    def initialize_schema(self) -> None:
        """Seed the snapshot if it does not exist yet."""
        self._load()

    # Unit operations
    def list_units(self) -> list[Unit]:
        """List all units."""
        self._delay()
        return self._load().units

    def add_unit(self, unit: Unit) -> str:
        """Add a unit. Returns unit ID."""
        return self.add_units([unit])[0]

    def add_units(self, units: list[Unit]) -> list[str]:
        """Add many units in one write. Returns their IDs in order."""
        self._delay()
        snapshot = self._load()
        stored = [_with_id(unit) for unit in units]
        snapshot.units.extend(stored)
        self._save(snapshot)
        return [unit.id for unit in stored]

    def update_unit(self, unit_id: str, updates: Mapping[str, Any]) -> None:
        """Update unit fields."""
        check_updates(Unit, updates)
        self._delay()
        snapshot = self._load()
        snapshot.units = _replace_by_id(snapshot.units, unit_id, updates, "Unit")
        self._save(snapshot)

    def delete_unit(self, unit_id: str) -> None:
        """Delete a unit."""
        self._delay()
        snapshot = self._load()
        remaining = [u for u in snapshot.units if u.id != unit_id]
        if len(remaining) == len(snapshot.units):
            raise NotFoundError(entity_not_found("Unit", unit_id))
        snapshot.units = remaining
        self._save(snapshot)

    def delete_block(self, block: str) -> int:
        """Delete every unit of a block. Returns the number removed."""
        self._delay()
        snapshot = self._load()
        remaining = [u for u in snapshot.units if u.block != block]
        removed = len(snapshot.units) - len(remaining)
        snapshot.units = remaining
        self._save(snapshot)
        return removed

    # Role operations
    def list_roles(self) -> list[RoleDefinition]:
        """List all role definitions."""
        self._delay()
        return self._load().roles

    def add_role(self, role: RoleDefinition) -> str:
        """Add a role definition. Returns role ID."""
        self._delay()
        snapshot = self._load()
        role = _with_id(role)
        snapshot.roles.append(role)
        self._save(snapshot)
        return role.id

    def update_role(self, role_id: str, updates: Mapping[str, Any]) -> None:
        """Update role definition fields."""
        check_updates(RoleDefinition, updates)
        self._delay()
        snapshot = self._load()
        snapshot.roles = _replace_by_id(snapshot.roles, role_id, updates, "Role")
        self._save(snapshot)

    def delete_role(self, role_id: str) -> None:
        """Delete a role definition."""
        self._delay()
        snapshot = self._load()
        remaining = [r for r in snapshot.roles if r.id != role_id]
        if len(remaining) == len(snapshot.roles):
            raise NotFoundError(entity_not_found("Role", role_id))
        snapshot.roles = remaining
        self._save(snapshot)

    # Person operations
    def list_people(self) -> list[Person]:
        """List all people with role names resolved."""
        self._delay()
        snapshot = self._load()
        names = self._role_names(snapshot)
        return [replace(p, role_name=names.get(p.role_id)) for p in snapshot.people]

    def get_person(self, person_id: str) -> Optional[Person]:
        """Get person by ID."""
        for person in self.list_people():
            if person.id == person_id:
                return person
        return None

    def find_person_by_username(self, username: str) -> Optional[Person]:
        """Get person by exact (case-sensitive) username."""
        for person in self.list_people():
            if person.username is not None and person.username == username:
                return person
        return None

    def add_person(self, person: Person) -> str:
        """Add a person. Returns person ID."""
        self._delay()
        snapshot = self._load()
        person = _with_id(replace(person, role_name=None))
        snapshot.people.append(person)
        self._save(snapshot)
        return person.id

    def update_person(self, person_id: str, updates: Mapping[str, Any]) -> None:
        """Update person fields."""
        check_updates(Person, updates)
        self._delay()
        snapshot = self._load()
        snapshot.people = _replace_by_id(snapshot.people, person_id, updates, "Person")
        self._save(snapshot)

    # Vehicle operations
    def list_vehicles(self) -> list[Vehicle]:
        """List all vehicles."""
        self._delay()
        return self._load().vehicles

    def add_vehicle(self, vehicle: Vehicle) -> str:
        """Add a vehicle. Returns vehicle ID."""
        self._delay()
        snapshot = self._load()
        vehicle = _with_id(vehicle)
        snapshot.vehicles.append(vehicle)
        self._save(snapshot)
        return vehicle.id

    def update_vehicle(self, vehicle_id: str, updates: Mapping[str, Any]) -> None:
        """Update vehicle fields."""
        check_updates(Vehicle, updates)
        self._delay()
        snapshot = self._load()
        snapshot.vehicles = _replace_by_id(snapshot.vehicles, vehicle_id, updates, "Vehicle")
        self._save(snapshot)

    # Parking operations
    def list_parking_spots(self) -> list[ParkingSpot]:
        """List parking spots in stored order."""
        self._delay()
        return self._load().parking_spots

    def add_parking_spot(self, spot: ParkingSpot) -> str:
        """Add a parking spot. Returns spot ID."""
        self._delay()
        snapshot = self._load()
        spot = _with_id(spot)
        snapshot.parking_spots.append(spot)
        self._save(snapshot)
        return spot.id

    def update_parking_spot(self, spot_id: str, updates: Mapping[str, Any]) -> None:
        """Update parking spot fields."""
        check_updates(ParkingSpot, updates)
        self._delay()
        snapshot = self._load()
        snapshot.parking_spots = _replace_by_id(
            snapshot.parking_spots, spot_id, updates, "Parking spot"
        )
        self._save(snapshot)

    # Package operations
    def list_packages(self) -> list[Package]:
        """List all packages."""
        self._delay()
        return self._load().packages

    def add_package(self, package: Package) -> str:
        """Add a package. Returns package ID."""
        self._delay()
        snapshot = self._load()
        package = _with_id(package)
        snapshot.packages.append(package)
        self._save(snapshot)
        return package.id

    def update_package(self, package_id: str, updates: Mapping[str, Any]) -> None:
        """Update package fields."""
        check_updates(Package, updates)
        self._delay()
        snapshot = self._load()
        snapshot.packages = _replace_by_id(snapshot.packages, package_id, updates, "Package")
        self._save(snapshot)

    # Access log operations
    def list_access_logs(self) -> list[AccessLog]:
        """List access logs, newest first."""
        self._delay()
        return sorted(self._load().logs, key=lambda log: log.timestamp, reverse=True)

    def add_access_log(self, log: AccessLog) -> str:
        """Append an access log. Returns log ID."""
        self._delay()
        snapshot = self._load()
        log = _with_id(log)
        snapshot.logs.append(log)
        self._save(snapshot)
        return log.id

    # Permission operations
    def list_permissions(self) -> list[RolePermission]:
        """List permission rows with role names resolved."""
        self._delay()
        snapshot = self._load()
        names = self._role_names(snapshot)
        return [replace(p, role_name=names.get(p.role_id)) for p in snapshot.permissions]

    def add_permission(self, permission: RolePermission) -> str:
        """Add a permission row. Returns permission ID."""
        self._delay()
        snapshot = self._load()
        permission = _with_id(replace(permission, role_name=None))
        snapshot.permissions.append(permission)
        self._save(snapshot)
        return permission.id

    def update_permission(self, permission_id: str, updates: Mapping[str, Any]) -> None:
        """Update permission flags."""
        check_updates(RolePermission, updates)
        self._delay()
        snapshot = self._load()
        snapshot.permissions = _replace_by_id(
            snapshot.permissions, permission_id, updates, "Permission"
        )
        self._save(snapshot)

    def delete_permissions_for_role(self, role_id: str) -> int:
        """Delete every permission row of a role. Returns the number removed."""
        self._delay()
        snapshot = self._load()
        remaining = [p for p in snapshot.permissions if p.role_id != role_id]
        removed = len(snapshot.permissions) - len(remaining)
        snapshot.permissions = remaining
        self._save(snapshot)
        return removed
