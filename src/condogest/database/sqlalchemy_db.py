"""Relational backend implementation of the Database interface."""

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

import structlog
from sqlalchemy import func
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import Session, joinedload

from condogest.database.base import Database, check_updates
from condogest.database.models import (
    AccessLog,
    Package,
    ParkingSpot,
    Person,
    Role,
    RolePermission,
    Unit,
    Vehicle,
    create_session_factory,
)
from condogest.database.mappers import (
    PACKAGE_COLUMNS,
    PARKING_SPOT_COLUMNS,
    PERMISSION_COLUMNS,
    PERSON_COLUMNS,
    ROLE_COLUMNS,
    UNIT_COLUMNS,
    VEHICLE_COLUMNS,
    access_log_to_domain,
    access_log_to_orm,
    package_to_domain,
    package_to_orm,
    parking_spot_to_domain,
    parking_spot_to_orm,
    permission_to_domain,
    permission_to_orm,
    person_to_domain,
    person_to_orm,
    role_to_domain,
    role_to_orm,
    unit_to_domain,
    unit_to_orm,
    updates_to_columns,
    vehicle_to_domain,
    vehicle_to_orm,
)
from condogest.domain import entities as domain
from condogest.domain.errors import NotFoundError, entity_not_found

logger = structlog.get_logger(__name__)


def build_database_url(database_url: str, access_key: Optional[str] = None) -> URL:
    """Combine the backend URL with its access key.

    The key is applied as the connection password. File-based backends such
    as SQLite have no host and take no credentials, so the key is ignored
    for them.
    """
    url = make_url(database_url)
    if access_key and url.host:
        url = url.set(password=access_key)
    return url


class SQLAlchemyDatabase(Database):
    """SQLAlchemy-based implementation of Database interface.

    Each call issues one statement scoped to one table (plus the role join
    for people and permissions). Backend errors roll the session back and
    propagate unchanged.
    """

    storage_mode = domain.StorageMode.REMOTE

    def __init__(self, database_url: str, access_key: Optional[str] = None):
        """Initialize SQLAlchemy database.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db',
                'postgresql://user@host/db', etc.)
            access_key: Password for the backend, if it needs one
        """
        self.database_url = build_database_url(database_url, access_key)
        self.session_factory = create_session_factory(self.database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    @contextmanager
    def _write(self) -> Iterator[Session]:
        """Run one write and commit it, rolling back on any failure."""
        session = self._get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise

    @contextmanager
    def _read(self) -> Iterator[Session]:
        """Run one query, rolling back if it fails so the session stays usable."""
        session = self._get_session()
        try:
            yield session
        except Exception:
            session.rollback()
            raise

    def _update(self, model: type, entity_id: str, values: dict[str, Any], kind: str) -> None:
        with self._write() as session:
            count = session.query(model).filter(model.id == entity_id).update(values)
            if count == 0:
                raise NotFoundError(entity_not_found(kind, entity_id))

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        logger.debug("remote_database_bound", url=self.database_url.render_as_string())

    def disconnect(self) -> None:
        """Disconnect from the database."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        # Schema is created automatically by create_session_factory
        pass

    # Unit operations
    def list_units(self) -> list[domain.Unit]:
        """List all units."""
        with self._read() as session:
            units = session.query(Unit).order_by(Unit.block, Unit.floor, Unit.number).all()
        return [unit_to_domain(u) for u in units]

    def add_unit(self, unit: domain.Unit) -> str:
        """Add a unit. Returns unit ID."""
        return self.add_units([unit])[0]

    def add_units(self, units: list[domain.Unit]) -> list[str]:
        """Add many units in one write. Returns their IDs in order."""
        rows = [unit_to_orm(u) for u in units]
        with self._write() as session:
            session.add_all(rows)
            ids = [row.id for row in rows]
        return ids

    def update_unit(self, unit_id: str, updates: Mapping[str, Any]) -> None:
        """Update unit fields."""
        check_updates(domain.Unit, updates)
        self._update(Unit, unit_id, updates_to_columns(updates, UNIT_COLUMNS), "Unit")

    def delete_unit(self, unit_id: str) -> None:
        """Delete a unit."""
        with self._write() as session:
            count = session.query(Unit).filter(Unit.id == unit_id).delete()
            if count == 0:
                raise NotFoundError(entity_not_found("Unit", unit_id))

    def delete_block(self, block: str) -> int:
        """Delete every unit of a block. Returns the number removed."""
        with self._write() as session:
            return session.query(Unit).filter(Unit.block == block).delete()

    # Role operations
    def list_roles(self) -> list[domain.RoleDefinition]:
        """List all role definitions."""
        with self._read() as session:
            roles = session.query(Role).order_by(Role.name).all()
        return [role_to_domain(r) for r in roles]

    def add_role(self, role: domain.RoleDefinition) -> str:
        """Add a role definition. Returns role ID."""
        row = role_to_orm(role)
        with self._write() as session:
            session.add(row)
            role_id = row.id
        return role_id

    def update_role(self, role_id: str, updates: Mapping[str, Any]) -> None:
        """Update role definition fields."""
        check_updates(domain.RoleDefinition, updates)
        self._update(Role, role_id, updates_to_columns(updates, ROLE_COLUMNS), "Role")

    def delete_role(self, role_id: str) -> None:
        """Delete a role definition."""
        with self._write() as session:
            count = session.query(Role).filter(Role.id == role_id).delete()
            if count == 0:
                raise NotFoundError(entity_not_found("Role", role_id))

    # Person operations
    def _people_query(self, session: Session):
        return session.query(Person).options(joinedload(Person.role))

    def list_people(self) -> list[domain.Person]:
        """List all people with role names resolved."""
        with self._read() as session:
            people = self._people_query(session).order_by(Person.name).all()
        return [person_to_domain(p) for p in people]

    def get_person(self, person_id: str) -> Optional[domain.Person]:
        """Get person by ID."""
        with self._read() as session:
            person = self._people_query(session).filter(Person.id == person_id).first()
        if person is None:
            return None
        return person_to_domain(person)

    def find_person_by_username(self, username: str) -> Optional[domain.Person]:
        """Get person by exact (case-sensitive) username."""
        with self._read() as session:
            person = self._people_query(session).filter(Person.username == username).first()
        if person is None:
            return None
        return person_to_domain(person)

    def add_person(self, person: domain.Person) -> str:
        """Add a person. Returns person ID."""
        row = person_to_orm(person)
        with self._write() as session:
            session.add(row)
            person_id = row.id
        return person_id

    def update_person(self, person_id: str, updates: Mapping[str, Any]) -> None:
        """Update person fields."""
        check_updates(domain.Person, updates)
        self._update(Person, person_id, updates_to_columns(updates, PERSON_COLUMNS), "Person")

    # Vehicle operations
    def list_vehicles(self) -> list[domain.Vehicle]:
        """List all vehicles."""
        with self._read() as session:
            vehicles = session.query(Vehicle).order_by(Vehicle.plate).all()
        return [vehicle_to_domain(v) for v in vehicles]

    def add_vehicle(self, vehicle: domain.Vehicle) -> str:
        """Add a vehicle. Returns vehicle ID."""
        row = vehicle_to_orm(vehicle)
        with self._write() as session:
            session.add(row)
            vehicle_id = row.id
        return vehicle_id

    def update_vehicle(self, vehicle_id: str, updates: Mapping[str, Any]) -> None:
        """Update vehicle fields."""
        check_updates(domain.Vehicle, updates)
        self._update(Vehicle, vehicle_id, updates_to_columns(updates, VEHICLE_COLUMNS), "Vehicle")

    # Parking operations
    def list_parking_spots(self) -> list[domain.ParkingSpot]:
        """List parking spots in stored order."""
        with self._read() as session:
            spots = session.query(ParkingSpot).order_by(ParkingSpot.position).all()
        return [parking_spot_to_domain(s) for s in spots]

    def add_parking_spot(self, spot: domain.ParkingSpot) -> str:
        """Add a parking spot after the existing ones. Returns spot ID."""
        with self._write() as session:
            last = session.query(func.max(ParkingSpot.position)).scalar()
            row = parking_spot_to_orm(spot, position=(last or 0) + 1)
            session.add(row)
            spot_id = row.id
        return spot_id

    def update_parking_spot(self, spot_id: str, updates: Mapping[str, Any]) -> None:
        """Update parking spot fields."""
        check_updates(domain.ParkingSpot, updates)
        self._update(
            ParkingSpot, spot_id, updates_to_columns(updates, PARKING_SPOT_COLUMNS), "Parking spot"
        )

    # Package operations
    def list_packages(self) -> list[domain.Package]:
        """List all packages."""
        with self._read() as session:
            packages = session.query(Package).order_by(Package.received_at).all()
        return [package_to_domain(p) for p in packages]

    def add_package(self, package: domain.Package) -> str:
        """Add a package. Returns package ID."""
        row = package_to_orm(package)
        with self._write() as session:
            session.add(row)
            package_id = row.id
        return package_id

    def update_package(self, package_id: str, updates: Mapping[str, Any]) -> None:
        """Update package fields."""
        check_updates(domain.Package, updates)
        self._update(Package, package_id, updates_to_columns(updates, PACKAGE_COLUMNS), "Package")

    # Access log operations
    def list_access_logs(self) -> list[domain.AccessLog]:
        """List access logs, newest first."""
        with self._read() as session:
            logs = session.query(AccessLog).order_by(AccessLog.timestamp.desc()).all()
        return [access_log_to_domain(log) for log in logs]

    def add_access_log(self, log: domain.AccessLog) -> str:
        """Append an access log. Returns log ID."""
        row = access_log_to_orm(log)
        with self._write() as session:
            session.add(row)
            log_id = row.id
        return log_id

    # Permission operations
    def list_permissions(self) -> list[domain.RolePermission]:
        """List permission rows with role names resolved."""
        with self._read() as session:
            rows = (
                session.query(RolePermission)
                .options(joinedload(RolePermission.role))
                .order_by(RolePermission.role_id, RolePermission.resource)
                .all()
            )
        return [permission_to_domain(p) for p in rows]

    def add_permission(self, permission: domain.RolePermission) -> str:
        """Add a permission row. Returns permission ID."""
        row = permission_to_orm(permission)
        with self._write() as session:
            session.add(row)
            permission_id = row.id
        return permission_id

    def update_permission(self, permission_id: str, updates: Mapping[str, Any]) -> None:
        """Update permission flags."""
        check_updates(domain.RolePermission, updates)
        self._update(
            RolePermission,
            permission_id,
            updates_to_columns(updates, PERMISSION_COLUMNS),
            "Permission",
        )

    def delete_permissions_for_role(self, role_id: str) -> int:
        """Delete every permission row of a role. Returns the number removed."""
        with self._write() as session:
            return session.query(RolePermission).filter(RolePermission.role_id == role_id).delete()
