"""Fixture data used to seed an empty store."""

from datetime import datetime, timedelta, UTC
from typing import Optional

import structlog

from condogest.database.base import Database
from condogest.domain.entities import (
    AccessLog,
    AccessType,
    Package,
    PackageStatus,
    ParkingSpot,
    Person,
    Resource,
    RoleDefinition,
    RolePermission,
    Snapshot,
    SpotType,
    Unit,
    Vehicle,
)
from condogest.utils.passwords import DEFAULT_ITERATIONS, hash_password

logger = structlog.get_logger(__name__)

ADMIN_ROLE_ID = "mock-admin-role"
RESIDENT_ROLE_ID = "mock-resident-role"
STAFF_ROLE_ID = "mock-staff-role"

FIXTURE_PASSWORD = "123"
SPOT_COUNT = 20
RESIDENT_SPOT_COUNT = 15
OCCUPIED_SPOT_COUNT = 5

# Plates parked in the first spots of the fixture garage.
PARKED_PLATES = ["ABC-1234", "XYZ-9876", "DEF-4321", "GHI-5678", "JKL-9012"]

# Resource -> (view, create, edit, delete) per role
STAFF_GRANTS: dict[Resource, tuple[bool, bool, bool, bool]] = {
    Resource.DASHBOARD: (True, False, False, False),
    Resource.UNITS: (True, False, False, False),
    Resource.PEOPLE: (True, True, False, False),
    Resource.PACKAGES: (True, True, True, False),
    Resource.PARKING: (True, True, True, False),
    Resource.ACCESS_CONTROL: (False, False, False, False),
    Resource.ROLE_MANAGEMENT: (False, False, False, False),
}
RESIDENT_GRANTS: dict[Resource, tuple[bool, bool, bool, bool]] = {
    Resource.DASHBOARD: (True, False, False, False),
    Resource.PACKAGES: (True, False, False, False),
}


def _permission_rows(role: RoleDefinition) -> list[RolePermission]:
    rows = []
    for resource in Resource:
        if role.id == ADMIN_ROLE_ID:
            flags = (True, True, True, True)
        elif role.id == STAFF_ROLE_ID:
            flags = STAFF_GRANTS[resource]
        else:
            flags = RESIDENT_GRANTS.get(resource, (False, False, False, False))
        rows.append(
            RolePermission(
                id=f"perm-{role.id}-{resource.value}",
                role_id=role.id,
                resource=resource,
                can_view=flags[0],
                can_create=flags[1],
                can_edit=flags[2],
                can_delete=flags[3],
            )
        )
    return rows


def generate_fixture_data(
    now: Optional[datetime] = None, password_iterations: int = DEFAULT_ITERATIONS
) -> Snapshot:
    """Build the demo condominium.

    4 units, 3 roles, 4 people, 2 vehicles, 20 parking spots (15 resident
    then 5 visitor, the first 5 occupied), 1 package waiting for pickup and
    2 access logs, plus a full permission matrix.

    Args:
        now: Reference time for timestamps (defaults to the current time)
        password_iterations: PBKDF2 rounds for the seeded passwords
    """
    now = now or datetime.now(UTC)

    units = [
        Unit(id="u1", block="A", number="101", floor=1),
        Unit(id="u2", block="A", number="102", floor=1),
        Unit(id="u3", block="A", number="201", floor=2),
        Unit(id="u4", block="B", number="101", floor=1),
    ]

    roles = [
        RoleDefinition(id=ADMIN_ROLE_ID, name="ADMIN", description="Full access"),
        RoleDefinition(id=RESIDENT_ROLE_ID, name="RESIDENT", description="Unit residents"),
        RoleDefinition(id=STAFF_ROLE_ID, name="STAFF", description="Front desk and gate staff"),
    ]

    people = [
        Person(
            id="p1",
            name="Ana Silva",
            role_id=ADMIN_ROLE_ID,
            email="admin@condominio.com.br",
            phone="(11) 99999-0101",
            avatar_url="https://picsum.photos/200",
            username="admin",
            password_hash=hash_password(FIXTURE_PASSWORD, iterations=password_iterations),
        ),
        Person(
            id="p2",
            name="Roberto Santos",
            role_id=RESIDENT_ROLE_ID,
            email="roberto@email.com",
            phone="(11) 99999-0102",
            unit_id="u1",
            avatar_url="https://picsum.photos/201",
        ),
        Person(
            id="p3",
            name="Carlos Dias",
            role_id=RESIDENT_ROLE_ID,
            email="carlos@email.com",
            phone="(11) 99999-0103",
            unit_id="u2",
            avatar_url="https://picsum.photos/202",
        ),
        Person(
            id="p4",
            name="Diana Prince",
            role_id=STAFF_ROLE_ID,
            email="staff@condominio.com.br",
            phone="(11) 99999-0199",
            avatar_url="https://picsum.photos/203",
            username="diana",
            password_hash=hash_password(FIXTURE_PASSWORD, iterations=password_iterations),
        ),
    ]

    vehicles = [
        Vehicle(id="v1", plate="ABC-1234", model="Toyota Corolla", color="Silver", owner_id="p2", unit_id="u1"),
        Vehicle(id="v2", plate="XYZ-9876", model="Honda Civic", color="Black", owner_id="p3", unit_id="u2"),
    ]

    spots = [
        ParkingSpot(
            id=f"ps{i}",
            code=f"V-{i + 1}",
            is_occupied=i < OCCUPIED_SPOT_COUNT,
            type=SpotType.RESIDENT if i < RESIDENT_SPOT_COUNT else SpotType.VISITOR,
            current_vehicle_id=PARKED_PLATES[i] if i < OCCUPIED_SPOT_COUNT else None,
        )
        for i in range(SPOT_COUNT)
    ]

    packages = [
        Package(
            id="pkg1",
            tracking_code="AMZ-999",
            received_at=now,
            received_by_staff_id="p4",
            unit_id="u1",
            recipient_name="Roberto Santos",
            location="Front desk - Shelf A",
            status=PackageStatus.WAITING_PICKUP,
        )
    ]

    logs = [
        AccessLog(
            id="l1",
            timestamp=now - timedelta(hours=1),
            type=AccessType.ENTRY,
            vehicle_plate="ABC-1234",
            is_registered=True,
            spot_id="ps0",
        ),
        AccessLog(
            id="l2",
            timestamp=now - timedelta(hours=2),
            type=AccessType.EXIT,
            vehicle_plate="XYZ-9876",
            is_registered=True,
        ),
    ]

    permissions = [row for role in roles for row in _permission_rows(role)]

    return Snapshot(
        units=units,
        roles=roles,
        people=people,
        vehicles=vehicles,
        parking_spots=spots,
        packages=packages,
        logs=logs,
        permissions=permissions,
    )


def seed_database(db: Database, snapshot: Optional[Snapshot] = None) -> int:
    """Write fixture data through the adapter contract.

    Roles go first so people and permission rows can reference them.

    Returns:
        Number of records written
    """
    snapshot = snapshot or generate_fixture_data()
    written = 0
    for role in snapshot.roles:
        db.add_role(role)
        written += 1
    written += len(db.add_units(snapshot.units))
    for person in snapshot.people:
        db.add_person(person)
        written += 1
    for vehicle in snapshot.vehicles:
        db.add_vehicle(vehicle)
        written += 1
    for spot in snapshot.parking_spots:
        db.add_parking_spot(spot)
        written += 1
    for package in snapshot.packages:
        db.add_package(package)
        written += 1
    for log in snapshot.logs:
        db.add_access_log(log)
        written += 1
    for permission in snapshot.permissions:
        db.add_permission(permission)
        written += 1
    logger.info("database_seeded", records=written)
    return written
