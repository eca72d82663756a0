"""Contract tests run against every Database implementation."""

from dataclasses import replace
from datetime import timedelta

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from condogest.database.fixtures import ADMIN_ROLE_ID, RESIDENT_ROLE_ID, SPOT_COUNT
from condogest.domain.entities import (
    AccessLog,
    AccessType,
    PackageStatus,
    ParkingSpot,
    Person,
    Resource,
    RoleDefinition,
    RolePermission,
    SpotType,
    Unit,
)
from condogest.domain.errors import NotFoundError

from conftest import FIXED_NOW


def test_fixture_counts(db):
    """Seeded stores hold the demo condominium."""
    assert len(db.list_units()) == 4
    assert len(db.list_roles()) == 3
    assert len(db.list_people()) == 4
    assert len(db.list_vehicles()) == 2
    assert len(db.list_parking_spots()) == SPOT_COUNT
    assert len(db.list_packages()) == 1
    assert len(db.list_access_logs()) == 2
    assert len(db.list_permissions()) == 3 * len(Resource)


def test_fixture_spots_layout(db):
    spots = db.list_parking_spots()
    assert [s.code for s in spots] == [f"V-{i}" for i in range(1, SPOT_COUNT + 1)]
    assert all(s.type is SpotType.RESIDENT for s in spots[:15])
    assert all(s.type is SpotType.VISITOR for s in spots[15:])
    assert [s.is_occupied for s in spots[:6]] == [True] * 5 + [False]
    assert spots[0].current_vehicle_id == "ABC-1234"
    assert all(s.current_vehicle_id is None for s in spots if not s.is_occupied)


def test_people_have_role_names(db):
    people = {p.id: p for p in db.list_people()}
    assert people["p1"].role_name == "ADMIN"
    assert people["p2"].role_name == "RESIDENT"
    assert people["p2"].is_resident
    assert not people["p4"].is_resident


def test_permissions_have_role_names(db):
    names = {p.role_name for p in db.list_permissions()}
    assert names == {"ADMIN", "RESIDENT", "STAFF"}


def test_get_person(db):
    person = db.get_person("p1")
    assert person is not None
    assert person.username == "admin"
    assert db.get_person("nope") is None


def test_find_person_by_username_is_case_sensitive(db):
    assert db.find_person_by_username("admin").id == "p1"
    assert db.find_person_by_username("ADMIN") is None


def test_add_unit_assigns_id(db):
    unit_id = db.add_unit(Unit(id="", block="C", number="101", floor=1))
    assert unit_id
    assert any(u.id == unit_id and u.block == "C" for u in db.list_units())


def test_add_units_bulk(db):
    ids = db.add_units(
        [Unit(id="", block="D", number=str(n), floor=1) for n in (101, 102, 103)]
    )
    assert len(ids) == 3
    assert len(set(ids)) == 3
    assert sum(1 for u in db.list_units() if u.block == "D") == 3


def test_delete_unit(db):
    db.delete_unit("u4")
    assert all(u.id != "u4" for u in db.list_units())


def test_delete_missing_unit(db):
    with pytest.raises(NotFoundError):
        db.delete_unit("missing")


def test_delete_block(db):
    assert db.delete_block("A") == 3
    assert [u.block for u in db.list_units()] == ["B"]
    assert db.delete_block("Z") == 0


def test_update_person(db):
    db.update_person("p2", {"phone": "555", "active": False})
    person = db.get_person("p2")
    assert person.phone == "555"
    assert person.active is False
    assert person.role_name == "RESIDENT"


def test_update_person_rejects_unknown_fields(db):
    with pytest.raises(ValueError):
        db.update_person("p2", {"shoe_size": 42})
    with pytest.raises(ValueError):
        db.update_person("p2", {"id": "other"})
    with pytest.raises(ValueError):
        db.update_person("p2", {"role_name": "ADMIN"})


def test_update_missing_person(db):
    with pytest.raises(NotFoundError):
        db.update_person("missing", {"phone": "1"})


def test_add_person_role_name_not_stored(db):
    person = Person(
        id="",
        name="New",
        role_id=ADMIN_ROLE_ID,
        email="n@x.com",
        phone="",
        role_name="SOMETHING ELSE",
    )
    person_id = db.add_person(person)
    assert db.get_person(person_id).role_name == "ADMIN"


def test_parking_spot_update_and_order(db):
    spot_id = db.add_parking_spot(
        ParkingSpot(id="", code="D-1", is_occupied=False, type=SpotType.DISABLED)
    )
    spots = db.list_parking_spots()
    assert spots[-1].id == spot_id

    db.update_parking_spot(spot_id, {"is_occupied": True, "current_vehicle_id": "AAA-0001"})
    spot = db.list_parking_spots()[-1]
    assert spot.is_occupied
    assert spot.current_vehicle_id == "AAA-0001"
    assert spot.type is SpotType.DISABLED


def test_update_package(db):
    db.update_package(
        "pkg1",
        {"status": PackageStatus.DELIVERED, "picked_up_at": FIXED_NOW + timedelta(hours=1)},
    )
    package = db.list_packages()[0]
    assert package.status is PackageStatus.DELIVERED
    assert package.picked_up_at == FIXED_NOW + timedelta(hours=1)


def test_access_logs_newest_first(db):
    db.add_access_log(
        AccessLog(
            id="",
            timestamp=FIXED_NOW - timedelta(hours=5),
            type=AccessType.ENTRY,
            vehicle_plate="OLD-0001",
            is_registered=False,
        )
    )
    db.add_access_log(
        AccessLog(
            id="",
            timestamp=FIXED_NOW,
            type=AccessType.EXIT,
            vehicle_plate="NEW-0001",
            is_registered=False,
        )
    )
    logs = db.list_access_logs()
    assert logs[0].vehicle_plate == "NEW-0001"
    assert logs[-1].vehicle_plate == "OLD-0001"
    timestamps = [log.timestamp for log in logs]
    assert timestamps == sorted(timestamps, reverse=True)


def test_roles_and_permissions(db):
    role_id = db.add_role(RoleDefinition(id="", name="AUDITOR"))
    permission_id = db.add_permission(
        RolePermission(id="", role_id=role_id, resource=Resource.DASHBOARD)
    )

    db.update_permission(permission_id, {"can_view": True})
    row = next(p for p in db.list_permissions() if p.id == permission_id)
    assert row.can_view
    assert not row.can_edit
    assert row.role_name == "AUDITOR"

    assert db.delete_permissions_for_role(role_id) == 1
    db.delete_role(role_id)
    assert all(r.id != role_id for r in db.list_roles())


def test_delete_permissions_leaves_other_roles(db):
    before = len(db.list_permissions())
    removed = db.delete_permissions_for_role(RESIDENT_ROLE_ID)
    assert removed == len(Resource)
    assert len(db.list_permissions()) == before - removed


def test_vehicles(db):
    plates = {v.plate for v in db.list_vehicles()}
    assert plates == {"ABC-1234", "XYZ-9876"}


def test_entities_are_replaced_not_mutated(db):
    unit = db.list_units()[0]
    with pytest.raises(Exception):
        unit.block = "Z"
    assert replace(unit, block="Z").block == "Z"


def test_update_unit(db):
    db.update_unit("u4", {"number": "102"})
    unit = next(u for u in db.list_units() if u.id == "u4")
    assert (unit.block, unit.number, unit.floor) == ("B", "102", 1)


def test_update_role(db):
    db.update_role(RESIDENT_ROLE_ID, {"description": "Owners and tenants"})
    role = next(r for r in db.list_roles() if r.id == RESIDENT_ROLE_ID)
    assert role.name == "RESIDENT"
    assert role.description == "Owners and tenants"


def test_update_vehicle(db):
    db.update_vehicle("v1", {"color": "Blue", "model": "Toyota Yaris"})
    vehicle = next(v for v in db.list_vehicles() if v.id == "v1")
    assert (vehicle.plate, vehicle.model, vehicle.color) == ("ABC-1234", "Toyota Yaris", "Blue")


@pytest.mark.parametrize(
    "method, entity_id",
    [("update_unit", "u1"), ("update_role", ADMIN_ROLE_ID), ("update_vehicle", "v1")],
)
def test_updates_reject_unknown_fields(db, method, entity_id):
    with pytest.raises(ValueError):
        getattr(db, method)(entity_id, {"shoe_size": 42})
    with pytest.raises(ValueError):
        getattr(db, method)(entity_id, {})


@pytest.mark.parametrize(
    "method, updates",
    [
        ("update_unit", {"floor": 3}),
        ("update_role", {"description": "x"}),
        ("update_vehicle", {"color": "Red"}),
    ],
)
def test_updates_of_missing_entities(db, method, updates):
    with pytest.raises(NotFoundError):
        getattr(db, method)("missing", updates)


def test_failed_query_leaves_remote_session_usable(remote_db):
    with pytest.raises(OperationalError):
        with remote_db._read() as session:
            session.execute(text("SELECT * FROM no_such_table"))

    assert not remote_db._get_session().in_transaction()
    assert len(remote_db.list_units()) == 4
