"""Tests for unit generation and management."""

import pytest

from condogest.domain.errors import ConflictError, NotFoundError, ValidationError
from condogest.domain.units import (
    MAX_PER_FLOOR,
    UnitService,
    apartment_number,
    parse_block_names,
)


def test_parse_block_names():
    assert parse_block_names(" c, d ,,tower 1, C") == ["C", "D", "TOWER 1"]
    assert parse_block_names(" , ") == []


def test_apartment_number():
    assert apartment_number(1, 1) == "101"
    assert apartment_number(2, 3) == "203"
    assert apartment_number(12, 4) == "1204"


def test_generate_counts_and_numbering(db, unit_service):
    before = len(db.list_units())

    created = unit_service.generate_units("C, D", floors=3, per_floor=2)

    assert len(created) == 2 * 3 * 2
    assert len(db.list_units()) == before + 12
    numbers = sorted(u.number for u in created if u.block == "C")
    assert numbers == ["101", "102", "201", "202", "301", "302"]
    assert {u.floor for u in created if u.number.startswith("3")} == {3}


def test_generate_is_one_bulk_write(db, unit_service, monkeypatch):
    calls = []
    original = db.add_units

    def spy(units):
        calls.append(len(units))
        return original(units)

    monkeypatch.setattr(db, "add_units", spy)
    unit_service.generate_units("E", floors=2, per_floor=2)

    assert calls == [4]


def test_generate_duplicate_blocks_collapse(unit_service):
    created = unit_service.generate_units("c, C", floors=1, per_floor=2)
    assert len(created) == 2


@pytest.mark.parametrize(
    "blocks, floors, per_floor",
    [("", 1, 1), (" , ", 1, 1), ("C", 0, 1), ("C", 1, 0), ("C", -1, 2)],
)
def test_generate_validation(db, unit_service, blocks, floors, per_floor):
    before = len(db.list_units())
    with pytest.raises(ValidationError):
        unit_service.generate_units(blocks, floors, per_floor)
    assert len(db.list_units()) == before


def test_generate_full_floors_keeps_numbers_unique(db, unit_service):
    created = unit_service.generate_units("Z", floors=2, per_floor=MAX_PER_FLOOR)

    pairs = {(u.block, u.number) for u in db.list_units() if u.block == "Z"}
    assert len(pairs) == len(created) == 2 * MAX_PER_FLOOR
    assert max(u.number for u in created if u.floor == 1) == "199"


@pytest.mark.parametrize("per_floor", [MAX_PER_FLOOR + 1, 101])
def test_generate_rejects_overflowing_floors(db, unit_service, per_floor):
    before = len(db.list_units())
    with pytest.raises(ValidationError, match="apartments per floor"):
        unit_service.generate_units("Z", floors=2, per_floor=per_floor)
    assert len(db.list_units()) == before


def test_generate_conflict_writes_nothing(db, unit_service):
    before = len(db.list_units())
    with pytest.raises(ConflictError, match="A-101"):
        unit_service.generate_units("A, F", floors=1, per_floor=2)
    assert len(db.list_units()) == before


def test_group_by_block_and_floor(unit_service):
    unit_service.generate_units("C", floors=2, per_floor=2)
    groups = unit_service.group_by_block()
    assert list(groups) == ["A", "B", "C"]

    floors = unit_service.floors_of_block("C")
    assert list(floors) == [1, 2]
    assert [u.number for u in floors[2]] == ["201", "202"]


def test_floor_order_is_numeric(empty_local_db):
    service = UnitService(empty_local_db)
    service.generate_units("Q", floors=1, per_floor=12)
    numbers = [u.number for u in service.floors_of_block("Q")[1]]
    assert numbers[-3:] == ["110", "111", "112"]


def test_find_and_get_unit(unit_service):
    assert unit_service.find_unit("a", "101").id == "u1"
    assert unit_service.find_unit("A", "999") is None
    assert unit_service.get_unit("u4").label == "B-101"
    with pytest.raises(NotFoundError):
        unit_service.get_unit("missing")


def test_delete_unit(db, unit_service):
    unit_service.delete_unit("u3")
    assert all(u.id != "u3" for u in db.list_units())


def test_delete_block(db, unit_service):
    assert unit_service.delete_block(" a ") == 3
    assert {u.block for u in db.list_units()} == {"B"}


def test_delete_unknown_block(unit_service):
    with pytest.raises(NotFoundError):
        unit_service.delete_block("Z")
