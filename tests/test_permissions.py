"""Tests for the permission matrix."""

import pytest

from condogest.database.fixtures import ADMIN_ROLE_ID, STAFF_ROLE_ID
from condogest.domain.entities import Capability, RecordState, Resource, RolePermission
from condogest.domain.errors import NotFoundError
from condogest.domain.permissions import PermissionMatrix, group_by_role, toggled

STAFF_PACKAGES = f"perm-{STAFF_ROLE_ID}-packages"


def test_group_by_role_preserves_order():
    rows = [
        RolePermission(id="1", role_id="b", resource=Resource.UNITS),
        RolePermission(id="2", role_id="a", resource=Resource.UNITS),
        RolePermission(id="3", role_id="b", resource=Resource.PEOPLE),
    ]
    groups = group_by_role(rows)
    assert list(groups) == ["b", "a"]
    assert [r.id for r in groups["b"]] == ["1", "3"]


def test_toggled_flips_one_flag():
    row = RolePermission(id="1", role_id="r", resource=Resource.UNITS, can_view=True)
    flipped = toggled(row, Capability.EDIT)
    assert flipped.can_edit
    assert flipped.can_view
    assert not flipped.can_create
    assert not flipped.can_delete


def test_service_groups_every_role(permission_service):
    groups = permission_service.group_by_role()
    assert set(groups) == {ADMIN_ROLE_ID, STAFF_ROLE_ID, "mock-resident-role"}
    assert all(len(rows) == len(Resource) for rows in groups.values())


def test_toggle_writes_only_one_field(db, permission_service):
    before = permission_service.get_permission(STAFF_PACKAGES)
    assert not before.can_delete

    after = permission_service.toggle(STAFF_PACKAGES, Capability.DELETE)

    stored = permission_service.get_permission(STAFF_PACKAGES)
    assert after == stored
    assert stored.can_delete
    assert (stored.can_view, stored.can_create, stored.can_edit) == (
        before.can_view,
        before.can_create,
        before.can_edit,
    )


def test_toggle_sends_single_field_update(db, permission_service, monkeypatch):
    sent = []
    original = db.update_permission

    def spy(permission_id, updates):
        sent.append(dict(updates))
        return original(permission_id, updates)

    monkeypatch.setattr(db, "update_permission", spy)
    permission_service.toggle(STAFF_PACKAGES, Capability.VIEW)

    assert sent == [{"can_view": False}]


def test_toggle_twice_restores(permission_service):
    before = permission_service.get_permission(STAFF_PACKAGES)
    permission_service.toggle(STAFF_PACKAGES, Capability.EDIT)
    permission_service.toggle(STAFF_PACKAGES, Capability.EDIT)
    assert permission_service.get_permission(STAFF_PACKAGES) == before


def test_toggle_unknown_row(permission_service):
    with pytest.raises(NotFoundError):
        permission_service.toggle("missing", Capability.VIEW)


def test_allows(permission_service):
    assert permission_service.allows(ADMIN_ROLE_ID, Resource.ROLE_MANAGEMENT, Capability.DELETE)
    assert not permission_service.allows(STAFF_ROLE_ID, Resource.ROLE_MANAGEMENT, Capability.VIEW)
    assert not permission_service.allows("no-role", Resource.UNITS, Capability.VIEW)


def test_matrix_confirms_successful_toggle(permission_service):
    matrix = PermissionMatrix(permission_service)

    row = matrix.toggle(STAFF_PACKAGES, Capability.DELETE)

    assert row.can_delete
    assert matrix.state(STAFF_PACKAGES) is RecordState.CONFIRMED
    assert permission_service.get_permission(STAFF_PACKAGES).can_delete


def test_matrix_rolls_back_failed_toggle(db, permission_service, monkeypatch):
    matrix = PermissionMatrix(permission_service)
    before = matrix.row(STAFF_PACKAGES)

    def fail(permission_id, updates):
        raise OSError("backend down")

    monkeypatch.setattr(db, "update_permission", fail)

    with pytest.raises(OSError, match="backend down"):
        matrix.toggle(STAFF_PACKAGES, Capability.DELETE)

    assert matrix.row(STAFF_PACKAGES) == before
    assert matrix.state(STAFF_PACKAGES) is RecordState.CONFIRMED


def test_matrix_shows_tentative_value_during_write(db, permission_service, monkeypatch):
    matrix = PermissionMatrix(permission_service)
    seen = []
    original = db.update_permission

    def observe(permission_id, updates):
        seen.append((matrix.state(permission_id), matrix.row(permission_id).can_delete))
        return original(permission_id, updates)

    monkeypatch.setattr(db, "update_permission", observe)
    matrix.toggle(STAFF_PACKAGES, Capability.DELETE)

    assert seen == [(RecordState.TENTATIVE, True)]


def test_matrix_unknown_row(permission_service):
    matrix = PermissionMatrix(permission_service, rows=[])
    with pytest.raises(NotFoundError):
        matrix.row("missing")
