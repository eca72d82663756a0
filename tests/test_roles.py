"""Tests for role definitions."""

import pytest

from condogest.database.fixtures import STAFF_ROLE_ID
from condogest.domain.entities import Resource
from condogest.domain.errors import ConflictError, DependencyError, NotFoundError, ValidationError


def test_create_role_adds_empty_permissions(db, role_service):
    role = role_service.create_role(" auditor ", "Read-only reviewers")

    assert role.name == "AUDITOR"
    rows = [p for p in db.list_permissions() if p.role_id == role.id]
    assert {r.resource for r in rows} == set(Resource)
    assert not any(r.can_view or r.can_create or r.can_edit or r.can_delete for r in rows)


def test_create_role_validation(role_service):
    with pytest.raises(ValidationError):
        role_service.create_role("  ")
    with pytest.raises(ConflictError):
        role_service.create_role("staff")


def test_delete_unused_role(db, role_service):
    role = role_service.create_role("TEMP")

    removed = role_service.delete_role(role.id)

    assert removed == len(Resource)
    assert all(r.id != role.id for r in db.list_roles())
    assert all(p.role_id != role.id for p in db.list_permissions())


def test_delete_role_in_use(db, role_service):
    with pytest.raises(DependencyError, match="STAFF"):
        role_service.delete_role(STAFF_ROLE_ID)
    assert any(r.id == STAFF_ROLE_ID for r in db.list_roles())
    assert any(p.role_id == STAFF_ROLE_ID for p in db.list_permissions())


def test_delete_unknown_role(role_service):
    with pytest.raises(NotFoundError):
        role_service.delete_role("missing")


def test_find_by_name(role_service):
    assert role_service.find_by_name("resident").id == "mock-resident-role"
    assert role_service.find_by_name("nobody") is None
