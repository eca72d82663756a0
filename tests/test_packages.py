"""Tests for package registration and pickup."""

from datetime import timedelta
from types import SimpleNamespace

import pytest

from condogest.domain.entities import PackageStatus
from condogest.domain.errors import NotFoundError, ValidationError
from condogest.domain.packages import PackageService
from condogest.services.assistant import Assistant

from conftest import FIXED_NOW


def test_register_package(db, package_service):
    registered = package_service.register_package(
        tracking_code=" ML-123 ",
        recipient_name="Carlos Dias",
        location="Shelf B",
        unit_id="u2",
        received_by_staff_id="p4",
        now=FIXED_NOW,
    )
    package = registered.package
    assert package.tracking_code == "ML-123"
    assert package.status is PackageStatus.WAITING_PICKUP
    assert package.received_at == FIXED_NOW
    assert registered.notification == ""
    assert package_service.get_package(package.id) == package


def test_register_drafts_notification(db):
    service = PackageService(db, assistant=Assistant(environ={}))
    registered = service.register_package("ML-9", "Carlos Dias", "Shelf B", "u2", "p4")
    assert registered.notification == (
        "Hello Carlos Dias, a package (ML-9) has arrived for you. Please pick it up at: Shelf B."
    )


@pytest.mark.parametrize(
    "tracking, recipient, location, unit",
    [("", "R", "L", "u1"), ("T", "", "L", "u1"), ("T", "R", " ", "u1"), ("T", "R", "L", "")],
)
def test_register_validation(db, package_service, tracking, recipient, location, unit):
    before = len(db.list_packages())
    with pytest.raises(ValidationError):
        package_service.register_package(tracking, recipient, location, unit, "p4")
    assert len(db.list_packages()) == before


def test_register_unknown_unit(package_service):
    with pytest.raises(NotFoundError):
        package_service.register_package("T", "R", "L", "nope", "p4")


def test_pickup(package_service):
    delivered = package_service.mark_picked_up("pkg1", now=FIXED_NOW + timedelta(hours=2))
    assert delivered.status is PackageStatus.DELIVERED
    assert delivered.picked_up_at == FIXED_NOW + timedelta(hours=2)


def test_pickup_is_idempotent(db, package_service, monkeypatch):
    first = package_service.mark_picked_up("pkg1", now=FIXED_NOW)

    writes = []
    monkeypatch.setattr(db, "update_package", lambda *args: writes.append(args))
    second = package_service.mark_picked_up("pkg1", now=FIXED_NOW + timedelta(days=1))

    assert writes == []
    assert second == first
    assert second.picked_up_at == FIXED_NOW


def test_pickup_unknown(package_service):
    with pytest.raises(NotFoundError):
        package_service.mark_picked_up("missing")


def test_pending_packages(package_service):
    assert [p.id for p in package_service.pending_packages()] == ["pkg1"]
    assert package_service.pending_packages(unit_id="u2") == []

    package_service.mark_picked_up("pkg1")
    assert package_service.pending_packages() == []


def test_find_by_tracking_code(package_service):
    assert package_service.find_by_tracking_code("amz-999").id == "pkg1"
    assert package_service.find_by_tracking_code("none") is None


def test_register_survives_malformed_assistant_reply(db):
    completions = SimpleNamespace(create=lambda **kwargs: SimpleNamespace(choices=[]))
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    service = PackageService(db, assistant=Assistant(client=client, environ={}))

    registered = service.register_package("ML-10", "Carlos Dias", "Shelf B", "u2", "p4")

    assert registered.notification == "Package arrived for Carlos Dias (ML-10). Location: Shelf B."
    assert service.find_by_tracking_code("ML-10") is not None
