"""Tests for login and password management."""

import pytest

from condogest.domain.auth import DEFAULT_PASSWORD, AuthService
from condogest.domain.errors import (
    AuthenticationError,
    ConflictError,
    InactiveUserError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from condogest.utils.passwords import verify_password


def test_login_success(auth_service):
    person = auth_service.login("admin", "123")
    assert person.id == "p1"
    assert person.role_name == "ADMIN"


def test_login_wrong_password(auth_service):
    with pytest.raises(InvalidCredentialsError):
        auth_service.login("admin", "wrong")


def test_login_unknown_user(auth_service):
    with pytest.raises(InvalidCredentialsError):
        auth_service.login("ghost", "123")


def test_login_username_is_case_sensitive(auth_service):
    with pytest.raises(InvalidCredentialsError):
        auth_service.login("Admin", "123")


def test_login_inactive_user_is_distinct(db, auth_service):
    db.update_person("p4", {"active": False})

    with pytest.raises(InactiveUserError) as exc_info:
        auth_service.login("diana", "123")

    assert not isinstance(exc_info.value, InvalidCredentialsError)
    assert isinstance(exc_info.value, AuthenticationError)
    assert "inactive" in str(exc_info.value)


def test_inactive_user_with_wrong_password(db, auth_service):
    db.update_person("p4", {"active": False})
    with pytest.raises(InvalidCredentialsError):
        auth_service.login("diana", "bad")


def test_change_password(db, auth_service):
    auth_service.reset_password("p4")
    assert AuthService.requires_password_change(db.get_person("p4"))

    auth_service.change_password("p4", "newpass", "newpass")

    person = auth_service.login("diana", "newpass")
    assert not auth_service.requires_password_change(person)
    with pytest.raises(InvalidCredentialsError):
        auth_service.login("diana", "123")


@pytest.mark.parametrize(
    "new, confirmation",
    [("short", "short"), ("", ""), ("longenough", "different")],
)
def test_change_password_validation(db, auth_service, new, confirmation):
    before = db.get_person("p4").password_hash
    with pytest.raises(ValidationError):
        auth_service.change_password("p4", new, confirmation)
    assert db.get_person("p4").password_hash == before


def test_change_password_minimum_length_is_six(auth_service):
    auth_service.change_password("p4", "abcdef", "abcdef")
    assert auth_service.login("diana", "abcdef").id == "p4"


def test_reset_password(db, auth_service):
    auth_service.change_password("p1", "custom1", "custom1")

    auth_service.reset_password("p1")

    person = db.get_person("p1")
    assert person.must_change_password
    assert verify_password(DEFAULT_PASSWORD, person.password_hash)
    assert auth_service.login("admin", DEFAULT_PASSWORD).id == "p1"


def test_reset_password_unknown_person(auth_service):
    with pytest.raises(NotFoundError):
        auth_service.reset_password("nobody")


def test_set_credentials(db, auth_service):
    auth_service.set_credentials("p2", "roberto", "temp12")

    person = auth_service.login("roberto", "temp12")
    assert person.id == "p2"
    assert person.must_change_password


def test_set_credentials_taken_username(auth_service):
    with pytest.raises(ConflictError):
        auth_service.set_credentials("p2", "admin", "temp12")
