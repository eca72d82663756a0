"""Authentication and password service."""

import structlog

from condogest.database.base import Database
from condogest.domain.entities import Person
from condogest.domain.errors import (
    ConflictError,
    InactiveUserError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
    entity_not_found,
    inactive_user,
    invalid_credentials,
)
from condogest.utils.passwords import DEFAULT_ITERATIONS, hash_password, verify_password

logger = structlog.get_logger(__name__)

DEFAULT_PASSWORD = "123"
MIN_PASSWORD_LENGTH = 6


class AuthService:
    """Service for login and password management."""

    def __init__(self, db: Database, password_iterations: int = DEFAULT_ITERATIONS):
        """Initialize auth service.

        Args:
            db: Database instance
            password_iterations: PBKDF2 rounds used for new hashes
        """
        self.db = db
        self.password_iterations = password_iterations

    def _hash(self, password: str) -> str:
        return hash_password(password, iterations=self.password_iterations)

    def login(self, username: str, password: str) -> Person:
        """Check credentials and return the matching person.

        Args:
            username: Username, matched case-sensitively
            password: Plain password

        Returns:
            Person with role name resolved

        Raises:
            InvalidCredentialsError: If the username is unknown or the password is wrong
            InactiveUserError: If the credentials match a deactivated account
        """
        person = self.db.find_person_by_username(username)
        if person is None or not verify_password(password, person.password_hash):
            logger.info("login_failed", username=username)
            raise InvalidCredentialsError(invalid_credentials())

        if not person.active:
            logger.info("login_inactive", username=username)
            raise InactiveUserError(inactive_user(username))

        logger.info("login_succeeded", username=username, role=person.role_name)
        return person

    @staticmethod
    def requires_password_change(person: Person) -> bool:
        """True when the person must pick a new password before continuing."""
        return person.must_change_password

    def _get_person(self, person_id: str) -> Person:
        person = self.db.get_person(person_id)
        if person is None:
            raise NotFoundError(entity_not_found("Person", person_id))
        return person

    def change_password(self, person_id: str, new_password: str, confirmation: str) -> None:
        """Set a new password chosen by the person.

        Clears the first-access flag.

        Raises:
            ValidationError: If the password is shorter than 6 characters or
                the confirmation does not match
            NotFoundError: If the person does not exist
        """
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        if new_password != confirmation:
            raise ValidationError("Passwords do not match")

        self._get_person(person_id)
        self.db.update_person(
            person_id,
            {"password_hash": self._hash(new_password), "must_change_password": False},
        )
        logger.info("password_changed", person_id=person_id)

    def reset_password(self, person_id: str) -> None:
        """Reset a password to the default and force a change on next login."""
        self._get_person(person_id)
        self.db.update_person(
            person_id,
            {"password_hash": self._hash(DEFAULT_PASSWORD), "must_change_password": True},
        )
        logger.info("password_reset", person_id=person_id)

    def set_credentials(self, person_id: str, username: str, password: str) -> None:
        """Give a person login access with a temporary password.

        The person must change it on first access.

        Raises:
            ValidationError: If username or password is empty
            ConflictError: If another person already uses the username
        """
        username = username.strip()
        if not username or not password:
            raise ValidationError("Username and password are required")
        existing = self.db.find_person_by_username(username)
        if existing is not None and existing.id != person_id:
            raise ConflictError(f"Username '{username}' is already taken")

        self._get_person(person_id)
        self.db.update_person(
            person_id,
            {
                "username": username,
                "password_hash": self._hash(password),
                "must_change_password": True,
            },
        )
