"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class AuthenticationError(DomainError):
    """Login failed."""


class InvalidCredentialsError(AuthenticationError):
    """Unknown username or wrong password."""


class InactiveUserError(AuthenticationError):
    """Credentials matched a deactivated account."""


def entity_not_found(kind: str, entity_id: str) -> str:
    """Return message for a missing entity of any kind."""
    return f"{kind} {entity_id} not found"


def unit_not_found(reference: str) -> str:
    """Return message for a missing unit."""
    return f"Unit '{reference}' not found"


def invalid_credentials() -> str:
    """Return message for a failed login."""
    return "Invalid username or password"


def inactive_user(username: str) -> str:
    """Return message for a login on a deactivated account."""
    return f"User '{username}' is inactive. Contact the administrator."


def duplicate_units(labels: list[str]) -> str:
    """Return message when generated units collide with existing ones."""
    shown = ", ".join(labels[:5])
    more = f" and {len(labels) - 5} more" if len(labels) > 5 else ""
    return f"Units already exist: {shown}{more}"


def role_delete_blocked(role_name: str, person_count: int) -> str:
    """Return message when a role is still assigned to people."""
    return (
        f"Cannot delete role '{role_name}': it is assigned to "
        f"{person_count} {'person' if person_count == 1 else 'people'}. "
        "Please reassign them first."
    )


def no_spot_available(spot_type: str) -> str:
    """Return message when a gate entry finds no free spot."""
    return f"No free {spot_type} spot available for this entry"
