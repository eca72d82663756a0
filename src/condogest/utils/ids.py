"""Entity ID generation."""

import uuid


def new_id() -> str:
    """Return a fresh entity ID."""
    return uuid.uuid4().hex
