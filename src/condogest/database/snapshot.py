"""camelCase JSON codec for the local snapshot document.

The document holds one list per entity. Records use camelCase keys,
ISO-8601 timestamp strings and plain strings for enum values; optional
fields that are unset are left out of the record.
"""

from dataclasses import fields, is_dataclass
from datetime import datetime, UTC
from enum import Enum
from typing import Any, Optional, TypeVar, get_args, get_origin, get_type_hints

from condogest.domain.entities import (
    AccessLog,
    Package,
    ParkingSpot,
    Person,
    RoleDefinition,
    RolePermission,
    Snapshot,
    Unit,
    Vehicle,
)

T = TypeVar("T")

# Snapshot attribute -> (document key, entity type)
DOCUMENT_LISTS: dict[str, tuple[str, type]] = {
    "units": ("units", Unit),
    "roles": ("roles", RoleDefinition),
    "people": ("people", Person),
    "vehicles": ("vehicles", Vehicle),
    "parking_spots": ("parkingSpots", ParkingSpot),
    "packages": ("packages", Package),
    "logs": ("logs", AccessLog),
    "permissions": ("permissions", RolePermission),
}

# Never written to the document; resolved when read.
NOT_STORED = frozenset({"role_name"})


def to_camel(name: str) -> str:
    """Convert a snake_case field name to camelCase."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _format_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _parse_value(annotation: Any, value: Any) -> Any:
    if value is None:
        return None
    if get_origin(annotation) is not None:
        # Optional[X] -> X
        inner = [arg for arg in get_args(annotation) if arg is not type(None)]
        annotation = inner[0] if inner else annotation
    if isinstance(annotation, type):
        if issubclass(annotation, Enum):
            return annotation(value)
        if issubclass(annotation, datetime):
            return _parse_timestamp(value)
    return value


def encode_entity(entity: Any) -> dict[str, Any]:
    """Encode one entity as a camelCase record."""
    if not is_dataclass(entity):
        raise TypeError(f"Cannot encode {type(entity).__name__}")
    record: dict[str, Any] = {}
    for f in fields(entity):
        if f.name in NOT_STORED:
            continue
        value = getattr(entity, f.name)
        if value is None:
            continue
        record[to_camel(f.name)] = _format_value(value)
    return record


def decode_entity(entity_type: type[T], record: dict[str, Any]) -> T:
    """Decode a camelCase record into an entity.

    Keys the entity does not know are ignored; missing optional keys fall
    back to the dataclass defaults.
    """
    hints = get_type_hints(entity_type)
    kwargs: dict[str, Any] = {}
    for f in fields(entity_type):
        key = to_camel(f.name)
        if key in record:
            kwargs[f.name] = _parse_value(hints[f.name], record[key])
    return entity_type(**kwargs)


def encode_snapshot(snapshot: Snapshot) -> dict[str, list[dict[str, Any]]]:
    """Encode every entity list of a snapshot."""
    return {
        key: [encode_entity(item) for item in getattr(snapshot, attr)]
        for attr, (key, _) in DOCUMENT_LISTS.items()
    }


def decode_snapshot(document: dict[str, Any]) -> Snapshot:
    """Decode a stored document. Lists missing from older documents are empty."""
    snapshot = Snapshot()
    for attr, (key, entity_type) in DOCUMENT_LISTS.items():
        records: Optional[list[dict[str, Any]]] = document.get(key)
        setattr(
            snapshot,
            attr,
            [decode_entity(entity_type, record) for record in records or []],
        )
    return snapshot
