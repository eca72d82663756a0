"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: the relational backend uses
snake_case columns, string-typed enums and a join for role names, while the
domain works with enums and resolved names. The ``*_COLUMNS`` maps translate
entity field names to column names for partial updates.
"""

from datetime import datetime, UTC
from enum import Enum
from typing import Any, Mapping, Optional

from condogest.domain import entities as domain
from condogest.utils.ids import new_id
from condogest.database.models import (
    AccessLog as ORMAccessLog,
    Package as ORMPackage,
    ParkingSpot as ORMParkingSpot,
    Person as ORMPerson,
    Role as ORMRole,
    RolePermission as ORMRolePermission,
    Unit as ORMUnit,
    Vehicle as ORMVehicle,
)

UNIT_COLUMNS = {
    "block": "block",
    "number": "number",
    "floor": "floor",
}

ROLE_COLUMNS = {
    "name": "name",
    "description": "description",
}

PERSON_COLUMNS = {
    "name": "name",
    "role_id": "role_id",
    "email": "email",
    "phone": "phone",
    "unit_id": "unit_id",
    "avatar_url": "avatar_url",
    "username": "username",
    "password_hash": "password_hash",
    "must_change_password": "must_change_password",
    "active": "active",
}

VEHICLE_COLUMNS = {
    "plate": "plate",
    "model": "model",
    "color": "color",
    "owner_id": "owner_id",
    "owner_name": "owner_name",
    "unit_id": "unit_id",
}

PARKING_SPOT_COLUMNS = {
    "code": "code",
    "is_occupied": "is_occupied",
    "current_vehicle_id": "current_vehicle_id",
    "type": "type",
}

PACKAGE_COLUMNS = {
    "tracking_code": "tracking_code",
    "received_at": "received_at",
    "received_by_staff_id": "received_by_staff_id",
    "unit_id": "unit_id",
    "recipient_name": "recipient_name",
    "location": "location",
    "status": "status",
    "picked_up_at": "picked_up_at",
}

PERMISSION_COLUMNS = {
    "role_id": "role_id",
    "resource": "resource",
    "can_view": "can_view",
    "can_create": "can_create",
    "can_edit": "can_edit",
    "can_delete": "can_delete",
}


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    """Backends without timezone support hand back naive UTC values."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def updates_to_columns(
    updates: Mapping[str, Any], columns: Mapping[str, str]
) -> dict[str, Any]:
    """Translate a partial entity update into column values."""
    values = {}
    for field_name, value in updates.items():
        if isinstance(value, Enum):
            value = value.value
        values[columns[field_name]] = value
    return values


def unit_to_domain(orm_unit: ORMUnit) -> domain.Unit:
    """Convert SQLAlchemy Unit model to domain Unit entity."""
    return domain.Unit(
        id=orm_unit.id,
        block=orm_unit.block,
        number=orm_unit.number,
        floor=orm_unit.floor,
    )


def unit_to_orm(unit: domain.Unit) -> ORMUnit:
    """Convert domain Unit entity to a new SQLAlchemy row."""
    return ORMUnit(id=unit.id or new_id(), block=unit.block, number=unit.number, floor=unit.floor)


def role_to_domain(orm_role: ORMRole) -> domain.RoleDefinition:
    """Convert SQLAlchemy Role model to domain RoleDefinition entity."""
    return domain.RoleDefinition(
        id=orm_role.id,
        name=orm_role.name,
        description=orm_role.description,
    )


def role_to_orm(role: domain.RoleDefinition) -> ORMRole:
    """Convert domain RoleDefinition entity to a new SQLAlchemy row."""
    return ORMRole(id=role.id or new_id(), name=role.name, description=role.description)


def person_to_domain(orm_person: ORMPerson) -> domain.Person:
    """Convert SQLAlchemy Person model to domain Person entity.

    The role name comes from the joined ``roles`` row.
    """
    return domain.Person(
        id=orm_person.id,
        name=orm_person.name,
        role_id=orm_person.role_id,
        email=orm_person.email,
        phone=orm_person.phone,
        unit_id=orm_person.unit_id,
        avatar_url=orm_person.avatar_url,
        username=orm_person.username,
        password_hash=orm_person.password_hash,
        must_change_password=bool(orm_person.must_change_password),
        active=bool(orm_person.active),
        role_name=orm_person.role.name if orm_person.role is not None else None,
    )


def person_to_orm(person: domain.Person) -> ORMPerson:
    """Convert domain Person entity to a new SQLAlchemy row."""
    return ORMPerson(
        id=person.id or new_id(),
        name=person.name,
        role_id=person.role_id,
        email=person.email,
        phone=person.phone,
        unit_id=person.unit_id,
        avatar_url=person.avatar_url,
        username=person.username,
        password_hash=person.password_hash,
        must_change_password=person.must_change_password,
        active=person.active,
    )


def vehicle_to_domain(orm_vehicle: ORMVehicle) -> domain.Vehicle:
    """Convert SQLAlchemy Vehicle model to domain Vehicle entity."""
    return domain.Vehicle(
        id=orm_vehicle.id,
        plate=orm_vehicle.plate,
        model=orm_vehicle.model,
        color=orm_vehicle.color,
        owner_id=orm_vehicle.owner_id,
        owner_name=orm_vehicle.owner_name,
        unit_id=orm_vehicle.unit_id,
    )


def vehicle_to_orm(vehicle: domain.Vehicle) -> ORMVehicle:
    """Convert domain Vehicle entity to a new SQLAlchemy row."""
    return ORMVehicle(
        id=vehicle.id or new_id(),
        plate=vehicle.plate,
        model=vehicle.model,
        color=vehicle.color,
        owner_id=vehicle.owner_id,
        owner_name=vehicle.owner_name,
        unit_id=vehicle.unit_id,
    )


def parking_spot_to_domain(orm_spot: ORMParkingSpot) -> domain.ParkingSpot:
    """Convert SQLAlchemy ParkingSpot model to domain ParkingSpot entity."""
    return domain.ParkingSpot(
        id=orm_spot.id,
        code=orm_spot.code,
        is_occupied=bool(orm_spot.is_occupied),
        type=domain.SpotType(orm_spot.type),
        current_vehicle_id=orm_spot.current_vehicle_id,
    )


def parking_spot_to_orm(spot: domain.ParkingSpot, position: int) -> ORMParkingSpot:
    """Convert domain ParkingSpot entity to a new SQLAlchemy row."""
    return ORMParkingSpot(
        id=spot.id or new_id(),
        position=position,
        code=spot.code,
        is_occupied=spot.is_occupied,
        current_vehicle_id=spot.current_vehicle_id,
        type=spot.type.value,
    )


def package_to_domain(orm_package: ORMPackage) -> domain.Package:
    """Convert SQLAlchemy Package model to domain Package entity."""
    return domain.Package(
        id=orm_package.id,
        tracking_code=orm_package.tracking_code,
        received_at=_aware(orm_package.received_at),
        received_by_staff_id=orm_package.received_by_staff_id,
        unit_id=orm_package.unit_id,
        recipient_name=orm_package.recipient_name,
        location=orm_package.location,
        status=domain.PackageStatus(orm_package.status),
        picked_up_at=_aware(orm_package.picked_up_at),
    )


def package_to_orm(package: domain.Package) -> ORMPackage:
    """Convert domain Package entity to a new SQLAlchemy row."""
    return ORMPackage(
        id=package.id or new_id(),
        tracking_code=package.tracking_code,
        received_at=package.received_at,
        received_by_staff_id=package.received_by_staff_id,
        unit_id=package.unit_id,
        recipient_name=package.recipient_name,
        location=package.location,
        status=package.status.value,
        picked_up_at=package.picked_up_at,
    )


def access_log_to_domain(orm_log: ORMAccessLog) -> domain.AccessLog:
    """Convert SQLAlchemy AccessLog model to domain AccessLog entity."""
    return domain.AccessLog(
        id=orm_log.id,
        timestamp=_aware(orm_log.timestamp),
        type=domain.AccessType(orm_log.type),
        vehicle_plate=orm_log.vehicle_plate,
        is_registered=bool(orm_log.is_registered),
        spot_id=orm_log.spot_id,
        notes=orm_log.notes,
    )


def access_log_to_orm(log: domain.AccessLog) -> ORMAccessLog:
    """Convert domain AccessLog entity to a new SQLAlchemy row."""
    return ORMAccessLog(
        id=log.id or new_id(),
        timestamp=log.timestamp,
        type=log.type.value,
        vehicle_plate=log.vehicle_plate,
        is_registered=log.is_registered,
        spot_id=log.spot_id,
        notes=log.notes,
    )


def permission_to_domain(orm_permission: ORMRolePermission) -> domain.RolePermission:
    """Convert SQLAlchemy RolePermission model to domain RolePermission entity.

    The role name comes from the joined ``roles`` row.
    """
    return domain.RolePermission(
        id=orm_permission.id,
        role_id=orm_permission.role_id,
        resource=domain.Resource(orm_permission.resource),
        can_view=bool(orm_permission.can_view),
        can_create=bool(orm_permission.can_create),
        can_edit=bool(orm_permission.can_edit),
        can_delete=bool(orm_permission.can_delete),
        role_name=orm_permission.role.name if orm_permission.role is not None else None,
    )


def permission_to_orm(permission: domain.RolePermission) -> ORMRolePermission:
    """Convert domain RolePermission entity to a new SQLAlchemy row."""
    return ORMRolePermission(
        id=permission.id or new_id(),
        role_id=permission.role_id,
        resource=permission.resource.value,
        can_view=permission.can_view,
        can_create=permission.can_create,
        can_edit=permission.can_edit,
        can_delete=permission.can_delete,
    )
