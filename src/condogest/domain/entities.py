"""Domain model entities for condogest.

These are pure data classes representing condominium concepts, independent of
how either storage backend lays them out. Both the local JSON snapshot and the
relational backend map into these types, so the business rules never see
storage field names.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class SpotType(str, Enum):
    """Parking spot category."""

    RESIDENT = "RESIDENT"
    VISITOR = "VISITOR"
    DISABLED = "DISABLED"


class EntryType(str, Enum):
    """Who is coming through the gate."""

    RESIDENT = "RESIDENT"
    VISITOR = "VISITOR"
    SERVICE = "SERVICE"


class AccessType(str, Enum):
    """Direction of a gate movement."""

    ENTRY = "ENTRY"
    EXIT = "EXIT"


class PackageStatus(str, Enum):
    """Package lifecycle state."""

    WAITING_PICKUP = "WAITING_PICKUP"
    DELIVERED = "DELIVERED"


class Resource(str, Enum):
    """Screens covered by the permission matrix."""

    DASHBOARD = "dashboard"
    UNITS = "units"
    PEOPLE = "people"
    PACKAGES = "packages"
    PARKING = "parking"
    ACCESS_CONTROL = "access_control"
    ROLE_MANAGEMENT = "role_management"


class Capability(str, Enum):
    """Boolean capability columns of a RolePermission row."""

    VIEW = "can_view"
    CREATE = "can_create"
    EDIT = "can_edit"
    DELETE = "can_delete"


class StorageMode(str, Enum):
    """Which persistence implementation is bound."""

    LOCAL = "local"
    REMOTE = "remote"


class RecordState(str, Enum):
    """Whether a locally held row matches what the store confirmed."""

    TENTATIVE = "tentative"
    CONFIRMED = "confirmed"


RESIDENT_ROLE_NAMES = frozenset({"RESIDENT", "MORADOR"})


@dataclass(frozen=True)
class Unit:
    """Residential unit domain entity."""

    id: str
    block: str
    number: str
    floor: int

    @property
    def label(self) -> str:
        return f"{self.block}-{self.number}"


@dataclass(frozen=True)
class RoleDefinition:
    """Role a person can hold."""

    id: str
    name: str
    description: Optional[str] = None

    @property
    def is_resident(self) -> bool:
        return self.name.upper() in RESIDENT_ROLE_NAMES


@dataclass(frozen=True)
class Person:
    """Resident, staff member or administrator.

    ``role_name`` is resolved from the role table when read and is never
    persisted. ``password_hash`` holds a salted hash, never the password.
    """

    id: str
    name: str
    role_id: str
    email: str
    phone: str
    unit_id: Optional[str] = None
    avatar_url: Optional[str] = None
    username: Optional[str] = None
    password_hash: Optional[str] = None
    must_change_password: bool = False
    active: bool = True
    role_name: Optional[str] = None

    @property
    def is_resident(self) -> bool:
        return (self.role_name or "").upper() in RESIDENT_ROLE_NAMES


@dataclass(frozen=True)
class Vehicle:
    """Registered vehicle domain entity."""

    id: str
    plate: str
    model: str
    color: str
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None
    unit_id: Optional[str] = None


@dataclass(frozen=True)
class ParkingSpot:
    """Parking spot domain entity.

    ``current_vehicle_id`` holds the plate of the vehicle parked there and is
    only set while ``is_occupied`` is true.
    """

    id: str
    code: str
    is_occupied: bool
    type: SpotType
    current_vehicle_id: Optional[str] = None


@dataclass(frozen=True)
class Package:
    """Delivered package domain entity."""

    id: str
    tracking_code: str
    received_at: datetime
    received_by_staff_id: str
    unit_id: str
    recipient_name: str
    location: str
    status: PackageStatus = PackageStatus.WAITING_PICKUP
    picked_up_at: Optional[datetime] = None


@dataclass(frozen=True)
class AccessLog:
    """Gate movement record. Append-only."""

    id: str
    timestamp: datetime
    type: AccessType
    vehicle_plate: str
    is_registered: bool
    spot_id: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class RolePermission:
    """One row of the permission matrix: a (role, resource) pair."""

    id: str
    role_id: str
    resource: Resource
    can_view: bool = False
    can_create: bool = False
    can_edit: bool = False
    can_delete: bool = False
    role_name: Optional[str] = None

    def allows(self, capability: Capability) -> bool:
        return getattr(self, capability.value)


@dataclass
class Snapshot:
    """Every entity list held by a store, as one document."""

    units: list[Unit] = field(default_factory=list)
    roles: list[RoleDefinition] = field(default_factory=list)
    people: list[Person] = field(default_factory=list)
    vehicles: list[Vehicle] = field(default_factory=list)
    parking_spots: list[ParkingSpot] = field(default_factory=list)
    packages: list[Package] = field(default_factory=list)
    logs: list[AccessLog] = field(default_factory=list)
    permissions: list[RolePermission] = field(default_factory=list)


@dataclass(frozen=True)
class EntryResult:
    """Outcome of a gate entry.

    ``spot`` is None when no free spot of the wanted type existed; the log is
    recorded either way.
    """

    log: AccessLog
    spot: Optional[ParkingSpot]
    vehicle: Optional[Vehicle]
    wanted_spot_type: SpotType

    @property
    def allocated(self) -> bool:
        return self.spot is not None


@dataclass(frozen=True)
class ExitResult:
    """Outcome of a gate exit."""

    log: AccessLog
    released_spots: list[ParkingSpot]


@dataclass(frozen=True)
class ActivityBucket:
    """Entries and exits within one window of the gate activity chart."""

    label: str
    entries: int
    exits: int


@dataclass(frozen=True)
class DashboardStats:
    """Figures shown on the overview screen."""

    total_spots: int
    occupied_spots: int
    pending_packages: int
    total_residents: int
    active_visitors: int
    activity: list[ActivityBucket]
    recent_logs: list[AccessLog]

    @property
    def free_spots(self) -> int:
        return self.total_spots - self.occupied_spots

    @property
    def occupancy_rate(self) -> int:
        """Occupied share of spots as a rounded percentage."""
        return round(self.occupied_spots / (self.total_spots or 1) * 100)
