"""Gate entry and exit service."""

from datetime import datetime, UTC
from typing import Optional

import structlog

from condogest.database.base import Database
from condogest.domain.entities import (
    AccessLog,
    AccessType,
    EntryResult,
    EntryType,
    ExitResult,
    ParkingSpot,
    SpotType,
    Vehicle,
)
from condogest.domain.errors import (
    NotFoundError,
    ValidationError,
    no_spot_available,
    unit_not_found,
)
from condogest.utils.ids import new_id

logger = structlog.get_logger(__name__)


def normalize_plate(plate: str) -> str:
    """Trim and upper-case a licence plate."""
    return plate.strip().upper()


def spot_type_for(entry_type: EntryType) -> SpotType:
    """Spot category an entry is allocated to.

    Service providers park in visitor spots.
    """
    if entry_type is EntryType.RESIDENT:
        return SpotType.RESIDENT
    if entry_type in (EntryType.VISITOR, EntryType.SERVICE):
        return SpotType.VISITOR
    raise ValueError(f"Unknown entry type: {entry_type}")


def first_free_spot(spots: list[ParkingSpot], spot_type: SpotType) -> Optional[ParkingSpot]:
    """First spot in stored order that is free and of the given type."""
    for spot in spots:
        if not spot.is_occupied and spot.type is spot_type:
            return spot
    return None


class GateService:
    """Service for registering vehicles through the gate."""

    def __init__(self, db: Database):
        """Initialize gate service.

        Args:
            db: Database instance
        """
        self.db = db

    def _find_vehicle(self, plate: str) -> Optional[Vehicle]:
        for vehicle in self.db.list_vehicles():
            if vehicle.plate.upper() == plate:
                return vehicle
        return None

    def register_entry(
        self,
        plate: str,
        unit_id: str,
        entry_type: EntryType,
        now: Optional[datetime] = None,
    ) -> EntryResult:
        """Register a vehicle entering the condominium.

        The first free spot of the matching type is occupied by the plate.
        When the garage has no such spot the entry is still logged and the
        result reports that nothing was allocated.

        Args:
            plate: Licence plate
            unit_id: Unit being visited
            entry_type: Resident, visitor or service entry
            now: Entry time (defaults to the current time)

        Returns:
            EntryResult with the log, the allocated spot (or None) and the
            matching vehicle registration (or None)

        Raises:
            ValidationError: If plate or unit is missing
            NotFoundError: If the unit does not exist
        """
        plate = normalize_plate(plate or "")
        if not plate or not unit_id:
            raise ValidationError("Plate and unit are required")

        unit = next((u for u in self.db.list_units() if u.id == unit_id), None)
        if unit is None:
            raise NotFoundError(unit_not_found(unit_id))

        entry_type = EntryType(entry_type)
        vehicle = self._find_vehicle(plate)
        wanted = spot_type_for(entry_type)

        spot = first_free_spot(self.db.list_parking_spots(), wanted)
        if spot is not None:
            self.db.update_parking_spot(
                spot.id, {"is_occupied": True, "current_vehicle_id": plate}
            )
            spot = ParkingSpot(
                id=spot.id,
                code=spot.code,
                is_occupied=True,
                type=spot.type,
                current_vehicle_id=plate,
            )
            logger.info("spot_allocated", plate=plate, spot=spot.code, spot_type=wanted.value)
        else:
            logger.warning(
                "no_spot_available",
                plate=plate,
                spot_type=wanted.value,
                message=no_spot_available(wanted.value),
            )

        log = AccessLog(
            id=new_id(),
            timestamp=now or datetime.now(UTC),
            type=AccessType.ENTRY,
            vehicle_plate=plate,
            is_registered=vehicle is not None,
            spot_id=spot.id if spot else None,
            notes=f"Unit {unit.label} ({entry_type.value})",
        )
        self.db.add_access_log(log)
        return EntryResult(log=log, spot=spot, vehicle=vehicle, wanted_spot_type=wanted)

    def register_exit(self, plate_or_id: str, now: Optional[datetime] = None) -> ExitResult:
        """Register a vehicle leaving.

        Every spot held by the plate is released. Plates are compared
        upper-cased, as entries store them. The exit is logged even when
        nothing was parked under it.
        """
        value = normalize_plate(plate_or_id or "")
        if not value:
            raise ValidationError("Plate is required")

        released = []
        for spot in self.db.list_parking_spots():
            if spot.current_vehicle_id is not None and spot.current_vehicle_id == value:
                self.db.update_parking_spot(
                    spot.id, {"is_occupied": False, "current_vehicle_id": None}
                )
                released.append(
                    ParkingSpot(id=spot.id, code=spot.code, is_occupied=False, type=spot.type)
                )

        registered = self._find_vehicle(value) is not None
        log = AccessLog(
            id=new_id(),
            timestamp=now or datetime.now(UTC),
            type=AccessType.EXIT,
            vehicle_plate=value,
            is_registered=registered,
            spot_id=released[0].id if released else None,
        )
        self.db.add_access_log(log)
        if not released:
            logger.info("exit_without_spot", plate=value)
        return ExitResult(log=log, released_spots=released)

    def release_spot(self, code: str, now: Optional[datetime] = None) -> ExitResult:
        """Register the exit of whatever vehicle occupies the spot with ``code``.

        Raises:
            NotFoundError: If no spot has this code
            ValidationError: If the spot is free
        """
        spot = next(
            (s for s in self.db.list_parking_spots() if s.code.upper() == code.strip().upper()),
            None,
        )
        if spot is None:
            raise NotFoundError(f"Parking spot '{code}' not found")
        if not spot.is_occupied or spot.current_vehicle_id is None:
            raise ValidationError(f"Parking spot '{spot.code}' is not occupied")
        return self.register_exit(spot.current_vehicle_id, now=now)

    def occupied_spots(self) -> list[ParkingSpot]:
        return [s for s in self.db.list_parking_spots() if s.is_occupied]

    def access_logs(
        self,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        plate: Optional[str] = None,
    ) -> list[AccessLog]:
        """Gate logs, newest first, optionally within [since, until) and for one plate."""
        plate = normalize_plate(plate) if plate else None
        return [
            log
            for log in self.db.list_access_logs()
            if (since is None or log.timestamp >= since)
            and (until is None or log.timestamp < until)
            and (plate is None or log.vehicle_plate.upper() == plate)
        ]
