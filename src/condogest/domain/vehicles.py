"""Vehicle domain service."""

from typing import Optional

from condogest.database.base import Database
from condogest.domain.entities import Vehicle
from condogest.domain.errors import ConflictError, NotFoundError, ValidationError, entity_not_found
from condogest.domain.gate import normalize_plate
from condogest.utils.ids import new_id


class VehicleService:
    """Service for managing registered vehicles."""

    def __init__(self, db: Database):
        """Initialize vehicle service.

        Args:
            db: Database instance
        """
        self.db = db

    def add_vehicle(
        self,
        plate: str,
        model: str,
        color: str,
        owner_id: Optional[str] = None,
    ) -> Vehicle:
        """Register a vehicle.

        The owner's name and unit are copied onto the record.

        Args:
            plate: Licence plate (stored upper-cased)
            model: Make and model
            color: Colour
            owner_id: Person who owns the vehicle

        Returns:
            The stored vehicle

        Raises:
            ValidationError: If plate or model is missing
            ConflictError: If the plate is already registered
            NotFoundError: If the owner does not exist
        """
        plate = normalize_plate(plate or "")
        if not plate or not (model or "").strip():
            raise ValidationError("Plate and model are required")
        if self.find_by_plate(plate) is not None:
            raise ConflictError(f"Vehicle with plate '{plate}' is already registered")

        owner_name = unit_id = None
        if owner_id:
            owner = self.db.get_person(owner_id)
            if owner is None:
                raise NotFoundError(entity_not_found("Person", owner_id))
            owner_name, unit_id = owner.name, owner.unit_id

        vehicle = Vehicle(
            id=new_id(),
            plate=plate,
            model=model.strip(),
            color=(color or "").strip(),
            owner_id=owner_id or None,
            owner_name=owner_name,
            unit_id=unit_id,
        )
        self.db.add_vehicle(vehicle)
        return vehicle

    def list_vehicles(self) -> list[Vehicle]:
        return self.db.list_vehicles()

    def find_by_plate(self, plate: str) -> Optional[Vehicle]:
        """Find a vehicle by plate, ignoring case and surrounding spaces."""
        plate = normalize_plate(plate)
        for vehicle in self.db.list_vehicles():
            if vehicle.plate.upper() == plate:
                return vehicle
        return None

    def vehicles_of_unit(self, unit_id: str) -> list[Vehicle]:
        return [v for v in self.db.list_vehicles() if v.unit_id == unit_id]
