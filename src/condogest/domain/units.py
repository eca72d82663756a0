"""Unit domain service."""

from collections import defaultdict

import structlog

from condogest.database.base import Database
from condogest.domain.entities import Unit
from condogest.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_units,
    entity_not_found,
)
from condogest.utils.ids import new_id

logger = structlog.get_logger(__name__)

# Numbers are floor * 100 + position, so a floor holds at most 99 apartments
MAX_PER_FLOOR = 99


def parse_block_names(blocks: str) -> list[str]:
    """Split a comma-separated block list.

    Names are trimmed and upper-cased; empty entries are dropped and repeats
    collapse to their first occurrence.
    """
    names: list[str] = []
    for raw in blocks.split(","):
        name = raw.strip().upper()
        if name and name not in names:
            names.append(name)
    return names


def apartment_number(floor: int, sequence: int) -> str:
    """Number of the ``sequence``-th apartment on ``floor`` (floor 2, apt 3 -> 203)."""
    return str(floor * 100 + sequence)


def _number_key(unit: Unit) -> tuple[int, str]:
    return (int(unit.number), unit.number) if unit.number.isdigit() else (0, unit.number)


class UnitService:
    """Service for managing units and blocks."""

    def __init__(self, db: Database):
        """Initialize unit service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_units(self) -> list[Unit]:
        return self.db.list_units()

    def build_units(self, blocks: str, floors: int, per_floor: int) -> list[Unit]:
        """Synthesize the units of one or more blocks without saving them.

        Args:
            blocks: Comma-separated block names (e.g. "A, B, TOWER 1")
            floors: Number of floors per block
            per_floor: Apartments per floor

        Returns:
            ``len(blocks) * floors * per_floor`` new units

        Raises:
            ValidationError: If no block name is given, a count is not positive
                or a floor would hold more than MAX_PER_FLOOR apartments
        """
        names = parse_block_names(blocks)
        if not names:
            raise ValidationError("At least one block name is required")
        if floors <= 0 or per_floor <= 0:
            raise ValidationError("Floors and apartments per floor must be positive")
        if per_floor > MAX_PER_FLOOR:
            raise ValidationError(
                f"At most {MAX_PER_FLOOR} apartments per floor are supported, got {per_floor}"
            )

        return [
            Unit(id=new_id(), block=name, number=apartment_number(floor, seq), floor=floor)
            for name in names
            for floor in range(1, floors + 1)
            for seq in range(1, per_floor + 1)
        ]

    def generate_units(self, blocks: str, floors: int, per_floor: int) -> list[Unit]:
        """Generate and save the units of one or more blocks.

        All units are written in one bulk call, and only if none of them
        collides with an existing (block, number) pair.

        Returns:
            The units that were saved

        Raises:
            ValidationError: If the input is invalid
            ConflictError: If any generated unit already exists
        """
        units = self.build_units(blocks, floors, per_floor)
        existing = {(u.block, u.number) for u in self.db.list_units()}
        clashes = [u.label for u in units if (u.block, u.number) in existing]
        if clashes:
            raise ConflictError(duplicate_units(clashes))

        self.db.add_units(units)
        logger.info("units_generated", count=len(units), blocks=sorted({u.block for u in units}))
        return units

    def get_unit(self, unit_id: str) -> Unit:
        """Get unit by ID.

        Raises:
            NotFoundError: If the unit does not exist
        """
        for unit in self.db.list_units():
            if unit.id == unit_id:
                return unit
        raise NotFoundError(entity_not_found("Unit", unit_id))

    def find_unit(self, block: str, number: str) -> Unit | None:
        """Find a unit by block and apartment number (block is case-insensitive)."""
        block = block.strip().upper()
        for unit in self.db.list_units():
            if unit.block.upper() == block and unit.number == number.strip():
                return unit
        return None

    def group_by_block(self, units: list[Unit] | None = None) -> dict[str, list[Unit]]:
        """Group units by block, blocks in name order."""
        units = self.db.list_units() if units is None else units
        groups: dict[str, list[Unit]] = defaultdict(list)
        for unit in units:
            groups[unit.block].append(unit)
        return {block: groups[block] for block in sorted(groups)}

    def floors_of_block(self, block: str, units: list[Unit] | None = None) -> dict[int, list[Unit]]:
        """Group one block's units by floor, floors and numbers ascending."""
        units = self.db.list_units() if units is None else units
        floors: dict[int, list[Unit]] = defaultdict(list)
        for unit in units:
            if unit.block == block:
                floors[unit.floor].append(unit)
        return {floor: sorted(floors[floor], key=_number_key) for floor in sorted(floors)}

    def delete_unit(self, unit_id: str) -> None:
        self.db.delete_unit(unit_id)
        logger.info("unit_deleted", unit_id=unit_id)

    def delete_block(self, block: str) -> int:
        """Delete a whole block. Block names are matched upper-cased.

        Raises:
            NotFoundError: If the block has no units
        """
        block = block.strip().upper()
        removed = self.db.delete_block(block)
        if removed == 0:
            raise NotFoundError(f"Block '{block}' not found")
        logger.info("block_deleted", block=block, units=removed)
        return removed
