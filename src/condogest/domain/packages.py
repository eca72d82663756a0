"""Package delivery service."""

from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Optional

import structlog

from condogest.database.base import Database
from condogest.domain.entities import Package, PackageStatus
from condogest.domain.errors import (
    NotFoundError,
    ValidationError,
    entity_not_found,
    unit_not_found,
)
from condogest.services.assistant import Assistant
from condogest.utils.ids import new_id

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RegisteredPackage:
    """A newly stored package and the notification drafted for it."""

    package: Package
    notification: str


class PackageService:
    """Service for receiving and handing out packages."""

    def __init__(self, db: Database, assistant: Optional[Assistant] = None):
        """Initialize package service.

        Args:
            db: Database instance
            assistant: Drafts resident notifications. Registration works
                without one
        """
        self.db = db
        self.assistant = assistant

    def register_package(
        self,
        tracking_code: str,
        recipient_name: str,
        location: str,
        unit_id: str,
        received_by_staff_id: str,
        now: Optional[datetime] = None,
    ) -> RegisteredPackage:
        """Register a package received at the front desk.

        Args:
            tracking_code: Carrier tracking code or description
            recipient_name: Person the package is addressed to
            location: Where the package is kept
            unit_id: Recipient's unit
            received_by_staff_id: Staff member who received it
            now: Reception time (defaults to the current time)

        Returns:
            RegisteredPackage with the stored package and a notification draft
            (empty when no assistant is attached)

        Raises:
            ValidationError: If a required field is missing
            NotFoundError: If the unit does not exist
        """
        tracking_code = (tracking_code or "").strip()
        recipient_name = (recipient_name or "").strip()
        location = (location or "").strip()
        if not tracking_code or not recipient_name or not location or not unit_id:
            raise ValidationError("Tracking code, recipient, location and unit are required")
        if not any(unit.id == unit_id for unit in self.db.list_units()):
            raise NotFoundError(unit_not_found(unit_id))

        package = Package(
            id=new_id(),
            tracking_code=tracking_code,
            received_at=now or datetime.now(UTC),
            received_by_staff_id=received_by_staff_id,
            unit_id=unit_id,
            recipient_name=recipient_name,
            location=location,
            status=PackageStatus.WAITING_PICKUP,
        )
        self.db.add_package(package)
        logger.info("package_registered", package_id=package.id, unit_id=unit_id)

        notification = ""
        if self.assistant is not None:
            notification = self.assistant.draft_package_notification(
                recipient_name, tracking_code, location
            )
        return RegisteredPackage(package=package, notification=notification)

    def get_package(self, package_id: str) -> Package:
        for package in self.db.list_packages():
            if package.id == package_id:
                return package
        raise NotFoundError(entity_not_found("Package", package_id))

    def find_by_tracking_code(self, tracking_code: str) -> Optional[Package]:
        code = tracking_code.strip().upper()
        for package in self.db.list_packages():
            if package.tracking_code.upper() == code:
                return package
        return None

    def mark_picked_up(self, package_id: str, now: Optional[datetime] = None) -> Package:
        """Hand a package over to the resident.

        Already delivered packages are returned unchanged.

        Raises:
            NotFoundError: If the package does not exist
        """
        package = self.get_package(package_id)
        if package.status is PackageStatus.DELIVERED:
            return package

        picked_up_at = now or datetime.now(UTC)
        self.db.update_package(
            package_id,
            {"status": PackageStatus.DELIVERED, "picked_up_at": picked_up_at},
        )
        logger.info("package_picked_up", package_id=package_id)
        return self.get_package(package_id)

    def list_packages(self) -> list[Package]:
        return self.db.list_packages()

    def pending_packages(self, unit_id: Optional[str] = None) -> list[Package]:
        """Packages still waiting for pickup, optionally for one unit."""
        return [
            p
            for p in self.db.list_packages()
            if p.status is PackageStatus.WAITING_PICKUP and (unit_id is None or p.unit_id == unit_id)
        ]
