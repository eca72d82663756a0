"""SQLAlchemy models for the relational backend."""

from datetime import datetime, UTC

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.engine import URL
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

from condogest.utils.ids import new_id

Base = declarative_base()


class Unit(Base):
    """Residential unit model."""

    __tablename__ = "units"

    id = Column(String(64), primary_key=True, default=new_id)
    block = Column(String, nullable=False)
    number = Column(String, nullable=False)
    floor = Column(Integer, nullable=False)


class Role(Base):
    """Role definition model."""

    __tablename__ = "roles"

    id = Column(String(64), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)

    # Relationships
    people = relationship("Person", back_populates="role")
    permissions = relationship("RolePermission", back_populates="role")


class Person(Base):
    """Person model."""

    __tablename__ = "people"

    id = Column(String(64), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    role_id = Column(String(64), ForeignKey("roles.id"), nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=False, default="")
    unit_id = Column(String(64), nullable=True)
    avatar_url = Column(String, nullable=True)
    username = Column(String, nullable=True, unique=True)
    password_hash = Column(String, nullable=True)
    must_change_password = Column(Boolean, default=False, nullable=False)
    active = Column(Boolean, default=True, nullable=False)

    # Relationships
    role = relationship("Role", back_populates="people")


class Vehicle(Base):
    """Vehicle model."""

    __tablename__ = "vehicles"

    id = Column(String(64), primary_key=True, default=new_id)
    plate = Column(String, nullable=False)
    model = Column(String, nullable=False, default="")
    color = Column(String, nullable=False, default="")
    owner_id = Column(String(64), nullable=True)
    owner_name = Column(String, nullable=True)
    unit_id = Column(String(64), nullable=True)


class ParkingSpot(Base):
    """Parking spot model.

    ``position`` keeps insertion order so spots are scanned in stored order.
    """

    __tablename__ = "parking_spots"

    id = Column(String(64), primary_key=True, default=new_id)
    position = Column(Integer, nullable=False, default=0)
    code = Column(String, nullable=False)
    is_occupied = Column(Boolean, default=False, nullable=False)
    current_vehicle_id = Column(String, nullable=True)
    type = Column(String, nullable=False)


class Package(Base):
    """Package model."""

    __tablename__ = "packages"

    id = Column(String(64), primary_key=True, default=new_id)
    tracking_code = Column(String, nullable=False)
    received_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)
    received_by_staff_id = Column(String(64), nullable=False)
    unit_id = Column(String(64), nullable=False)
    recipient_name = Column(String, nullable=False)
    location = Column(String, nullable=False)
    status = Column(String, nullable=False)
    picked_up_at = Column(DateTime(timezone=True), nullable=True)


class AccessLog(Base):
    """Gate access log model."""

    __tablename__ = "access_logs"

    id = Column(String(64), primary_key=True, default=new_id)
    timestamp = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)
    type = Column(String, nullable=False)
    vehicle_plate = Column(String, nullable=False)
    is_registered = Column(Boolean, default=False, nullable=False)
    spot_id = Column(String(64), nullable=True)
    notes = Column(String, nullable=True)


class RolePermission(Base):
    """Permission matrix row model."""

    __tablename__ = "role_permissions"

    id = Column(String(64), primary_key=True, default=new_id)
    role_id = Column(String(64), ForeignKey("roles.id"), nullable=False)
    resource = Column(String, nullable=False)
    can_view = Column(Boolean, default=False, nullable=False)
    can_create = Column(Boolean, default=False, nullable=False)
    can_edit = Column(Boolean, default=False, nullable=False)
    can_delete = Column(Boolean, default=False, nullable=False)

    # One row per (role, resource)
    __table_args__ = (UniqueConstraint("role_id", "resource", name="uq_role_resource"),)

    # Relationships
    role = relationship("Role", back_populates="permissions")


def create_session_factory(database_url: str | URL) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
