"""Shared pytest fixtures for condogest tests."""

import os
import tempfile
from datetime import datetime, UTC

import pytest
import structlog

from condogest.database.fixtures import generate_fixture_data, seed_database
from condogest.database.json_store import LocalDatabase
from condogest.database.sqlalchemy_db import SQLAlchemyDatabase
from condogest.domain.auth import AuthService
from condogest.domain.dashboard import DashboardService
from condogest.domain.gate import GateService
from condogest.domain.packages import PackageService
from condogest.domain.people import PersonService
from condogest.domain.permissions import PermissionService
from condogest.domain.roles import RoleService
from condogest.domain.units import UnitService
from condogest.domain.vehicles import VehicleService

# Cheap hashing keeps the suite fast; the format is the same.
TEST_ITERATIONS = 1000

FIXED_NOW = datetime(2024, 5, 10, 15, 30, tzinfo=UTC)


def fixture_snapshot():
    return generate_fixture_data(now=FIXED_NOW, password_iterations=TEST_ITERATIONS)


@pytest.fixture
def local_db():
    """Local JSON database in a temporary directory, seeded with fixtures."""
    with tempfile.TemporaryDirectory() as data_path:
        db = LocalDatabase(data_path, latency=0, seed_factory=fixture_snapshot)
        db.connect()
        db.initialize_schema()
        yield db
        db.disconnect()


@pytest.fixture
def remote_db():
    """SQLAlchemy database on a temporary SQLite file, seeded with fixtures."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = SQLAlchemyDatabase(f"sqlite:///{db_path}", access_key="unused-for-sqlite")
    db.database_path = db_path
    db.connect()
    db.initialize_schema()
    seed_database(db, fixture_snapshot())

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture(params=["local", "remote"])
def db(request):
    """Every database implementation, seeded with the same fixture data."""
    return request.getfixturevalue(f"{request.param}_db")


@pytest.fixture
def empty_local_db():
    """Local JSON database that starts with no records."""
    from condogest.domain.entities import Snapshot

    with tempfile.TemporaryDirectory() as data_path:
        yield LocalDatabase(data_path, latency=0, seed_factory=Snapshot)


@pytest.fixture
def unit_service(db):
    return UnitService(db)


@pytest.fixture
def gate_service(db):
    return GateService(db)


@pytest.fixture
def auth_service(db):
    return AuthService(db, password_iterations=TEST_ITERATIONS)


@pytest.fixture
def person_service(db):
    return PersonService(db, password_iterations=TEST_ITERATIONS)


@pytest.fixture
def vehicle_service(db):
    return VehicleService(db)


@pytest.fixture
def permission_service(db):
    return PermissionService(db)


@pytest.fixture
def role_service(db):
    return RoleService(db)


@pytest.fixture
def dashboard_service(db):
    return DashboardService(db)


@pytest.fixture
def package_service(db):
    return PackageService(db)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def local_env(monkeypatch):
    """Environment selecting the local store with no simulated delay."""
    monkeypatch.delenv("CONDOGEST_REMOTE_URL", raising=False)
    monkeypatch.delenv("CONDOGEST_REMOTE_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("CONDOGEST_SIMULATED_LATENCY", "0")


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any logging setup done by CLI invocations."""
    yield
    structlog.reset_defaults()
