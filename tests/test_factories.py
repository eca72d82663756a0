"""Tests for database selection."""

import pytest

from condogest.database.factories import (
    create_database,
    create_local_database,
    remote_configured,
)
from condogest.database.json_store import DEFAULT_LATENCY, LocalDatabase
from condogest.database.sqlalchemy_db import SQLAlchemyDatabase, build_database_url
from condogest.domain.entities import StorageMode


def test_remote_needs_both_values():
    assert not remote_configured({})
    assert not remote_configured({"CONDOGEST_REMOTE_URL": "sqlite://"})
    assert not remote_configured({"CONDOGEST_REMOTE_KEY": "k"})
    assert remote_configured({"CONDOGEST_REMOTE_URL": "sqlite://", "CONDOGEST_REMOTE_KEY": "k"})


def test_local_selected_without_remote(tmp_path):
    db = create_database(data_path=str(tmp_path), latency=0, environ={})
    assert isinstance(db, LocalDatabase)
    assert db.storage_mode is StorageMode.LOCAL


def test_remote_selected_when_configured(tmp_path):
    environ = {
        "CONDOGEST_REMOTE_URL": f"sqlite:///{tmp_path / 'remote.db'}",
        "CONDOGEST_REMOTE_KEY": "secret",
    }
    db = create_database(environ=environ)
    assert isinstance(db, SQLAlchemyDatabase)
    assert db.storage_mode is StorageMode.REMOTE
    assert db.list_units() == []
    db.disconnect()


def test_local_defaults_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("CONDOGEST_DATA_PATH", str(tmp_path))
    monkeypatch.delenv("CONDOGEST_SIMULATED_LATENCY", raising=False)
    db = create_local_database()
    assert db.data_path == tmp_path
    assert db.latency == DEFAULT_LATENCY


def test_latency_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("CONDOGEST_SIMULATED_LATENCY", "0")
    assert create_local_database(data_path=str(tmp_path)).latency == 0


def test_bad_latency(tmp_path, monkeypatch):
    monkeypatch.setenv("CONDOGEST_SIMULATED_LATENCY", "slow")
    with pytest.raises(ValueError, match="CONDOGEST_SIMULATED_LATENCY"):
        create_local_database(data_path=str(tmp_path))


def test_access_key_becomes_password():
    url = build_database_url("postgresql://condo@db.example.com/condo", "s3cret")
    assert url.password == "s3cret"
    assert url.host == "db.example.com"


def test_access_key_ignored_for_sqlite():
    url = build_database_url("sqlite:///condo.db", "s3cret")
    assert url.password is None
