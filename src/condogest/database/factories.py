"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Mapping, Optional

import structlog

from condogest.database.base import Database
from condogest.database.json_store import DEFAULT_LATENCY, LocalDatabase
from condogest.database.sqlalchemy_db import SQLAlchemyDatabase

logger = structlog.get_logger(__name__)

REMOTE_URL_VAR = "CONDOGEST_REMOTE_URL"
REMOTE_KEY_VAR = "CONDOGEST_REMOTE_KEY"
DATA_PATH_VAR = "CONDOGEST_DATA_PATH"
LATENCY_VAR = "CONDOGEST_SIMULATED_LATENCY"


def create_local_database(
    data_path: Optional[str] = None, latency: Optional[float] = None
) -> LocalDatabase:
    """Create a local JSON snapshot database.

    Args:
        data_path: Directory for the snapshot. If None, checks CONDOGEST_DATA_PATH
            environment variable, then defaults to ~/.condogest
        latency: Simulated delay per call in seconds. If None, checks
            CONDOGEST_SIMULATED_LATENCY, then defaults to 0.3

    Returns:
        LocalDatabase instance
    """
    if data_path is None:
        data_path = os.environ.get(DATA_PATH_VAR)

    if data_path is None:
        data_path = str(Path.home() / ".condogest")

    if latency is None:
        raw = os.environ.get(LATENCY_VAR)
        try:
            latency = float(raw) if raw else DEFAULT_LATENCY
        except ValueError:
            raise ValueError(f"{LATENCY_VAR} must be a number of seconds, got '{raw}'")

    return LocalDatabase(data_path, latency=latency)


def create_remote_database(database_url: str, access_key: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a relational backend database.

    Args:
        database_url: SQLAlchemy URL of the backend
        access_key: Backend password

    Returns:
        SQLAlchemyDatabase instance
    """
    return SQLAlchemyDatabase(database_url, access_key=access_key)


def remote_configured(environ: Optional[Mapping[str, str]] = None) -> bool:
    """True when both the remote URL and its access key are set."""
    environ = os.environ if environ is None else environ
    return bool(environ.get(REMOTE_URL_VAR)) and bool(environ.get(REMOTE_KEY_VAR))


def create_database(
    data_path: Optional[str] = None,
    latency: Optional[float] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Database:
    """Bind the database implementation for this process.

    The relational backend is used when CONDOGEST_REMOTE_URL and
    CONDOGEST_REMOTE_KEY are both set; otherwise the local snapshot is used.
    Call once at startup and keep the returned instance.
    """
    environ = os.environ if environ is None else environ
    if remote_configured(environ):
        db: Database = create_remote_database(environ[REMOTE_URL_VAR], environ[REMOTE_KEY_VAR])
    else:
        db = create_local_database(data_path=data_path, latency=latency)
    logger.info("database_bound", mode=db.storage_mode.value)
    return db
