"""Database layer for condogest application."""

from condogest.database.base import Database
from condogest.database.factories import (
    create_database,
    create_local_database,
    create_remote_database,
)

__all__ = ["Database", "create_database", "create_local_database", "create_remote_database"]
