"""Persistence layer: database management, storage backends and repositories."""

from userstore.infrastructure.persistence.backend import SQLAlchemyBackend, StorageBackend
from userstore.infrastructure.persistence.database import DatabaseManager, get_db_manager

__all__ = ["DatabaseManager", "SQLAlchemyBackend", "StorageBackend", "get_db_manager"]
