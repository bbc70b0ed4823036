"""
Repository layer for database access.

This module contains all database access operations, encapsulating MongoDB queries and data persistence logic.
"""
from repositories.base import Database
from repositories.resource_repository import ResourceRepository, to_object_id

__all__ = [
    "Database",
    "ResourceRepository",
    "to_object_id",
]
