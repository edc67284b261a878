"""Database store layer - provides persistence for saved drafts.

This module re-exports all public database functions for easy importing.
"""

from evkit.store.queries import get_latest_draft, list_drafts, save_draft
from evkit.store.schema import database_exists, get_db_path, init_database

__all__ = [
    # Schema
    "database_exists",
    "get_db_path",
    "init_database",
    # Queries
    "get_latest_draft",
    "list_drafts",
    "save_draft",
]
