"""Database query functions."""

import json
import sqlite3
from dataclasses import asdict
from decimal import Decimal
from pathlib import Path
from typing import Any

from evkit.domain.models import CurrencyCode, EventDraft
from evkit.store.schema import get_db_path


def _connect(db_path: Path | None = None) -> sqlite3.Connection:
    """Create a database connection with row factory.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Database connection with row_factory configured.
    """
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def draft_to_json(draft: EventDraft) -> str:
    """Serialize a draft, keeping prices as exact decimal strings."""
    data = asdict(draft)
    data["price"] = str(draft.price)
    return json.dumps(data, sort_keys=True)


def draft_from_json(payload: str) -> EventDraft:
    """Deserialize a draft written by draft_to_json."""
    data = json.loads(payload)
    return EventDraft(
        title=data.get("title", ""),
        description=data.get("description", ""),
        category=data.get("category", ""),
        venue=data.get("venue", ""),
        price=Decimal(data.get("price", "0")),
        currency=CurrencyCode(data.get("currency", "EGP")),
    )


def save_draft(draft: EventDraft, db_path: Path | None = None) -> int:
    """Insert a draft snapshot.

    Args:
        draft: Draft to store.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Row ID of the stored snapshot.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                "INSERT INTO drafts (title, description, data) VALUES (?, ?, ?)",
                (draft.title, draft.description, draft_to_json(draft)),
            )
            conn.commit()
            return int(cursor.lastrowid or 0)
        except sqlite3.Error:
            conn.rollback()
            raise


def get_latest_draft(db_path: Path | None = None) -> EventDraft | None:
    """Get the most recently saved draft.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Latest draft, or None if nothing has been saved.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT data FROM drafts ORDER BY id DESC LIMIT 1")
        row = cursor.fetchone()
        return draft_from_json(row["data"]) if row else None


def list_drafts(db_path: Path | None = None, limit: int | None = None) -> list[dict[str, Any]]:
    """Get saved drafts, newest first.

    Args:
        db_path: Path to the database file. If None, uses default location.
        limit: Maximum number of drafts to return. If None, returns all.

    Returns:
        List of dictionaries with id, saved_at and the draft fields.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        query = "SELECT id, saved_at, data FROM drafts ORDER BY id DESC"
        params: list[Any] = []

        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        cursor.execute(query, params)
        rows = cursor.fetchall()

        results = []
        for row in rows:
            draft = draft_from_json(row["data"])
            results.append({"id": row["id"], "saved_at": row["saved_at"], **asdict(draft)})
        return results
