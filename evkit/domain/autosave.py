"""Pure types and functions for draft autosaving.

This module contains the functional core of autosave:
- No I/O operations (no timers, no storage, no console)
- No side effects
- Save status values and the predicates that drive the persister

The stateful, timer-driven part lives in evkit.autosave.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields, is_dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Idle:
    """Nothing to save."""


@dataclass(frozen=True)
class Dirty:
    """Unsaved changes waiting for the quiet period to end."""


@dataclass(frozen=True)
class Saving:
    """A save is in flight."""


@dataclass(frozen=True)
class Saved:
    """The last save succeeded."""

    at: datetime


@dataclass(frozen=True)
class Failed:
    """The last save failed; changes are still unsaved."""

    error: Exception
    at: datetime


SaveStatus = Idle | Dirty | Saving | Saved | Failed


def _field_values(draft: Any) -> dict[str, Any]:
    if draft is None:
        return {}
    if isinstance(draft, Mapping):
        return dict(draft)
    if is_dataclass(draft) and not isinstance(draft, type):
        return {f.name: getattr(draft, f.name) for f in fields(draft)}
    return dict(vars(draft)) if hasattr(draft, "__dict__") else {}


def has_content(draft: Any, fields: Iterable[str] | None = None) -> bool:
    """Check whether a draft holds anything worth saving.

    Args:
        draft: Mapping, dataclass instance or plain object.
        fields: Field names to inspect. If None, every field is inspected.

    Returns:
        True if at least one inspected textual field is non-blank.
    """
    values = _field_values(draft)
    if fields is not None:
        values = {name: values.get(name) for name in fields}

    return any(isinstance(value, str) and value.strip() for value in values.values())


def event_has_content(draft: Any) -> bool:
    """Check whether an event draft has a title or description."""
    return has_content(draft, fields=("title", "description"))


def is_terminal(status: SaveStatus) -> bool:
    """Check whether a status ends a debounce cycle (or precedes any)."""
    return isinstance(status, (Idle, Saved, Failed))


def describe_status(status: SaveStatus) -> str | None:
    """Format save status for display.

    Args:
        status: Current save status.

    Returns:
        Label such as "Saving..." or "Saved 14:03:22", or None when there
        is nothing to show.
    """
    if isinstance(status, Saving):
        return "Saving..."
    if isinstance(status, Saved):
        return f"Saved {status.at.strftime('%H:%M:%S')}"
    if isinstance(status, Failed):
        return f"Save failed: {status.error}"
    if isinstance(status, Dirty):
        return "Unsaved changes"
    return None
