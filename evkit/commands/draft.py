"""Draft command: an interactive event editor with autosave."""

import asyncio
import sqlite3
import sys
from pathlib import Path

from rich.console import Console

from evkit.autosave import DebouncedPersister
from evkit.config import (
    autosave_interval_from_config,
    default_currency_from_config,
    format_options_from_config,
    load_config_or_default,
)
from evkit.domain.autosave import SaveStatus, describe_status, event_has_content
from evkit.domain.currency import format_price
from evkit.domain.drafts import EDITABLE_FIELDS, apply_field_edit, parse_edit_line
from evkit.domain.models import EventDraft, FormatOptions
from evkit.store.queries import get_latest_draft, save_draft
from evkit.store.schema import database_exists, get_db_path

console = Console()

HELP_TEXT = (
    "Type field=value to edit ("
    + ", ".join(EDITABLE_FIELDS)
    + "). Commands: :show, :save, :retry, :quit"
)


def print_status(status: SaveStatus) -> None:
    """Print a save status change."""
    label = describe_status(status)
    if label is None:
        return
    if label.startswith("Save failed"):
        console.print(f"[red]{label}[/red]")
    elif label.startswith("Saved"):
        console.print(f"[green]✓[/green] [dim]{label}[/dim]")
    else:
        console.print(f"[dim]{label}[/dim]")


def print_draft(draft: EventDraft, options: FormatOptions) -> None:
    """Print the current draft."""
    console.print(f"[bold]{draft.title or '(untitled)'}[/bold]")
    if draft.description:
        console.print(draft.description)
    console.print(f"  Category: {draft.category or '-'}")
    console.print(f"  Venue: {draft.venue or '-'}")
    console.print(f"  Price: {format_price(draft.price, options=options, currency=draft.currency)}")


async def run_editor(draft: EventDraft, interval_ms: int, options: FormatOptions, db_path: Path) -> None:
    """Read edits from the terminal and autosave them until :quit or EOF."""

    async def on_save(snapshot: EventDraft) -> None:
        await asyncio.to_thread(save_draft, snapshot, db_path)

    persister: DebouncedPersister[EventDraft] = DebouncedPersister(
        on_save, interval_ms=interval_ms, should_save=event_has_content
    )
    persister.subscribe(print_status)

    console.print(f"[dim]{HELP_TEXT}[/dim]")
    console.print(f"[dim]Autosave after {interval_ms / 1000:g}s without edits[/dim]")

    while True:
        try:
            line = await asyncio.to_thread(console.input, "[cyan]> [/cyan]")
        except EOFError:
            break

        line = line.strip()
        if not line:
            continue
        if line == ":quit":
            break
        if line == ":show":
            print_draft(draft, options)
            continue
        if line == ":save":
            await persister.flush()
            continue
        if line == ":retry":
            persister.retry()
            continue

        edit = parse_edit_line(line)
        if edit is None:
            console.print(f"[yellow]{HELP_TEXT}[/yellow]")
            continue

        draft, error = apply_field_edit(draft, edit[0], edit[1], options.locale)
        if error:
            console.print(f"[red]{error}[/red]")
            continue
        persister.notify(draft)

    await persister.flush()
    if persister.dirty and event_has_content(draft):
        console.print("[yellow]Unsaved changes were not stored[/yellow]")


def draft_command(interval_ms: int | None = None, resume: bool = False) -> None:
    """Edit an event draft interactively with autosave."""
    db_path = get_db_path()

    if not database_exists(db_path):
        console.print("[red]Database not found. Run 'evkit init' first.[/red]", style="bold")
        sys.exit(1)

    try:
        config = load_config_or_default()
        options = format_options_from_config(config)
        if interval_ms is None:
            interval_ms = autosave_interval_from_config(config)
    except (OSError, ValueError) as e:
        console.print(f"[red]Invalid config: {e}[/red]", style="bold")
        sys.exit(1)

    if interval_ms < 0:
        console.print("[red]Interval must not be negative[/red]", style="bold")
        sys.exit(1)

    try:
        draft = (get_latest_draft(db_path) if resume else None) or EventDraft(
            currency=default_currency_from_config(config)
        )
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    if resume:
        print_draft(draft, options)

    asyncio.run(run_editor(draft, interval_ms, options, db_path))
