"""Admin commands for init and listing saved drafts."""

import sqlite3
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from evkit.config import (
    create_default_config,
    format_options_from_config,
    get_config_path,
    load_config_or_default,
    show_free_from_config,
)
from evkit.domain.currency import format_price
from evkit.store.queries import list_drafts
from evkit.store.schema import get_db_path, init_database

console = Console()


def run_full_init(db_path: Path, config_path: Path) -> None:
    """Initialize new database and config."""
    console.print(f"[cyan]Initializing database at {db_path}...[/cyan]")
    init_database(db_path)
    console.print("[green]✓[/green] Database initialized")

    console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
    create_default_config(config_path)
    console.print("[green]✓[/green] Config file created (permissions: 600)")

    console.print("\n[green]Initialization complete![/green]", style="bold")
    console.print(f"[dim]Database: {db_path}[/dim]")
    console.print(f"[dim]Config: {config_path}[/dim]")


def init_command(force: bool = False) -> None:
    """Initialize evkit database and configuration."""
    db_path = get_db_path()
    config_path = get_config_path()

    db_exists = db_path.exists()
    config_exists = config_path.exists()

    try:
        # Guard: refuse to overwrite without force flag
        if not force and (db_exists or config_exists):
            console.print("[red]Initialization failed:[/red]", style="bold")
            if db_exists:
                console.print(f"  Database already exists: {db_path}")
            if config_exists:
                console.print(f"  Config already exists: {config_path}")
            console.print("\n[yellow]Use 'evkit init --force' to overwrite[/yellow]")
            sys.exit(1)

        run_full_init(db_path, config_path)

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)


def drafts_command(limit: int = 20, all: bool = False) -> None:
    """List saved drafts."""
    db_path = get_db_path()

    try:
        config = load_config_or_default()
        options = format_options_from_config(config)
        show_free = show_free_from_config(config)
    except (OSError, ValueError) as e:
        console.print(f"[red]Invalid config: {e}[/red]", style="bold")
        sys.exit(1)

    try:
        actual_limit = None if all else limit
        drafts = list_drafts(db_path, actual_limit)

        if not drafts:
            console.print("[yellow]No saved drafts found[/yellow]")
            return

        title = f"Drafts (showing all {len(drafts)})" if all else f"Drafts (showing {len(drafts)})"
        table = Table(title=title)
        table.add_column("ID", style="dim", justify="right")
        table.add_column("Saved", style="cyan")
        table.add_column("Title", style="white")
        table.add_column("Category", style="magenta")
        table.add_column("Price", justify="right", style="green")

        for draft in drafts:
            price = format_price(draft["price"], show_free, options, draft["currency"])
            table.add_row(
                str(draft["id"]),
                draft["saved_at"],
                draft["title"] or "[dim](untitled)[/dim]",
                draft["category"] or "[dim]-[/dim]",
                price,
            )

        console.print(table)

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
