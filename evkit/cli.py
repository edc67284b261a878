"""CLI entry point for evkit."""

import typer

from evkit.commands.admin import drafts_command, init_command
from evkit.commands.currency import (
    convert_command,
    format_command,
    number_command,
    parse_command,
    price_command,
    rates_command,
)
from evkit.commands.draft import draft_command
from evkit.logs import configure_logging

app = typer.Typer(
    name="evkit",
    help="Event toolkit - autosaved event drafts and EGP price formatting",
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Event toolkit - autosaved event drafts and EGP price formatting."""
    configure_logging(verbose)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing database and config"),
) -> None:
    """Initialize evkit database and configuration."""
    init_command(force)


@app.command(name="format")
def format_(
    amount: str,
    currency: str = typer.Option(None, "--currency", "-c", help="Currency code (default: from config)"),
    decimals: int = typer.Option(None, "--decimals", "-d", min=0, help="Fractional digits"),
    locale: str = typer.Option(None, "--locale", "-l", help="Locale tag, e.g. en-EG or ar-EG"),
    no_symbol: bool = typer.Option(False, "--no-symbol", help="Leave out the currency symbol"),
) -> None:
    """Format an amount as currency text."""
    format_command(amount, currency, decimals, locale, no_symbol)


@app.command()
def price(
    amount: str,
    no_free: bool = typer.Option(False, "--no-free", help="Format zero as an amount instead of 'Free'"),
    currency: str = typer.Option(None, "--currency", "-c", help="Currency code (default: from config)"),
) -> None:
    """Format a ticket price, showing zero as Free."""
    price_command(amount, no_free, currency)


@app.command()
def parse(
    text: str,
    locale: str = typer.Option(None, "--locale", "-l", help="Locale of the text's decimal separator"),
) -> None:
    """Parse currency text such as 'EGP 1,234.50' to an amount."""
    parse_command(text, locale)


@app.command()
def number(
    value: str,
    locale: str = typer.Option(None, "--locale", "-l", help="Locale tag"),
) -> None:
    """Format a plain number with digit grouping."""
    number_command(value, locale)


@app.command()
def convert(
    amount: str,
    from_currency: str = typer.Argument(..., metavar="FROM"),
    to_currency: str = typer.Argument(..., metavar="TO"),
) -> None:
    """Convert an amount between currencies."""
    convert_command(amount, from_currency, to_currency)


@app.command()
def rates(
    set_value: str = typer.Option(None, "--set", help="Add or update a rate (CODE=RATE)"),
) -> None:
    """Show or update your exchange rates."""
    rates_command(set_value)


@app.command()
def draft(
    interval_ms: int = typer.Option(None, "--interval-ms", help="Autosave quiet period (default: from config)"),
    resume: bool = typer.Option(False, "--resume", "-r", help="Continue from the last saved draft"),
) -> None:
    """Edit an event draft with autosave."""
    draft_command(interval_ms, resume)


@app.command(name="drafts")
def drafts(
    limit: int = typer.Option(20, help="Maximum drafts to show"),
    all: bool = typer.Option(False, "--all", "-a", help="Show all saved drafts"),
) -> None:
    """List your saved drafts."""
    drafts_command(limit, all)


if __name__ == "__main__":
    app()
