"""Currency commands for formatting, parsing and converting amounts."""

import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from evkit.config import (
    default_currency_from_config,
    format_options_from_config,
    get_config_path,
    load_config_or_default,
    rate_table_from_config,
    set_rate,
    show_free_from_config,
)
from evkit.domain.currency import (
    convert,
    format_money,
    format_money_result,
    format_number,
    format_price,
    parse_money,
    to_decimal,
)
from evkit.domain.models import CurrencyCode, FormatOptions, LocaleTag

console = Console()


def _load(config_path: Path | None = None) -> dict[str, Any]:
    try:
        return load_config_or_default(config_path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not read config: {e}[/red]", style="bold")
        sys.exit(1)


def _options(
    config: dict[str, Any],
    decimals: int | None = None,
    locale: str | None = None,
    no_symbol: bool = False,
) -> FormatOptions:
    try:
        options = format_options_from_config(config)
        if decimals is not None:
            options = replace(options, decimals=decimals)
        if locale:
            options = replace(options, locale=LocaleTag(locale))
        if no_symbol:
            options = replace(options, show_symbol=False)
        return options
    except ValueError as e:
        console.print(f"[red]Invalid format options: {e}[/red]", style="bold")
        sys.exit(1)


def _amount(text: str) -> Any:
    try:
        return to_decimal(text)
    except ValueError:
        console.print(f"[red]Not a number: {text}[/red]", style="bold")
        sys.exit(1)


def format_command(
    amount: str,
    currency: str | None = None,
    decimals: int | None = None,
    locale: str | None = None,
    no_symbol: bool = False,
) -> None:
    """Format an amount as currency text."""
    config = _load()
    options = _options(config, decimals, locale, no_symbol)
    code = CurrencyCode(currency.upper()) if currency else default_currency_from_config(config)

    result = format_money_result(_amount(amount), options, code)
    console.print(result.text, markup=False)
    if result.used_fallback:
        console.print(f"[dim]Locale '{options.locale}' unavailable, used fallback format[/dim]")


def price_command(amount: str, no_free: bool = False, currency: str | None = None) -> None:
    """Format a price, showing zero as Free."""
    config = _load()
    options = _options(config)
    code = CurrencyCode(currency.upper()) if currency else default_currency_from_config(config)
    show_free = show_free_from_config(config) and not no_free

    console.print(format_price(_amount(amount), show_free, options, code), markup=False)


def parse_command(text: str, locale: str | None = None) -> None:
    """Parse currency text to a plain amount."""
    config = _load()
    options = _options(config, locale=locale)
    console.print(f"{parse_money(text, options.locale):f}", markup=False)


def number_command(value: str, locale: str | None = None) -> None:
    """Format a plain number with digit grouping."""
    config = _load()
    options = _options(config, locale=locale)
    console.print(format_number(_amount(value), options.locale), markup=False)


def convert_command(amount: str, from_currency: str, to_currency: str) -> None:
    """Convert an amount between currencies using the configured rates."""
    config = _load()
    try:
        rates = rate_table_from_config(config)
    except ValueError as e:
        console.print(f"[red]Invalid rates in config: {e}[/red]", style="bold")
        sys.exit(1)

    source = CurrencyCode(from_currency.upper())
    target = CurrencyCode(to_currency.upper())
    value = _amount(amount)

    converted = convert(value, source, target, rates)
    options = _options(config)
    console.print(f"{format_money(value, options, source)} = {format_money(converted, options, target)}", markup=False)

    unknown = [code for code in (source, target) if code not in rates.rates]
    if unknown and source != target:
        console.print(f"[yellow]No rate for {', '.join(unknown)}; treated as 1[/yellow]")


def rates_command(set_value: str | None = None) -> None:
    """Show or update the exchange rate table."""
    if set_value:
        code, sep, rate = set_value.partition("=")
        if not sep or not code.strip():
            console.print("[red]Use --set CODE=RATE (e.g., USD=0.032)[/red]", style="bold")
            sys.exit(1)
        try:
            set_rate(code.strip(), rate.strip())
        except ValueError as e:
            console.print(f"[red]{e}[/red]", style="bold")
            sys.exit(1)
        except OSError as e:
            console.print(f"[red]Could not write config: {e}[/red]", style="bold")
            sys.exit(1)
        console.print(f"[green]✓[/green] {code.strip().upper()} = {rate.strip()}")
        console.print(f"[dim]Config: {get_config_path()}[/dim]")
        return

    config = _load()
    try:
        rates = rate_table_from_config(config)
    except ValueError as e:
        console.print(f"[red]Invalid rates in config: {e}[/red]", style="bold")
        sys.exit(1)

    table = Table(title=f"Exchange Rates (base {rates.base})")
    table.add_column("Currency", style="cyan")
    table.add_column("Rate", justify="right")
    table.add_column(f"1 {rates.base} =", justify="right", style="green")

    options = _options(config)
    for code in sorted(rates.rates):
        rate = rates.rates[code]
        table.add_row(code, f"{rate:f}", format_money(convert(1, rates.base, code, rates), options, code))

    console.print(table)
