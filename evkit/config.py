"""Configuration file management for evkit.

Only the command layer reads this file; autosave and currency code take
their settings as arguments.
"""

import os
import tomllib
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import tomli_w

from evkit.autosave import DEFAULT_INTERVAL_MS
from evkit.domain.models import (
    BASE_CURRENCY,
    DEFAULT_DECIMALS,
    DEFAULT_LOCALE,
    DEFAULT_RATES,
    CurrencyCode,
    FormatOptions,
    LocaleTag,
    RateTable,
)


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "evkit" / "config.toml"


def default_config() -> dict[str, Any]:
    """Build the default configuration dictionary."""
    return {
        "autosave": {"interval_ms": DEFAULT_INTERVAL_MS},
        "currency": {
            "code": BASE_CURRENCY,
            "locale": DEFAULT_LOCALE,
            "decimals": DEFAULT_DECIMALS,
            "show_symbol": True,
            "show_free": True,
        },
        # Rates are strings so TOML floats never touch them
        "rates": {code: str(rate) for code, rate in DEFAULT_RATES.rates.items()},
    }


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)
    save_config(default_config(), config_path)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def load_config_or_default(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration, using defaults when no config file exists."""
    try:
        return load_config(config_path)
    except FileNotFoundError:
        return default_config()


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def format_options_from_config(config: dict[str, Any]) -> FormatOptions:
    """Build formatting options from the [currency] section.

    Raises:
        ValueError: If decimals is not a non-negative integer.
    """
    section = config.get("currency", {})
    decimals = section.get("decimals", DEFAULT_DECIMALS)
    if not isinstance(decimals, int) or isinstance(decimals, bool):
        raise ValueError(f"currency.decimals must be an integer, got {decimals!r}")

    return FormatOptions(
        show_symbol=bool(section.get("show_symbol", True)),
        decimals=decimals,
        locale=LocaleTag(str(section.get("locale", DEFAULT_LOCALE))),
    )


def show_free_from_config(config: dict[str, Any]) -> bool:
    """Whether zero prices render as "Free"."""
    return bool(config.get("currency", {}).get("show_free", True))


def default_currency_from_config(config: dict[str, Any]) -> CurrencyCode:
    """Get the display currency from the [currency] section."""
    return CurrencyCode(str(config.get("currency", {}).get("code", BASE_CURRENCY)).upper())


def parse_rate(value: Any) -> Decimal:
    """Parse a configured exchange rate.

    Raises:
        ValueError: If the rate is not a positive number.
    """
    try:
        rate = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid rate: {value!r}") from e
    if not rate.is_finite() or rate <= 0:
        raise ValueError(f"Rate must be a positive number, got {value!r}")
    return rate


def rate_table_from_config(config: dict[str, Any]) -> RateTable:
    """Build the rate table from the [rates] section.

    Rates are always relative to EGP, whatever the display currency is.

    Returns:
        Configured rates, or the default table when the section is absent.

    Raises:
        ValueError: If any rate is invalid.
    """
    section = config.get("rates")
    if not section:
        return DEFAULT_RATES
    rates = {CurrencyCode(code.upper()): parse_rate(value) for code, value in section.items()}
    return RateTable(rates=rates, base=BASE_CURRENCY)


def autosave_interval_from_config(config: dict[str, Any]) -> int:
    """Get the autosave quiet period in milliseconds.

    Raises:
        ValueError: If the interval is not a non-negative integer.
    """
    interval = config.get("autosave", {}).get("interval_ms", DEFAULT_INTERVAL_MS)
    if not isinstance(interval, int) or isinstance(interval, bool) or interval < 0:
        raise ValueError(f"autosave.interval_ms must be a non-negative integer, got {interval!r}")
    return interval


def set_rate(code: str, rate: Any, config_path: Path | None = None) -> None:
    """Add or update an exchange rate in the config file.

    Args:
        code: Currency code.
        rate: Rate relative to the base currency.
        config_path: Path to config file. If None, uses default location.

    Raises:
        ValueError: If the rate is invalid.
    """
    parsed = parse_rate(rate)
    config = load_config_or_default(config_path)

    rates = config.get("rates", {})
    rates[code.upper()] = str(parsed)
    config["rates"] = rates

    if config_path is None:
        config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    save_config(config, config_path)
