"""Tests for evkit.config."""

import stat
from decimal import Decimal
from pathlib import Path

import pytest

from evkit.config import (
    autosave_interval_from_config,
    create_default_config,
    default_config,
    default_currency_from_config,
    format_options_from_config,
    get_config_path,
    load_config,
    load_config_or_default,
    rate_table_from_config,
    set_rate,
    show_free_from_config,
)
from evkit.domain.models import DEFAULT_RATES, CurrencyCode, FormatOptions


class TestConfigFile:
    """Tests for reading and writing the config file."""

    def test_config_path_follows_xdg(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should place the config under XDG_CONFIG_HOME."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_path() == tmp_path / "evkit" / "config.toml"

    def test_default_config_round_trip(self, tmp_path: Path) -> None:
        """Should write the defaults and read them back."""
        config_path = tmp_path / "evkit" / "config.toml"
        create_default_config(config_path)

        assert load_config(config_path) == default_config()

    def test_config_file_is_private(self, tmp_path: Path) -> None:
        """Should create the config with 0600 permissions."""
        config_path = tmp_path / "config.toml"
        create_default_config(config_path)

        assert stat.S_IMODE(config_path.stat().st_mode) == 0o600

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """Should raise FileNotFoundError from load_config."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        """Should fall back to defaults in load_config_or_default."""
        assert load_config_or_default(tmp_path / "missing.toml") == default_config()


class TestConfigValues:
    """Tests for turning config sections into domain values."""

    def test_defaults(self) -> None:
        """Should match the domain defaults."""
        config = default_config()

        assert format_options_from_config(config) == FormatOptions()
        assert rate_table_from_config(config) == DEFAULT_RATES
        assert autosave_interval_from_config(config) == 30_000
        assert default_currency_from_config(config) == "EGP"
        assert show_free_from_config(config) is True

    def test_empty_config(self) -> None:
        """Should use defaults for missing sections."""
        assert format_options_from_config({}) == FormatOptions()
        assert rate_table_from_config({}) == DEFAULT_RATES
        assert autosave_interval_from_config({}) == 30_000

    def test_custom_currency_section(self) -> None:
        """Should read locale, decimals and symbol settings."""
        config = {"currency": {"locale": "ar-EG", "decimals": 0, "show_symbol": False, "show_free": False}}

        options = format_options_from_config(config)

        assert options == FormatOptions(show_symbol=False, decimals=0, locale="ar-EG")
        assert show_free_from_config(config) is False

    def test_invalid_decimals(self) -> None:
        """Should reject negative or non-integer decimals."""
        with pytest.raises(ValueError):
            format_options_from_config({"currency": {"decimals": -2}})
        with pytest.raises(ValueError):
            format_options_from_config({"currency": {"decimals": "two"}})

    def test_invalid_interval(self) -> None:
        """Should reject negative or non-integer intervals."""
        with pytest.raises(ValueError):
            autosave_interval_from_config({"autosave": {"interval_ms": -1}})
        with pytest.raises(ValueError):
            autosave_interval_from_config({"autosave": {"interval_ms": 1.5}})

    def test_rates_section(self) -> None:
        """Should read rates as exact decimals."""
        rates = rate_table_from_config({"rates": {"egp": "1", "GBP": "0.025", "USD": 0.032}})

        assert rates.rate_for(CurrencyCode("GBP")) == Decimal("0.025")
        assert rates.rate_for(CurrencyCode("USD")) == Decimal("0.032")
        assert rates.rate_for(CurrencyCode("EGP")) == Decimal("1")

    def test_rates_stay_relative_to_egp(self) -> None:
        """Should keep EGP as the base when another display currency is configured."""
        config = {"currency": {"code": "USD"}, "rates": {"EGP": "1", "USD": "0.032"}}

        assert rate_table_from_config(config).base == "EGP"

    def test_invalid_rate(self) -> None:
        """Should reject non-numeric or non-positive rates."""
        with pytest.raises(ValueError):
            rate_table_from_config({"rates": {"USD": "cheap"}})
        with pytest.raises(ValueError):
            rate_table_from_config({"rates": {"USD": "0"}})


class TestSetRate:
    """Tests for set_rate."""

    def test_adds_rate_to_existing_config(self, tmp_path: Path) -> None:
        """Should add a new rate and keep the others."""
        config_path = tmp_path / "config.toml"
        create_default_config(config_path)

        set_rate("gbp", "0.025", config_path)

        rates = rate_table_from_config(load_config(config_path))
        assert rates.rate_for(CurrencyCode("GBP")) == Decimal("0.025")
        assert rates.rate_for(CurrencyCode("USD")) == Decimal("0.032")

    def test_creates_config_when_missing(self, tmp_path: Path) -> None:
        """Should start from defaults when no config exists."""
        config_path = tmp_path / "evkit" / "config.toml"

        set_rate("USD", "0.05", config_path)

        rates = rate_table_from_config(load_config(config_path))
        assert rates.rate_for(CurrencyCode("USD")) == Decimal("0.05")

    def test_rejects_invalid_rate(self, tmp_path: Path) -> None:
        """Should not write an invalid rate."""
        config_path = tmp_path / "config.toml"

        with pytest.raises(ValueError):
            set_rate("USD", "-1", config_path)
        assert not config_path.exists()
