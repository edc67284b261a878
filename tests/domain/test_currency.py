"""Tests for evkit.domain.currency pure functions."""

import logging
from decimal import Decimal

import pytest

from evkit.domain.currency import (
    FormatResult,
    convert,
    convert_money,
    format_money,
    format_money_result,
    format_number,
    format_price,
    parse_money,
    round_amount,
    to_decimal,
)
from evkit.domain.models import DEFAULT_RATES, CurrencyCode, FormatOptions, LocaleTag, Money, RateTable


class TestRoundAmount:
    """Tests for round_amount."""

    def test_rounds_half_to_even(self) -> None:
        """Should round ties to the even digit."""
        assert round_amount(Decimal("0.125"), 2) == Decimal("0.12")
        assert round_amount(Decimal("0.135"), 2) == Decimal("0.14")
        assert round_amount(Decimal("2.5"), 0) == Decimal("2")
        assert round_amount(Decimal("3.5"), 0) == Decimal("4")

    def test_float_input_avoids_binary_artifacts(self) -> None:
        """Should treat 2.675 as written, not as 2.67499999..."""
        assert round_amount(2.675, 2) == Decimal("2.68")

    def test_pads_to_requested_decimals(self) -> None:
        """Should keep trailing zeros up to the requested precision."""
        assert str(round_amount(5, 2)) == "5.00"

    def test_rejects_non_finite(self) -> None:
        """Should raise ValueError for NaN and infinity."""
        with pytest.raises(ValueError):
            round_amount(float("nan"), 2)
        with pytest.raises(ValueError):
            round_amount(Decimal("Infinity"), 2)


class TestToDecimal:
    """Tests for to_decimal."""

    def test_converts_numbers_and_strings(self) -> None:
        """Should convert ints, floats and numeric strings."""
        assert to_decimal(5) == Decimal("5")
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(" 12.50 ") == Decimal("12.50")

    def test_rejects_non_numeric(self) -> None:
        """Should raise ValueError for text, None and booleans."""
        for value in ("abc", None, True, [1]):
            with pytest.raises(ValueError):
                to_decimal(value)


class TestFormatOptions:
    """Tests for FormatOptions validation."""

    def test_defaults(self) -> None:
        """Should default to symbol, 2 decimals and en-EG."""
        options = FormatOptions()
        assert options.show_symbol is True
        assert options.decimals == 2
        assert options.locale == "en-EG"

    def test_negative_decimals_rejected(self) -> None:
        """Should reject negative decimals at construction."""
        with pytest.raises(ValueError):
            FormatOptions(decimals=-1)


class TestFormatMoney:
    """Tests for format_money and format_money_result."""

    def test_default_format_includes_code_and_grouping(self) -> None:
        """Should render EGP with digit grouping and two decimals."""
        result = format_money_result(1234.5)

        assert result.used_fallback is False
        assert "EGP" in result.text
        assert "1,234.50" in result.text

    def test_without_symbol(self) -> None:
        """Should drop the currency code when show_symbol is False."""
        assert format_money(1234.5, FormatOptions(show_symbol=False)) == "1,234.50"

    def test_decimals_option(self) -> None:
        """Should honour the decimals option."""
        assert format_money(Decimal("1234.5678"), FormatOptions(show_symbol=False, decimals=3)) == "1,234.568"
        assert format_money(Decimal("99.99"), FormatOptions(show_symbol=False, decimals=0)) == "100"

    def test_zero_decimals_rounds_half_to_even(self) -> None:
        """Should round ties to even before formatting."""
        no_symbol = FormatOptions(show_symbol=False, decimals=0)
        assert format_money(1234.5, no_symbol) == "1,234"
        assert format_money(1235.5, no_symbol) == "1,236"

    def test_money_currency_wins(self) -> None:
        """Should use the currency carried by Money."""
        text = format_money(Money(Decimal("1234.5"), CurrencyCode("USD")), FormatOptions(locale=LocaleTag("en-US")))
        assert text == "$1,234.50"

    def test_other_locale_conventions(self) -> None:
        """Should use the locale's separators."""
        text = format_money(1234.5, FormatOptions(locale=LocaleTag("de-DE")), CurrencyCode("EUR"))
        assert "1.234,50" in text
        assert "€" in text

    def test_unknown_locale_uses_fallback(self) -> None:
        """Should fall back to '<amount> <code>' for an unknown locale."""
        result = format_money_result(1234.5, FormatOptions(locale=LocaleTag("zz-ZZ")))
        assert result == FormatResult(text="1234.50 EGP", used_fallback=True)

    def test_fallback_respects_decimals(self) -> None:
        """Should round the fallback amount to the requested decimals."""
        result = format_money_result(Decimal("10.005"), FormatOptions(decimals=1, locale=LocaleTag("zz")))
        assert result.text == "10.0 EGP"
        assert result.used_fallback

    def test_malformed_amount_uses_zero_fallback(self) -> None:
        """Should render unusable amounts as zero in the fallback."""
        assert format_money_result(None) == FormatResult(text="0.00 EGP", used_fallback=True)
        assert format_money_result(float("nan")) == FormatResult(text="0.00 EGP", used_fallback=True)

    def test_fallback_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Should log a warning when falling back."""
        with caplog.at_level(logging.WARNING, logger="evkit.domain.currency"):
            format_money(5, FormatOptions(locale=LocaleTag("zz-ZZ")))

        assert "Currency formatting error" in caplog.text

    def test_successful_format_is_not_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Should not log on the normal path."""
        with caplog.at_level(logging.WARNING, logger="evkit.domain.currency"):
            format_money(5)

        assert caplog.records == []


class TestFormatPrice:
    """Tests for format_price."""

    def test_zero_is_free(self) -> None:
        """Should render zero as Free by default."""
        assert format_price(0) == "Free"
        assert format_price(Decimal("0.00")) == "Free"
        assert format_price(Money(Decimal(0), CurrencyCode("USD"))) == "Free"

    def test_zero_without_free(self) -> None:
        """Should format zero as an amount when show_free is False."""
        text = format_price(0, show_free=False)
        assert text != "Free"
        assert "0.00" in text
        assert "EGP" in text

    def test_non_zero_matches_format_money(self) -> None:
        """Should format other amounts like format_money."""
        assert format_price(150) == format_money(150)

    def test_tiny_amount_is_not_free(self) -> None:
        """Should only treat exactly zero as Free."""
        assert format_price(Decimal("0.001")) != "Free"


class TestParseMoney:
    """Tests for parse_money."""

    def test_empty_and_missing_input(self) -> None:
        """Should return zero for empty or absent input."""
        assert parse_money("") == 0
        assert parse_money(None) == 0
        assert parse_money("   ") == 0

    def test_garbage_input(self) -> None:
        """Should return zero for text that is not a number."""
        assert parse_money("not a number") == 0
        assert parse_money("1.2.3") == 0
        assert parse_money("1-2") == 0

    def test_strips_code_and_grouping(self) -> None:
        """Should drop currency codes, symbols and grouping separators."""
        assert parse_money("EGP 1,234.50") == Decimal("1234.50")
        assert parse_money("1,234.50 EGP") == Decimal("1234.50")
        assert parse_money("E£ 99") == Decimal("99")
        assert parse_money("$1,000,000") == Decimal("1000000")

    def test_negative_amounts(self) -> None:
        """Should keep the sign, including the Unicode minus."""
        assert parse_money("-EGP 5.25") == Decimal("-5.25")
        assert parse_money("−12.5") == Decimal("-12.5")

    def test_numeric_input(self) -> None:
        """Should accept numbers as well as text."""
        assert parse_money(1500) == Decimal("1500")
        assert parse_money(12.5) == Decimal("12.5")

    def test_locale_decimal_separator(self) -> None:
        """Should read the decimal separator of the given locale."""
        assert parse_money("1.234,50 €", LocaleTag("de-DE")) == Decimal("1234.50")

    def test_unknown_locale_reads_english_separators(self) -> None:
        """Should not fail on an unknown locale."""
        assert parse_money("1,234.50", LocaleTag("zz-ZZ")) == Decimal("1234.50")


class TestRoundTrip:
    """Tests for parse_money(format_money(x)) round trips."""

    def test_spec_example(self) -> None:
        """Should round-trip 1234.5 at two decimals in en-EG."""
        assert parse_money(format_money(1234.5)) == Decimal("1234.50")

    def test_round_trip_within_precision(self) -> None:
        """Should recover the amount rounded to the chosen precision."""
        amounts = [Decimal("0"), Decimal("0.01"), Decimal("-99.99"), Decimal("1000000"), Decimal("2.675")]
        for amount in amounts:
            assert parse_money(format_money(amount)) == round_amount(amount, 2)

    def test_round_trip_other_options(self) -> None:
        """Should round-trip without symbol, other decimals and other locales."""
        cases = [
            FormatOptions(show_symbol=False),
            FormatOptions(decimals=3),
            FormatOptions(decimals=0),
            FormatOptions(locale=LocaleTag("de-DE")),
            FormatOptions(locale=LocaleTag("ar-EG")),
            FormatOptions(locale=LocaleTag("ar-EG"), show_symbol=False),
            FormatOptions(locale=LocaleTag("ar")),
        ]
        for options in cases:
            text = format_money(Decimal("98765.4321"), options)
            assert parse_money(text, options.locale) == round_amount(Decimal("98765.4321"), options.decimals)

    def test_round_trip_arabic_egp(self) -> None:
        """Should not mistake the dots in the Arabic pound symbol for a decimal point."""
        options = FormatOptions(locale=LocaleTag("ar-EG"))
        for amount in (Decimal("1234.5"), Decimal("-1234.5"), Decimal("0.01"), Decimal("1234567.89")):
            text = format_money(amount, options)
            assert parse_money(text, options.locale) == round_amount(amount, 2), text

    def test_arabic_symbol_before_amount(self) -> None:
        """Should read amounts typed after the Arabic pound symbol."""
        assert parse_money("ج.م. 1,234.50", LocaleTag("ar-EG")) == Decimal("1234.50")
        assert parse_money("ج.م.1,234.50", LocaleTag("ar-EG")) == Decimal("1234.50")


class TestFormatNumber:
    """Tests for format_number."""

    def test_groups_digits(self) -> None:
        """Should group thousands without a currency symbol."""
        assert format_number(1234567) == "1,234,567"
        assert format_number(1234.5) == "1,234.5"

    def test_other_locale(self) -> None:
        """Should use the locale's separators."""
        assert format_number(Decimal("1234567.891"), LocaleTag("de-DE")) == "1.234.567,891"

    def test_falls_back_to_plain_text(self) -> None:
        """Should return the plain textual form when formatting fails."""
        assert format_number(1234, LocaleTag("zz-ZZ")) == "1234"
        assert format_number("abc") == "abc"
        assert format_number(None) == "0"


class TestConvert:
    """Tests for convert and convert_money."""

    def test_same_currency_is_identity(self) -> None:
        """Should return the amount unchanged for equal currencies."""
        for amount in (0, 1, 12.34, Decimal("-5.5"), 10**12):
            assert convert(amount, CurrencyCode("EGP"), CurrencyCode("EGP")) is amount

    def test_egp_to_usd(self) -> None:
        """Should multiply by the target rate."""
        assert convert(100, CurrencyCode("EGP"), CurrencyCode("USD")) == Decimal("3.2")

    def test_usd_to_egp(self) -> None:
        """Should divide by the source rate."""
        assert convert(Decimal("3.2"), CurrencyCode("USD"), CurrencyCode("EGP")) == Decimal("100")

    def test_cross_rate(self) -> None:
        """Should convert between two non-base currencies via the base."""
        expected = (Decimal("10") / Decimal("0.032")) * Decimal("0.029")
        assert convert(10, CurrencyCode("USD"), CurrencyCode("EUR")) == expected

    def test_unknown_currency_counts_as_one(self) -> None:
        """Should treat unknown codes as rate 1."""
        assert convert(50, CurrencyCode("EGP"), CurrencyCode("XYZ")) == Decimal("50")
        assert convert(50, CurrencyCode("XYZ"), CurrencyCode("USD")) == Decimal("1.6")

    def test_custom_rate_table(self) -> None:
        """Should use the rate table passed in."""
        rates = RateTable(rates={CurrencyCode("EGP"): Decimal("1"), CurrencyCode("GBP"): Decimal("0.025")})
        assert convert(200, CurrencyCode("EGP"), CurrencyCode("GBP"), rates) == Decimal("5")

    def test_convert_money(self) -> None:
        """Should return Money in the target currency."""
        result = convert_money(Money(Decimal("100")), CurrencyCode("usd"))
        assert result == Money(Decimal("3.2"), CurrencyCode("USD"))


class TestRateTable:
    """Tests for RateTable."""

    def test_zero_rate_counts_as_one(self) -> None:
        """Should treat a zero rate like a missing one."""
        rates = RateTable(rates={CurrencyCode("ABC"): Decimal("0")})
        assert rates.rate_for(CurrencyCode("ABC")) == Decimal("1")

    def test_codes_are_case_insensitive(self) -> None:
        """Should normalize codes to upper case."""
        assert DEFAULT_RATES.rate_for(CurrencyCode("usd")) == Decimal("0.032")

    def test_with_rate_returns_new_table(self) -> None:
        """Should leave the original table untouched."""
        updated = DEFAULT_RATES.with_rate(CurrencyCode("GBP"), Decimal("0.025"))

        assert updated.rate_for(CurrencyCode("GBP")) == Decimal("0.025")
        assert CurrencyCode("GBP") not in DEFAULT_RATES.rates

    def test_rates_are_read_only(self) -> None:
        """Should not allow mutation of the rates mapping."""
        with pytest.raises(TypeError):
            DEFAULT_RATES.rates[CurrencyCode("GBP")] = Decimal("1")  # type: ignore[index]
