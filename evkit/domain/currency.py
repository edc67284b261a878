"""Pure functions for formatting, parsing and converting money.

This module contains the functional core for currency handling:
- No I/O operations (formatting failures are only logged)
- No shared mutable state; rates are passed in as a RateTable
- Locale conventions come from CLDR data via Babel

Rounding: amounts are quantized to the requested number of decimals with
ROUND_HALF_EVEN before they reach the locale formatter, so 0.125 -> 0.12
and 2.675 -> 2.68 regardless of locale.
"""

import copy
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Any

from babel import Locale, UnknownLocaleError
from babel.numbers import NumberFormatError, format_decimal, get_decimal_symbol, parse_decimal

from evkit.domain.models import (
    BASE_CURRENCY,
    DEFAULT_LOCALE,
    DEFAULT_RATES,
    CurrencyCode,
    FormatOptions,
    LocaleTag,
    Money,
    RateTable,
)

logger = logging.getLogger(__name__)

FREE_LABEL = "Free"

_MINUS_SIGNS = ("−", "‒", "–", "﹣", "－")

_BIDI_MARKS = ("\u200e", "\u200f", "\u061c")


@dataclass(frozen=True)
class FormatResult:
    """Immutable formatting outcome."""

    text: str
    used_fallback: bool = False


def to_decimal(value: Any) -> Decimal:
    """Convert a number to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary expansion.

    Args:
        value: Decimal, int, float or numeric string.

    Returns:
        The value as a Decimal.

    Raises:
        ValueError: If the value is not numeric.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, (int, float, str)):
        try:
            return Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Not a number: {value!r}") from e
    raise ValueError(f"Not a number: {value!r}")


def round_amount(amount: Any, decimals: int) -> Decimal:
    """Round an amount half-to-even at the given number of decimals.

    Args:
        amount: Numeric amount.
        decimals: Fractional digits to keep (>= 0).

    Returns:
        Quantized Decimal.

    Raises:
        ValueError: If the amount is not a finite number.
    """
    value = to_decimal(amount)
    if not value.is_finite():
        raise ValueError(f"Not a finite amount: {amount!r}")
    return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_EVEN)


def resolve_locale(tag: LocaleTag | str) -> Locale:
    """Resolve a locale tag to CLDR locale data.

    Unknown regional variants fall back to the bare language, the same
    lookup browsers apply, so "en-EG" resolves to English conventions.

    Args:
        tag: Locale tag with "-" or "_" separators.

    Returns:
        Babel Locale.

    Raises:
        UnknownLocaleError: If neither the tag nor its language is known.
        ValueError: If the tag is malformed.
    """
    identifier = str(tag).strip().replace("-", "_")
    try:
        return Locale.parse(identifier)
    except UnknownLocaleError:
        language = identifier.split("_", 1)[0]
        if language == identifier:
            raise
        return Locale.parse(language)


def _fallback_text(amount: Any, decimals: int, currency: CurrencyCode) -> str:
    try:
        number = f"{round_amount(amount, decimals):f}"
    except (ValueError, ArithmeticError):
        number = f"{Decimal(0).scaleb(-decimals):f}" if decimals else "0"
    return f"{number} {currency}"


def format_money_result(
    amount: Money | Any,
    options: FormatOptions | None = None,
    currency: CurrencyCode = BASE_CURRENCY,
) -> FormatResult:
    """Format an amount as currency text, reporting whether the fallback was used.

    Args:
        amount: Money, or a bare number in `currency`.
        options: Formatting options. If None, uses defaults.
        currency: Currency for bare numbers. Ignored for Money.

    Returns:
        FormatResult with the text and a fallback flag.
    """
    if options is None:
        options = FormatOptions()
    if isinstance(amount, Money):
        amount, currency = amount.amount, amount.currency
    currency = CurrencyCode(str(currency).upper())

    try:
        value = round_amount(amount, options.decimals)
        locale = resolve_locale(options.locale)
        if options.show_symbol:
            pattern = copy.copy(locale.currency_formats["standard"])
        else:
            pattern = copy.copy(locale.decimal_formats[None])
        pattern.frac_prec = (options.decimals, options.decimals)
        text = pattern.apply(value, locale, currency=currency, currency_digits=False)
        return FormatResult(text=text.strip())
    except (ValueError, ArithmeticError, KeyError, UnknownLocaleError) as e:
        logger.warning("Currency formatting error for %r (%s): %s", amount, options.locale, e)
        return FormatResult(text=_fallback_text(amount, options.decimals, currency), used_fallback=True)


def format_money(
    amount: Money | Any,
    options: FormatOptions | None = None,
    currency: CurrencyCode = BASE_CURRENCY,
) -> str:
    """Format an amount as currency text (e.g., "EGP 1,234.50").

    Never raises on bad input or locales; falls back to "1234.50 EGP".
    """
    return format_money_result(amount, options, currency).text


def format_price(
    amount: Money | Any,
    show_free: bool = True,
    options: FormatOptions | None = None,
    currency: CurrencyCode = BASE_CURRENCY,
) -> str:
    """Format a price, rendering exactly zero as "Free".

    Args:
        amount: Money, or a bare number in `currency`.
        show_free: Whether zero renders as "Free".
        options: Formatting options. If None, uses defaults.
        currency: Currency for bare numbers.

    Returns:
        Formatted price.
    """
    value = amount.amount if isinstance(amount, Money) else amount
    if show_free and _is_zero(value):
        return FREE_LABEL
    return format_money(amount, options, currency)


def _is_zero(value: Any) -> bool:
    try:
        return to_decimal(value) == 0
    except ValueError:
        return False


def _strip_bidi(text: str) -> str:
    for mark in _BIDI_MARKS:
        text = text.replace(mark, "")
    return text


def _clean_numeric_text(text: str, decimal_symbol: str, currency_symbols: Iterable[str] = ()) -> str:
    text = _strip_bidi(text)
    for sign in _MINUS_SIGNS:
        text = text.replace(sign, "-")

    # Symbols such as "ج.م." contain the decimal separator
    for symbol in currency_symbols:
        if decimal_symbol in symbol:
            text = text.replace(symbol, " ")

    keep = re.escape(decimal_symbol)
    text = re.sub(rf"{keep}(?!\d)", "", text)
    return re.sub(rf"[^0-9+\-{keep}]", "", text)


def _symbols_with_separator(locale: Locale, decimal_symbol: str) -> list[str]:
    symbols = {_strip_bidi(symbol).strip() for symbol in locale.currency_symbols.values()}
    # Longest first so "ج.م." goes before any shorter symbol inside it
    return sorted((s for s in symbols if s and decimal_symbol in s and s != decimal_symbol), key=len, reverse=True)


def parse_money(text: Any, locale: LocaleTag | str = DEFAULT_LOCALE) -> Decimal:
    """Parse user-entered currency text to an amount.

    Currency symbols, codes, whitespace and grouping separators are dropped
    before parsing. Malformed input is treated as zero.

    Args:
        text: Text such as "EGP 1,234.50". None and numbers are accepted.
        locale: Locale whose decimal separator the text uses.

    Returns:
        Parsed amount, or Decimal(0) if empty or unparseable.
    """
    if text is None or isinstance(text, bool):
        return Decimal(0)
    raw = str(text).strip()
    if not raw:
        return Decimal(0)

    try:
        babel_locale = resolve_locale(locale)
    except (ValueError, UnknownLocaleError):
        babel_locale = Locale.parse("en")

    decimal_symbol = get_decimal_symbol(babel_locale)
    cleaned = _clean_numeric_text(raw, decimal_symbol, _symbols_with_separator(babel_locale, decimal_symbol))
    if not cleaned:
        return Decimal(0)

    try:
        value = parse_decimal(cleaned, locale=babel_locale)
    except (NumberFormatError, InvalidOperation, ValueError):
        return Decimal(0)

    if not value.is_finite():
        return Decimal(0)
    return value


def format_number(value: Any, locale: LocaleTag | str = DEFAULT_LOCALE) -> str:
    """Format a plain number with locale digit grouping (e.g., "1,234,567").

    Args:
        value: Number to format.
        locale: Locale tag.

    Returns:
        Grouped number, or str(value) if formatting fails.
    """
    try:
        number = to_decimal(value)
        if not number.is_finite():
            raise ValueError(f"Not a finite number: {value!r}")
        return format_decimal(number, locale=resolve_locale(locale))
    except (ValueError, ArithmeticError, UnknownLocaleError) as e:
        logger.warning("Number formatting error for %r (%s): %s", value, locale, e)
        return "0" if value is None else str(value)


def convert(
    amount: Any,
    from_currency: CurrencyCode,
    to_currency: CurrencyCode,
    rates: RateTable = DEFAULT_RATES,
) -> Any:
    """Convert an amount between currencies.

    Args:
        amount: Numeric amount in `from_currency`.
        from_currency: Source currency code.
        to_currency: Target currency code.
        rates: Rate table. Unknown codes count as rate 1.

    Returns:
        The amount unchanged if the currencies match, otherwise a Decimal.
    """
    if from_currency.upper() == to_currency.upper():
        return amount

    value = to_decimal(amount)
    return (value / rates.rate_for(from_currency)) * rates.rate_for(to_currency)


def convert_money(money: Money, to_currency: CurrencyCode, rates: RateTable = DEFAULT_RATES) -> Money:
    """Convert Money into another currency."""
    target = CurrencyCode(to_currency.upper())
    return Money(amount=to_decimal(convert(money.amount, money.currency, target, rates)), currency=target)
