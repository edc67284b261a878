"""Domain type definitions for evkit.

These types make units explicit:
- Money: Decimal amount paired with its currency code
- CurrencyCode: ISO-4217-like code (e.g., "EGP")
- LocaleTag: BCP-47-like locale tag (e.g., "en-EG")
- FormatOptions: how an amount is rendered
- RateTable: exchange rates relative to a base currency
- EventDraft: the in-progress event record the editor autosaves
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import NewType

CurrencyCode = NewType("CurrencyCode", str)

# Locale tags use "-" or "_" separators (e.g., "en-EG", "ar_EG")
LocaleTag = NewType("LocaleTag", str)

BASE_CURRENCY = CurrencyCode("EGP")
DEFAULT_LOCALE = LocaleTag("en-EG")
DEFAULT_DECIMALS = 2


@dataclass(frozen=True)
class Money:
    """Immutable monetary amount in a given currency."""

    amount: Decimal
    currency: CurrencyCode = BASE_CURRENCY


@dataclass(frozen=True)
class FormatOptions:
    """Immutable options for rendering an amount as text."""

    show_symbol: bool = True
    decimals: int = DEFAULT_DECIMALS
    locale: LocaleTag = DEFAULT_LOCALE

    def __post_init__(self) -> None:
        if self.decimals < 0:
            raise ValueError(f"decimals must be >= 0, got {self.decimals}")


@dataclass(frozen=True)
class RateTable:
    """Immutable exchange rates, one scalar per currency relative to `base`."""

    rates: Mapping[CurrencyCode, Decimal]
    base: CurrencyCode = BASE_CURRENCY

    def __post_init__(self) -> None:
        normalized = {CurrencyCode(code.upper()): Decimal(str(rate)) for code, rate in self.rates.items()}
        object.__setattr__(self, "rates", MappingProxyType(normalized))

    def rate_for(self, code: CurrencyCode) -> Decimal:
        """Get the rate for a currency.

        Args:
            code: Currency code.

        Returns:
            The rate, or 1 when the code is unknown or has a zero rate.
        """
        rate = self.rates.get(CurrencyCode(code.upper()))
        if not rate:
            return Decimal(1)
        return rate

    def with_rate(self, code: CurrencyCode, rate: Decimal) -> "RateTable":
        """Return a copy of the table with one rate added or replaced."""
        updated = dict(self.rates)
        updated[CurrencyCode(code.upper())] = rate
        return RateTable(rates=updated, base=self.base)


# Placeholder rates, not market data
DEFAULT_RATES = RateTable(
    rates={
        CurrencyCode("EGP"): Decimal("1"),
        CurrencyCode("USD"): Decimal("0.032"),
        CurrencyCode("EUR"): Decimal("0.029"),
    }
)


@dataclass(frozen=True)
class EventDraft:
    """Immutable snapshot of an event being edited."""

    title: str = ""
    description: str = ""
    category: str = ""
    venue: str = ""
    price: Decimal = field(default_factory=Decimal)
    currency: CurrencyCode = BASE_CURRENCY
