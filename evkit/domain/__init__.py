"""Domain models and types for evkit.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from evkit.domain.models import CurrencyCode, EventDraft, FormatOptions, LocaleTag, Money, RateTable

__all__ = ["CurrencyCode", "EventDraft", "FormatOptions", "LocaleTag", "Money", "RateTable"]
