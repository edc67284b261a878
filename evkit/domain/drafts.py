"""Pure functions for editing event drafts.

Edits arrive as "field=value" text from the editor and produce a new
immutable EventDraft snapshot. Prices are parsed with the currency codec,
so "EGP 1,500" and "1500" give the same amount.
"""

from dataclasses import replace

from evkit.domain.currency import parse_money
from evkit.domain.models import DEFAULT_LOCALE, CurrencyCode, EventDraft, LocaleTag

TEXT_FIELDS = ("title", "description", "category", "venue")
EDITABLE_FIELDS = (*TEXT_FIELDS, "price", "currency")


def parse_edit_line(line: str) -> tuple[str, str] | None:
    """Split an editor line into field and value.

    Args:
        line: Text such as "title=Tech Meetup".

    Returns:
        Tuple of (field, value), or None if the line has no "=".
    """
    field_name, sep, value = line.partition("=")
    if not sep:
        return None
    return field_name.strip().lower(), value.strip()


def apply_field_edit(
    draft: EventDraft,
    field_name: str,
    value: str,
    locale: LocaleTag = DEFAULT_LOCALE,
) -> tuple[EventDraft, str | None]:
    """Apply one field edit to a draft.

    Args:
        draft: Current draft.
        field_name: Field to change.
        value: New value as typed.
        locale: Locale used to read prices.

    Returns:
        Tuple of (new_draft, error_message). On error the draft is unchanged.
    """
    if field_name not in EDITABLE_FIELDS:
        return draft, f"Unknown field '{field_name}'. Editable: {', '.join(EDITABLE_FIELDS)}"

    if field_name == "price":
        if not any(char.isdigit() for char in value):
            return draft, f"Price must be a number, got '{value}'"
        price = parse_money(value, locale)
        if price < 0:
            return draft, "Price must not be negative"
        return replace(draft, price=price), None

    if field_name == "currency":
        code = value.upper()
        if not code.isalpha() or len(code) != 3:
            return draft, "Currency must be a 3-letter code"
        return replace(draft, currency=CurrencyCode(code)), None

    return replace(draft, **{field_name: value}), None
