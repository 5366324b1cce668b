"""Formatting utilities for currency display."""

from dataclasses import dataclass

from ..config import CURRENCIES, Preferences, get_currency

WESTERN_DIGITS = "0123456789"


@dataclass(frozen=True)
class NumberStyle:
    group_separator: str = ","
    digits: str = WESTERN_DIGITS
    indian_grouping: bool = False  # 12,34,567 instead of 1,234,567
    symbol_after: bool = False
    spacer: str = ""


INTERNATIONAL = NumberStyle()

LOCAL_STYLES: dict[str, NumberStyle] = {
    "bn-BD": NumberStyle(digits="০১২৩৪৫৬৭৮৯", indian_grouping=True, symbol_after=True),
    "en-US": NumberStyle(),
    "de-DE": NumberStyle(group_separator=".", symbol_after=True, spacer=" "),
    "en-GB": NumberStyle(),
    "en-IN": NumberStyle(indian_grouping=True),
    "ar-SA": NumberStyle(group_separator="٬", digits="٠١٢٣٤٥٦٧٨٩", symbol_after=True, spacer=" "),
    "ar-AE": NumberStyle(group_separator="٬", digits="٠١٢٣٤٥٦٧٨٩", symbol_after=True, spacer=" "),
    "ms-MY": NumberStyle(),
}


def _group(digits: str, separator: str, indian: bool) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    size = 2 if indian else 3
    groups = []
    while head:
        groups.insert(0, head[-size:])
        head = head[:-size]
    return separator.join(groups + [tail])


def format_number(value: float, style: NumberStyle = INTERNATIONAL) -> str:
    """Whole-unit number with grouping and the style's digit set."""
    rounded = int(round(abs(value)))
    text = _group(str(rounded), style.group_separator, style.indian_grouping)
    if style.digits != WESTERN_DIGITS:
        text = text.translate(str.maketrans(WESTERN_DIGITS, style.digits))
    return text


def format_currency(value: float, prefs: Preferences) -> str:
    """
    Format an amount for display using the selected currency.

    'international' mode always uses Western digits and comma grouping;
    'local' mode uses the conventions of the currency's home locale.

    Example:
        >>> format_currency(1234.56, Preferences(currency="USD"))
        '$1,235'
    """
    currency = get_currency(prefs.currency) or CURRENCIES[0]
    if prefs.number_format == "local":
        style = LOCAL_STYLES.get(currency.locale, INTERNATIONAL)
    else:
        style = INTERNATIONAL

    number = format_number(value, style)
    sign = "-" if round(value) < 0 else ""
    if style.symbol_after:
        return f"{sign}{number}{style.spacer}{currency.symbol}"
    return f"{sign}{currency.symbol}{style.spacer}{number}"
