"""German number parsing and formatting.

Listing prices, areas and form inputs arrive as de-DE strings ("450.000 €",
"85,5 m²"): the period groups thousands and the comma separates decimals.
Every function here is total; nothing raises on bad input.
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

import numpy as np

Number = Union[int, float]

_NOT_NUMERIC = re.compile(r"[^0-9,.]")
_NOT_DIGIT_OR_COMMA = re.compile(r"[^0-9,]")

PLACEHOLDER = "—"


def parse_localized_number(value: str | Number | None) -> float:
    """Parse a de-DE formatted number.

    Everything except digits, commas and periods is dropped, periods are
    treated as thousands separators and the first comma as the decimal
    separator: ``"1.234,56 €"`` -> ``1234.56``.

    Args:
        value: Raw user or listing text. Numbers pass through unchanged.

    Returns:
        The parsed value, or 0.0 for empty or unparseable input.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0

    cleaned = _NOT_NUMERIC.sub("", str(value)).replace(".", "")
    whole, _, fraction = cleaned.partition(",")
    fraction = fraction.replace(",", "")
    if not whole and not fraction:
        return 0.0
    try:
        parsed = float(f"{whole or '0'}.{fraction or '0'}")
    except ValueError:
        return 0.0
    # Digit strings beyond the float range overflow to inf
    return parsed if math.isfinite(parsed) else 0.0


def _group_thousands(digits: str) -> str:
    """Group a plain digit string in threes, working on the text (no length limit)."""
    digits = digits.lstrip("0") or "0"
    head = len(digits) % 3 or 3
    groups = [digits[:head]] + [digits[i:i + 3] for i in range(head, len(digits), 3)]
    return ".".join(groups)


def format_thousands(value: str | Number | None) -> str:
    """Re-group a number with de-DE thousands separators.

    Strings are treated as text being typed into a field: existing grouping is
    discarded, the integer part is regrouped and a trailing comma fraction is
    kept exactly as typed (``"1234,"`` -> ``"1.234,"``). Numbers are rendered
    with their shortest exact representation (``1234.5`` -> ``"1.234,5"``).

    Returns:
        The formatted text, or an empty string for empty input.
    """
    if value is None or isinstance(value, bool):
        return ""

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return ""
        text = np.format_float_positional(abs(float(value)), trim="-")
        whole, _, fraction = text.partition(".")
        sign = "-" if value < 0 else ""
        return sign + _group_thousands(whole) + (f",{fraction}" if fraction else "")

    text = _NOT_DIGIT_OR_COMMA.sub("", str(value))
    if not text:
        return ""
    whole, separator, fraction = text.partition(",")
    grouped = _group_thousands(whole) if whole else "0"
    return grouped + separator + fraction.replace(",", "")


def format_decimal(value: Number, fraction_digits: int = 2) -> str:
    """Fixed-point de-DE rendering, e.g. ``1234.5`` -> ``"1.234,50"``."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return PLACEHOLDER
    if not math.isfinite(number):
        return PLACEHOLDER

    digits = max(0, int(fraction_digits))
    try:
        rounded = Decimal(repr(number)).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        rounded = Decimal(repr(number))
    text = f"{abs(rounded):,.{digits}f}"
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return ("-" if rounded < 0 else "") + text


def format_currency(amount: Number, fraction_digits: int = 0) -> str:
    """Euro amount in de-DE notation: ``format_currency(1234.5, 2)`` -> ``"1.234,50 €"``."""
    text = format_decimal(amount, fraction_digits)
    if text == PLACEHOLDER:
        return text
    return f"{text} €"


def format_signed_currency(amount: Number, fraction_digits: int = 0) -> str:
    """Currency with an explicit sign; zero counts as positive (``"+0 €"``)."""
    text = format_currency(abs(amount), fraction_digits) if math.isfinite(amount) else PLACEHOLDER
    if text == PLACEHOLDER:
        return text
    return ("+" if amount >= 0 else "-") + text


def format_percent(ratio: Number | None, fraction_digits: int = 2) -> str:
    """Render a ratio as a percentage: ``0.0425`` -> ``"4,25 %"``."""
    if ratio is None:
        return PLACEHOLDER
    text = format_decimal(float(ratio) * 100.0, fraction_digits)
    if text == PLACEHOLDER:
        return text
    return f"{text} %"
