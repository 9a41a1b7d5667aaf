from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

"""Currency / cost normalization.

Cost text in the feed is free-form ("£399.99", "$4.33", "Â£12"). Parsing is
lenient on purpose: known currency markers are stripped, the leading numeric
part is read, and anything unparseable becomes zero. A zero cost is then left
to the business rules. normalize_cost never raises.
"""

__all__ = [
    "CURRENCY_MARKERS",
    "normalize_cost",
    "normalize_stock",
]

# 順序重要: 文字化け形 "Â£" を "£" より先に除去する。\ufffd は latin-1 の £ をデコードし損ねた痕跡
CURRENCY_MARKERS: tuple[str, ...] = ("Â£", "£", "Â", "\ufffd", "$")

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

ZERO = Decimal("0")


def strip_currency_markers(text: str) -> str:
    for marker in CURRENCY_MARKERS:
        text = text.replace(marker, "")
    return text.strip()


def normalize_cost(text: str | None) -> Decimal:
    """Parse cost text into a Decimal, defaulting to zero.

    >>> normalize_cost("£399.99")
    Decimal('399.99')
    >>> normalize_cost("12.5abc")
    Decimal('12.5')
    >>> normalize_cost("n/a")
    Decimal('0')
    """
    if not text:
        return ZERO
    cleaned = strip_currency_markers(text)
    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return ZERO
    try:
        value = Decimal(match.group(0))
    except InvalidOperation:  # pragma: no cover - regex guarantees a literal
        return ZERO
    if not value.is_finite():  # pragma: no cover
        return ZERO
    return value


def normalize_stock(text: str | None) -> int:
    """Stock as int; absent (None / empty) counts as 0.

    The validator has already rejected non-integer text.
    """
    if text is None or text.strip() == "":
        return 0
    return int(text.strip())
