"""Locale-tolerant decimal parsing for spreadsheet and stored figures.

Margins arrive as strings typed by humans in either US (``1,234.56``) or
European (``1.234,56``) notation. The rules applied here are a heuristic,
not a locale-aware parser:

- both ``,`` and ``.`` present: whichever occurs last is the decimal point,
  the other one is stripped as a thousands separator;
- only ``,`` present: it is stripped (thousands separator);
- otherwise the string is parsed as-is.

Empty and unparseable inputs become zero. ``normalize_decimal`` logs a
warning in the unparseable case so dirty data does not pass silently;
callers that must reject bad data use ``parse_decimal`` and check ``ok``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from decimal import InvalidOperation

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENTS = Decimal("0.01")


@dataclass(frozen=True)
class NormalizedDecimal:
    value: Decimal
    ok: bool = True


def _canonical_text(text: str) -> str:
    last_comma = text.rfind(",")
    last_dot = text.rfind(".")
    if last_comma != -1 and last_dot != -1:
        if last_comma > last_dot:
            return text.replace(".", "").replace(",", ".")
        return text.replace(",", "")
    if last_comma != -1:
        return text.replace(",", "")
    return text


def parse_decimal(value) -> NormalizedDecimal:
    """Parse ``value`` and report whether it was a usable number."""
    if value is None:
        return NormalizedDecimal(ZERO)
    if isinstance(value, bool):
        return NormalizedDecimal(ZERO, ok=False)
    if isinstance(value, Decimal):
        return NormalizedDecimal(value if value.is_finite() else ZERO, value.is_finite())
    if isinstance(value, int):
        return NormalizedDecimal(Decimal(value))
    if isinstance(value, float):
        parsed = Decimal(str(value))
        return NormalizedDecimal(parsed if parsed.is_finite() else ZERO, parsed.is_finite())

    text = str(value).strip()
    if not text:
        return NormalizedDecimal(ZERO)
    try:
        parsed = Decimal(_canonical_text(text))
    except InvalidOperation:
        return NormalizedDecimal(ZERO, ok=False)
    if not parsed.is_finite():
        return NormalizedDecimal(ZERO, ok=False)
    return NormalizedDecimal(parsed)


def normalize_decimal(value) -> Decimal:
    """Return ``value`` as a Decimal, never raising.

    Empty input and unparseable input both yield ``Decimal("0")``.
    """
    result = parse_decimal(value)
    if not result.ok:
        logger.warning("Unparseable numeric value %r treated as 0", value)
    return result.value


def to_money(value) -> Decimal:
    """Normalize and round to two decimal places."""
    return normalize_decimal(value).quantize(CENTS)
