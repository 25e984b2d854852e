"""
Number parsing transform for budget-ingest.

Government extracts mix Spanish and English conventions:
- ``1.234,56`` (period thousands, comma decimal)
- ``1,234.56`` (comma thousands, period decimal)
- ``1234`` / ``1.234`` / ``1,5`` and currency symbols such as ``€``

``parse_amount`` resolves the ambiguity for traditional tables.
``parse_plain_amount`` is the simpler rule used by year-columns tables,
whose values are always period-decimal.

Both return ``Decimal``; anything unparseable becomes ``Decimal(0)`` so that
the strictly-positive filter downstream drops it.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

import pandas as pd

_CURRENCY_RE = re.compile(r"[€$£¥\s]")
_NUMERIC_CELL_RE = re.compile(r"^[-+]?[\d.,]*\d[\d.,]*$")
_ZERO = Decimal(0)


def _strip(raw: object) -> str:
    if raw is None:
        return ""
    return _CURRENCY_RE.sub("", str(raw))


def _to_decimal(cleaned: str) -> Decimal:
    try:
        value = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        return _ZERO
    if not value.is_finite():
        return _ZERO
    return value


def parse_amount(raw: object) -> Decimal:
    """Parse a locale-ambiguous amount string.

    Rules, applied after removing currency symbols and whitespace:

    1. Both ``,`` and ``.`` present: whichever occurs last is the decimal
       separator; the other is a thousands separator and is removed.
    2. Only ``,``: a single comma followed by 1-2 digits is the decimal
       separator; otherwise commas are thousands separators.
    3. Otherwise periods are thousands separators and are removed.

    Examples::

        parse_amount("1.234,56")  -> Decimal("1234.56")
        parse_amount("1,234.56")  -> Decimal("1234.56")
        parse_amount("12,5 €")    -> Decimal("12.5")
        parse_amount("1.234")     -> Decimal("1234")
        parse_amount("abc")       -> Decimal("0")
    """
    cleaned = _strip(raw)
    if not cleaned:
        return _ZERO

    has_comma = "," in cleaned
    has_period = "." in cleaned

    if has_comma and has_period:
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif has_comma:
        parts = cleaned.split(",")
        if len(parts) == 2 and 1 <= len(parts[1]) <= 2:
            cleaned = cleaned.replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    else:
        cleaned = cleaned.replace(".", "")

    return _to_decimal(cleaned)


def parse_plain_amount(raw: object) -> Decimal:
    """Parse a period-decimal amount (year-columns tables).

    ``"209880.90"`` -> ``Decimal("209880.90")``. No separator guessing.
    """
    cleaned = _strip(raw)
    if not cleaned:
        return _ZERO
    return _to_decimal(cleaned)


def looks_numeric(raw: object) -> bool:
    """True if the cell is a number, allowing separators and currency symbols."""
    cleaned = _strip(raw)
    return bool(cleaned) and bool(_NUMERIC_CELL_RE.match(cleaned))


def parse_amounts(series: pd.Series, plain: bool = False) -> pd.Series:
    """Apply ``parse_amount`` (or ``parse_plain_amount``) to every cell.

    Returns an object-dtype Series of ``Decimal`` values with the same index.
    The input is not modified.
    """
    parser = parse_plain_amount if plain else parse_amount
    return series.map(parser).astype(object)
