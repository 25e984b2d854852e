"""
Unit scaling transform for budget-ingest.

Year-columns extracts publish amounts in millions of euros
("209880.90" means 209,880.90 million). The model stores every amount in
base units (euros), so those values are multiplied by the layout's unit
multiplier before a line item is built.

Supported units and their multipliers:
  unidades           -> 1          (base, no scaling)
  miles              -> 1,000
  millones           -> 1,000,000
  miles_de_millones  -> 1,000,000,000

The unit is fixed by the layout YAML, not by user configuration.
"""

from __future__ import annotations

from decimal import Decimal

from budget_ingest.exceptions import UnknownUnitError

UNIT_MULTIPLIERS: dict[str, int] = {
    "unidades": 1,
    "miles": 1_000,
    "millones": 1_000_000,
    "miles_de_millones": 1_000_000_000,
}


def unit_multiplier(unit: str) -> int:
    """Look up the multiplier for *unit*.

    Raises:
        UnknownUnitError: If the unit is not in ``UNIT_MULTIPLIERS``.
    """
    try:
        return UNIT_MULTIPLIERS[unit]
    except KeyError:
        raise UnknownUnitError(
            f"Unknown unit '{unit}'. Supported units: {sorted(UNIT_MULTIPLIERS)}"
        ) from None


def scale_to_base(amount: Decimal, unit: str) -> Decimal:
    """Convert *amount* expressed in *unit* to base units (euros).

    Example: ``scale_to_base(Decimal("50000.00"), "millones")`` ->
    ``Decimal("50000000000.00")``
    """
    return amount * unit_multiplier(unit)

