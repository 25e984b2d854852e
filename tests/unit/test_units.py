"""
Unit tests for unit scaling (budget_ingest.transforms.units).
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from budget_ingest.exceptions import UnknownUnitError
from budget_ingest.transforms.units import (
    UNIT_MULTIPLIERS,
    scale_to_base,
    unit_multiplier,
)


class TestUnitMultiplier:
    @pytest.mark.parametrize("unit, expected", [
        ("unidades", 1),
        ("miles", 1_000),
        ("millones", 1_000_000),
        ("miles_de_millones", 1_000_000_000),
    ])
    def test_known_units(self, unit, expected):
        assert unit_multiplier(unit) == expected

    def test_unknown_unit_raises(self):
        with pytest.raises(UnknownUnitError, match="billones"):
            unit_multiplier("billones")

    def test_table_is_complete(self):
        assert set(UNIT_MULTIPLIERS) == {"unidades", "miles", "millones", "miles_de_millones"}


class TestScaleToBase:
    def test_millions_to_euros(self):
        assert scale_to_base(Decimal("50000.00"), "millones") == Decimal("50000000000")

    def test_fractional_millions_stay_exact(self):
        assert scale_to_base(Decimal("209880.90"), "millones") == Decimal("209880900000")

    def test_base_unit_unchanged(self):
        assert scale_to_base(Decimal("12.5"), "unidades") == Decimal("12.5")

