"""
Domain models for budget-ingest.

Two families of types live here:

- Pipeline intermediates (plain dataclasses): ``RawRow`` is a table row
  before field resolution, ``ColumnMap`` records which columns hold the
  amount / concept / category of a traditional table.
- Validated records (Pydantic): ``BudgetLineItem`` is one normalized fact,
  and ``BudgetSummary`` is the yearly aggregate returned to callers.

The type taxonomy is closed. ``INCOME_TYPES`` and ``SPENDING_TYPES`` fix the
canonical order used when rendering summaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

import pandas as pd
from pydantic import BaseModel, Field, field_serializer, model_validator


class Category(str, Enum):
    INCOME = "income"
    SPENDING = "spending"


class BudgetType(str, Enum):
    # income
    PERSONAL_INCOME_TAX = "personal_income_tax"
    CORPORATE_TAX = "corporate_tax"
    VAT = "vat"
    SOCIAL_SECURITY_CONTRIBUTIONS = "social_security_contributions"
    AUTONOMOUS_COMMUNITIES_TAXES = "autonomous_communities_taxes"
    EU_FUNDS = "eu_funds"
    OTHER_REVENUES = "other_revenues"
    # spending
    PENSIONS = "pensions"
    SOCIAL_SECURITY = "social_security"
    EDUCATION = "education"
    HEALTHCARE = "healthcare"
    DEFENSE = "defense"
    INFRASTRUCTURE = "infrastructure"
    PUBLIC_ADMINISTRATION = "public_administration"
    DEBT_INTEREST = "debt_interest"
    OTHER_SPENDING = "other_spending"


class DataSource(str, Enum):
    REAL = "real"
    HARDCODED = "hardcoded"


INCOME_TYPES: tuple[BudgetType, ...] = (
    BudgetType.PERSONAL_INCOME_TAX,
    BudgetType.CORPORATE_TAX,
    BudgetType.VAT,
    BudgetType.SOCIAL_SECURITY_CONTRIBUTIONS,
    BudgetType.AUTONOMOUS_COMMUNITIES_TAXES,
    BudgetType.EU_FUNDS,
    BudgetType.OTHER_REVENUES,
)

SPENDING_TYPES: tuple[BudgetType, ...] = (
    BudgetType.PENSIONS,
    BudgetType.SOCIAL_SECURITY,
    BudgetType.EDUCATION,
    BudgetType.HEALTHCARE,
    BudgetType.DEFENSE,
    BudgetType.INFRASTRUCTURE,
    BudgetType.PUBLIC_ADMINISTRATION,
    BudgetType.DEBT_INTEREST,
    BudgetType.OTHER_SPENDING,
)

TYPES_BY_CATEGORY: dict[Category, tuple[BudgetType, ...]] = {
    Category.INCOME: INCOME_TYPES,
    Category.SPENDING: SPENDING_TYPES,
}


def catch_all(category: Category) -> BudgetType:
    """Type assigned when no classification rule matches."""
    if category is Category.INCOME:
        return BudgetType.OTHER_REVENUES
    return BudgetType.OTHER_SPENDING


def as_number(value: Decimal) -> int | float:
    """Render a Decimal as a JSON number (int when integral)."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# ---------------------------------------------------------------------------
# Pipeline intermediates
# ---------------------------------------------------------------------------

@dataclass
class RawRow:
    """One table row before field resolution.

    Attributes:
        cells: Column name -> raw cell text (already stripped).
        source: File name or URL the row was read from.
        index: Zero-based row position in the source table.
    """
    cells: dict[str, str] = field(default_factory=dict)
    source: str = ""
    index: int = 0

    def get(self, column: str | None) -> str:
        if column is None:
            return ""
        return str(self.cells.get(column, "") or "").strip()


@dataclass
class ColumnMap:
    """Which columns of a traditional table hold each field (``None`` = unresolved)."""
    amount: str | None = None
    concept: str | None = None
    category: str | None = None

    def is_empty(self) -> bool:
        return self.amount is None and self.concept is None and self.category is None


@dataclass
class SourceTable:
    """A located table: an all-string DataFrame plus provenance.

    Attributes:
        name: File name or URL the table was read from.
        df: Cells as strings (``dtype=str``, no NaN coercion).
        category: Known category for category-specific files (year-columns
            ``ingresos.csv`` / ``gastos.csv``); ``None`` otherwise.
        origin: ``"local"`` or ``"remote"``.
    """
    name: str
    df: pd.DataFrame
    category: Category | None = None
    origin: str = "local"


# ---------------------------------------------------------------------------
# Validated records
# ---------------------------------------------------------------------------

class BudgetLineItem(BaseModel):
    """A single normalized (year, category, type, amount) fact."""

    year: int
    category: Category
    type: BudgetType
    amount: Decimal = Field(..., gt=0, description="Amount in euros, strictly positive")
    description: str = ""
    source: str | None = Field(None, description="File name or URL of origin")

    @model_validator(mode="after")
    def _check_type_matches_category(self) -> BudgetLineItem:
        if self.type not in TYPES_BY_CATEGORY[self.category]:
            raise ValueError(
                f"Type '{self.type.value}' does not belong to category "
                f"'{self.category.value}'"
            )
        return self


class AggregatedEntry(BaseModel):
    """Summed amount for one type within a category."""

    type: BudgetType = Field(..., serialization_alias="_id")
    total: Decimal

    @field_serializer("total")
    def _serialize_total(self, value: Decimal) -> int | float:
        return as_number(value)


class CategorySummary(BaseModel):
    items: list[AggregatedEntry] = Field(default_factory=list)
    total: Decimal = Decimal(0)

    @field_serializer("total")
    def _serialize_total(self, value: Decimal) -> int | float:
        return as_number(value)


class BudgetSummary(BaseModel):
    """Yearly income / spending / balance summary."""

    year: int
    income: CategorySummary
    spending: CategorySummary
    balance: Decimal
    data_source: DataSource = Field(..., serialization_alias="dataSource")

    @field_serializer("balance")
    def _serialize_balance(self, value: Decimal) -> int | float:
        return as_number(value)

    def to_dict(self) -> dict:
        """External JSON shape: ``{year, income, spending, balance, dataSource}``."""
        return self.model_dump(mode="json", by_alias=True)

    def totals_by_type(self) -> dict[BudgetType, Decimal]:
        return {
            entry.type: entry.total
            for entry in [*self.income.items, *self.spending.items]
        }
