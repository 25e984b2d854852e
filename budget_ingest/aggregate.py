"""
Aggregator for budget-ingest.

Turns normalized line items into a ``BudgetSummary``:

1. Keep only items of the requested year.
2. Group by (category, type) and sum amounts.
3. Compute the income and spending totals and the balance
   (income - spending).

An empty filtered set is not an error: the baseline summary is returned
instead, tagged ``dataSource = "hardcoded"``. This applies equally to
year-columns extracts that simply do not cover the requested year.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

import pandas as pd

from budget_ingest.baseline import baseline_summary
from budget_ingest.models import (
    AggregatedEntry,
    BudgetLineItem,
    BudgetSummary,
    Category,
    CategorySummary,
    DataSource,
    TYPES_BY_CATEGORY,
)

logger = logging.getLogger(__name__)


def items_to_frame(items: Iterable[BudgetLineItem]) -> pd.DataFrame:
    """Flatten line items into a DataFrame (enum columns as their string values)."""
    records = [
        {
            "year": item.year,
            "category": item.category.value,
            "type": item.type.value,
            "amount": item.amount,
            "description": item.description,
        }
        for item in items
    ]
    return pd.DataFrame(
        records, columns=["year", "category", "type", "amount", "description"]
    )


def _sum_decimals(values: pd.Series) -> Decimal:
    return sum(values, Decimal(0))


def _category_summary(grouped: pd.Series, category: Category) -> CategorySummary:
    entries: list[AggregatedEntry] = []
    for budget_type in TYPES_BY_CATEGORY[category]:
        key = (category.value, budget_type.value)
        if key in grouped.index:
            entries.append(AggregatedEntry(type=budget_type, total=grouped.loc[key]))
    total = sum((e.total for e in entries), Decimal(0))
    return CategorySummary(items=entries, total=total)


def aggregate(items: Iterable[BudgetLineItem], year: int) -> BudgetSummary:
    """Aggregate *items* into the summary for *year*.

    Entries within each category follow the taxonomy order. Returns the
    baseline summary when no item belongs to *year*.
    """
    df = items_to_frame(items)
    df = df[df["year"] == year]

    if df.empty:
        logger.info("No line items for %d -- using baseline data", year)
        return baseline_summary(year)

    grouped = df.groupby(["category", "type"], sort=False)["amount"].agg(_sum_decimals)

    income = _category_summary(grouped, Category.INCOME)
    spending = _category_summary(grouped, Category.SPENDING)
    logger.info(
        "Aggregated %d item(s) for %d into %d income / %d spending type(s)",
        len(df), year, len(income.items), len(spending.items),
    )
    return BudgetSummary(
        year=year,
        income=income,
        spending=spending,
        balance=income.total - spending.total,
        data_source=DataSource.REAL,
    )
