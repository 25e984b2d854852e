"""
Baseline dataset for budget-ingest.

A fixed, hand-authored summary returned whenever no real line items could
be extracted for a year. Values are in euros, taken from 2023-2024 Spanish
central government budget estimates, and do not vary by year; only the
``year`` field of the returned summary follows the request.
"""

from __future__ import annotations

from decimal import Decimal

from budget_ingest.models import (
    AggregatedEntry,
    BudgetSummary,
    BudgetType,
    CategorySummary,
    DataSource,
)

_BILLION = Decimal(1_000_000_000)

BASELINE_INCOME: dict[BudgetType, Decimal] = {
    BudgetType.PERSONAL_INCOME_TAX: 95 * _BILLION,            # IRPF
    BudgetType.CORPORATE_TAX: 28 * _BILLION,                  # Impuesto de Sociedades
    BudgetType.VAT: 78 * _BILLION,                            # IVA
    BudgetType.SOCIAL_SECURITY_CONTRIBUTIONS: 120 * _BILLION, # Cotizaciones
    BudgetType.AUTONOMOUS_COMMUNITIES_TAXES: 45 * _BILLION,   # Impuestos CCAA
    BudgetType.EU_FUNDS: 35 * _BILLION,
    BudgetType.OTHER_REVENUES: 25 * _BILLION,
}

BASELINE_SPENDING: dict[BudgetType, Decimal] = {
    BudgetType.PENSIONS: 140 * _BILLION,
    BudgetType.SOCIAL_SECURITY: 95 * _BILLION,
    BudgetType.EDUCATION: 52 * _BILLION,
    BudgetType.HEALTHCARE: 75 * _BILLION,
    BudgetType.DEFENSE: 12 * _BILLION,
    BudgetType.INFRASTRUCTURE: 18 * _BILLION,
    BudgetType.PUBLIC_ADMINISTRATION: 35 * _BILLION,
    BudgetType.DEBT_INTEREST: 32 * _BILLION,
    BudgetType.OTHER_SPENDING: 28 * _BILLION,
}


def _category_summary(totals: dict[BudgetType, Decimal]) -> CategorySummary:
    items = [AggregatedEntry(type=t, total=total) for t, total in totals.items()]
    return CategorySummary(items=items, total=sum(totals.values(), Decimal(0)))


def baseline_summary(year: int) -> BudgetSummary:
    """Return the fixed fallback summary, tagged ``hardcoded``."""
    income = _category_summary(BASELINE_INCOME)
    spending = _category_summary(BASELINE_SPENDING)
    return BudgetSummary(
        year=year,
        income=income,
        spending=spending,
        balance=income.total - spending.total,
        data_source=DataSource.HARDCODED,
    )
