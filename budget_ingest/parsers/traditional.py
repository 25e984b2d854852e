"""
Traditional-layout parser for budget-ingest.

Handles extracts in normal form, one row per line item:

    Tipo,Concepto,Importe
    Ingreso,IRPF,"95.000.000.000,00"
    Gasto,Pensiones contributivas,"140.000.000.000,00"

Column names differ between publications, so each field is resolved
against the candidate lists of the layout YAML:

- ``resolve_columns()`` -> ``ColumnMap`` (once per table)
- ``resolve_row(RawRow, ColumnMap, year)`` -> ``BudgetLineItem | None``
  (pure, once per row)

Rows carry no year; every item gets the requested year.
Per-row failures are logged at debug level and the row is skipped.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from budget_ingest.exceptions import ParsingError
from budget_ingest.layout_registry import FieldCandidates, Layout
from budget_ingest.models import BudgetLineItem, Category, ColumnMap, RawRow, SourceTable
from budget_ingest.parsers.base import BaseParser, ParseResult, iter_raw_rows
from budget_ingest.transforms.classify import classify, normalize_text
from budget_ingest.transforms.numbers import looks_numeric, parse_amount

logger = logging.getLogger(__name__)

# Category cell vocabulary
_INCOME_WORDS = ("ingreso", "income", "revenue")
_SPENDING_WORDS = ("gasto", "spending", "expense")
_INCOME_CODES = {"i"}
_SPENDING_CODES = {"g"}

# Concept words implying income when the category is unknown
_INCOME_CONCEPT_WORDS = ("ingreso", "revenue", "impuesto", "tributo", "tax", "income")


def _find_column(columns: list[str], candidates: list[str]) -> str | None:
    by_name: dict[str, str] = {}
    for col in columns:
        by_name.setdefault(normalize_text(str(col)), col)
    for candidate in candidates:
        col = by_name.get(normalize_text(candidate))
        if col is not None:
            return col
    return None


def resolve_columns(columns: list[str], fields: FieldCandidates) -> ColumnMap:
    """Pick the amount / concept / category columns of a table.

    Matching is case- and accent-insensitive. Candidates are tried in list
    order, so ``Concepto`` beats ``Tipo`` for the concept even when ``Tipo``
    comes first in the table. The same column may serve two fields (e.g.
    ``Tipo`` as both concept and category when nothing better exists).
    """
    return ColumnMap(
        amount=_find_column(columns, fields.amount),
        concept=_find_column(columns, fields.concept),
        category=_find_column(columns, fields.category),
    )


def category_from_cell(value: str) -> Category | None:
    """Interpret a category cell ("Ingresos", "Gasto", "I", ...); ``None`` if unknown."""
    text = normalize_text(value)
    if not text:
        return None
    if text in _INCOME_CODES or any(w in text for w in _INCOME_WORDS):
        return Category.INCOME
    if text in _SPENDING_CODES or any(w in text for w in _SPENDING_WORDS):
        return Category.SPENDING
    return None


def infer_category(concept: str) -> Category:
    """Default category for a row without a usable category cell."""
    text = normalize_text(concept)
    if any(w in text for w in _INCOME_CONCEPT_WORDS):
        return Category.INCOME
    return Category.SPENDING


def _amount_text(raw: RawRow, columns: ColumnMap) -> str:
    if columns.amount is not None:
        return raw.get(columns.amount)
    # No amount column: first cell that looks like a number
    for col, value in raw.cells.items():
        if col in (columns.concept, columns.category):
            continue
        if looks_numeric(value):
            return value
    return ""


def resolve_row(raw: RawRow, columns: ColumnMap, year: int) -> BudgetLineItem | None:
    """Normalize one traditional row into a line item.

    Returns ``None`` when the amount is missing, unparseable or not
    strictly positive.

    Raises:
        pydantic.ValidationError: If the resolved values fail model validation.
    """
    amount = parse_amount(_amount_text(raw, columns))
    if amount <= 0:
        return None

    concept = raw.get(columns.concept)
    category = None
    if columns.category is not None:
        category = category_from_cell(raw.get(columns.category))
    if category is None:
        category = infer_category(concept)

    return BudgetLineItem(
        year=year,
        category=category,
        type=classify(concept, category),
        amount=amount,
        description=concept,
        source=raw.source or None,
    )


class TraditionalParser(BaseParser):
    """Parser for one-row-per-line-item tables."""

    def parse(
        self,
        table: SourceTable,
        layout: Layout,
        year: int | None = None,
    ) -> ParseResult:
        if year is None:
            raise ParsingError(
                f"Traditional table '{table.name}' has no year column; a year is required"
            )
        logger.info("Parsing traditional table: %s", table.name)

        columns = resolve_columns([str(c) for c in table.df.columns], layout.fields)
        logger.info(
            "  Amount column: %s, concept column: %s, category column: %s",
            columns.amount or "NOT FOUND",
            columns.concept or "NOT FOUND",
            columns.category or "NOT FOUND",
        )

        result = ParseResult(format_name=layout.format_name)
        for raw in iter_raw_rows(table.df, source=table.name):
            result.rows_total += 1
            try:
                item = resolve_row(raw, columns, year)
            except (ValidationError, ValueError, ArithmeticError) as exc:
                logger.debug("  Row %d rejected: %s", raw.index, exc)
                item = None
            if item is None:
                result.rows_skipped += 1
                continue
            result.items.append(item)

        logger.info(
            "  Normalized %d item(s) from %d row(s) (%d skipped)",
            len(result.items), result.rows_total, result.rows_skipped,
        )
        return result
