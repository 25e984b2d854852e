"""
Year-columns parser for budget-ingest.

Handles series extracts where each row is a concept and each column after
the first is a year:

    Concepto,2021,2022,2023,2024-P
    Impuestos directos,98000.10,105000.00,110500.50,118000.00
    Total ingresos,250000.00,...

Key rules:
- The concept column is the first column, unless its header itself looks
  like a year; then the first non-year column is used.
- Subtotal and noise rows are skipped: empty concept, the header name
  repeated, anything containing "total", purely numeric concepts, concepts
  shorter than three characters and concepts starting with a year.
- One line item per (row, year column) whose value parses to a strictly
  positive period-decimal. Values are in the layout's unit (millions of
  euros) and are scaled to euros.

The table has no category column; the category comes from the file it was
read from (ingresos.csv -> income, gastos.csv -> spending).
"""

from __future__ import annotations

import logging
import re

from pydantic import ValidationError

from budget_ingest.exceptions import ParsingError
from budget_ingest.layout_registry import Layout
from budget_ingest.models import BudgetLineItem, SourceTable
from budget_ingest.parsers.base import BaseParser, ParseResult, iter_raw_rows
from budget_ingest.transforms.classify import classify
from budget_ingest.transforms.numbers import parse_amounts
from budget_ingest.transforms.units import scale_to_base

logger = logging.getLogger(__name__)

_NUMERIC_CONCEPT_RE = re.compile(r"^\d+\.?\d*$")
_LEADING_YEAR_RE = re.compile(r"^\d{4}")


def find_year_columns(columns: list[str], pattern: re.Pattern[str]) -> list[tuple[str, int]]:
    """Return ``(column_name, year)`` for every header matching *pattern*.

    The pattern's first group must capture the four-digit year.
    """
    found: list[tuple[str, int]] = []
    for col in columns:
        match = pattern.match(str(col).strip())
        if match:
            found.append((col, int(match.group(1))))
    return found


def find_concept_column(columns: list[str], pattern: re.Pattern[str]) -> str | None:
    """First column, or the first non-year column if the first looks like a year."""
    if not columns:
        return None
    first = columns[0]
    if not _LEADING_YEAR_RE.match(str(first)):
        return first
    for col in columns:
        if not pattern.match(str(col).strip()) and not _LEADING_YEAR_RE.match(str(col)):
            return col
    return None


def is_noise_concept(concept: str, header: str, layout: Layout) -> bool:
    """True if a concept cell denotes a subtotal / header / value rather than a line item."""
    if not concept or concept == header:
        return True
    lowered = concept.lower()
    if any(word in lowered for word in layout.skip_rows.contains):
        return True
    if _NUMERIC_CONCEPT_RE.match(concept):
        return True
    if len(concept) < layout.skip_rows.min_concept_length:
        return True
    if _LEADING_YEAR_RE.match(concept):
        return True
    return False


class YearColumnsParser(BaseParser):
    """Parser for concept x year tables."""

    def parse(
        self,
        table: SourceTable,
        layout: Layout,
        year: int | None = None,
    ) -> ParseResult:
        logger.info("Parsing year-columns table: %s", table.name)

        if table.category is None:
            raise ParsingError(
                f"Year-columns table '{table.name}' has no category; "
                "it must be read from a category-specific file"
            )
        pattern = layout.year_header_re
        if pattern is None:
            raise ParsingError(f"Layout '{layout.format_name}' has no year_header_pattern")

        columns = [str(c) for c in table.df.columns]
        concept_col = find_concept_column(columns, pattern)
        if concept_col is None:
            raise ParsingError(f"No concept column found in '{table.name}'. Columns: {columns[:10]}")
        year_cols = [(col, y) for col, y in find_year_columns(columns, pattern) if col != concept_col]

        logger.info(
            "  Concept column: '%s', %d year column(s): %s",
            concept_col, len(year_cols), [col for col, _ in year_cols],
        )

        amounts = {col: parse_amounts(table.df[col], plain=True) for col, _ in year_cols}

        result = ParseResult(format_name=layout.format_name)
        for raw in iter_raw_rows(table.df, source=table.name):
            result.rows_total += 1
            concept = raw.get(concept_col)
            if is_noise_concept(concept, concept_col, layout):
                logger.debug("  Skipping row %d: concept=%r", raw.index, concept)
                result.rows_skipped += 1
                continue

            item_type = classify(concept, table.category)
            emitted = 0
            for col, col_year in year_cols:
                amount = amounts[col].iloc[raw.index]
                if amount <= 0:
                    continue
                try:
                    item = BudgetLineItem(
                        year=col_year,
                        category=table.category,
                        type=item_type,
                        amount=scale_to_base(amount, layout.unit),
                        description=concept,
                        source=table.name,
                    )
                except (ValidationError, ArithmeticError) as exc:
                    logger.debug("  Row %d, column %s rejected: %s", raw.index, col, exc)
                    continue
                result.items.append(item)
                emitted += 1
            if emitted == 0:
                result.rows_skipped += 1

        logger.info(
            "  Parsed %d item(s) from %d row(s) (%d skipped)",
            len(result.items), result.rows_total, result.rows_skipped,
        )
        return result
