"""
Internal pipeline orchestration for budget-ingest.

Extracted from ``service.py`` so that both the module-level
``get_summary()`` and ``BudgetService.summary()`` reuse the same
locate -> detect -> parse -> aggregate sequence.

This module is **not** part of the public API.
"""

from __future__ import annotations

import logging

from budget_ingest.aggregate import aggregate
from budget_ingest.baseline import baseline_summary
from budget_ingest.config import BudgetConfig
from budget_ingest.detect import detect_format
from budget_ingest.exceptions import BudgetIngestError
from budget_ingest.layout_registry import Layout, load_all_layouts
from budget_ingest.models import BudgetLineItem, BudgetSummary, SourceTable
from budget_ingest.sources import SourceLocator

logger = logging.getLogger(__name__)


def extract_items(
    tables: list[SourceTable],
    year: int,
    layouts: list[Layout] | None = None,
) -> list[BudgetLineItem]:
    """Detect, parse and normalize every located table.

    A table whose format is unknown or whose parse fails for any reason
    is skipped with a warning; the remaining tables still contribute.

    Args:
        tables: Tables returned by the SourceLocator.
        year: The requested year (assigned to traditional rows).
        layouts: Pre-loaded layouts (optional; loads from disk if None).

    Returns:
        All line items extracted, across all years present in the tables.
    """
    if layouts is None:
        layouts = load_all_layouts()

    items: list[BudgetLineItem] = []
    for table in tables:
        try:
            parser_cls, layout = detect_format(table.df, layouts, name=table.name)
            result = parser_cls().parse(table, layout, year)
        except (BudgetIngestError, ArithmeticError, ValueError) as exc:
            logger.warning("Skipping table %s: %s", table.name, exc)
            continue
        logger.info(
            "Table %s (%s): %d item(s), %d of %d row(s) skipped",
            table.name, result.format_name, len(result.items),
            result.rows_skipped, result.rows_total,
        )
        items.extend(result.items)
    return items


async def build_summary(
    year: int,
    config: BudgetConfig,
    locator: SourceLocator | None = None,
) -> BudgetSummary:
    """Run the full pipeline for *year*.

    Steps:
      1. ``SourceLocator.locate()`` -> tables (local first, then remote).
      2. ``extract_items()`` -> normalized line items.
      3. ``aggregate()`` -> summary, or the baseline when nothing was found.

    Never raises for a valid year: every failure degrades to the baseline.
    """
    logger.info("Building budget summary for %d", year)
    layouts = load_all_layouts()
    if locator is None:
        locator = SourceLocator(config, layouts=layouts)

    tables = await locator.locate(year)
    items = extract_items(tables, year, layouts)
    try:
        summary = aggregate(items, year)
    except ArithmeticError as exc:
        logger.warning("Could not aggregate %d item(s) for %d: %s", len(items), year, exc)
        summary = baseline_summary(year)
    logger.info(
        "Summary for %d: income=%s spending=%s balance=%s (source: %s)",
        year, summary.income.total, summary.spending.total,
        summary.balance, summary.data_source.value,
    )
    return summary
