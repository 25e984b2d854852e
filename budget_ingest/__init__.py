"""
budget-ingest: yearly government income / spending summaries from
heterogeneous CSV extracts.

Public API surface:

- ``summarize(year, ...)`` -- **recommended entry point**. Synchronous:
  locates the tables for *year*, normalizes and classifies every line
  item, and returns a ``BudgetSummary``. Never raises for a valid year;
  falls back to the built-in baseline when no real data is found.

- ``get_summary(year, ...)`` -- The same, as a coroutine, for callers that
  already run an event loop.

- ``BudgetService`` -- Summary plus stored line-item operations
  (``items``, ``years``, ``create_item``) over an injected store.

Example::

    import budget_ingest

    summary = budget_ingest.summarize(2024, config_path="budget.yaml")
    print(summary.to_dict()["balance"], summary.data_source)
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from budget_ingest._pipeline import build_summary
from budget_ingest.config import BudgetConfig, default_config, load_config
from budget_ingest.models import BudgetLineItem, BudgetSummary, BudgetType, Category, DataSource
from budget_ingest.service import BudgetService

__all__ = [
    "summarize",
    "get_summary",
    "BudgetService",
    "BudgetConfig",
    "BudgetLineItem",
    "BudgetSummary",
    "BudgetType",
    "Category",
    "DataSource",
]

logger = logging.getLogger(__name__)


async def get_summary(year: int, config: BudgetConfig | None = None) -> BudgetSummary:
    """Build the summary for *year* (coroutine).

    Args:
        year: Four-digit year.
        config: A BudgetConfig; built-in defaults when ``None``.
    """
    return await build_summary(year, config or default_config())


def summarize(year: int, config_path: str | Path | None = None) -> BudgetSummary:
    """Build the summary for *year* (blocking).

    Args:
        year: Four-digit year.
        config_path: Optional path to budget.yaml. Built-in defaults when
            ``None``.

    Raises:
        FileNotFoundError: If *config_path* is given but does not exist.
        pydantic.ValidationError: If the config fails validation.
    """
    config = load_config(config_path) if config_path is not None else default_config()
    logger.info("summarize() -- year=%d, config=%s", year, config_path or "<defaults>")
    return asyncio.run(build_summary(year, config))
