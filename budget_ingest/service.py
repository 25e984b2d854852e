"""
Request handler for budget-ingest.

``BudgetService`` is what an HTTP layer or a CLI calls. It wires the
summary pipeline to an injected ``BudgetStore``:

- ``summary(year)``      -- locate / parse / aggregate, baseline on failure.
- ``items(...)``         -- stored line items, filtered.
- ``years()``            -- stored years, or the configured fallback years.
- ``create_item(data)``  -- validate and store a manually submitted item.

The store is never consulted by ``summary()``.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from budget_ingest._pipeline import build_summary
from budget_ingest.config import BudgetConfig, default_config
from budget_ingest.exceptions import StorageError
from budget_ingest.models import BudgetLineItem, BudgetSummary, BudgetType, Category
from budget_ingest.sources import SourceLocator
from budget_ingest.storage import BudgetStore, build_store

logger = logging.getLogger(__name__)


class BudgetService:
    """Budget summary and line-item operations.

    Args:
        config: The validated BudgetConfig (defaults to built-in settings).
        store: Persisted item store (defaults to the one selected by
            ``config.storage``, see ``build_store``).
        locator: Source locator (defaults to one built from *config*).
    """

    def __init__(
        self,
        config: BudgetConfig | None = None,
        store: BudgetStore | None = None,
        locator: SourceLocator | None = None,
    ) -> None:
        self.config = config or default_config()
        self.store = store if store is not None else build_store(self.config)
        self.locator = locator or SourceLocator(self.config)

    async def summary(self, year: int) -> BudgetSummary:
        """Yearly summary from real data, or the baseline when none is available."""
        return await build_summary(year, self.config, self.locator)

    def items(
        self,
        year: int | None = None,
        category: Category | str | None = None,
        type: BudgetType | str | None = None,
    ) -> list[BudgetLineItem]:
        """Stored line items matching the given filters.

        Raises:
            ValueError: If *category* or *type* is not a known value.
            StorageError: If the store cannot be read.
        """
        return self.store.query(
            year=year,
            category=Category(category) if category is not None else None,
            type=BudgetType(type) if type is not None else None,
        )

    def years(self) -> list[int]:
        """Years with stored items, newest first; the fallback list if there are none."""
        try:
            years = self.store.distinct_years()
        except StorageError as exc:
            logger.warning("Could not read stored years: %s", exc)
            years = []
        if years:
            return sorted(years, reverse=True)
        return list(self.config.fallback_years)

    def create_item(self, data: dict[str, Any]) -> BudgetLineItem:
        """Validate *data* as a BudgetLineItem and store it.

        Raises:
            pydantic.ValidationError: If *data* is not a valid line item.
            StorageError: If the store cannot be written.
        """
        try:
            item = BudgetLineItem.model_validate(data)
        except ValidationError:
            logger.info("Rejected budget item: %s", data)
            raise
        return self.store.create(item)
