"""
Persisted item store for budget-ingest.

The summary pipeline never needs a store. The service layer uses one for
manually submitted line items (create / list / distinct years). The store
is an injected capability; running without persistence is a configuration
choice (``NullStore``), not a runtime connectivity check.

Implementations:
- ``NullStore``: persists nothing; queries return nothing.
- ``ParquetStore``: all items in a single Parquet file. Reads use PyArrow
  column pruning and predicate pushdown (``filters``), so a year query only
  scans matching row groups. Amounts are stored as decimal strings to keep
  them exact.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Protocol, runtime_checkable

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from budget_ingest.config import BudgetConfig
from budget_ingest.exceptions import StorageError
from budget_ingest.models import BudgetLineItem, BudgetType, Category

logger = logging.getLogger(__name__)

_SCHEMA = pa.schema([
    ("year", pa.int64()),
    ("category", pa.string()),
    ("type", pa.string()),
    ("amount", pa.string()),
    ("description", pa.string()),
    ("source", pa.string()),
    ("created_at", pa.string()),
])


@runtime_checkable
class BudgetStore(Protocol):
    """Create / query / distinct capability over persisted line items."""

    def create(self, item: BudgetLineItem) -> BudgetLineItem: ...

    def query(
        self,
        year: int | None = None,
        category: Category | None = None,
        type: BudgetType | None = None,
    ) -> list[BudgetLineItem]: ...

    def distinct_years(self) -> list[int]: ...


class NullStore:
    """A store that persists nothing."""

    def create(self, item: BudgetLineItem) -> BudgetLineItem:
        logger.debug("Persistence disabled; item not stored: %s", item.description)
        return item

    def query(
        self,
        year: int | None = None,
        category: Category | None = None,
        type: BudgetType | None = None,
    ) -> list[BudgetLineItem]:
        return []

    def distinct_years(self) -> list[int]:
        return []


class ParquetStore:
    """Line items persisted in one Parquet file.

    Args:
        path: The Parquet file. Created (with parent directories) on the
            first ``create()``.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def create(self, item: BudgetLineItem) -> BudgetLineItem:
        row = pa.Table.from_pylist(
            [{
                "year": item.year,
                "category": item.category.value,
                "type": item.type.value,
                "amount": str(item.amount),
                "description": item.description,
                "source": item.source,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }],
            schema=_SCHEMA,
        )
        try:
            if self.path.exists():
                table = pa.concat_tables([pq.read_table(self.path), row])
            else:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                table = row
            pq.write_table(table, self.path)
        except (OSError, pa.ArrowException) as exc:
            raise StorageError(f"Failed to write {self.path.name}: {exc}") from exc
        logger.info(
            "Stored %s/%s item for %d in %s", item.category.value, item.type.value,
            item.year, self.path,
        )
        return item

    def query(
        self,
        year: int | None = None,
        category: Category | None = None,
        type: BudgetType | None = None,
    ) -> list[BudgetLineItem]:
        """Items matching every given filter, newest year first, then largest amount."""
        if not self.path.exists():
            return []

        filters: list[tuple[str, str, object]] = []
        if year is not None:
            filters.append(("year", "==", int(year)))
        if category is not None:
            filters.append(("category", "==", Category(category).value))
        if type is not None:
            filters.append(("type", "==", BudgetType(type).value))

        df = self._read(filters=filters or None)
        items = [
            BudgetLineItem(
                year=int(row["year"]),
                category=row["category"],
                type=row["type"],
                amount=Decimal(row["amount"]),
                description=row["description"] or "",
                source=row["source"] if isinstance(row["source"], str) else None,
            )
            for row in df.to_dict(orient="records")
        ]
        items.sort(key=lambda i: (-i.year, -i.amount))
        return items

    def distinct_years(self) -> list[int]:
        if not self.path.exists():
            return []
        df = self._read(columns=["year"])
        return sorted({int(y) for y in df["year"]}, reverse=True)

    def _read(
        self,
        columns: list[str] | None = None,
        filters: list[tuple[str, str, object]] | None = None,
    ) -> pd.DataFrame:
        try:
            table = pq.read_table(self.path, columns=columns, filters=filters)
        except (OSError, pa.ArrowException) as exc:
            raise StorageError(f"Failed to read {self.path.name}: {exc}") from exc
        return table.to_pandas()


def build_store(config: BudgetConfig) -> BudgetStore:
    """Instantiate the store selected by ``config.storage``."""
    if config.storage.backend == "parquet":
        logger.info("Using Parquet store at %s", config.storage.path)
        return ParquetStore(config.storage.path)
    return NullStore()
