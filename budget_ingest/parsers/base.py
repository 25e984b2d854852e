"""
Base parser protocol / ABC for budget-ingest.

All layout-specific parsers implement this interface. The contract is:
1. parse() takes a SourceTable, the matched Layout and the requested year,
   and returns a ParseResult.
2. ParseResult carries the normalized line items plus row statistics
   (how many rows were read, how many were skipped as noise or failures).

Parsers never raise for a bad row; they skip it and count it.
They may raise ParsingError when the table as a whole is unusable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pandas as pd

from budget_ingest.models import BudgetLineItem, RawRow, SourceTable

if TYPE_CHECKING:
    from budget_ingest.layout_registry import Layout


@dataclass
class ParseResult:
    """Standardized output from any parser.

    Attributes:
        items: Normalized line items, every one with ``amount > 0``.
        format_name: The layout used to parse the table.
        rows_total: Number of data rows in the table.
        rows_skipped: Rows that produced no item (noise rows, unparseable
            or non-positive amounts, resolution failures).
    """
    items: list[BudgetLineItem] = field(default_factory=list)
    format_name: str = ""
    rows_total: int = 0
    rows_skipped: int = 0


def iter_raw_rows(df: pd.DataFrame, source: str = "") -> list[RawRow]:
    """Convert an all-string DataFrame into ``RawRow`` records."""
    columns = [str(c) for c in df.columns]
    rows: list[RawRow] = []
    for index, values in enumerate(df.itertuples(index=False, name=None)):
        cells = {
            col: ("" if pd.isna(value) else str(value).strip())
            for col, value in zip(columns, values)
        }
        rows.append(RawRow(cells=cells, source=source, index=index))
    return rows


class BaseParser(ABC):
    """Abstract base class for table-layout parsers."""

    @abstractmethod
    def parse(
        self,
        table: SourceTable,
        layout: Layout,
        year: int | None = None,
    ) -> ParseResult:
        """Parse a located source table into line items.

        Args:
            table: The located table (all-string DataFrame + provenance).
            layout: The matched Layout definition.
            year: The requested year. Traditional tables carry no year of
                their own and need it; year-columns tables ignore it.

        Returns:
            ParseResult with normalized items and row statistics.

        Raises:
            ParsingError: If the table structure is unusable.
        """
