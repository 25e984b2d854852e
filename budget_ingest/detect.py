"""
Format detection for budget-ingest.

Uses the layout YAML files for detection instead of ad hoc checks in the
parsers. Layouts are tested in priority order: year_columns -> traditional.

Design: Strategy Pattern
- detect_format() returns a (parser_class, layout) tuple.
- The parser class is selected by the layout's format_orientation.

Detection algorithm:
1. Load all layout YAML files from budget_ingest/layouts/.
2. For each layout (ordered by priority):
   a. year_columns: at least ``min_year_columns`` headers after the concept
      column match ``year_header_pattern``.
   b. traditional: if ``require_any_field`` is set, at least one of the
      amount / concept / category fields resolves to a column.
3. Fallback: raise UnknownFormatError.
"""

from __future__ import annotations

import logging

import pandas as pd

from budget_ingest.exceptions import UnknownFormatError
from budget_ingest.layout_registry import Layout, load_all_layouts
from budget_ingest.parsers.base import BaseParser
from budget_ingest.parsers.traditional import TraditionalParser, resolve_columns
from budget_ingest.parsers.year_columns import (
    YearColumnsParser,
    find_concept_column,
    find_year_columns,
)

logger = logging.getLogger(__name__)

# Maps format_orientation to parser class
_PARSER_MAP: dict[str, type[BaseParser]] = {
    "year_columns": YearColumnsParser,
    "traditional": TraditionalParser,
}


def _check_layout(layout: Layout, columns: list[str]) -> bool:
    """Test whether a table's header matches a layout's detection rules."""
    if layout.format_orientation == "year_columns":
        pattern = layout.year_header_re
        if pattern is None:
            return False
        concept_col = find_concept_column(columns, pattern)
        if concept_col is None:
            return False
        year_cols = [col for col, _ in find_year_columns(columns, pattern) if col != concept_col]
        return len(year_cols) >= layout.detection.min_year_columns

    if layout.detection.require_any_field:
        return not resolve_columns(columns, layout.fields).is_empty()
    return True


def detect_format(
    df: pd.DataFrame,
    layouts: list[Layout] | None = None,
    name: str = "<table>",
) -> tuple[type[BaseParser], Layout]:
    """Detect the layout of a parsed table.

    Args:
        df: The table as read by the locator (header row = column names).
        layouts: Pre-loaded layouts (optional; loads from disk if None).
        name: Table name used in log and error messages.

    Returns:
        Tuple of (parser_class, matched_layout).

    Raises:
        UnknownFormatError: If the table is empty or matches no layout.
    """
    if layouts is None:
        layouts = load_all_layouts()

    if not layouts:
        raise UnknownFormatError("No layout YAML files found. Cannot detect format.")

    columns = [str(c).strip() for c in df.columns]
    if not columns or df.empty:
        raise UnknownFormatError(f"Table is empty: {name}")

    for layout in layouts:
        if _check_layout(layout, columns):
            parser_cls = _PARSER_MAP.get(layout.format_orientation)
            if parser_cls is None:
                logger.warning(
                    "Layout '%s' matched but no parser for '%s'",
                    layout.format_name, layout.format_orientation,
                )
                continue
            logger.info("Detected format '%s' for %s", layout.format_name, name)
            return parser_cls, layout

    raise UnknownFormatError(
        f"Could not detect format for: {name}\n"
        f"Tried {len(layouts)} layouts, none matched.\n"
        f"Columns: {columns[:20]}"
    )
