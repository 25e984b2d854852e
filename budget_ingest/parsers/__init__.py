"""
Parsers sub-package for budget-ingest.

Contains format-specific parsers that convert a located CSV table into
normalized ``BudgetLineItem`` objects.

Design: Strategy Pattern
- base.py defines the BaseParser ABC (protocol).
- year_columns.py implements YearColumnsParser for extracts with one
  amount column per year (headers like ``2023`` or ``2024-P``).
- traditional.py implements TraditionalParser for row-per-item extracts
  with amount / concept / category columns.

Each parser receives a Layout object from the detector, which provides
the header pattern, candidate column names and unit for that format.

The format detector (detect.py) selects the parser + layout at runtime.
"""
