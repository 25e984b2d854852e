"""
Custom exception hierarchy for budget-ingest.

Callers can catch specific exceptions (e.g., UnknownFormatError vs
ConfigValidationError) instead of generic ValueError/RuntimeError.
Most pipeline errors are caught inside the pipeline itself, which
degrades to the baseline summary; configuration and storage errors
propagate to the caller.
"""


class BudgetIngestError(Exception):
    """Base exception for all budget-ingest errors."""


class UnknownFormatError(BudgetIngestError):
    """Raised when a table matches neither the year-columns nor the traditional layout.

    The message includes the table's column names to aid debugging.
    """


class ParsingError(BudgetIngestError):
    """Raised when a parser encounters unexpected table structure.

    For example, a year-columns table without a known category, or a
    table with no concept column.
    """


class ConfigValidationError(BudgetIngestError):
    """Raised when budget.yaml is empty or internally inconsistent."""


class SourceError(BudgetIngestError):
    """Raised when a source table cannot be read.

    The locator catches this per file or per URL and moves on to the
    next candidate.
    """


class StorageError(BudgetIngestError):
    """Raised when the persisted item store cannot be read or written."""


class UnknownUnitError(BudgetIngestError):
    """Raised when a layout declares a unit with no known multiplier."""
