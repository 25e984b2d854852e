"""
Transforms sub-package for budget-ingest.

Small, independently testable normalization steps used by the parsers:
  - numbers.py: Parse locale-formatted amount strings into Decimals.
  - units.py: Scale amounts from a declared unit (miles, millones, ...)
    to base currency units.
  - classify.py: Map a free-text concept to a budget type via ordered
    keyword rules.
"""
