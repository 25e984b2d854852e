"""
Layout definitions sub-package for budget-ingest.

Contains YAML files that describe each known table layout: how to
recognise it and, for traditional tables, which column names may hold
the amount, concept and category. The loader module (layout_registry.py
in the parent package) reads these files at runtime.
"""
