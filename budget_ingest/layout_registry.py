"""
Layout loader for budget-ingest.

Loads layout YAML files from budget_ingest/layouts/ and provides
structured access via Pydantic models. Each layout defines:
- format_name: unique identifier (e.g., "year_columns")
- format_orientation: year_columns | traditional
- detection: rules for identifying whether a table matches this layout
- unit: the unit amounts are expressed in (scaled to euros on parse)
- fields: candidate column names per field (traditional only)
- skip_rows: noise-row rules (year-columns only)

Keeping candidate lists in YAML means a new publication's column names
can be supported by editing a file, without code changes.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from budget_ingest.transforms.units import UNIT_MULTIPLIERS

logger = logging.getLogger(__name__)

# Directory containing layout YAML files (sibling package)
_LAYOUTS_DIR = Path(__file__).parent / "layouts"

# Detection priority: year_columns -> traditional
_ORIENTATION_PRIORITY = {"year_columns": 0, "traditional": 1}


class DetectionConfig(BaseModel):
    """Detection rules for a layout."""
    year_header_pattern: str | None = None
    min_year_columns: int = 1
    require_any_field: bool = False

    @field_validator("year_header_pattern")
    @classmethod
    def _check_pattern(cls, value: str | None) -> str | None:
        if value is not None:
            re.compile(value)
        return value


class FieldCandidates(BaseModel):
    """Candidate column names for each traditional-table field."""
    amount: list[str] = Field(default_factory=list)
    concept: list[str] = Field(default_factory=list)
    category: list[str] = Field(default_factory=list)


class SkipRowsConfig(BaseModel):
    """Rules for discarding subtotal / noise rows in year-columns tables."""
    contains: list[str] = Field(default_factory=lambda: ["total"])
    min_concept_length: int = 3


class Layout(BaseModel):
    """A complete layout definition loaded from YAML."""
    format_name: str
    format_orientation: Literal["year_columns", "traditional"]
    description: str = ""
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    unit: str = "unidades"
    fields: FieldCandidates = Field(default_factory=FieldCandidates)
    skip_rows: SkipRowsConfig = Field(default_factory=SkipRowsConfig)

    @field_validator("unit")
    @classmethod
    def _check_unit(cls, value: str) -> str:
        if value not in UNIT_MULTIPLIERS:
            raise ValueError(
                f"Unknown unit '{value}'. Supported units: {sorted(UNIT_MULTIPLIERS)}"
            )
        return value

    @property
    def priority(self) -> int:
        """Lower number = checked first during detection."""
        return _ORIENTATION_PRIORITY.get(self.format_orientation, 99)

    @property
    def year_header_re(self) -> re.Pattern[str] | None:
        pattern = self.detection.year_header_pattern
        return re.compile(pattern) if pattern else None


def load_layout(path: Path) -> Layout:
    """Load a single layout YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    return Layout.model_validate(raw)


def load_all_layouts(layouts_dir: Path | None = None) -> list[Layout]:
    """Load all layout YAML files, sorted by detection priority.

    Args:
        layouts_dir: Directory to scan for .yaml files. Defaults to
            the built-in layouts/ directory.

    Returns:
        List of Layout objects, year-columns layouts first.
    """
    layouts_dir = layouts_dir or _LAYOUTS_DIR
    layouts: list[Layout] = []
    for yaml_path in sorted(layouts_dir.glob("*.yaml")):
        try:
            layout = load_layout(yaml_path)
            layouts.append(layout)
            logger.debug("Loaded layout: %s from %s", layout.format_name, yaml_path)
        except Exception as e:
            logger.warning("Failed to load layout from %s: %s", yaml_path, e)
    layouts.sort(key=lambda l: l.priority)
    logger.debug("Loaded %d layouts", len(layouts))
    return layouts

