"""
Configuration models and YAML I/O for budget-ingest.

This module defines the Pydantic models that map 1:1 to budget.yaml,
plus helper functions for loading, saving and building the default config.

Key models:
- BudgetConfig: Top-level config (source + storage + fallback years).
- SourceConfig: Local data directory, filename conventions and the remote
  endpoint template probed when no local file is usable.
- StorageConfig: Which persisted item store backs the service.

Key functions:
- load_config(path) -> BudgetConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.
- default_config(**overrides) -> BudgetConfig: Built-in defaults.

The unit of year-columns tables (millions of euros) is a property of the
layout, not of this config, and cannot be changed here.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from budget_ingest.exceptions import ConfigValidationError

logger = logging.getLogger(__name__)

DEFAULT_REMOTE_BASE_URL = "https://www.sepg.pap.hacienda.gob.es/Presup/PGE{year}/Liquidacion/csv/"


class YearColumnFiles(BaseModel):
    """The two year-columns files, one per category."""

    income: str = "ingresos.csv"
    spending: str = "gastos.csv"


class SourceConfig(BaseModel):
    """Where the locator looks for source tables."""

    data_dir: str = Field("data/csv", description="Directory holding local CSV extracts")
    delimiter: str = Field(",", min_length=1, max_length=1, description="CSV field delimiter")
    year_column_files: YearColumnFiles = Field(default_factory=YearColumnFiles)
    local_files: list[str] = Field(
        default_factory=lambda: [
            "{year}_liquidacion.csv",
            "{year}_liquidacion_presupuesto.csv",
            "{year}_presupuesto.csv",
            "{year}_gastos.csv",
            "{year}_ingresos.csv",
            "liquidacion.csv",
            "presupuesto.csv",
        ],
        description="Traditional-layout filenames in priority order; '{year}' is substituted",
    )
    remote_enabled: bool = Field(True, description="If False, never touch the network")
    remote_base_url: str = Field(
        DEFAULT_REMOTE_BASE_URL,
        description="Base URL template; must contain '{year}'",
    )
    remote_files: list[str] = Field(
        default_factory=lambda: [
            "liquidacion.csv",
            "liquidacion_presupuesto.csv",
            "presupuesto.csv",
            "gastos.csv",
            "ingresos.csv",
        ],
        description="Candidate filenames probed under the remote base URL, in order",
    )
    timeout: float = Field(15.0, gt=0, description="Per-request timeout in seconds")

    @field_validator("remote_base_url")
    @classmethod
    def _check_year_placeholder(cls, value: str) -> str:
        if "{year}" not in value:
            raise ValueError(
                f"remote_base_url must contain a '{{year}}' placeholder, got: {value}"
            )
        return value

    def base_url_for(self, year: int) -> str:
        url = self.remote_base_url.format(year=year)
        return url if url.endswith("/") else url + "/"


class StorageConfig(BaseModel):
    """Persisted item store settings."""

    backend: Literal["none", "parquet"] = Field(
        "none", description="'none' disables persistence; 'parquet' stores items in one file"
    )
    path: str | None = Field(None, description="Parquet file path (parquet backend only)")

    @model_validator(mode="after")
    def _check_path_for_parquet(self) -> StorageConfig:
        if self.backend == "parquet" and not self.path:
            raise ValueError("storage.path is required when storage.backend is 'parquet'")
        return self


class BudgetConfig(BaseModel):
    """Top-level configuration for budget-ingest.

    Maps 1:1 to budget.yaml.
    """

    source: SourceConfig = Field(default_factory=SourceConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    fallback_years: list[int] = Field(
        default_factory=lambda: [2024, 2023, 2022, 2021, 2020],
        description="Years advertised when the store holds none",
    )


def default_config(**source_overrides) -> BudgetConfig:
    """Build a BudgetConfig with built-in defaults.

    Keyword arguments override fields of ``SourceConfig`` (e.g.
    ``data_dir="inputs"``, ``remote_enabled=False``).
    """
    return BudgetConfig(source=SourceConfig(**source_overrides))


def load_config(path: str | Path) -> BudgetConfig:
    """Load and validate budget.yaml into a BudgetConfig model.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigValidationError: If the file is empty.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Config file is empty: {path}")
    logger.info("Loaded config from %s", path)
    return BudgetConfig.model_validate(raw)


def save_config(config: BudgetConfig, path: str | Path) -> None:
    """Serialize a BudgetConfig to YAML with a header comment."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        f.write("# budget-ingest configuration\n")
        f.write("# Edit this file to change source locations, filenames and storage.\n\n")
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved config to %s", path)
