"""
Shared test fixtures and sample tables for budget-ingest tests.

Sample CSV strings are defined here as module-level constants so the unit
and integration tests exercise the same shapes of input. Fixtures write
them into a temporary data directory and build a config pointing at it.
"""

from __future__ import annotations

import io

import pandas as pd
import pytest

from budget_ingest.config import BudgetConfig, default_config
from budget_ingest.layout_registry import load_all_layouts

# ---------------------------------------------------------------------------
# Sample tables -- edit here if the expected input shapes change
# ---------------------------------------------------------------------------
INCOME_YEAR_COLUMNS_CSV = """\
Concepto,2023,2024-P
Impuestos directos,45000.00,50000.00
IVA,80000.50,82000.00
Cotizaciones sociales,120000.00,125000.00
Total ingresos,245000.50,257000.00
"""

SPENDING_YEAR_COLUMNS_CSV = """\
Concepto,2023,2024-P
Pensiones contributivas,140000.00,150000.00
Educación,50000.00,52000.00
Intereses de la deuda,31000.00,
Total gastos,221000.00,202000.00
"""

TRADITIONAL_CSV = """\
Tipo,Concepto,Importe
Ingreso,IRPF,"95.000.000.000,00"
Ingreso,Impuesto sobre Sociedades,"28.000.000.000,00"
Gasto,Pensiones contributivas,"140.000.000.000,00"
Gasto,Defensa,"12.000.000.000,00"
Gasto,Partida anulada,0
"""

SUBTOTALS_ONLY_CSV = """\
Concepto,2023,2024
Total ingresos,1.0,2.0
"""

UNKNOWN_CSV = """\
col_a,col_b,col_c
1,2,3
"""


def frame(text: str) -> pd.DataFrame:
    """Read a sample CSV string the way the locator does (all cells as text)."""
    return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: end-to-end tests through the public API",
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def layouts():
    return load_all_layouts()


@pytest.fixture
def layouts_by_name(layouts):
    return {layout.format_name: layout for layout in layouts}


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "csv"
    path.mkdir()
    return path


@pytest.fixture
def offline_config(data_dir) -> BudgetConfig:
    """Config reading from an empty temp data dir with the network disabled."""
    return default_config(data_dir=str(data_dir), remote_enabled=False)
