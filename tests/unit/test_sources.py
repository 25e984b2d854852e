"""
Unit tests for the source locator (budget_ingest.sources).

Local lookups use a temporary data directory. Remote lookups run against
``httpx.MockTransport`` so no request leaves the process.
"""

from __future__ import annotations

import asyncio
import io

import httpx
import pytest

from budget_ingest.config import default_config
from budget_ingest.exceptions import SourceError
from budget_ingest.models import Category
from budget_ingest.sources import SourceLocator, read_csv_table
from conftest import (
    INCOME_YEAR_COLUMNS_CSV,
    SPENDING_YEAR_COLUMNS_CSV,
    SUBTOTALS_ONLY_CSV,
    TRADITIONAL_CSV,
)

_BASE = "https://budget.example.org/PGE{year}/"


def _remote_config(data_dir, **overrides):
    return default_config(data_dir=str(data_dir), remote_base_url=_BASE, **overrides)


def _transport(routes: dict[str, httpx.Response], seen: list[str] | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(str(request.url))
        return routes.get(str(request.url), httpx.Response(404))
    return httpx.MockTransport(handler)


# ---------------------------------------------------------------------------
# read_csv_table
# ---------------------------------------------------------------------------

class TestReadCsvTable:
    def test_cells_stay_text(self, tmp_path):
        path = tmp_path / "t.csv"
        path.write_text("Concepto,Importe\nIVA,001\n,\n", encoding="utf-8")
        df = read_csv_table(path)
        assert df.loc[0, "Importe"] == "001"
        assert df.loc[1, "Concepto"] == ""

    def test_bom_and_header_whitespace(self, tmp_path):
        path = tmp_path / "t.csv"
        path.write_text("\ufeff Concepto ,Importe\nIVA,1\n", encoding="utf-8")
        assert list(read_csv_table(path).columns) == ["Concepto", "Importe"]

    def test_latin1_fallback(self, tmp_path):
        path = tmp_path / "t.csv"
        path.write_bytes("Concepto,Importe\nEducación,1\n".encode("latin-1"))
        assert read_csv_table(path).loc[0, "Concepto"] == "Educación"

    def test_custom_delimiter(self):
        df = read_csv_table(io.StringIO("Concepto;Importe\nIVA;1,5\n"), delimiter=";")
        assert df.loc[0, "Importe"] == "1,5"

    def test_empty_content_raises(self):
        with pytest.raises(SourceError):
            read_csv_table(io.StringIO(""))


# ---------------------------------------------------------------------------
# Local passes
# ---------------------------------------------------------------------------

class TestLocateLocal:
    def test_year_columns_files_win(self, data_dir, offline_config):
        (data_dir / "ingresos.csv").write_text(INCOME_YEAR_COLUMNS_CSV, encoding="utf-8")
        (data_dir / "gastos.csv").write_text(SPENDING_YEAR_COLUMNS_CSV, encoding="utf-8")
        (data_dir / "2024_liquidacion.csv").write_text(TRADITIONAL_CSV, encoding="utf-8")

        tables = SourceLocator(offline_config).locate_local(2024)
        assert [(t.name, t.category) for t in tables] == [
            ("ingresos.csv", Category.INCOME),
            ("gastos.csv", Category.SPENDING),
        ]

    def test_single_year_columns_file_is_enough(self, data_dir, offline_config):
        (data_dir / "gastos.csv").write_text(SPENDING_YEAR_COLUMNS_CSV, encoding="utf-8")
        tables = SourceLocator(offline_config).locate_local(2024)
        assert [t.category for t in tables] == [Category.SPENDING]

    def test_traditional_file_in_year_columns_slot_is_ignored(self, data_dir, offline_config):
        (data_dir / "ingresos.csv").write_text(TRADITIONAL_CSV, encoding="utf-8")
        (data_dir / "presupuesto.csv").write_text(TRADITIONAL_CSV, encoding="utf-8")
        tables = SourceLocator(offline_config).locate_local(2024)
        assert [t.name for t in tables] == ["presupuesto.csv"]

    def test_year_columns_file_without_items_falls_through(self, data_dir, offline_config):
        (data_dir / "ingresos.csv").write_text(SUBTOTALS_ONLY_CSV, encoding="utf-8")
        (data_dir / "2024_liquidacion.csv").write_text(TRADITIONAL_CSV, encoding="utf-8")
        tables = SourceLocator(offline_config).locate_local(2024)
        assert [t.name for t in tables] == ["2024_liquidacion.csv"]

    def test_only_year_columns_files_with_items_are_kept(self, data_dir, offline_config):
        (data_dir / "ingresos.csv").write_text(SUBTOTALS_ONLY_CSV, encoding="utf-8")
        (data_dir / "gastos.csv").write_text(SPENDING_YEAR_COLUMNS_CSV, encoding="utf-8")
        tables = SourceLocator(offline_config).locate_local(2024)
        assert [t.name for t in tables] == ["gastos.csv"]

    def test_traditional_priority_order(self, data_dir, offline_config):
        (data_dir / "liquidacion.csv").write_text(TRADITIONAL_CSV, encoding="utf-8")
        (data_dir / "2024_presupuesto.csv").write_text(TRADITIONAL_CSV, encoding="utf-8")
        tables = SourceLocator(offline_config).locate_local(2024)
        assert [t.name for t in tables] == ["2024_presupuesto.csv"]
        assert tables[0].origin == "local"

    def test_header_only_file_is_skipped(self, data_dir, offline_config):
        (data_dir / "2024_liquidacion.csv").write_text("Tipo,Concepto,Importe\n", encoding="utf-8")
        (data_dir / "presupuesto.csv").write_text(TRADITIONAL_CSV, encoding="utf-8")
        tables = SourceLocator(offline_config).locate_local(2024)
        assert [t.name for t in tables] == ["presupuesto.csv"]

    def test_nothing_found(self, offline_config):
        assert SourceLocator(offline_config).locate_local(2024) == []


# ---------------------------------------------------------------------------
# Remote fallback
# ---------------------------------------------------------------------------

class TestFetchRemote:
    def test_first_usable_candidate_wins(self, data_dir):
        seen: list[str] = []
        routes = {
            "https://budget.example.org/PGE2024/presupuesto.csv": httpx.Response(
                200, text="\ufeff" + TRADITIONAL_CSV
            ),
            "https://budget.example.org/PGE2024/gastos.csv": httpx.Response(
                200, text=SPENDING_YEAR_COLUMNS_CSV
            ),
        }
        locator = SourceLocator(_remote_config(data_dir), transport=_transport(routes, seen))

        tables = asyncio.run(locator.locate(2024))

        assert len(tables) == 1
        assert tables[0].name.endswith("/PGE2024/presupuesto.csv")
        assert tables[0].origin == "remote"
        assert list(tables[0].df.columns) == ["Tipo", "Concepto", "Importe"]
        # liquidacion.csv and liquidacion_presupuesto.csv were probed first
        assert len(seen) == 3

    def test_server_errors_move_to_next_candidate(self, data_dir):
        routes = {
            "https://budget.example.org/PGE2024/liquidacion.csv": httpx.Response(500),
            "https://budget.example.org/PGE2024/liquidacion_presupuesto.csv": httpx.Response(
                200, text=""
            ),
            "https://budget.example.org/PGE2024/ingresos.csv": httpx.Response(
                200, text=INCOME_YEAR_COLUMNS_CSV
            ),
        }
        locator = SourceLocator(_remote_config(data_dir), transport=_transport(routes))
        tables = asyncio.run(locator.locate(2024))
        assert len(tables) == 1
        assert tables[0].category is Category.INCOME

    def test_network_error_yields_nothing(self, data_dir):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        locator = SourceLocator(_remote_config(data_dir), transport=httpx.MockTransport(handler))
        assert asyncio.run(locator.locate(2024)) == []

    def test_all_missing_yields_nothing(self, data_dir):
        locator = SourceLocator(_remote_config(data_dir), transport=_transport({}))
        assert asyncio.run(locator.locate(2024)) == []

    def test_local_data_skips_network(self, data_dir):
        (data_dir / "presupuesto.csv").write_text(TRADITIONAL_CSV, encoding="utf-8")
        seen: list[str] = []
        locator = SourceLocator(_remote_config(data_dir), transport=_transport({}, seen))
        tables = asyncio.run(locator.locate(2024))
        assert [t.name for t in tables] == ["presupuesto.csv"]
        assert seen == []

    def test_remote_disabled(self, data_dir):
        seen: list[str] = []
        config = _remote_config(data_dir, remote_enabled=False)
        locator = SourceLocator(config, transport=_transport({}, seen))
        assert asyncio.run(locator.locate(2024)) == []
        assert seen == []
