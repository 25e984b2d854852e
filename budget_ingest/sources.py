"""
Source locator for budget-ingest.

Finds the tables to parse for a requested year. Search order:

1. Local, pass 1 -- the two year-columns files (``ingresos.csv`` for
   income, ``gastos.csv`` for spending). If either exists, is detected as
   year-columns and yields at least one line item, this pass wins and
   nothing else is read. Files holding only subtotal or empty rows do not
   count.
2. Local, pass 2 -- traditional filenames in priority order
   (``{year}_liquidacion.csv``, ``{year}_presupuesto.csv``, ...,
   ``liquidacion.csv``). The first file with at least one row wins.
3. Remote -- only when both local passes found nothing. The base URL is
   built from the year and each candidate filename is probed in order with
   a bounded timeout. 404 is expected and logged at debug level; other
   HTTP or network errors are logged as warnings. Either way the next
   candidate is tried; there are no retries. The first response that
   parses into at least one row wins.

The locator never raises: any failure is logged and yields ``[]``, which
the aggregator turns into the baseline summary.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

import httpx
import pandas as pd

from budget_ingest.config import BudgetConfig
from budget_ingest.detect import detect_format
from budget_ingest.exceptions import ParsingError, SourceError, UnknownFormatError
from budget_ingest.layout_registry import Layout, load_all_layouts
from budget_ingest.models import Category, SourceTable
from budget_ingest.parsers.year_columns import YearColumnsParser

logger = logging.getLogger(__name__)

_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/csv,text/plain,*/*",
}

_ENCODINGS = ("utf-8-sig", "latin-1")


def read_csv_table(source: str | Path | io.StringIO, delimiter: str = ",") -> pd.DataFrame:
    """Read a CSV into an all-string DataFrame.

    Cells are kept as text (``dtype=str``, empty cells stay ``""``) so that
    number parsing can apply its own locale rules. Header names are
    stripped. Local files are decoded as UTF-8 (BOM tolerated), falling
    back to Latin-1.

    Raises:
        SourceError: If the content cannot be parsed as CSV.
    """
    encodings = _ENCODINGS if not isinstance(source, io.StringIO) else (None,)
    last_exc: Exception | None = None
    for encoding in encodings:
        if isinstance(source, io.StringIO):
            source.seek(0)
        try:
            df = pd.read_csv(
                source,
                sep=delimiter,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                encoding=encoding,
            )
        except UnicodeDecodeError as exc:
            last_exc = exc
            continue
        except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
            raise SourceError(f"Could not parse CSV {source}: {exc}") from exc
        df.columns = [str(c).strip() for c in df.columns]
        return df
    raise SourceError(f"Could not decode CSV {source}: {last_exc}") from last_exc


class SourceLocator:
    """Locates source tables for a year: local directory first, then the network.

    Args:
        config: The validated BudgetConfig.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
        layouts: Pre-loaded layouts (optional; loads from disk if None).
    """

    def __init__(
        self,
        config: BudgetConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        layouts: list[Layout] | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._layouts = layouts if layouts is not None else load_all_layouts()

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    async def locate(self, year: int) -> list[SourceTable]:
        """Return the tables for *year*, or ``[]`` if nothing usable was found."""
        try:
            tables = self.locate_local(year)
            if tables:
                return tables
            if not self.config.source.remote_enabled:
                logger.info("No local tables for %d and remote sources are disabled", year)
                return []
            return await self.fetch_remote(year)
        except Exception:
            logger.exception("Source lookup failed for year %d", year)
            return []

    def locate_local(self, year: int) -> list[SourceTable]:
        """Run both local passes; year-columns files take precedence."""
        tables = self._read_year_column_files()
        if tables:
            logger.info(
                "Using %d year-columns file(s): %s", len(tables), [t.name for t in tables]
            )
            return tables

        table = self._read_first_traditional_file(year)
        if table is not None:
            return [table]
        return []

    async def fetch_remote(self, year: int) -> list[SourceTable]:
        """Probe the remote candidate filenames for *year* in order."""
        source = self.config.source
        base_url = source.base_url_for(year)
        logger.info("No local tables found, probing %s", base_url)

        async with httpx.AsyncClient(
            timeout=source.timeout,
            headers=_HEADERS,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            for filename in source.remote_files:
                url = f"{base_url}{filename}"
                text = await self._probe(client, url)
                if not text:
                    continue
                try:
                    df = read_csv_table(io.StringIO(text.lstrip("\ufeff")), source.delimiter)
                except SourceError as exc:
                    logger.warning("  %s: %s", filename, exc)
                    continue
                if df.empty:
                    logger.info("  %s: downloaded but no records parsed", filename)
                    continue
                logger.info("Fetched %d record(s) from %s", len(df), url)
                return [
                    SourceTable(
                        name=url,
                        df=df,
                        category=self._category_for(filename),
                        origin="remote",
                    )
                ]

        logger.warning("Could not fetch a usable CSV for %d from %s", year, base_url)
        return []

    # -----------------------------------------------------------------
    # Private helpers
    # -----------------------------------------------------------------

    def _data_dir(self) -> Path:
        return Path(self.config.source.data_dir)

    def _category_for(self, filename: str) -> Category | None:
        files = self.config.source.year_column_files
        name = Path(filename).name
        if name == files.income:
            return Category.INCOME
        if name == files.spending:
            return Category.SPENDING
        return None

    def _read_local(self, path: Path) -> pd.DataFrame | None:
        if not path.is_file():
            return None
        logger.info("Reading local CSV file: %s", path)
        try:
            df = read_csv_table(path, self.config.source.delimiter)
        except (SourceError, OSError) as exc:
            logger.warning("Error reading local file %s: %s", path.name, exc)
            return None
        if df.empty:
            logger.info("  %s has no records", path.name)
            return None
        logger.info("  Read %d record(s) from %s", len(df), path.name)
        return df

    def _read_year_column_files(self) -> list[SourceTable]:
        files = self.config.source.year_column_files
        tables: list[SourceTable] = []
        for filename, category in ((files.income, Category.INCOME), (files.spending, Category.SPENDING)):
            df = self._read_local(self._data_dir() / filename)
            if df is None:
                continue
            try:
                _parser_cls, layout = detect_format(df, self._layouts, name=filename)
            except UnknownFormatError as exc:
                logger.warning("  %s is not a usable table: %s", filename, exc)
                continue
            if layout.format_orientation != "year_columns":
                logger.warning(
                    "  %s is laid out as '%s', not year-columns; ignoring it in this pass",
                    filename, layout.format_name,
                )
                continue
            table = SourceTable(name=filename, df=df, category=category)
            try:
                result = YearColumnsParser().parse(table, layout)
            except (ParsingError, ArithmeticError, ValueError) as exc:
                logger.warning("  %s could not be parsed: %s", filename, exc)
                continue
            if not result.items:
                logger.info("  %s holds no line items; ignoring it in this pass", filename)
                continue
            tables.append(table)
        return tables

    def _read_first_traditional_file(self, year: int) -> SourceTable | None:
        for template in self.config.source.local_files:
            filename = template.format(year=year)
            df = self._read_local(self._data_dir() / filename)
            if df is not None:
                return SourceTable(name=filename, df=df, category=self._category_for(filename))
        return None

    async def _probe(self, client: httpx.AsyncClient, url: str) -> str | None:
        logger.debug("  Trying: %s", url)
        try:
            response = await client.get(url)
            if response.status_code == 404:
                logger.debug("  %s: not found", url)
                return None
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "  %s: HTTP %d %s", url, exc.response.status_code, exc.response.reason_phrase
            )
            return None
        except httpx.RequestError as exc:
            logger.warning("  %s: no response (%s: %s)", url, type(exc).__name__, exc)
            return None
        return response.text or None
