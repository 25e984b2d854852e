"""
Demo script: print yearly budget summaries via the public API.

Usage:
    uv run python scripts/run_summary.py                     # current defaults, 2024
    uv run python scripts/run_summary.py 2023 2024           # several years
    uv run python scripts/run_summary.py 2024 --offline      # never touch the network
    uv run python scripts/run_summary.py 2024 --config budget.yaml
    uv run python scripts/run_summary.py 2024 --data-dir inputs/csv

Each summary is printed as JSON. When neither the local data directory nor
the remote endpoint yields a usable table, the baseline summary is printed
(``"dataSource": "hardcoded"``).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("run_summary")


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print yearly budget summaries as JSON.")
    parser.add_argument("years", nargs="*", type=int, default=[2024], help="Four-digit years")
    parser.add_argument("--config", help="Path to budget.yaml")
    parser.add_argument("--data-dir", help="Override source.data_dir")
    parser.add_argument("--offline", action="store_true", help="Disable remote sources")
    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> None:
    from budget_ingest import BudgetService
    from budget_ingest.config import default_config, load_config

    args = _parse_args(argv)
    config = load_config(args.config) if args.config else default_config()
    if args.data_dir:
        config.source.data_dir = args.data_dir
    if args.offline:
        config.source.remote_enabled = False

    service = BudgetService(config)
    for year in args.years:
        log.info("=" * 70)
        log.info("Year %d  (data_dir=%s, remote=%s)", year,
                 config.source.data_dir, config.source.remote_enabled)
        log.info("=" * 70)
        summary = asyncio.run(service.summary(year))
        print(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False))

    log.info("All years processed.")


if __name__ == "__main__":
    main()
