"""Command line for Retail Core.

Usage
-----
Enrich the fact table from the raw CSVs in <data-root>/a_raw/sales/batch:
    retail-core --data-root ./data enrich

Run a report (enriches first if needed) and print it:
    retail-core --data-root ./data report category_revenue

Also copy the report to a CSV of your choice:
    retail-core report avg_rating_by_day -o ratings.csv

List the report catalog / check raw data quality:
    retail-core list
    retail-core --data-root ./data qa

--data-root defaults to $RETAIL_DATA_ROOT, then ./data.

Exit codes:
    0 on success
    1 when input files are missing
    2 on schema, data or configuration errors
    130 when interrupted
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Sequence

import pandas as pd

from retail_core.config import DataPaths
from retail_core.exceptions import RetailCoreError
from retail_core.qa import run_sales_qa
from retail_core.sales import raw as sales_raw
from retail_core.sales.api import enrich, get_report
from retail_core.sales.marts import as_frame
from retail_core.sales.reports import REPORTS
from retail_core.utils import format_duration

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="retail-core",
        description="Enrich retail sales transactions and run aggregate reports.",
    )
    p.add_argument(
        "--data-root",
        default=None,
        help="Root of the data layers (default: $RETAIL_DATA_ROOT or ./data).",
    )
    p.add_argument(
        "--verbose",
        "--debug",
        action="store_true",
        dest="verbose",
        help="Verbose/debug logging output.",
    )
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Less logging output.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    enrich_p = sub.add_parser("enrich", help="Backfill derived columns onto the fact table.")
    enrich_p.add_argument(
        "--force",
        action="store_true",
        help="Re-run enrichment even if the fact table is current.",
    )

    report_p = sub.add_parser("report", help="Run one report from the catalog.")
    report_p.add_argument("name", help="Report name (see `retail-core list`).")
    report_p.add_argument(
        "--refresh",
        action="store_true",
        help="Re-run enrichment before reporting.",
    )
    report_p.add_argument(
        "-o",
        "--output",
        default=None,
        help="Also write the report to this CSV path.",
    )

    sub.add_parser("list", help="List report names.")
    sub.add_parser("qa", help="Run data quality checks over the raw transactions.")
    return p


def _print_frame(frame: pd.DataFrame) -> None:
    if frame.empty:
        print("(no rows)")
    else:
        print(frame.to_string(index=False))


def _run(args: argparse.Namespace) -> int:
    if args.command == "list":
        for spec in REPORTS.values():
            print(f"{spec.name:<28} {spec.description}")
        return 0

    paths = DataPaths.from_env(args.data_root)

    if args.command == "qa":
        result = run_sales_qa(sales_raw.load(paths))
        for key, value in result.summary.items():
            if key != "errors":
                print(f"{key}: {value}")
        for error in result.summary["errors"]:
            print(f"ERROR: {error}")
        return 0 if result.ok else 2

    started = time.perf_counter()

    if args.command == "enrich":
        fact = enrich(paths, force=args.force)
        logger.info(
            "Enrichment finished: %d rows in %s",
            len(fact),
            format_duration(time.perf_counter() - started),
        )
        print(f"Enriched fact table: {paths.fact_sales} ({len(fact)} rows)")
        return 0

    result = get_report(paths, args.name, refresh=args.refresh)
    frame = as_frame(args.name, result)
    if args.output:
        frame.to_csv(args.output, index=False, encoding="utf-8")
        print(f"Wrote: {args.output}")
    _print_frame(frame)
    logger.debug("Report %s took %s", args.name, format_duration(time.perf_counter() - started))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s: %(message)s",
    )

    try:
        return _run(args)
    except RetailCoreError as e:
        logger.debug("Failed", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
