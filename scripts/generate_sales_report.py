"""
CRM Sales Metrics — Report Generator
======================================
Computes one report view from the command line and prints it (or writes it)
as JSON. Reads the live store by default, or a JSON export with --from-json.

Usage:
    python -m scripts.generate_sales_report --seller team --start 2024-01-01 --end 2024-01-31
    python -m scripts.generate_sales_report --view ranking --metric calls --start 2024-01-01 --end 2024-01-31
    python -m scripts.generate_sales_report --view categories --from-json data/export.json
    python -m scripts.generate_sales_report --seller Ana --start 2024-01-01 --end 2024-01-31 --output out/ana.json
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

from scripts.lib.dates import DateWindow
from scripts.lib.errors import SalesMetricsError
from scripts.lib.logger import set_level, setup_logger
from scripts.lib.utils import write_json_report
from scripts.metrics.composer import ReportComposer

logger = setup_logger("generate_sales_report")

VIEWS = ("dashboard", "metrics", "historical", "ranking", "categories")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Generate a sales metrics report as JSON")
    parser.add_argument("--view", choices=VIEWS, default="dashboard", help="Report view. Default: dashboard")
    parser.add_argument("--seller", default="team", help="Seller name or 'team'. Default: team")
    parser.add_argument("--metric", default="sales", help="Metric for historical/ranking. Default: sales")
    parser.add_argument("--start", help="Window start date (YYYY-MM-DD)")
    parser.add_argument("--end", help="Window end date (YYYY-MM-DD), whole day included")
    parser.add_argument(
        "--policy",
        choices=("current-state", "event-log"),
        help="Stage counting policy. Default: STAGE_COUNTING_POLICY",
    )
    parser.add_argument("--from-json", dest="from_json", help="Read leads from a JSON export instead of Supabase")
    parser.add_argument("--output", help="Write the report to this file instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def build_composer(args: argparse.Namespace) -> ReportComposer:
    """Composer over a JSON export or the live store (fail-fast connect)."""
    if args.from_json:
        from scripts.metrics.repository import load_export
        repository, directory = load_export(args.from_json)
    else:
        from scripts.lib.supabase_client import init_client
        from scripts.metrics.repository import SupabaseLeadRepository, SupabaseSellerDirectory
        init_client()
        repository, directory = SupabaseLeadRepository(), SupabaseSellerDirectory()
    return ReportComposer(repository, directory, policy=args.policy)


async def run_view(composer: ReportComposer, args: argparse.Namespace):
    window = DateWindow.from_strings(args.start, args.end)
    if args.view == "metrics":
        return await composer.seller_metrics(args.seller, window)
    if args.view == "historical":
        return await composer.historical_series(args.metric, window, args.seller)
    if args.view == "ranking":
        return await composer.ranking(args.metric, window)
    if args.view == "categories":
        return await composer.category_breakdown(window)
    return await composer.dashboard(args.seller, window)


def _jsonable(result):
    if isinstance(result, list):
        return [item.model_dump(mode="json", by_alias=True) for item in result]
    return result.model_dump(mode="json", by_alias=True)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code."""
    args = _parse_args(argv)
    if args.verbose:
        set_level("DEBUG")
    logger.info("Sales report: view=%s seller=%s window=%s..%s", args.view, args.seller, args.start, args.end)

    try:
        composer = build_composer(args)
        report = _jsonable(asyncio.run(run_view(composer, args)))
    except SalesMetricsError as e:
        logger.error("Report generation failed: %s", e)
        return 1

    if args.output:
        try:
            target = write_json_report(report, args.output)
        except OSError as e:
            logger.error("Cannot write report to %s: %s", args.output, e)
            return 1
        logger.info("Report written to %s", target)
    else:
        print(json.dumps(report, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
