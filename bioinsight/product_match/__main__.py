"""
CLI entry point for the Product Match Engine.

Usage:
    python -m bioinsight.product_match --catalog catalog.json match --name "Gibco FBS 500ml"
    python -m bioinsight.product_match --catalog catalog.json match --rows purchases.csv --output-csv results.csv
    python -m bioinsight.product_match --catalog catalog.json alternatives P-100 --limit 5
    python -m bioinsight.product_match --catalog catalog.json recommend P-1 P-2 --budget 95000 --max-lead-time 7
"""

import argparse
import logging
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

from .adapters import load_purchase_rows
from .config import load_config
from .engine import ProductMatchEngine
from .models import OptimizationParams
from .report import export_csv, format_alternatives, format_console, format_recommendations


def _decimal(value: str) -> Decimal:
    try:
        return Decimal(value.replace(",", ""))
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {value}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="product_match",
        description="Product Match Engine - Match purchase rows, find substitutes, recommend offers",
    )

    parser.add_argument(
        "--catalog",
        required=True,
        metavar="FILE",
        help="Catalog snapshot (JSON with products and offers)",
    )
    parser.add_argument(
        "--config",
        default=None,
        metavar="FILE",
        help="Engine config file (default: module's engine_config.json)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log debug output",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    match = sub.add_parser("match", help="Match purchase rows to catalog products")
    source = match.add_mutually_exclusive_group(required=True)
    source.add_argument("--name", help="Item name of a single row")
    source.add_argument("--rows", metavar="FILE", help="Purchase rows file (CSV or JSON)")
    match.add_argument("--catalog-number", default=None, help="Catalog number of a single row")
    match.add_argument("--vendor", default=None, help="Vendor hint of a single row")
    match.add_argument("--output-csv", metavar="FILE", help="Output CSV file path")
    match.add_argument("--show-matched", action="store_true", help="Include catalog-number matches in console output")

    alternatives = sub.add_parser("alternatives", help="Find substitute products")
    alternatives.add_argument("product_id")
    alternatives.add_argument("--limit", type=int, default=None)

    recommend = sub.add_parser("recommend", help="Recommend offers under budget and lead-time limits")
    recommend.add_argument("product_ids", nargs="+")
    recommend.add_argument("--budget", type=_decimal, default=None)
    recommend.add_argument("--max-lead-time", type=int, default=None, metavar="DAYS")
    recommend.add_argument("--prefer", nargs="*", default=[], metavar="VENDOR", help="Preferred vendor ids")
    recommend.add_argument("--category", nargs="*", default=[], help="Allowed categories")
    recommend.add_argument("--exclude", nargs="*", default=[], metavar="PRODUCT", help="Product ids to skip")
    recommend.add_argument("--limit", type=int, default=None)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    catalog_path = Path(args.catalog)
    if not catalog_path.exists():
        print(f"Error: Catalog file not found: {catalog_path}", file=sys.stderr)
        return 1

    try:
        config = load_config(args.config)
        engine = ProductMatchEngine.from_json(catalog_path, config=config)

        if args.command == "match":
            return _run_match(engine, args)
        if args.command == "alternatives":
            results = engine.find_alternatives(args.product_id, args.limit)
            print(format_alternatives(args.product_id, results))
            return 0
        if args.command == "recommend":
            params = OptimizationParams(
                budget=args.budget,
                max_lead_time=args.max_lead_time,
                preferred_vendors=frozenset(args.prefer),
                required_categories=frozenset(args.category),
                exclude_product_ids=frozenset(args.exclude),
            )
            result = engine.recommend(args.product_ids, params, args.limit)
            print(format_recommendations(result))
            return 0

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 1


def _run_match(engine: ProductMatchEngine, args) -> int:
    if args.name is not None:
        result = engine.match(args.name, args.catalog_number, args.vendor)
        print(f"{result.tier.value} {result.confidence:.2f} {result.product_id or '-'}  {result.reason}")
        return 0

    records = load_purchase_rows(args.rows)
    results = engine.match_records(records)
    print(format_console(results, show_matched=args.show_matched))

    if args.output_csv:
        output_path = Path(args.output_csv)
        with open(output_path, "w", newline="") as f:
            export_csv(results, output=f)
        print(f"\nCSV exported to: {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
