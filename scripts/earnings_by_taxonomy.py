#!/usr/bin/env python3
"""
Earnings by Taxonomy Report Script

Prints sales and earnings per taxonomy term for a report range,
parents first with their children indented beneath them.

Usage:
    python scripts/earnings_by_taxonomy.py                      # default range
    python scripts/earnings_by_taxonomy.py --range last_month
    python scripts/earnings_by_taxonomy.py --range other --start 2026-01-01 --end 2026-03-31
    python scripts/earnings_by_taxonomy.py --json               # machine-readable output
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse
import json
from datetime import date

from taxonomy_reports.config import get_settings
from taxonomy_reports.models.base import SessionLocal, init_db
from taxonomy_reports.services.taxonomy_earnings_service import TaxonomyEarningsService
from taxonomy_reports.utils.date_ranges import RANGE_NAMES, InvalidDateRange, parse_dates_for_range
from taxonomy_reports.utils.helpers import format_amount, format_currency


def run_report(range_name, start=None, end=None, as_json=False):
    settings = get_settings()
    date_range = parse_dates_for_range(range_name, start=start, end=end)

    init_db()
    db = SessionLocal()
    try:
        terms = TaxonomyEarningsService(db).compute(date_range)
    finally:
        db.close()

    if as_json:
        print(json.dumps({
            "period": date_range.to_dict(),
            "data": [t.to_dict() for t in terms],
        }, indent=2))
        return

    print(f"\nEarnings by taxonomy ({date_range.range_name}: "
          f"{date_range.start or '-'} -> {date_range.end or '-'})\n")
    if not terms:
        print("No taxonomies found.")
        return

    print(f"{'Taxonomy':<32} {'Sales':>8} {'Earnings':>14} {'Avg Sales':>10} {'Avg Earnings':>14}")
    print("-" * 82)
    for t in terms:
        name = f"  — {t.name}" if t.parent else t.name
        print(
            f"{name[:32]:<32} {t.sales:>8} "
            f"{format_currency(t.earnings, settings.currency):>14} "
            f"{format_amount(t.average_sales):>10} "
            f"{format_currency(t.average_earnings, settings.currency):>14}"
        )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Earnings by taxonomy report")
    parser.add_argument("--range", dest="range_name", choices=RANGE_NAMES,
                        default=get_settings().default_report_range)
    parser.add_argument("--start", type=date.fromisoformat, default=None, help="YYYY-MM-DD (with --range other)")
    parser.add_argument("--end", type=date.fromisoformat, default=None, help="YYYY-MM-DD (with --range other)")
    parser.add_argument("--json", action="store_true", help="JSON output")
    args = parser.parse_args()

    try:
        run_report(args.range_name, args.start, args.end, as_json=args.json)
    except InvalidDateRange as e:
        parser.error(str(e))
