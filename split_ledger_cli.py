"""
SplitMate command line
- Load a group snapshot (JSON), print member balances and the minimal set of
  transfers that settles them.
- Optionally import expenses from CSV, export them to CSV, or export an Excel report.

Run:
  splitmate group.json --export-excel report.xlsx

Dependencies:
  pip install openpyxl
"""
from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional

from config import default_settings_path, load_group, load_settings, save_group
from computations import plan_group
from csv_handler import export_expenses_to_csv, import_expenses_from_csv
from excel_export import export_excel
from exceptions import LedgerError
from utils import parse_date

logger = logging.getLogger(__name__)


def _date_arg(s: str):
    try:
        return parse_date(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{s}', expected YYYY-MM-DD") from None


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="splitmate",
        description="Compute group balances and settle all debts with minimal transfers"
    )
    p.add_argument('group', help="Path to the group snapshot JSON")
    p.add_argument('--start', type=_date_arg, help="Only expenses on or after this date (YYYY-MM-DD)")
    p.add_argument('--end', type=_date_arg, help="Only expenses on or before this date (YYYY-MM-DD)")
    p.add_argument('--settings', help="Settings JSON (default: settings.json in the app directory)")
    p.add_argument('--import-csv', metavar='PATH', help="Append expenses from CSV and save the group")
    p.add_argument('--replace', action='store_true', help="With --import-csv, replace instead of append")
    p.add_argument('--export-csv', metavar='PATH', help="Write the group's expenses to CSV")
    p.add_argument('--export-excel', metavar='PATH', help="Write an Excel report")
    p.add_argument('-v', '--verbose', action='store_true', help="Debug logging")
    return p


def run(args: argparse.Namespace) -> None:
    settings = load_settings(args.settings or default_settings_path())
    group = load_group(args.group)

    if args.import_csv:
        imported = import_expenses_from_csv(args.import_csv, group.id)
        if args.replace:
            group.expenses = imported
        else:
            group.expenses.extend(imported)
        save_group(group, args.group)
        logger.info("Imported %d expenses into %s", len(imported), args.group)

    report, outstanding, settlements = plan_group(
        group, args.start, args.end, settings.precision, settings.tolerance)

    print(f"{group.name} ({group.currency})")
    print("Balances:")
    for b in report.balances:
        print(f"  {b.member:<20} {b.net_amount:>12.2f}")
    if group.paid_settlements:
        print("Outstanding after paid settlements:")
        for b in outstanding:
            print(f"  {b.member:<20} {b.net_amount:>12.2f}")
    print("Settlements:")
    if not settlements:
        print("  all settled")
    for s in settlements:
        print(f"  {s.from_member} pays {s.to_member} {s.amount:.2f}")
    if not report.ok:
        print("Issues:")
        for issue in list(report.skipped) + list(report.warnings):
            print(f"  {issue.message}")

    if args.export_csv:
        export_expenses_to_csv(group.expenses, args.export_csv)
        logger.info("Exported %d expenses to %s", len(group.expenses), args.export_csv)
    if args.export_excel:
        export_excel(group, args.export_excel, args.start, args.end, settings)
        logger.info("Exported report to %s", args.export_excel)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        run(args)
    except (LedgerError, OSError) as ex:
        logger.error("%s", ex)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
