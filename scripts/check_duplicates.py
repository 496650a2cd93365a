"""
Find addresses listed more than once in a holder export or a report section.

Usage:
    python scripts/check_duplicates.py --export holders.csv
    python scripts/check_duplicates.py --report run9.txt --contract 0x48b6...
"""

import argparse
import os
import sys
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from insight_bench.loaders.snapshots import read_holder_export, read_report_section
from insight_bench.reporting import print_banner, print_rows
from insight_bench.transformers.snapshots import find_duplicates


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Report duplicate holder rows")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--export", help="Quoted holder export CSV")
    source.add_argument("--report", help="Captured benchmark output")
    parser.add_argument("--contract", help="Contract whose section to read from --report")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    if args.report and not args.contract:
        print("--contract is required with --report")
        return

    if args.export:
        print(f"🔍 Checking for duplicates in {args.export}...")
        export = read_holder_export(Path(args.export))
        frame = export.frame
        for number, line in export.unparsed:
            print(f"⚠️  Could not parse line {number}: {line}")
        reported = None
    else:
        print(f"🔍 Checking for duplicate wallets in {args.report}...")
        section = read_report_section(Path(args.report), args.contract)
        frame = section.frame
        reported = section

    duplicates = find_duplicates(frame)
    total = len(frame)
    unique = frame["address"].str.lower().nunique()

    print_banner("📋 DUPLICATE CHECK RESULTS")
    print("\n📊 Summary:")
    if reported is not None:
        print(f"- Reported total holders: {reported.reported_total:,}")
        print(f"- Total items from pages: {reported.total_items_from_pages:,}")
        print(f"- Pages processed: {reported.pages}")
    print(f"- Total rows processed: {total:,}")
    print(f"- Unique addresses: {unique:,}")
    print(f"- Duplicate addresses: {len(duplicates):,}")

    if duplicates.empty:
        print("\n✅ No duplicates found! All addresses are unique.")
        return

    print("\n🔄 Duplicate addresses found:")
    print_rows(duplicates, ["address", "occurrences", "balances", "line_numbers"], "Address,Occurrences,Balances,Line Numbers")

    print("\n🔍 Balance consistency check:")
    for row in duplicates.itertuples(index=False):
        if row.consistent:
            print(f"✅ {row.address}: Consistent balance - {row.balances[0]}")
        else:
            print(f"❌ {row.address}: Different balances - {', '.join(row.balances)}")

    extra = total - unique
    print("\n📈 Impact:")
    print(f"- Expected total (if no duplicates): {unique:,}")
    print(f"- Actual total: {total:,}")
    print(f"- Extra entries due to duplicates: {extra:,}")


if __name__ == "__main__":
    main()
