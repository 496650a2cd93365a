"""
Compare two extra-holder exports written by compare_holders.py.

Usage:
    python scripts/compare_extra_holders.py --before extra_run4.csv --after extra_run5.csv
"""

import argparse
import os
import sys
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from insight_bench.loaders.snapshots import read_holder_export
from insight_bench.reporting import print_banner, print_rows
from insight_bench.transformers.snapshots import diff_holders, index_by_address


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Which extra holders appeared or disappeared between two exports")
    parser.add_argument("--before", required=True)
    parser.add_argument("--after", required=True)
    parser.add_argument("--watch", nargs="*", default=[], help="Addresses to look up in the newer export")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    print("🔍 Loading extra holders data...")
    before = read_holder_export(Path(args.before)).frame
    after = read_holder_export(Path(args.after)).frame

    diff = diff_holders(before, after)
    before_name, after_name = Path(args.before).stem, Path(args.after).stem
    print(f"📊 {before_name} extra holders: {diff.left_count}")
    print(f"📊 {after_name} extra holders: {diff.right_count}")

    print_banner(f"📋 EXTRA HOLDERS COMPARISON ({before_name} vs {after_name})")
    columns = ["address", "balance", "pending_balance_update"]

    print(f"\n➕ New in {after_name} ({len(diff.only_right)}):")
    print_rows(diff.only_right, columns, "Address,Balance,PendingBalanceUpdate")

    print(f"\n➖ Removed in {after_name} ({len(diff.only_left)}):")
    print_rows(diff.only_left, columns, "Address,Balance,PendingBalanceUpdate")

    net = len(diff.only_right) - len(diff.only_left)
    print("\n📈 Summary:")
    print(f"- {before_name} extra holders: {diff.left_count:,}")
    print(f"- {after_name} extra holders: {diff.right_count:,}")
    print(f"- New in {after_name}: {len(diff.only_right):,}")
    print(f"- Removed in {after_name}: {len(diff.only_left):,}")
    print(f"- Net change: {'+' if net > 0 else ''}{net}")

    if args.watch:
        indexed = index_by_address(after)
        print("\n🔍 Checking watched holders:")
        for address in args.watch:
            key = address.lower()
            if key in indexed.index:
                print(f"- {address}: YES (balance {indexed.loc[key, 'balance']})")
            else:
                print(f"- {address}: NO")


if __name__ == "__main__":
    main()
