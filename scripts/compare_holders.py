"""
Compare a holder export against the holder section of a benchmark report.

Usage:
    python scripts/compare_holders.py --export holders.csv --report run5.txt --contract 0xFC27...
"""

import argparse
import os
import sys
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from insight_bench.loaders.snapshots import read_holder_export, read_report_section, write_holders_csv
from insight_bench.reporting import print_banner, print_rows
from insight_bench.transformers.snapshots import diff_holders


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Diff a holder export against a benchmark report")
    parser.add_argument("--export", required=True, help="Quoted Address,Balance,PendingBalanceUpdate CSV")
    parser.add_argument("--report", required=True, help="Captured benchmark output")
    parser.add_argument("--contract", required=True)
    parser.add_argument("--threshold", type=float, default=0.001, help="Ignore balance differences up to this many tokens")
    parser.add_argument("--output", default="extra_holders.csv", help="Where to write holders missing from the report")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    print("🔍 Loading holder data...")
    export = read_holder_export(Path(args.export)).frame
    section = read_report_section(Path(args.report), args.contract)
    if not section.found:
        print(f"No holder section for {args.contract} in {args.report}")
        return

    diff = diff_holders(export, section.frame, threshold=args.threshold)
    print(f"📊 Export holders: {diff.left_count}")
    print(f"📊 Report holders: {diff.right_count}")

    print_banner("📋 HOLDER COMPARISON REPORT")

    print(f"\n🔍 Missing holders in export ({len(diff.only_right)}):")
    print_rows(diff.only_right, ["address", "balance"], "Address,Balance", limit=50)

    print(f"\n➕ Extra holders in export ({len(diff.only_left)}):")
    print_rows(diff.only_left, ["address", "balance"], "Address,Balance", limit=20)

    print(f"\n⚖️  Balance differences ({len(diff.balance_differences)}):")
    print_rows(
        diff.balance_differences,
        ["address", "left_balance", "right_balance", "difference"],
        "Address,Export Balance,Report Balance,Difference",
        limit=20,
    )

    print("\n📈 Summary:")
    print(f"- Export holders: {diff.left_count:,}")
    print(f"- Report holders: {diff.right_count:,}")
    print(f"- Missing in export: {len(diff.only_right):,}")
    print(f"- Extra in export: {len(diff.only_left):,}")
    print(f"- Balance differences: {len(diff.balance_differences):,}")
    print(f"- Total balance of missing holders: {diff.only_right['amount'].sum():,} tokens")

    if not diff.only_left.empty:
        count = write_holders_csv(
            diff.only_left,
            Path(args.output),
            ["address", "balance", "pending_balance_update"],
            header=["Address", "Balance", "PendingBalanceUpdate"],
        )
        print(f"\n📁 Exported {count} extra holders to {args.output}")


if __name__ == "__main__":
    main()
