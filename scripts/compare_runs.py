"""
Check two benchmark reports for the same contract for consistency.

Usage:
    python scripts/compare_runs.py --before run8.txt --after run9.txt --contract 0x48b6...
"""

import argparse
import os
import sys
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from insight_bench.loaders.snapshots import read_report_section
from insight_bench.reporting import print_banner, print_rows
from insight_bench.transformers.snapshots import diff_holders, summarize_balances


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare the holder sections of two benchmark runs")
    parser.add_argument("--before", required=True)
    parser.add_argument("--after", required=True)
    parser.add_argument("--contract", required=True)
    parser.add_argument("--threshold", type=float, default=0.000001)
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    before_name, after_name = Path(args.before).stem, Path(args.after).stem
    print(f"🔍 Comparing {before_name} and {after_name} for {args.contract}...")

    before = read_report_section(Path(args.before), args.contract)
    after = read_report_section(Path(args.after), args.contract)

    print(f"📊 {before_name} holders: {len(before.frame)} (reported: {before.reported_total})")
    print(f"📊 {after_name} holders: {len(after.frame)} (reported: {after.reported_total})")
    print(f"📊 Decimals - {before_name}: {before.decimals}, {after_name}: {after.decimals}")

    diff = diff_holders(before.frame, after.frame, threshold=args.threshold)

    print_banner(f"📋 {before_name.upper()} vs {after_name.upper()} CONSISTENCY CHECK")

    print("\n📊 Summary Stats:")
    print(f"- {before_name} total holders: {before.reported_total:,}")
    print(f"- {after_name} total holders: {after.reported_total:,}")
    print(f"- Difference in reported totals: {abs(before.reported_total - after.reported_total)}")
    print(f"- {before_name} parsed holders: {diff.left_count:,}")
    print(f"- {after_name} parsed holders: {diff.right_count:,}")
    print(f"- Difference in parsed holders: {abs(diff.left_count - diff.right_count)}")

    print("\n🔍 Differences Found:")
    print(f"- Only in {before_name}: {len(diff.only_left):,}")
    print(f"- Only in {after_name}: {len(diff.only_right):,}")
    print(f"- Balance differences: {len(diff.balance_differences):,}")

    if not diff.only_left.empty:
        print(f"\n➖ Holders only in {before_name} ({len(diff.only_left)}):")
        print_rows(diff.only_left, ["address", "balance"], "Address,Balance", limit=20)
    if not diff.only_right.empty:
        print(f"\n➕ Holders only in {after_name} ({len(diff.only_right)}):")
        print_rows(diff.only_right, ["address", "balance"], "Address,Balance", limit=20)
    if not diff.balance_differences.empty:
        print(f"\n⚖️  Balance differences ({len(diff.balance_differences)}):")
        print_rows(
            diff.balance_differences,
            ["address", "left_balance", "right_balance", "difference"],
            f"Address,{before_name} Balance,{after_name} Balance,Difference",
            limit=20,
        )

    before_total = summarize_balances(before.frame).total
    after_total = summarize_balances(after.frame).total
    print("\n💰 Total Balance Comparison:")
    print(f"- {before_name} total balance: {before_total:,} tokens")
    print(f"- {after_name} total balance: {after_total:,} tokens")
    print(f"- Total balance difference: {abs(before_total - after_total):,} tokens")

    consistent = (
        diff.only_left.empty
        and diff.only_right.empty
        and diff.balance_differences.empty
        and before.reported_total == after.reported_total
    )
    print(f"\n🎯 Consistency Verdict: {'✅ IDENTICAL' if consistent else '❌ DIFFERENCES FOUND'}")
    if not consistent:
        print("\n⚠️  API results are NOT consistent between runs. Possible causes:")
        print("   - Data is being updated between API calls")
        print("   - API has timing/caching issues")
        print("   - Different data snapshots are being served")


if __name__ == "__main__":
    main()
