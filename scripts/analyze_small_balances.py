"""
Break down holders below one token in a holder export.

Usage:
    python scripts/analyze_small_balances.py --export holders.csv
"""

import argparse
import os
import sys
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from insight_bench.loaders.snapshots import read_holder_export
from insight_bench.reporting import print_banner
from insight_bench.transformers.snapshots import small_balance_report


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analyze small-balance holders")
    parser.add_argument("--export", required=True)
    parser.add_argument("--below", type=float, default=1.0, help="Upper bound in tokens (exclusive)")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    print(f"🔍 Analyzing small balance holders in {args.export}...")
    report = small_balance_report(read_holder_export(Path(args.export)).frame, below=args.below)

    share = len(report.small) / report.holders * 100 if report.holders else 0.0
    print(f"📊 Total holders: {report.holders:,}")
    print(f"📊 Holders with < {args.below:g} token: {len(report.small):,} ({share:.1f}%)")
    if report.small.empty:
        print(f"No holders with < {args.below:g} token found.")
        return

    print_banner(f"📋 SMALL BALANCE ANALYSIS (< {args.below:g} TOKEN)")
    s = report.summary
    print("\n📈 Statistics:")
    print(f"- Count: {s.count:,}")
    print(f"- Total balance: {s.total:.6f} tokens")
    print(f"- Average balance: {s.average:.6f} tokens")
    print(f"- Median balance: {s.median:.6f} tokens")
    print(f"- Smallest balance: {s.smallest:.18f} tokens")
    print(f"- Largest balance: {s.largest:.6f} tokens")

    print("\n📊 Balance Range Distribution:")
    for row in report.distribution.itertuples(index=False):
        print(f"- {row.label}: {row.count:,} holders ({row.percentage:.1f}%)")

    print("\n💰 Ultra-small balances:")
    print(f"- Exactly 0 tokens: {report.zero_count:,} holders")
    print(f"- Near-zero (< 0.000000000001): {report.near_zero_count:,} holders")

    print("\n🔬 Smallest 20 balances (with addresses):")
    print("Address,Balance")
    for row in report.small.head(20).itertuples(index=False):
        print(f"{row.address},{row.amount:.18f}")

    print(f"\n📊 Largest 20 balances under {args.below:g} token:")
    print("Address,Balance")
    for row in report.small.iloc[::-1].head(20).itertuples(index=False):
        print(f"{row.address},{row.balance}")

    print("\n💎 Impact Analysis:")
    print(f"- Small balance holders represent {report.share_of_supply:.6f}% of total token supply")
    print(f"- Average holder in this group: {s.average:.8f} tokens")
    print(f"- These {len(report.small):,} holders collectively own {s.total:.6f} tokens")


if __name__ == "__main__":
    main()
