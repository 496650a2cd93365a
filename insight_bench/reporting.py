import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from insight_bench.benchmark import BenchmarkResult


@dataclass
class EndpointStats:
    count: int = 0
    total_time: float = 0.0
    average_time: float = 0.0
    items: int = 0
    pages: int = 0


@dataclass
class SlowestQuery:
    contract: str = ""
    endpoint: str = ""
    ms: float = 0.0
    url: str = ""


@dataclass
class SummaryMetrics:
    total_queries: int
    total_time: float
    average_time_per_query: float
    longest_query: SlowestQuery
    endpoint_stats: Dict[str, EndpointStats] = field(default_factory=dict)


def _signed(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)


def print_result(result: BenchmarkResult) -> None:
    print("\n============================================================")
    print(f"Contract: {result.contract}  Chain: {result.chain_id}")
    print(f"Endpoint: {result.endpoint}")
    print(f"Description: {result.description}")
    print(f"Total items: {result.total_items}  Pages: {result.pages}  Total time: {result.total_ms:.2f} ms")

    v = result.validation
    if v is None:
        print("⚪ VALIDATION SKIPPED: No expected data available")
    elif v.is_valid:
        print(f"✅ VALIDATION PASSED: Expected {v.expected}, got {v.actual}")
    else:
        print(f"❌ VALIDATION FAILED: Expected {v.expected}, got {v.actual} (difference: {_signed(v.difference)})")

    if result.meta:
        print(f"Meta: {json.dumps(result.meta)}")
    for p in result.per_page:
        print(f"  Page {p.page}: items={p.items} time={p.ms:.2f} ms  url={p.url}")


def print_owner_section(result: BenchmarkResult) -> None:
    print(f"\n  === Owner Balances CSV for {result.contract} ({len(result.holders)} total owners) ===")
    print("owner_address,total_owned")
    for owner, count in sorted(result.holders.items()):
        print(f"{owner},{count}")
    print("  === End of CSV ===\n")


def print_holder_section(result: BenchmarkResult) -> None:
    print(
        f"\n  === Holder Balances CSV for {result.contract} "
        f"({len(result.holders)} total holders, {result.decimals} decimals) ==="
    )
    print("holder_address,token_balance")
    for holder, balance in sorted(result.holders.items()):
        print(f"{holder},{balance}")
    print("  === End of CSV ===\n")


def print_duplicate_summary(result: BenchmarkResult) -> None:
    if result.duplicates:
        print(f"\n  🔄 DUPLICATE SUMMARY: Found {len(result.duplicates)} duplicate addresses")
        print("  Duplicate Details:")
        for index, dup in enumerate(result.duplicates, start=1):
            print(f"    {index}. {dup.address} on page {dup.page} (existing: {dup.previous}, new: {dup.current})")
    else:
        print(f"\n  ✅ NO DUPLICATES: All {len(result.holders)} addresses are unique")


def calculate_summary_metrics(results: List[BenchmarkResult]) -> SummaryMetrics:
    total_queries = 0
    total_time = 0.0
    longest = SlowestQuery()
    endpoint_stats: Dict[str, EndpointStats] = {}

    for result in results:
        stat = endpoint_stats.setdefault(result.endpoint, EndpointStats())
        stat.count += 1
        stat.total_time += result.total_ms
        stat.items += result.total_items
        stat.pages += result.pages

        for page in result.per_page:
            total_queries += 1
            total_time += page.ms
            if page.ms > longest.ms:
                longest = SlowestQuery(result.contract, result.endpoint, page.ms, page.url)

    for stat in endpoint_stats.values():
        stat.average_time = stat.total_time / stat.count

    return SummaryMetrics(
        total_queries=total_queries,
        total_time=total_time,
        average_time_per_query=total_time / total_queries if total_queries else 0.0,
        longest_query=longest,
        endpoint_stats=endpoint_stats,
    )


def print_summary_metrics(metrics: SummaryMetrics, results: List[BenchmarkResult]) -> None:
    print("\n\n🔬 BENCHMARK SUMMARY")
    print("==================================================")
    print(f"Total API calls: {metrics.total_queries}")
    print(f"Total time: {metrics.total_time:.2f} ms ({metrics.total_time / 1000:.2f}s)")
    print(f"Average time per call: {metrics.average_time_per_query:.2f} ms")

    slowest = metrics.longest_query
    print(f"\n🐌 Slowest query: {slowest.ms:.2f} ms")
    print(f"   Contract: {slowest.contract}")
    print(f"   Endpoint: {slowest.endpoint}")
    print(f"   URL: {slowest.url}")

    validated = [r for r in results if r.validation is not None]
    passed = [r for r in validated if r.validation.is_valid]
    failed = [r for r in validated if not r.validation.is_valid]

    print("\n🔍 VALIDATION SUMMARY:")
    print(f"   Total validations: {len(validated)}")
    print(f"   ✅ Passed: {len(passed)}")
    print(f"   ❌ Failed: {len(failed)}")
    print(f"   ⚪ Skipped: {len(results) - len(validated)}")

    if failed:
        print("\n❌ VALIDATION FAILURES:")
        for r in failed:
            v = r.validation
            print(f"   {r.contract} ({r.endpoint}): Expected {v.expected}, got {v.actual} ({_signed(v.difference)})")

    print("\n📊 Endpoint Statistics:")
    for endpoint, stats in metrics.endpoint_stats.items():
        print(f"\n  {endpoint}:")
        print(f"    Contracts tested: {stats.count}")
        print(f"    Total pages: {stats.pages}")
        print(f"    Total items: {stats.items:,}")
        print(f"    Avg time per contract: {stats.average_time:.2f} ms")
        print(f"    Total time: {stats.total_time:.2f} ms")


def print_banner(title: str, width: int = 80) -> None:
    print("\n" + "=" * width)
    print(title)
    print("=" * width)


def print_rows(frame, columns: List[str], header: str, limit: Optional[int] = None) -> None:
    """Print ``columns`` of ``frame`` as CSV lines, truncated after ``limit`` rows."""
    if frame.empty:
        return
    print(header)
    shown = frame if limit is None else frame.head(limit)
    for row in shown.itertuples(index=False):
        print(",".join(_cell(getattr(row, c)) for c in columns))
    if limit is not None and len(frame) > limit:
        print(f"... and {len(frame) - limit} more")


def _cell(value) -> str:
    if isinstance(value, float):
        return f"{value:.6f}"
    if isinstance(value, list):
        return '"' + " | ".join(str(v) for v in value) + '"'
    return "" if value is None else str(value)
