import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import requests
from dotenv import load_dotenv

from insight_bench.benchmark import (
    BenchmarkResult,
    benchmark_erc20_owners,
    benchmark_erc721_owners,
    benchmark_erc721_transfers,
)
from insight_bench.config import BenchmarkConfig, ConfigError, build_config, load_yaml
from insight_bench.extractors.insight import InsightAPI
from insight_bench.reporting import (
    calculate_summary_metrics,
    print_duplicate_summary,
    print_holder_section,
    print_owner_section,
    print_result,
    print_summary_metrics,
)
from insight_bench.transformers.reference import (
    CollectionTarget,
    ExpectedCounts,
    TokenStandard,
    load_collections,
    load_expected_counts,
)

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Benchmark Insight API owner and transfer endpoints")
    parser.add_argument("--collections", default="collections.csv", help="CSV of chain_id, contract address, ERC standard")
    parser.add_argument("--mode", choices=["initial", "incremental"], default="incremental",
                        help="initial scans transfers from block 1, incremental only the lookback window")
    parser.add_argument("--since-hours", type=float, default=24, help="Lookback window for incremental transfers")
    parser.add_argument("--limit", type=int, default=1000, help="Page size, clamped to 1..1000")
    parser.add_argument("--sort", choices=["asc", "desc"], default="desc")
    parser.add_argument("--sleep-ms", type=float, default=None, help="Delay between pages (default: SLEEP_MS or 0)")
    parser.add_argument("--base-url", default=None)
    parser.add_argument("--expected-owners", default="token-owner-data.csv")
    parser.add_argument("--expected-transfers", default="nft-transfers.csv")
    parser.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    parser.add_argument("--settings", default="config/insight.yaml", help="Optional YAML settings file")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def benchmark_target(
    api: InsightAPI,
    target: CollectionTarget,
    config: BenchmarkConfig,
    expected: ExpectedCounts,
    results: List[BenchmarkResult],
) -> None:
    """Benchmark every endpoint for ``target``, appending each result to ``results`` as soon as it finishes."""
    if target.standard == TokenStandard.ERC721:
        owners = benchmark_erc721_owners(
            api, target.chain_id, target.address, config.limit,
            sleep_ms=config.sleep_ms, expected_owners=expected.token_owners,
        )
        print_owner_section(owners)
        print_result(owners)
        results.append(owners)

        transfers = benchmark_erc721_transfers(
            api, target.chain_id, target.address, config.limit,
            sleep_ms=config.sleep_ms,
            sort_order=config.sort_order,
            mode=config.mode,
            since_hours=config.since_hours,
            expected_transfers=expected.nft_transfers,
        )
        print_result(transfers)
        results.append(transfers)
    else:
        owners = benchmark_erc20_owners(
            api, target.chain_id, target.address, config.limit,
            sleep_ms=config.sleep_ms, expected_owners=expected.token_owners,
        )
        print_duplicate_summary(owners)
        print_holder_section(owners)
        print_result(owners)
        results.append(owners)


def run(config: BenchmarkConfig, api: Optional[InsightAPI] = None) -> List[BenchmarkResult]:
    if not config.collections_path.exists():
        raise ConfigError(f"collections.csv not found at {config.collections_path.resolve()}")
    targets = load_collections(config.collections_path)
    if not targets:
        raise ConfigError("No valid rows found in collections.csv")

    print(f"Loaded {len(targets)} collections from {config.collections_path.resolve()}")
    print(f"Base URL: {config.base_url}")
    print(
        f"Mode: {config.mode.value}  sinceHours: {config.since_hours:g}  limit: {config.limit}  "
        f"sort: {config.sort_order}  sleepMs: {config.sleep_ms:g}"
    )

    expected = load_expected_counts(config.expected_owners_path, config.expected_transfers_path)
    api = api or InsightAPI.from_config(config)

    all_results: List[BenchmarkResult] = []
    for target in targets:
        label = f" ({target.name})" if target.name else ""
        print(f"\n---- Processing {target.standard.value.upper()} {target.address} on chain {target.chain_id}{label} ----")
        try:
            benchmark_target(api, target, config, expected, all_results)
        except (requests.RequestException, RuntimeError, ValueError) as exc:
            logger.error("Error benchmarking %s on chain %s: %s", target.address, target.chain_id, exc)

    print_summary_metrics(calculate_summary_metrics(all_results), all_results)
    print("\nAll benchmarks completed.")
    return all_results


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stdout,
    )

    settings = load_yaml(args.settings) if Path(args.settings).exists() else {}
    try:
        config = build_config(args, settings)
        run(config)
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
