"""
Paginated benchmarks for the Insight API owner and transfer endpoints.

One generic loop (``collect_pages``) walks an endpoint page by page, starting
at page 0. Each endpoint plugs in how a page is fetched and how its records
are accumulated:

    ERC721 owners     /nfts/owners/{address}   SumCounts
    ERC20 owners      /tokens/owners           LastWriteWins (wei -> tokens)
    ERC721 transfers  /nfts/transfers          CountOnly

Pagination stops on an empty page, on metadata that declares the last page,
or, without metadata, on a page shorter than ``limit``.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import requests

from insight_bench.config import ScanMode
from insight_bench.extractors.insight import InsightAPI, transfer_filters
from insight_bench.handlers.validation import ValidationOutcome, validate_against
from insight_bench.transformers.holders import CountOnly, DuplicateEvent, LastWriteWins, SumCounts
from insight_bench.transformers.shapes import (
    MetaPage,
    UnrecognizedPage,
    classify_response,
    describe_unrecognized,
    has_next_page,
)
from insight_bench.transformers.units import DEFAULT_DECIMALS, wei_to_tokens

logger = logging.getLogger(__name__)

FetchPage = Callable[[int], Tuple[Any, str]]
PageHook = Callable[[int, List[Dict[str, Any]]], None]


@dataclass(frozen=True)
class PageTiming:
    page: int  # 1-based for display
    items: int
    ms: float
    url: str


@dataclass
class BenchmarkResult:
    contract: str
    chain_id: int
    endpoint: str
    description: str
    total_items: int
    pages: int
    total_ms: float
    per_page: List[PageTiming]
    meta: Optional[Dict[str, Any]] = None
    validation: Optional[ValidationOutcome] = None
    holders: Dict[str, Any] = field(default_factory=dict)
    duplicates: List[DuplicateEvent] = field(default_factory=list)
    decimals: Optional[int] = None


def collect_pages(
    fetch: FetchPage,
    accumulator: Any,
    limit: int,
    sleep_ms: float = 0,
    label: str = "",
    on_page: Optional[PageHook] = None,
) -> List[PageTiming]:
    per_page: List[PageTiming] = []
    total_records = 0
    page = 0

    while True:
        logger.info("  Fetching page %d for %s...", page, label)
        started = time.perf_counter()
        body, url = fetch(page)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("  Page %d completed in %.0fms", page, elapsed_ms)

        shape = classify_response(body)
        if isinstance(shape, UnrecognizedPage):
            describe_unrecognized(shape, url)

        items = shape.items
        if on_page is not None:
            on_page(page, items)
        for record in items:
            accumulator.add(record, page)

        total_records += len(items)
        if isinstance(accumulator, CountOnly):
            logger.info("  Page %d: got %d items, total so far: %d", page, len(items), total_records)
        else:
            logger.info(
                "  Page %d: got %d items, unique holders: %d, total items so far: %d",
                page, len(items), accumulator.size, total_records,
            )

        per_page.append(PageTiming(page=page + 1, items=len(items), ms=elapsed_ms, url=url))

        has_next = has_next_page(shape, limit)
        if isinstance(shape, MetaPage):
            logger.info(
                "  Pagination via meta: page=%d, total_pages=%d, hasNext=%s",
                shape.meta.page, shape.meta.total_pages, has_next,
            )
        else:
            logger.info("  Pagination via array length: items=%d, limit=%d, hasNext=%s", len(items), limit, has_next)

        if not has_next:
            logger.info("  Breaking pagination loop: hasNext=%s, items=%d", has_next, len(items))
            break

        page += 1
        logger.info("  Continuing to page %d...", page)
        if sleep_ms > 0:
            time.sleep(sleep_ms / 1000)

    return per_page


class DecimalsProbe:
    """Resolves token decimals once, on page 0, using the first holder seen."""

    def __init__(self, api: InsightAPI, chain_id: int, token: str) -> None:
        self.api = api
        self.chain_id = chain_id
        self.token = token
        self.decimals = DEFAULT_DECIMALS
        self.attempted = False

    def __call__(self, page: int, items: List[Dict[str, Any]]) -> None:
        if self.attempted or page != 0:
            return
        owner = next(
            (str(r["owner_address"]).lower() for r in items if isinstance(r, dict) and r.get("owner_address")),
            None,
        )
        if owner is None:
            return
        self.attempted = True
        logger.info("  Getting token decimals using owner %s...", owner)
        try:
            found = self.api.get_token_decimals(self.chain_id, self.token, owner)
        except (requests.RequestException, RuntimeError, ValueError) as exc:
            logger.warning("  Could not fetch token decimals using owner address: %s", exc)
            return
        if found is None:
            logger.warning("  No decimals in token metadata, using %d", self.decimals)
            return
        self.decimals = found
        logger.info("  Token decimals: %d", found)

    def convert(self, raw: str) -> str:
        return wei_to_tokens(raw, self.decimals)


def benchmark_erc721_owners(
    api: InsightAPI,
    chain_id: int,
    collection: str,
    limit: int,
    sleep_ms: float = 0,
    expected_owners: Optional[Mapping[str, int]] = None,
) -> BenchmarkResult:
    owners = SumCounts()
    started = time.perf_counter()
    per_page = collect_pages(
        lambda page: api.get_nft_owners(chain_id, collection, limit, page),
        owners,
        limit,
        sleep_ms=sleep_ms,
        label="ERC721 owners",
    )
    total_ms = (time.perf_counter() - started) * 1000

    return BenchmarkResult(
        contract=collection,
        chain_id=chain_id,
        endpoint="/nfts/owners/{address}",
        description="ERC721 collection owners with balances",
        total_items=owners.size,
        pages=len(per_page),
        total_ms=total_ms,
        per_page=per_page,
        validation=validate_against(expected_owners or {}, collection, owners.size),
        holders=dict(owners.holders),
    )


def benchmark_erc20_owners(
    api: InsightAPI,
    chain_id: int,
    contract: str,
    limit: int,
    sleep_ms: float = 0,
    expected_owners: Optional[Mapping[str, int]] = None,
) -> BenchmarkResult:
    probe = DecimalsProbe(api, chain_id, contract)
    holders = LastWriteWins(convert=probe.convert)
    started = time.perf_counter()
    per_page = collect_pages(
        lambda page: api.get_token_owners(chain_id, contract, limit, page),
        holders,
        limit,
        sleep_ms=sleep_ms,
        label="ERC20 owners",
        on_page=probe,
    )
    total_ms = (time.perf_counter() - started) * 1000

    return BenchmarkResult(
        contract=contract,
        chain_id=chain_id,
        endpoint="/tokens/owners",
        description="ERC20 token holders",
        total_items=holders.size,
        pages=len(per_page),
        total_ms=total_ms,
        per_page=per_page,
        validation=validate_against(expected_owners or {}, contract, holders.size),
        holders=dict(holders.holders),
        duplicates=list(holders.duplicates),
        decimals=probe.decimals,
    )


def benchmark_erc721_transfers(
    api: InsightAPI,
    chain_id: int,
    contract: str,
    limit: int,
    sleep_ms: float = 0,
    sort_order: str = "desc",
    mode: ScanMode = ScanMode.RECENT_WINDOW,
    since_hours: float = 24,
    expected_transfers: Optional[Mapping[str, int]] = None,
) -> BenchmarkResult:
    transfers = CountOnly()
    filters = transfer_filters(mode, since_hours)
    started = time.perf_counter()
    per_page = collect_pages(
        lambda page: api.get_nft_transfers(chain_id, contract, limit, page, sort_order, filters),
        transfers,
        limit,
        sleep_ms=sleep_ms,
        label="ERC721 transfers",
    )
    total_ms = (time.perf_counter() - started) * 1000

    # a recent-window scan is partial by construction
    validation = None
    if mode == ScanMode.FULL_HISTORY:
        validation = validate_against(expected_transfers or {}, contract, transfers.size)

    return BenchmarkResult(
        contract=contract,
        chain_id=chain_id,
        endpoint="/nfts/transfers",
        description=f"ERC721 all transfers ({mode.value})",
        total_items=transfers.size,
        pages=len(per_page),
        total_ms=total_ms,
        per_page=per_page,
        meta={"sort_order": sort_order, "mode": mode.value, "since_hours": since_hours},
        validation=validation,
    )
