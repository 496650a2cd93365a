import logging

import pytest

from conftest import owners
from insight_bench import benchmark
from insight_bench.benchmark import (
    benchmark_erc20_owners,
    benchmark_erc721_owners,
    benchmark_erc721_transfers,
    collect_pages,
)
from insight_bench.config import ScanMode
from insight_bench.extractors.insight import transfer_filters
from insight_bench.transformers.holders import CountOnly, DuplicateEvent
from insight_bench.utils.http import InsightHTTPError

TOKEN = "0xTokenContract"
COLLECTION = "0xNftCollection"
NFT_OWNERS = f"/nfts/owners/{COLLECTION}"


def meta_page(items, page, total_pages):
    return {"data": {"data": items, "meta": {"page": page, "total_pages": total_pages}}}


def transfers(n):
    return [{"token_id": str(i)} for i in range(n)]


def test_meta_pagination_requests_sequential_pages(fake_api):
    api, client = fake_api(pages={"/nfts/transfers": [
        meta_page(transfers(2), 0, 3),
        meta_page(transfers(2), 1, 3),
        meta_page(transfers(1), 2, 3),
    ]})

    result = benchmark_erc721_transfers(api, 1, COLLECTION, limit=2, mode=ScanMode.FULL_HISTORY)

    assert [p["page"] for p in client.fetches("/nfts/transfers")] == [0, 1, 2]
    assert result.pages == 3
    assert result.total_items == 5
    assert [t.page for t in result.per_page] == [1, 2, 3]
    assert [t.items for t in result.per_page] == [2, 2, 1]


def test_metadata_wins_over_a_full_last_page(fake_api):
    api, client = fake_api(pages={"/nfts/transfers": [meta_page(transfers(2), 0, 1)]})

    result = benchmark_erc721_transfers(api, 1, COLLECTION, limit=2)

    assert result.pages == 1
    assert len(client.calls) == 1


def test_flat_pages_stop_on_a_short_page(fake_api):
    api, client = fake_api(pages={NFT_OWNERS: [
        {"data": owners(("0xa", "1"), ("0xb", "1"))},
        {"data": owners(("0xc", "1"))},
    ]})

    result = benchmark_erc721_owners(api, 1, COLLECTION, limit=2)

    assert result.pages == 2
    assert [p["page"] for p in client.fetches(NFT_OWNERS)] == [0, 1]


def test_empty_page_stops_even_when_meta_claims_more(fake_api):
    api, client = fake_api(pages={"/nfts/transfers": [meta_page([], 0, 10)]})

    result = benchmark_erc721_transfers(api, 1, COLLECTION, limit=2)

    assert len(client.calls) == 1
    assert result.total_items == 0
    assert result.pages == 1


def test_unrecognized_body_counts_zero_and_stops(fake_api, caplog):
    api, client = fake_api(pages={NFT_OWNERS: [{"error": "rate limited", "message": "slow down"}]})

    with caplog.at_level(logging.WARNING):
        result = benchmark_erc721_owners(api, 1, COLLECTION, limit=2)

    assert result.total_items == 0
    assert len(client.calls) == 1
    assert "Response keys: error, message" in caplog.text


def test_sleeps_between_pages_but_not_after_the_last(fake_api, monkeypatch):
    slept = []
    monkeypatch.setattr(benchmark.time, "sleep", slept.append)
    api, _ = fake_api(pages={NFT_OWNERS: [
        {"data": owners(("0xa", "1"))},
        {"data": owners(("0xb", "1"))},
        {"data": []},
    ]})

    benchmark_erc721_owners(api, 1, COLLECTION, limit=1, sleep_ms=250)

    assert slept == [0.25, 0.25]


def test_http_error_propagates_out_of_the_loop(fake_api):
    error = InsightHTTPError(500, "Internal Server Error", "https://insight.test/v1/nfts/transfers", "oops")
    api, _ = fake_api(errors={"/nfts/transfers": error})

    with pytest.raises(InsightHTTPError, match="HTTP 500"):
        benchmark_erc721_transfers(api, 1, COLLECTION, limit=2)


def test_erc721_owner_counts_sum_across_pages(fake_api):
    api, _ = fake_api(pages={NFT_OWNERS: [
        {"data": owners(("0xA", "2"), ("0xb", "1"))},
        {"data": owners(("0xa", "3"))},
    ]})

    result = benchmark_erc721_owners(api, 1, COLLECTION, limit=2, expected_owners={COLLECTION.lower(): 2})

    assert result.holders == {"0xa": 5, "0xb": 1}
    assert result.total_items == 2
    assert result.validation.is_valid
    assert result.validation.difference == 0


def test_erc20_holders_across_three_pages(fake_api):
    wei = "1000000000000000000"
    api, client = fake_api(
        pages={"/tokens/owners": [
            {"data": owners(("0xA", wei), ("0xb", "500000000000000000"))},
            {"data": owners(("0xc", "1"), ("0xa", "2" + wei[1:]))},
            {"data": owners(("0xd", wei))},
        ]},
        token_body={"data": [{"decimals": 18}]},
    )

    result = benchmark_erc20_owners(api, 8453, TOKEN, limit=2, expected_owners={TOKEN.lower(): 5})

    assert result.pages == 3
    assert result.total_items == 4
    assert result.holders["0xa"] == "2"
    assert result.holders["0xb"] == "0.5"
    assert result.holders["0xc"] == "0.000000000000000001"
    assert result.duplicates == [DuplicateEvent(address="0xa", page=1, previous="1", current="2")]
    assert result.decimals == 18
    assert result.validation.difference == -1
    assert not result.validation.is_valid


def test_decimals_probe_runs_once_with_the_first_holder(fake_api):
    api, client = fake_api(
        pages={"/tokens/owners": [
            {"data": owners(("0xFirst", "1000000"), ("0xsecond", "1"))},
            {"data": owners(("0xthird", "2500000"))},
        ]},
        token_body={"data": [{"decimals": 6}]},
    )

    result = benchmark_erc20_owners(api, 1, TOKEN, limit=2)

    probes = client.fetches("/tokens")
    assert len(probes) == 1
    assert probes[0]["owner_address"] == "0xfirst"
    assert probes[0]["token_address"] == TOKEN
    assert result.decimals == 6
    assert result.holders["0xfirst"] == "1"
    assert result.holders["0xthird"] == "2.5"


def test_decimals_probe_failure_falls_back_to_18(fake_api, caplog):
    error = InsightHTTPError(404, "Not Found", "https://insight.test/v1/tokens", "")
    api, _ = fake_api(
        pages={"/tokens/owners": [{"data": owners(("0xa", "1500000000000000000"))}]},
        token_error=error,
    )

    with caplog.at_level(logging.WARNING):
        result = benchmark_erc20_owners(api, 1, TOKEN, limit=2)

    assert result.decimals == 18
    assert result.holders == {"0xa": "1.5"}
    assert "Could not fetch token decimals" in caplog.text


def test_erc20_without_expected_entry_is_unvalidated(fake_api):
    api, _ = fake_api(pages={"/tokens/owners": [{"data": []}]})

    result = benchmark_erc20_owners(api, 1, TOKEN, limit=2, expected_owners={"0xother": 3})

    assert result.validation is None
    assert result.total_items == 0


def test_transfers_validate_only_in_full_history_mode(fake_api):
    expected = {COLLECTION.lower(): 3}

    api, client = fake_api(pages={"/nfts/transfers": [{"data": transfers(3)}]})
    full = benchmark_erc721_transfers(
        api, 1, COLLECTION, limit=10, mode=ScanMode.FULL_HISTORY, expected_transfers=expected,
    )
    assert full.validation.is_valid
    assert client.fetches("/nfts/transfers")[0]["block_number_from"] == 1
    assert full.meta == {"sort_order": "desc", "mode": "initial", "since_hours": 24}
    assert full.description == "ERC721 all transfers (initial)"

    api, client = fake_api(pages={"/nfts/transfers": [{"data": transfers(1)}]})
    recent = benchmark_erc721_transfers(
        api, 1, COLLECTION, limit=10, mode=ScanMode.RECENT_WINDOW, since_hours=2, expected_transfers=expected,
    )
    assert recent.validation is None
    params = client.fetches("/nfts/transfers")[0]
    assert "block_timestamp_from" in params
    assert "block_number_from" not in params


def test_transfer_filters_lookback():
    assert transfer_filters(ScanMode.FULL_HISTORY, 24, now=1_000_000) == {"block_number_from": 1}
    assert transfer_filters(ScanMode.RECENT_WINDOW, 24, now=1_000_000) == {"block_timestamp_from": 913_600}
    assert transfer_filters(ScanMode.RECENT_WINDOW, 0, now=1_000_000) == {"block_timestamp_from": 999_999}


def test_collect_pages_logs_running_totals(caplog):
    bodies = [{"data": transfers(2)}, {"data": transfers(1)}]

    with caplog.at_level(logging.INFO, logger="insight_bench.benchmark"):
        timings = collect_pages(lambda page: (bodies[page], f"u{page}"), CountOnly(), limit=2, label="test")

    assert [t.url for t in timings] == ["u0", "u1"]
    assert "Page 1: got 1 items, total so far: 3" in caplog.text
    assert "Breaking pagination loop" in caplog.text


def test_unusable_decimals_metadata_falls_back_to_18(fake_api, caplog):
    api, _ = fake_api(
        pages={"/tokens/owners": [{"data": owners(("0xa", "1500000000000000000"))}]},
        token_body={"data": [{"decimals": {"v": 18}}]},
    )

    with caplog.at_level(logging.WARNING):
        result = benchmark_erc20_owners(api, 1, TOKEN, limit=2)

    assert result.decimals == 18
    assert result.holders == {"0xa": "1.5"}
    assert "Unusable decimals" in caplog.text


def test_incomplete_meta_still_counts_the_page(fake_api):
    api, client = fake_api(pages={"/nfts/transfers": [{"data": {"data": transfers(3), "meta": {"page": 0}}}]})

    result = benchmark_erc721_transfers(api, 1, COLLECTION, limit=5)

    assert result.total_items == 3
    assert len(client.calls) == 1
