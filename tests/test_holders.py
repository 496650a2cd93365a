from insight_bench.transformers.holders import CountOnly, DuplicateEvent, LastWriteWins, SumCounts


def test_erc721_balances_are_summed_per_address():
    acc = SumCounts()
    acc.add({"owner_address": "0xAbC", "balance": "2"}, page=0)
    acc.add({"owner_address": "0xabc", "balance": "3"}, page=1)
    assert acc.holders == {"0xabc": 5}
    assert acc.size == 1


def test_erc721_balance_defaults_to_one():
    acc = SumCounts()
    acc.add({"owner_address": "0xa"}, page=0)
    acc.add({"owner_address": "0xa", "balance": ""}, page=0)
    acc.add({"owner_address": "0xa", "balance": "lots"}, page=0)
    assert acc.holders == {"0xa": 3}


def test_erc20_last_write_wins_and_logs_one_duplicate():
    acc = LastWriteWins()
    acc.add({"owner_address": "0xA", "balance": "100"}, page=0)
    acc.add({"owner_address": "0xb", "balance": "7"}, page=0)
    acc.add({"owner_address": "0xa", "balance": "250"}, page=1)
    assert acc.holders == {"0xa": "250", "0xb": "7"}
    assert acc.size == 2
    assert acc.duplicates == [DuplicateEvent(address="0xa", page=1, previous="100", current="250")]


def test_erc20_balances_go_through_the_converter():
    acc = LastWriteWins(convert=lambda raw: f"converted:{raw}")
    acc.add({"owner_address": "0xa"}, page=0)
    assert acc.holders == {"0xa": "converted:0"}


def test_records_without_owner_are_ignored():
    acc = LastWriteWins()
    acc.add({"balance": "1"}, page=0)
    acc.add("not a record", page=0)
    assert acc.size == 0


def test_count_only_counts_every_record():
    acc = CountOnly()
    for _ in range(3):
        acc.add({"token_id": "1"}, page=0)
    assert acc.size == 3
