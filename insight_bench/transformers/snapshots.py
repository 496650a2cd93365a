from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import pandas as pd
import pandera as pa
from pandera import Check, Column


HOLDER_SCHEMA = pa.DataFrameSchema(
    {
        "address": Column(str, Check.str_length(min_value=1)),
        "balance": Column(str),
        "pending_balance_update": Column(str, nullable=True),
        "line_number": Column(int, Check.ge(1)),
    }
)

# (label, min, max); max None means unbounded
HOLDING_RANGES: List[Tuple[str, float, Optional[float]]] = [
    ("> 1M tokens", 1_000_000, None),
    ("100K - 1M tokens", 100_000, 999_999.99),
    ("10K - 100K tokens", 10_000, 99_999.99),
    ("1K - 10K tokens", 1_000, 9_999.99),
    ("100 - 1K tokens", 100, 999.99),
    ("10 - 100 tokens", 10, 99.99),
    ("1 - 10 tokens", 1, 9.99),
    ("< 1 token", 0, 0.99),
]

DUST_RANGES: List[Tuple[str, float, Optional[float]]] = [
    ("0.1 - 1 tokens", 0.1, 0.999999),
    ("0.01 - 0.1 tokens", 0.01, 0.099999),
    ("0.001 - 0.01 tokens", 0.001, 0.009999),
    ("0.0001 - 0.001 tokens", 0.0001, 0.000999),
    ("0.00001 - 0.0001 tokens", 0.00001, 0.00009999),
    ("0.000001 - 0.00001 tokens", 0.000001, 0.000009999),
    ("0.0000001 - 0.000001 tokens", 0.0000001, 0.0000009999),
    ("0.00000001 - 0.0000001 tokens", 0.00000001, 0.00000009999),
    ("0.000000001 - 0.00000001 tokens", 0.000000001, 0.000000009999),
    ("< 0.000000001 tokens (dust)", 0, 0.000000000999),
]


def validate_holders(frame: pd.DataFrame) -> pd.DataFrame:
    return HOLDER_SCHEMA.validate(frame)


def parse_balances(balances: pd.Series) -> pd.Series:
    """Display balances ("1,234.5") as floats; unparseable values become NaN."""
    return pd.to_numeric(balances.astype(str).str.replace(",", "", regex=False), errors="coerce")


def with_numeric_balance(frame: pd.DataFrame) -> pd.DataFrame:
    return frame.assign(
        key=frame["address"].str.lower(),
        amount=parse_balances(frame["balance"]),
    )


def index_by_address(frame: pd.DataFrame) -> pd.DataFrame:
    """One row per lower-cased address; a repeated address keeps its last row."""
    enriched = with_numeric_balance(frame)
    return enriched.drop_duplicates(subset="key", keep="last").set_index("key")


@dataclass
class HolderDiff:
    only_left: pd.DataFrame
    only_right: pd.DataFrame
    balance_differences: pd.DataFrame
    left_count: int
    right_count: int


def diff_holders(left: pd.DataFrame, right: pd.DataFrame, threshold: float = 0.001) -> HolderDiff:
    """Set difference of two holder snapshots plus balance drift on shared holders."""
    left_idx = index_by_address(left)
    right_idx = index_by_address(right)

    only_left = left_idx[~left_idx.index.isin(right_idx.index)]
    only_right = right_idx[~right_idx.index.isin(left_idx.index)]

    shared = left_idx.join(right_idx, how="inner", lsuffix="_left", rsuffix="_right")
    shared = shared.assign(difference=(shared["amount_left"] - shared["amount_right"]).abs())
    drift = shared[shared["difference"] > threshold]
    differences = pd.DataFrame(
        {
            "address": drift["address_left"],
            "left_balance": drift["balance_left"],
            "right_balance": drift["balance_right"],
            "difference": drift["difference"],
        }
    ).sort_values("difference", ascending=False, kind="stable")

    return HolderDiff(
        only_left=only_left.sort_values("amount", ascending=False, kind="stable").reset_index(drop=True),
        only_right=only_right.sort_values("amount", ascending=False, kind="stable").reset_index(drop=True),
        balance_differences=differences.reset_index(drop=True),
        left_count=len(left_idx),
        right_count=len(right_idx),
    )


def find_duplicates(frame: pd.DataFrame) -> pd.DataFrame:
    """Addresses occurring more than once, most frequent first."""
    enriched = frame.assign(key=frame["address"].str.lower())
    grouped = enriched.groupby("key", sort=False).agg(
        occurrences=("address", "size"),
        balances=("balance", list),
        line_numbers=("line_number", list),
    )
    dups = grouped[grouped["occurrences"] > 1]
    dups = dups.assign(consistent=dups["balances"].map(lambda values: len(set(values)) == 1))
    return (
        dups.sort_values("occurrences", ascending=False, kind="stable")
        .rename_axis("address")
        .reset_index()
    )


@dataclass
class BalanceSummary:
    count: int
    total: float
    average: float
    median: float
    largest: float
    smallest: float


def summarize_balances(frame: pd.DataFrame) -> BalanceSummary:
    amounts = parse_balances(frame["balance"]).dropna()
    if amounts.empty:
        return BalanceSummary(0, 0.0, 0.0, 0.0, 0.0, 0.0)
    return BalanceSummary(
        count=len(amounts),
        total=float(amounts.sum()),
        average=float(amounts.mean()),
        median=float(amounts.median()),
        largest=float(amounts.max()),
        smallest=float(amounts.min()),
    )


def balance_distribution(frame: pd.DataFrame, ranges: Sequence[Tuple[str, float, Optional[float]]] = HOLDING_RANGES) -> pd.DataFrame:
    amounts = parse_balances(frame["balance"]).dropna()
    rows = []
    for label, low, high in ranges:
        mask = amounts >= low
        if high is not None:
            mask &= amounts <= high
        count = int(mask.sum())
        rows.append(
            {
                "label": label,
                "count": count,
                "percentage": count / len(amounts) * 100 if len(amounts) else 0.0,
            }
        )
    return pd.DataFrame(rows, columns=["label", "count", "percentage"])


@dataclass
class SmallBalanceReport:
    holders: int
    small: pd.DataFrame
    summary: BalanceSummary
    distribution: pd.DataFrame
    zero_count: int
    near_zero_count: int
    share_of_supply: float


def small_balance_report(frame: pd.DataFrame, below: float = 1.0) -> SmallBalanceReport:
    enriched = with_numeric_balance(frame)
    small = enriched[enriched["amount"] < below].sort_values("amount", kind="stable").reset_index(drop=True)
    summary = summarize_balances(small)
    supply = float(enriched["amount"].sum())
    return SmallBalanceReport(
        holders=len(enriched),
        small=small,
        summary=summary,
        distribution=balance_distribution(small, DUST_RANGES),
        zero_count=int((small["amount"] == 0).sum()),
        near_zero_count=int(((small["amount"] > 0) & (small["amount"] < 1e-12)).sum()),
        share_of_supply=summary.total / supply * 100 if supply else 0.0,
    )
