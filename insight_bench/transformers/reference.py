import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd
import pandera as pa
from pandera import Check, Column

logger = logging.getLogger(__name__)


CHAIN_ID_COLUMNS = ("chain_id", "chainId", "chainID", "Chain ID", "CHAIN_ID")
ADDRESS_COLUMNS = ("contract_address", "address", "contractAddress", "Address")
STANDARD_COLUMNS = ("erc_standard", "contract_type", "type", "Contract Type")
NAME_COLUMNS = ("name", "collection_name", "Collection Name")


COLLECTION_SCHEMA = pa.DataFrameSchema(
    {
        "chain_id": Column(int, Check.ge(0)),
        "address": Column(str, Check.str_length(min_value=1)),
        "standard": Column(str, Check.isin(["erc20", "erc721"])),
        "name": Column(str, nullable=True),
    }
)

EXPECTED_COUNT_SCHEMA = pa.DataFrameSchema(
    {
        "contract": Column(str, Check.str_matches(r"^\S+$")),
        "count": Column(int, Check.ge(0)),
    }
)


class TokenStandard(str, Enum):
    ERC20 = "erc20"
    ERC721 = "erc721"


@dataclass(frozen=True)
class CollectionTarget:
    chain_id: int
    address: str
    standard: TokenStandard
    name: Optional[str] = None

    @property
    def key(self) -> str:
        return self.address.lower()


@dataclass
class ExpectedCounts:
    token_owners: Dict[str, int] = field(default_factory=dict)
    nft_transfers: Dict[str, int] = field(default_factory=dict)


def _read_csv(path: Path) -> pd.DataFrame:
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    df.columns = [str(c).strip() for c in df.columns]
    return df


def _pick(row: pd.Series, candidates: Sequence[str]) -> Optional[str]:
    for name in candidates:
        if name in row.index:
            value = row[name]
            return value.strip() if isinstance(value, str) else value
    return None


def parse_standard(raw: str) -> Optional[TokenStandard]:
    raw = (raw or "").strip().lower()
    if "721" in raw:
        return TokenStandard.ERC721
    if "20" in raw:
        return TokenStandard.ERC20
    return None


def normalize_collections(df: pd.DataFrame) -> pd.DataFrame:
    rows = []
    for index, row in df.iterrows():
        line = int(index) + 2
        chain_raw = _pick(row, CHAIN_ID_COLUMNS)
        address = _pick(row, ADDRESS_COLUMNS) or ""
        try:
            chain_id = int(str(chain_raw).strip())
        except (TypeError, ValueError):
            chain_id = None
        if chain_id is None or not address:
            logger.warning("Skipping invalid CSV row #%d: missing chain_id or address", line)
            continue
        if chain_id < 0:
            logger.warning("Skipping invalid CSV row #%d: negative chain_id %d", line, chain_id)
            continue

        standard_raw = _pick(row, STANDARD_COLUMNS) or ""
        standard = parse_standard(standard_raw)
        if standard is None:
            logger.warning("Skipping row for %s (unknown type: %s)", address, standard_raw.strip().lower())
            continue

        rows.append(
            {
                "chain_id": chain_id,
                "address": address,
                "standard": standard.value,
                "name": _pick(row, NAME_COLUMNS) or None,
            }
        )
    normalized = pd.DataFrame(rows, columns=["chain_id", "address", "standard", "name"])
    normalized["chain_id"] = normalized["chain_id"].astype("int64")
    normalized["name"] = normalized["name"].astype(object)
    return COLLECTION_SCHEMA.validate(normalized)


def load_collections(path: Path) -> List[CollectionTarget]:
    df = normalize_collections(_read_csv(Path(path)))
    return [
        CollectionTarget(
            chain_id=int(row.chain_id),
            address=row.address,
            standard=TokenStandard(row.standard),
            name=row.name if isinstance(row.name, str) and row.name else None,
        )
        for row in df.itertuples(index=False)
    ]


def normalize_expected_counts(df: pd.DataFrame, count_column: str) -> pd.DataFrame:
    if "contract" not in df.columns or count_column not in df.columns:
        if not df.empty:
            logger.warning("Expected-count table lacks 'contract' or '%s' column", count_column)
        return EXPECTED_COUNT_SCHEMA.validate(
            pd.DataFrame({"contract": pd.Series(dtype=str), "count": pd.Series(dtype="int64")})
        )
    frame = pd.DataFrame(
        {
            "contract": df["contract"].astype(str).str.strip().str.lower(),
            "count": pd.to_numeric(df[count_column].astype(str).str.strip(), errors="coerce"),
        }
    )
    frame = frame[(frame["contract"] != "") & frame["count"].notna()]
    negative = frame["count"] < 0
    if negative.any():
        logger.warning(
            "Skipping %d expected-count rows with negative %s: %s",
            int(negative.sum()), count_column, ", ".join(frame.loc[negative, "contract"]),
        )
        frame = frame[~negative]
    frame = frame.assign(count=frame["count"].astype("int64")).reset_index(drop=True)
    return EXPECTED_COUNT_SCHEMA.validate(frame)


def load_expected_table(path: Path, count_column: str) -> Dict[str, int]:
    path = Path(path)
    if not path.exists():
        return {}
    frame = normalize_expected_counts(_read_csv(path), count_column)
    # later rows win, as with a plain dict build
    return {contract: int(count) for contract, count in zip(frame["contract"], frame["count"])}


def load_expected_counts(owners_path: Path, transfers_path: Path) -> ExpectedCounts:
    expected = ExpectedCounts()
    if Path(owners_path).exists():
        expected.token_owners = load_expected_table(owners_path, "number_of_owners")
        logger.info("Loaded %d expected token owner counts", len(expected.token_owners))
    if Path(transfers_path).exists():
        expected.nft_transfers = load_expected_table(transfers_path, "num_transfers")
        logger.info("Loaded %d expected NFT transfer counts", len(expected.nft_transfers))
    return expected
