import logging
import time
from typing import Any, Dict, Optional, Tuple

from insight_bench.config import BenchmarkConfig, ScanMode
from insight_bench.utils.http import HttpClient

logger = logging.getLogger(__name__)

NFT_OWNERS_PATH = "/nfts/owners/{address}"
TOKEN_OWNERS_PATH = "/tokens/owners"
TOKENS_PATH = "/tokens"
NFT_TRANSFERS_PATH = "/nfts/transfers"


def transfer_filters(mode: ScanMode, since_hours: float, now: Optional[float] = None) -> Dict[str, Any]:
    """Block filter for the transfers scan: from block 1, or a lookback window."""
    if mode == ScanMode.FULL_HISTORY:
        return {"block_number_from": 1}
    now = time.time() if now is None else now
    lookback = max(1, int(since_hours * 3600))
    return {"block_timestamp_from": int(now) - lookback}


class InsightAPI:
    def __init__(self, client: HttpClient):
        self.client = client

    @classmethod
    def from_config(cls, config: BenchmarkConfig) -> "InsightAPI":
        return cls(HttpClient(config.base_url, headers=config.headers, timeout=config.timeout))

    def get_nft_owners(self, chain_id: int, collection: str, limit: int, page: int) -> Tuple[Any, str]:
        return self.client.get(
            NFT_OWNERS_PATH.format(address=collection),
            params={"chain_id": chain_id, "limit": limit, "page": page, "include_balances": True},
        )

    def get_token_owners(self, chain_id: int, contract: str, limit: int, page: int) -> Tuple[Any, str]:
        return self.client.get(
            TOKEN_OWNERS_PATH,
            params={"chain_id": chain_id, "contract_address": contract, "limit": limit, "page": page},
        )

    def get_nft_transfers(self, chain_id: int, contract: str, limit: int, page: int, sort_order: str, filters: Dict[str, Any]) -> Tuple[Any, str]:
        params = {
            "chain_id": chain_id,
            "contract_address": contract,
            "limit": limit,
            "sort_order": sort_order,
        }
        params.update(filters)
        params["page"] = page
        return self.client.get(NFT_TRANSFERS_PATH, params=params)

    def get_token_decimals(self, chain_id: int, token: str, owner: str) -> Optional[int]:
        """Look up token decimals through /tokens, probing with a known holder."""
        body, _ = self.client.get(
            TOKENS_PATH,
            params={
                "chain_id": chain_id,
                "token_address": token,
                "owner_address": owner,
                "limit": 1,
                "metadata": True,
            },
        )
        data = body.get("data") if isinstance(body, dict) else None
        if isinstance(data, list) and data and isinstance(data[0], dict):
            decimals = data[0].get("decimals")
            if decimals is None:
                return None
            try:
                return int(decimals)
            except (TypeError, ValueError):
                logger.warning("  Unusable decimals %r in token metadata for %s", decimals, token)
        return None
