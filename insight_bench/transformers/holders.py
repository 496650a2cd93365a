import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DuplicateEvent:
    address: str
    page: int
    previous: str
    current: str


def _owner_key(record: Any) -> Optional[str]:
    if not isinstance(record, dict):
        return None
    owner = record.get("owner_address")
    if not owner:
        return None
    return str(owner).lower()


class SumCounts:
    """ERC721 owners: per-record balances are added up per address."""

    kind = "sum-counts"

    def __init__(self) -> None:
        self.holders: Dict[str, int] = {}
        self.duplicates: List[DuplicateEvent] = []

    @property
    def size(self) -> int:
        return len(self.holders)

    def add(self, record: Dict[str, Any], page: int) -> None:
        owner = _owner_key(record)
        if owner is None:
            return
        raw = record.get("balance")
        try:
            balance = int(raw) if raw not in (None, "") else 1
        except (TypeError, ValueError):
            logger.warning("  ⚠️ Unparseable NFT balance %r for %s, counting 1", raw, owner)
            balance = 1
        self.holders[owner] = self.holders.get(owner, 0) + balance


class LastWriteWins:
    """ERC20 owners: the latest converted balance for an address replaces the earlier one."""

    kind = "last-write-wins"

    def __init__(self, convert: Callable[[str], str] = str) -> None:
        self.convert = convert
        self.holders: Dict[str, str] = {}
        self.duplicates: List[DuplicateEvent] = []

    @property
    def size(self) -> int:
        return len(self.holders)

    def add(self, record: Dict[str, Any], page: int) -> None:
        holder = _owner_key(record)
        if holder is None:
            return
        balance = self.convert(str(record.get("balance") or "0"))
        if holder in self.holders:
            event = DuplicateEvent(holder, page, self.holders[holder], balance)
            self.duplicates.append(event)
            logger.info(
                "  🔄 DUPLICATE DETECTED: %s on page %d (existing: %s, new: %s)",
                holder, page, event.previous, event.current,
            )
        self.holders[holder] = balance


class CountOnly:
    """Transfers: records are only counted."""

    kind = "count-only"

    def __init__(self) -> None:
        self.count = 0
        self.holders: Dict[str, Any] = {}
        self.duplicates: List[DuplicateEvent] = []

    @property
    def size(self) -> int:
        return self.count

    def add(self, record: Dict[str, Any], page: int) -> None:
        self.count += 1
