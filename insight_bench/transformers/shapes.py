"""
Response-shape classification for Insight API pages.

Every decoded body is mapped onto one of three page shapes so the pagination
driver never probes raw JSON itself:

    MetaPage          {"data": {"data": [...], "meta": {"page": 0, "total_pages": 3}}}
    FlatPage          {"data": [...]}  or  {"data": {"data": [...]}}
    UnrecognizedPage  anything else (counted as zero items)
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaginationMeta:
    page: int
    total_pages: int

    @property
    def has_next(self) -> bool:
        # page is 0-based
        return self.page < self.total_pages - 1


@dataclass(frozen=True)
class MetaPage:
    items: List[Dict[str, Any]]
    meta: PaginationMeta


@dataclass(frozen=True)
class FlatPage:
    items: List[Dict[str, Any]]


@dataclass(frozen=True)
class UnrecognizedPage:
    keys: List[str] = field(default_factory=list)
    error: Any = None
    message: Any = None
    result_keys: Optional[List[str]] = None
    result_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def items(self) -> List[Dict[str, Any]]:
        return []


PageShape = Union[MetaPage, FlatPage, UnrecognizedPage]


def _parse_meta(raw: Dict[str, Any]) -> Optional[PaginationMeta]:
    page = raw.get("page", raw.get("currentPage", raw.get("current_page")))
    total_pages = raw.get("total_pages", raw.get("totalPages"))
    try:
        return PaginationMeta(page=int(page), total_pages=int(total_pages))
    except (TypeError, ValueError):
        return None


def _unrecognized(body: Any) -> UnrecognizedPage:
    if not isinstance(body, dict):
        return UnrecognizedPage()
    result = body.get("result")
    result_keys = None
    result_counts: Dict[str, int] = {}
    if isinstance(result, dict):
        result_keys = list(result.keys())
        for name in ("owners", "transfers"):
            if isinstance(result.get(name), list):
                result_counts[name] = len(result[name])
    return UnrecognizedPage(
        keys=list(body.keys()),
        error=body.get("error"),
        message=body.get("message"),
        result_keys=result_keys,
        result_counts=result_counts,
    )


def classify_response(body: Any) -> PageShape:
    data = body.get("data") if isinstance(body, dict) else None

    if isinstance(data, dict) and isinstance(data.get("meta"), dict):
        meta = _parse_meta(data["meta"])
        nested = data.get("data")
        if isinstance(nested, list):
            if meta is not None:
                return MetaPage(items=nested, meta=meta)
            # incomplete meta falls through to the page-size rule
            return FlatPage(items=nested)
        return _unrecognized(body)

    if isinstance(data, list):
        return FlatPage(items=data)
    if isinstance(data, dict) and isinstance(data.get("data"), list):
        return FlatPage(items=data["data"])

    return _unrecognized(body)


def describe_unrecognized(shape: UnrecognizedPage, url: str) -> None:
    """Log what the body looked like so a shape miss can be debugged by hand."""
    logger.warning("  🔍 DEBUG: Response structure for %s", url)
    logger.warning("  Response keys: %s", ", ".join(shape.keys))
    if shape.result_keys is not None:
        logger.warning("  Result keys: %s", ", ".join(shape.result_keys))
        for name, count in shape.result_counts.items():
            logger.warning("  %s count: %d", name.capitalize(), count)
    if shape.error is not None:
        logger.warning("  ❌ API Error: %s", json.dumps(shape.error, default=str))
    if shape.message is not None:
        logger.warning("  📄 Message: %s", shape.message)


def has_next_page(shape: PageShape, limit: int) -> bool:
    items = len(shape.items)
    if items == 0:
        return False
    if isinstance(shape, MetaPage):
        return shape.meta.has_next
    return items == limit
