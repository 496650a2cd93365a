import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml


ENV_PATTERN = re.compile(r"\$\{([A-Z0-9_]+)\}")

DEFAULT_BASE_URL = "https://insight.thirdweb.com/v1"
MAX_PAGE_LIMIT = 1000


class ConfigError(RuntimeError):
    """Raised when the run cannot start because required settings are missing."""


class ScanMode(str, Enum):
    FULL_HISTORY = "initial"
    RECENT_WINDOW = "incremental"


def _expand_env(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        def replace(match: re.Match) -> str:
            key = match.group(1)
            return env.get(key, "")

        return ENV_PATTERN.sub(replace, value)
    if isinstance(value, dict):
        return {k: _expand_env(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v, env) for v in value]
    return value


def load_yaml(path: str, env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    data = yaml.safe_load(Path(path).read_text()) or {}
    return _expand_env(data, os.environ if env is None else env)


@dataclass(frozen=True)
class BenchmarkConfig:
    base_url: str
    client_id: str
    collections_path: Path
    limit: int = MAX_PAGE_LIMIT
    mode: ScanMode = ScanMode.RECENT_WINDOW
    since_hours: float = 24.0
    sort_order: str = "desc"
    sleep_ms: float = 0.0
    expected_owners_path: Path = Path("token-owner-data.csv")
    expected_transfers_path: Path = Path("nft-transfers.csv")
    timeout: Optional[float] = None

    @property
    def headers(self) -> Dict[str, str]:
        return {"x-client-id": self.client_id}


def clamp_limit(value: Any) -> int:
    try:
        limit = int(float(value))
    except (TypeError, ValueError):
        limit = MAX_PAGE_LIMIT
    return max(1, min(MAX_PAGE_LIMIT, limit))


def _first(*values: Any) -> Any:
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value.strip() if isinstance(value, str) else value
    return None


def build_config(args: Any, settings: Optional[Dict[str, Any]] = None, env: Optional[Mapping[str, str]] = None) -> BenchmarkConfig:
    """Resolve CLI flags, environment and YAML settings into one config object.

    Flags win over the environment, which wins over the settings file.
    """
    env = os.environ if env is None else env
    insight = (settings or {}).get("insight", {}) or {}

    client_id = _first(
        env.get("X_CLIENT_ID"),
        env.get("X_CLIENT_ID_HEADER"),
        insight.get("client_id"),
    )
    if not client_id:
        raise ConfigError("Missing X_CLIENT_ID in environment (.env).")

    base_url = _first(getattr(args, "base_url", None), env.get("BASE_URL"), insight.get("base_url"), DEFAULT_BASE_URL)
    sleep_ms = _first(getattr(args, "sleep_ms", None), env.get("SLEEP_MS"), insight.get("sleep_ms"), 0)
    timeout = _first(getattr(args, "timeout", None), insight.get("timeout"))
    mode = _first(getattr(args, "mode", None), ScanMode.RECENT_WINDOW.value)
    sort_order = _first(getattr(args, "sort", None), "desc")

    return BenchmarkConfig(
        base_url=str(base_url).rstrip("/"),
        client_id=client_id,
        collections_path=Path(_first(getattr(args, "collections", None), "collections.csv")),
        limit=clamp_limit(_first(getattr(args, "limit", None), MAX_PAGE_LIMIT)),
        mode=ScanMode.FULL_HISTORY if mode == ScanMode.FULL_HISTORY.value else ScanMode.RECENT_WINDOW,
        since_hours=float(_first(getattr(args, "since_hours", None), 24)),
        sort_order="asc" if sort_order == "asc" else "desc",
        sleep_ms=max(0.0, float(sleep_ms)),
        expected_owners_path=Path(_first(getattr(args, "expected_owners", None), "token-owner-data.csv")),
        expected_transfers_path=Path(_first(getattr(args, "expected_transfers", None), "nft-transfers.csv")),
        timeout=float(timeout) if timeout is not None else None,
    )
