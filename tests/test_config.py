from pathlib import Path

import pytest

from insight_bench.config import (
    DEFAULT_BASE_URL,
    ConfigError,
    ScanMode,
    build_config,
    clamp_limit,
    load_yaml,
)
from insight_bench.pipeline import parse_args


def test_defaults_with_only_a_client_id():
    config = build_config(parse_args([]), env={"X_CLIENT_ID": "abc"})

    assert config.base_url == DEFAULT_BASE_URL
    assert config.client_id == "abc"
    assert config.headers == {"x-client-id": "abc"}
    assert config.limit == 1000
    assert config.mode is ScanMode.RECENT_WINDOW
    assert config.since_hours == 24
    assert config.sort_order == "desc"
    assert config.sleep_ms == 0
    assert config.timeout is None
    assert config.collections_path == Path("collections.csv")


def test_missing_client_id_is_a_config_error():
    with pytest.raises(ConfigError, match="X_CLIENT_ID"):
        build_config(parse_args([]), env={})


def test_client_id_header_variable_is_a_fallback():
    config = build_config(parse_args([]), env={"X_CLIENT_ID_HEADER": "from-header-var"})
    assert config.client_id == "from-header-var"


def test_flags_beat_environment():
    args = parse_args(["--base-url", "https://flag.example/v1/", "--sleep-ms", "5", "--mode", "initial", "--sort", "asc"])
    env = {"X_CLIENT_ID": "abc", "BASE_URL": "https://env.example/v1", "SLEEP_MS": "100"}

    config = build_config(args, env=env)

    assert config.base_url == "https://flag.example/v1"
    assert config.sleep_ms == 5
    assert config.mode is ScanMode.FULL_HISTORY
    assert config.sort_order == "asc"


def test_environment_beats_settings():
    settings = {"insight": {"base_url": "https://yaml.example/v1", "sleep_ms": "7", "client_id": "yaml-id"}}
    env = {"X_CLIENT_ID": "env-id", "BASE_URL": "https://env.example/v1"}

    config = build_config(parse_args([]), settings, env=env)

    assert config.client_id == "env-id"
    assert config.base_url == "https://env.example/v1"
    assert config.sleep_ms == 7


def test_settings_file_expands_environment_placeholders(tmp_path):
    path = tmp_path / "insight.yaml"
    path.write_text(
        "insight:\n"
        "  client_id: \"${X_CLIENT_ID}\"\n"
        "  base_url: \"${BASE_URL}\"\n"
        "  timeout: 30\n"
    )

    settings = load_yaml(str(path), env={"X_CLIENT_ID": "from-yaml"})
    config = build_config(parse_args([]), settings, env={})

    assert settings["insight"]["base_url"] == ""
    assert config.client_id == "from-yaml"
    assert config.base_url == DEFAULT_BASE_URL
    assert config.timeout == 30


@pytest.mark.parametrize("raw, expected", [(5000, 1000), (0, 1), (-3, 1), ("250", 250), ("junk", 1000)])
def test_clamp_limit(raw, expected):
    assert clamp_limit(raw) == expected


def test_limit_flag_is_clamped():
    config = build_config(parse_args(["--limit", "5000"]), env={"X_CLIENT_ID": "abc"})
    assert config.limit == 1000
