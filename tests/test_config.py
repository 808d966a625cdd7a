from __future__ import annotations

import pytest

from paramify.config import ParamifyConfig
from paramify.exceptions import ParamifyConfigError

_ENV_KEYS = (
    "PARAMIFY_USGS_BASE_URL",
    "PARAMIFY_UPDATE_INTERVAL_SECONDS",
    "PARAMIFY_MAX_RETRIES",
    "PARAMIFY_DEFAULT_FLOOD_THRESHOLD",
    "PARAMIFY_REQUEST_TIMEOUT",
    "PARAMIFY_MAX_RESPONSE_BYTES",
    "PARAMIFY_TRUNCATE_FLOOD_LEVEL",
    "PARAMIFY_CONTROLLERS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_environment() -> None:
    config = ParamifyConfig.from_env()

    assert config == ParamifyConfig()
    assert config.usgs_base_url == "https://waterservices.usgs.gov/nwis/iv/"
    assert config.update_interval_seconds == 300
    assert config.default_flood_threshold == 12.0
    assert config.truncate_flood_level is True
    assert config.controllers == ()


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARAMIFY_USGS_BASE_URL", "http://gauges.test/iv/")
    monkeypatch.setenv("PARAMIFY_UPDATE_INTERVAL_SECONDS", "120")
    monkeypatch.setenv("PARAMIFY_DEFAULT_FLOOD_THRESHOLD", "8.5")
    monkeypatch.setenv("PARAMIFY_MAX_RESPONSE_BYTES", "4096")
    monkeypatch.setenv("PARAMIFY_TRUNCATE_FLOOD_LEVEL", "off")
    monkeypatch.setenv("PARAMIFY_CONTROLLERS", " ctrl-a, ,ctrl-b ")

    config = ParamifyConfig.from_env()

    assert config.usgs_base_url == "http://gauges.test/iv/"
    assert config.update_interval_seconds == 120
    assert config.default_flood_threshold == 8.5
    assert config.max_response_bytes == 4096
    assert config.truncate_flood_level is False
    assert config.controllers == ("ctrl-a", "ctrl-b")


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARAMIFY_UPDATE_INTERVAL_SECONDS", "not-a-number")
    monkeypatch.setenv("PARAMIFY_TRUNCATE_FLOOD_LEVEL", "false")

    config = ParamifyConfig.from_env(update_interval_seconds=90, truncate_flood_level=True)

    assert config.update_interval_seconds == 90
    assert config.truncate_flood_level is True


def test_bad_numeric_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARAMIFY_REQUEST_TIMEOUT", "soon")

    with pytest.raises(ParamifyConfigError, match="PARAMIFY_REQUEST_TIMEOUT"):
        ParamifyConfig.from_env()


def test_unrecognised_bool_keeps_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARAMIFY_TRUNCATE_FLOOD_LEVEL", "maybe")
    assert ParamifyConfig.from_env().truncate_flood_level is True
