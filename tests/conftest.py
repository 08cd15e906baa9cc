from __future__ import annotations

import pytest

from sample_maps import build_sample_map, build_stream_map
from strainpp import config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep a user's own config file and environment out of the tests."""
    monkeypatch.delenv("STRAINPP_CONFIG_PATH", raising=False)
    monkeypatch.delenv("STRAINPP_HITRESULT_PRIORITY", raising=False)
    monkeypatch.delenv("STRAINPP_LOG_LEVEL", raising=False)
    monkeypatch.setattr(
        config,
        "_default_config_candidates",
        lambda: [tmp_path / "missing" / "strainpp_config.json"],
    )
    config.get_config.cache_clear()
    yield
    config.get_config.cache_clear()


@pytest.fixture
def easy_map():
    return build_sample_map(difficulty="easy")


@pytest.fixture
def medium_map():
    return build_sample_map(difficulty="medium")


@pytest.fixture
def hard_map():
    return build_sample_map(difficulty="hard")


@pytest.fixture
def stream_map():
    return build_stream_map(count=64, interval_ms=90.0)
