from __future__ import annotations

import json
import logging

import pytest

from strainpp import config
from strainpp.hitresults import HitResultPriority


def _write_config(path, payload) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_defaults_without_a_file():
    loaded, resolved_path = config.load_config()

    assert resolved_path is None
    assert loaded.calculation.priority() is HitResultPriority.BEST_CASE
    assert loaded.logging.level == "WARNING"


def test_explicit_path_from_environment(tmp_path, monkeypatch):
    config_path = tmp_path / "custom.json"
    _write_config(config_path, {"calculation": {"hitresult_priority": "worst-case"}, "logging": {"level": "debug"}})
    monkeypatch.setenv("STRAINPP_CONFIG_PATH", str(config_path))

    loaded, resolved_path = config.load_config()

    assert resolved_path == config_path
    assert loaded.calculation.hitresult_priority == "worst_case"
    assert loaded.logging.level == "DEBUG"


def test_first_existing_candidate_is_used(tmp_path, monkeypatch):
    second = tmp_path / "second.json"
    _write_config(second, {"logging": {"level": "INFO"}})
    monkeypatch.setattr(config, "_default_config_candidates", lambda: [tmp_path / "first.json", second])

    loaded, resolved_path = config.load_config()

    assert resolved_path == second
    assert loaded.logging.level == "INFO"


def test_environment_overrides_file(tmp_path, monkeypatch):
    config_path = tmp_path / "strainpp_config.json"
    _write_config(config_path, {"calculation": {"hitresult_priority": "best_case"}})
    monkeypatch.setenv("STRAINPP_HITRESULT_PRIORITY", "worst_case")
    monkeypatch.setenv("STRAINPP_LOG_LEVEL", "error")

    loaded, _resolved_path = config.load_config(config_path)

    assert loaded.calculation.priority() is HitResultPriority.WORST_CASE
    assert loaded.logging.level == "ERROR"


def test_missing_explicit_path_is_an_error(tmp_path, monkeypatch):
    monkeypatch.setenv("STRAINPP_CONFIG_PATH", str(tmp_path / "nope.json"))

    with pytest.raises(ValueError, match="not found"):
        config.load_config()


@pytest.mark.parametrize(
    "raw_text, message",
    [
        ("{not json", "not valid JSON"),
        ("[1, 2]", "JSON object"),
        ('{"calculation": {"hitresult_priority": "median"}}', "validation failed"),
        ('{"logging": {"level": "LOUD"}}', "validation failed"),
    ],
)
def test_invalid_files_raise_value_error(tmp_path, raw_text, message):
    config_path = tmp_path / "broken.json"
    config_path.write_text(raw_text, encoding="utf-8")

    with pytest.raises(ValueError, match=message):
        config.load_config(config_path)


def test_get_config_is_cached(monkeypatch):
    first = config.get_config()
    monkeypatch.setenv("STRAINPP_HITRESULT_PRIORITY", "worst_case")

    assert config.get_config() is first
    assert config.default_hitresult_priority() is HitResultPriority.BEST_CASE

    config.get_config.cache_clear()
    assert config.default_hitresult_priority() is HitResultPriority.WORST_CASE


def test_configure_logging_uses_logging_section(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    loaded = config.StrainppConfig.model_validate({"logging": {"level": "info", "format": "%(message)s"}})
    config.configure_logging(loaded)

    assert calls == [{"level": logging.INFO, "format": "%(message)s"}]


def test_main_prints_resolved_config(capsys):
    exit_code = config.main()

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["ok"] is True
    assert payload["config_path"] is None
    assert payload["config"]["calculation"]["hitresult_priority"] == "best_case"


def test_main_reports_errors(tmp_path, monkeypatch, capsys):
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    monkeypatch.setenv("STRAINPP_CONFIG_PATH", str(broken))

    exit_code = config.main()

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 2
    assert payload["ok"] is False
