from __future__ import annotations

from sequencer.runtime.debug_config import env_float, env_int, load_debug_config, resolve_log_level_name


def test_load_debug_config_parses_flags(monkeypatch) -> None:
    monkeypatch.setenv("SEQUENCER_DEBUG_TRANSITIONS", "1")
    monkeypatch.setenv("SEQUENCER_DEBUG_INPUT", "yes")
    monkeypatch.setenv("SEQUENCER_LOG_LEVEL", "debug")

    cfg = load_debug_config()
    assert cfg.trace_transitions is True
    assert cfg.trace_input is True
    assert cfg.log_level == "DEBUG"


def test_load_debug_config_defaults_to_disabled(monkeypatch) -> None:
    monkeypatch.delenv("SEQUENCER_DEBUG_TRANSITIONS", raising=False)
    monkeypatch.delenv("SEQUENCER_DEBUG_INPUT", raising=False)

    cfg = load_debug_config()
    assert cfg.trace_transitions is False
    assert cfg.trace_input is False


def test_resolve_log_level_prefers_sequencer_override(monkeypatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("SEQUENCER_LOG_LEVEL", "error")
    assert resolve_log_level_name() == "ERROR"

    monkeypatch.delenv("SEQUENCER_LOG_LEVEL")
    assert resolve_log_level_name() == "WARNING"

    monkeypatch.delenv("LOG_LEVEL")
    assert resolve_log_level_name(default="info") == "INFO"


def test_numeric_env_helpers_fall_back_on_garbage(monkeypatch) -> None:
    monkeypatch.setenv("SEQUENCER_TEST_INT", "abc")
    monkeypatch.setenv("SEQUENCER_TEST_FLOAT", "1.5")
    assert env_int("SEQUENCER_TEST_INT", 4) == 4
    assert env_float("SEQUENCER_TEST_FLOAT", 0.0) == 1.5
    assert env_float("SEQUENCER_TEST_MISSING", 2.5) == 2.5
