from __future__ import annotations

import os

from gauntlet.infra.config import GauntletConfig, load_config, load_default_env_files, load_env_file


def test_load_config_defaults(monkeypatch) -> None:
    for key in list(os.environ):
        if key.startswith("GAUNTLET_"):
            monkeypatch.delenv(key)

    assert load_config() == GauntletConfig()


def test_load_config_reads_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("GAUNTLET_SECRET_ANSWER", " Frost ")
    monkeypatch.setenv("GAUNTLET_SCAN_HOLD_SECONDS", "1.5")
    monkeypatch.setenv("GAUNTLET_SNAP_DISTANCE", "45")
    monkeypatch.setenv("GAUNTLET_TOKEN_COUNT", "4")
    monkeypatch.setenv("GAUNTLET_CAPTURE_TIMEOUT_SECONDS", "3")
    monkeypatch.setenv("GAUNTLET_SEED", "99")

    cfg = load_config()
    assert cfg.secret_answer == "Frost"
    assert cfg.scan_hold_seconds == 1.5
    assert cfg.snap_distance == 45.0
    assert cfg.token_count == 4
    assert cfg.capture_permission_timeout_seconds == 3.0
    assert cfg.seed == 99


def test_load_config_keeps_defaults_for_invalid_values(monkeypatch) -> None:
    monkeypatch.setenv("GAUNTLET_SECRET_ANSWER", "   ")
    monkeypatch.setenv("GAUNTLET_SCAN_HOLD_SECONDS", "-2")
    monkeypatch.setenv("GAUNTLET_SNAP_DISTANCE", "wide")
    monkeypatch.setenv("GAUNTLET_TOKEN_COUNT", "0")
    monkeypatch.setenv("GAUNTLET_SCAN_SETTLE_SECONDS", "-1")
    monkeypatch.setenv("GAUNTLET_SEED", "abc")

    cfg = load_config()
    defaults = GauntletConfig()
    assert cfg.secret_answer == defaults.secret_answer
    assert cfg.scan_hold_seconds == defaults.scan_hold_seconds
    assert cfg.snap_distance == defaults.snap_distance
    assert cfg.token_count == 1
    assert cfg.scan_settle_seconds == defaults.scan_settle_seconds
    assert cfg.seed is None


def test_load_env_file_strips_quotes_and_comments(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / ".env.app"
    env_file.write_text(
        "# tuning\nGAUNTLET_SECRET_ANSWER='glacier'\nBROKEN LINE\nGAUNTLET_SEED=5\n",
        encoding="utf-8",
    )
    monkeypatch.delenv("GAUNTLET_SECRET_ANSWER", raising=False)
    monkeypatch.delenv("GAUNTLET_SEED", raising=False)

    load_env_file(str(env_file))

    assert os.environ["GAUNTLET_SECRET_ANSWER"] == "glacier"
    assert os.environ["GAUNTLET_SEED"] == "5"


def test_later_env_files_win_unless_existing_is_kept(tmp_path, monkeypatch) -> None:
    base = tmp_path / ".env.app"
    local = tmp_path / ".env.app.local"
    base.write_text("GAUNTLET_SECRET_ANSWER=base\n", encoding="utf-8")
    local.write_text("GAUNTLET_SECRET_ANSWER=local\n", encoding="utf-8")
    monkeypatch.setenv("GAUNTLET_SECRET_ANSWER", "shell")

    load_default_env_files(override_existing=False, paths=(str(base), str(local)))
    assert os.environ["GAUNTLET_SECRET_ANSWER"] == "shell"

    load_default_env_files(paths=(str(base), str(local)))
    assert os.environ["GAUNTLET_SECRET_ANSWER"] == "local"
