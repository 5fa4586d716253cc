from pathlib import Path

import pytest

from kbsearch.core.config import DEFAULT_EXCLUDE_PATTERNS, Config


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "KBSEARCH_SETTINGS_FILE",
        "KBSEARCH_EXCLUDE_PATTERNS",
        "KBSEARCH_RIPGREP_PATH",
        "KBSEARCH_APP_ROOT",
        "KBSEARCH_RIPGREP_FROM_PATH",
        "KBSEARCH_MAX_CONCURRENCY",
        "KBSEARCH_SEARCH_TIMEOUT",
        "KBSEARCH_LOGS_DIR",
        "KBSEARCH_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    cfg = Config.load()
    assert cfg.exclude_patterns == DEFAULT_EXCLUDE_PATTERNS.split(",")
    assert cfg.exclude_patterns[:2] == ["node_modules", ".git"]
    assert cfg.ripgrep_path == ""
    assert cfg.ripgrep_from_path is True
    assert cfg.max_concurrency == 4
    assert cfg.search_timeout_seconds == 30
    assert cfg.log_to_file is True
    assert cfg.settings_file.name == "repositories.json"
    assert cfg.validate() == []


def test_environment_overrides(clean_env, tmp_path):
    clean_env.setenv("KBSEARCH_SETTINGS_FILE", str(tmp_path / "s.json"))
    clean_env.setenv("KBSEARCH_EXCLUDE_PATTERNS", " dist , ,*.log")
    clean_env.setenv("KBSEARCH_RIPGREP_FROM_PATH", "no")
    clean_env.setenv("KBSEARCH_MAX_CONCURRENCY", "0")
    clean_env.setenv("KBSEARCH_SEARCH_TIMEOUT", "2.5")
    clean_env.setenv("KBSEARCH_LOGS_DIR", str(tmp_path / "logs"))
    clean_env.setenv("KBSEARCH_LOG_FILE", "false")

    cfg = Config.load()

    assert cfg.settings_file == Path(tmp_path / "s.json")
    assert cfg.exclude_patterns == ["dist", "*.log"]
    assert cfg.ripgrep_from_path is False
    assert cfg.max_concurrency == 1
    assert cfg.search_timeout_seconds == 2.5
    assert cfg.logs_dir == tmp_path / "logs"
    assert cfg.log_to_file is False


def test_validate_reports_problems(clean_env, tmp_path):
    clean_env.setenv("KBSEARCH_SEARCH_TIMEOUT", "0")
    clean_env.setenv("KBSEARCH_RIPGREP_PATH", str(tmp_path / "missing-rg"))
    clean_env.setenv("KBSEARCH_APP_ROOT", str(tmp_path / "no-app"))

    errors = Config.load().validate()

    assert len(errors) == 3
    assert any("timeout" in e for e in errors)
