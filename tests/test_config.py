# File: tests/test_config.py
import json
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from mail_scout.config import DEFAULT_USER_AGENTS, DelayRange, ScoutConfig, load_config

REPO_DEFAULT = Path(__file__).resolve().parents[1] / "configs" / "default.yaml"


def test_defaults():
    cfg = ScoutConfig()
    assert cfg.max_pages_per_site == 25
    assert cfg.max_links_per_page == 15
    assert cfg.max_retries == 3
    assert cfg.retry_backoff == 5.0
    assert cfg.page_timeout == 60.0
    assert (cfg.rate_limit.max_requests, cfg.rate_limit.time_window) == (8, 60.0)
    assert (cfg.rate_limit.jitter.min_seconds, cfg.rate_limit.jitter.max_seconds) == (3.0, 7.0)
    assert (cfg.settle_delay.min_seconds, cfg.settle_delay.max_seconds) == (2.0, 5.0)
    assert (cfg.site_delay.min_seconds, cfg.site_delay.max_seconds) == (10.0, 25.0)
    assert cfg.user_agents == DEFAULT_USER_AGENTS
    assert cfg.renderer == "playwright"
    assert cfg.output_dir == Path("scraped_data")


def test_shipped_default_yaml_matches_builtin_defaults():
    assert load_config(REPO_DEFAULT) == ScoutConfig()


def test_load_yaml(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "renderer": "http",
                "max_pages_per_site": 10,
                "rate_limit": {"max_requests": 4, "jitter": {"min_seconds": 1, "max_seconds": 2}},
                "user_agents": ["  Agent/1.0  ", ""],
            }
        ),
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.renderer == "http"
    assert cfg.max_pages_per_site == 10
    assert cfg.rate_limit.max_requests == 4
    assert cfg.rate_limit.time_window == 60.0
    assert cfg.rate_limit.jitter == DelayRange(min_seconds=1, max_seconds=2)
    assert cfg.user_agents == ["Agent/1.0"]


def test_load_json(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"output_dir": "out", "json_reports": True}), encoding="utf-8")
    cfg = load_config(path)
    assert cfg.output_dir == Path("out")
    assert cfg.json_reports is True


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == ScoutConfig()


def test_no_path_and_no_default_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config(None) == ScoutConfig()


def test_no_path_uses_configs_default(tmp_path, monkeypatch):
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("max_retries: 1\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    assert load_config(None).max_retries == 1


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_unsupported_suffix(tmp_path):
    path = tmp_path / "cfg.toml"
    path.write_text("x = 1", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_bad_yaml_syntax(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("rate_limit: [unclosed", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_top_level_must_be_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(TypeError):
        load_config(path)


@pytest.mark.parametrize(
    "data",
    [
        {"unknown_key": 1},
        {"max_pages_per_site": 0},
        {"renderer": "selenium"},
        {"user_agents": []},
        {"user_agents": ["   "]},
        {"site_delay": {"min_seconds": 30, "max_seconds": 10}},
        {"rate_limit": {"time_window": 0}},
    ],
)
def test_invalid_values(data):
    with pytest.raises(ValidationError):
        ScoutConfig(**data)


def test_config_is_frozen():
    cfg = ScoutConfig()
    with pytest.raises(ValidationError):
        cfg.max_retries = 10


def test_delay_range_sample_stays_in_bounds():
    rng_range = DelayRange(min_seconds=2.0, max_seconds=5.0)
    assert all(2.0 <= rng_range.sample() <= 5.0 for _ in range(50))
    assert DelayRange().sample() == 0.0
