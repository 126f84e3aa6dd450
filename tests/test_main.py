"""Tests for the CLI entry point and config handling (src/main.py)."""

import json
from unittest.mock import patch

import pytest

from main import async_main, build_parser, load_config, prune_cache, validate_config
from services.algolia import AlgoliaClient
from services.producthunt import ProductHuntClient
from services.tools import HuntTools
from timeframe.clock import FixedClock
from utils.cache import ResponseCache


@pytest.fixture
def demo_tools(mock_http, wednesday_noon_utc):
    return HuntTools(
        ProductHuntClient(http_client=mock_http, token=""),
        AlgoliaClient(http_client=mock_http),
        default_timezone="America/New_York",
        clock=FixedClock(wednesday_noon_utc),
    )


class TestLoadConfig:
    def test_project_config(self, project_root):
        config = load_config(str(project_root / "config.yaml"))
        assert config["timeframe"]["default_timezone"] == "America/New_York"
        assert config["limits"]["tool_max"] == 10
        assert validate_config(config) == []

    def test_missing_file(self, tmp_path):
        assert load_config(str(tmp_path / "missing.yaml")) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("timeframe: [unclosed", encoding="utf-8")
        assert load_config(str(path)) == {}

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        assert load_config(str(path)) == {}


class TestValidateConfig:
    def test_empty_is_valid(self):
        assert validate_config({}) == []

    def test_section_type(self):
        warnings = validate_config({"limits": "ten"})
        assert warnings == ["Config 'limits' should be dict, got str"]

    def test_unknown_timezone(self):
        warnings = validate_config({"timeframe": {"default_timezone": "Mars/Base"}})
        assert warnings == ["Unknown timeframe.default_timezone: 'Mars/Base'"]

    def test_bad_limits(self):
        warnings = validate_config({"limits": {"tool_max": 0, "search_max": "50"}})
        assert len(warnings) == 2


class TestParser:
    def test_top_defaults(self):
        args = build_parser().parse_args(["top"])
        assert args.command == "top"
        assert args.limit == 3
        assert args.order == "RANKING"
        assert args.timeframe is None

    def test_invalid_order_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["top", "--order", "POPULAR"])

    def test_search(self):
        args = build_parser().parse_args(["--json", "search", "ai agents", "--limit", "5"])
        assert args.json
        assert args.query == "ai agents"
        assert args.limit == 5

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_log_level_defaults_to_config(self):
        assert build_parser().parse_args(["window"]).log_level is None

    def test_cache_clear_flag(self):
        assert build_parser().parse_args(["cache", "--clear"]).clear
        assert not build_parser().parse_args(["cache"]).clear


class TestAsyncMain:
    async def test_window(self, demo_tools, tmp_path, capsys):
        args = build_parser().parse_args(
            ["--config", str(tmp_path / "none.yaml"), "--json", "window", "last week"]
        )
        with patch("main.build_tools", return_value=demo_tools):
            assert await async_main(args) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["window"] == {
            "postedAfter": "2024-06-03T04:00:00Z",
            "postedBefore": "2024-06-10T04:00:00Z",
            "label": "last-week",
        }

    async def test_top_prints_table(self, demo_tools, tmp_path, capsys):
        args = build_parser().parse_args(
            ["--config", str(tmp_path / "none.yaml"), "top", "--timeframe", "yesterday", "--limit", "2"]
        )
        with patch("main.build_tools", return_value=demo_tools):
            assert await async_main(args) == 0
        out = capsys.readouterr().out
        assert out.startswith("Window (yesterday): 2024-06-11T04:00:00Z -> 2024-06-12T04:00:00Z")
        assert "| 1 | LaunchPad Pro |" in out
        assert "| 3 |" not in out

    async def test_top_by_date(self, demo_tools, tmp_path, capsys):
        args = build_parser().parse_args(
            ["--config", str(tmp_path / "none.yaml"), "--json", "top", "--date", "2024-09-01", "--tz", "UTC"]
        )
        with patch("main.build_tools", return_value=demo_tools):
            assert await async_main(args) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["date"] == "2024-09-01"
        assert out["window"]["postedAfter"] == "2024-09-01T00:00:00Z"

    async def test_search(self, demo_tools, tmp_path, capsys):
        args = build_parser().parse_args(["--config", str(tmp_path / "none.yaml"), "search", "mock"])
        with patch("main.build_tools", return_value=demo_tools):
            assert await async_main(args) == 0
        assert "| 1 | Mocktail |" in capsys.readouterr().out

    async def test_bad_timezone_exit_code(self, demo_tools, tmp_path, capsys):
        args = build_parser().parse_args(
            ["--config", str(tmp_path / "none.yaml"), "window", "today", "--tz", "Nowhere/City"]
        )
        with patch("main.build_tools", return_value=demo_tools):
            assert await async_main(args) == 1
        assert "Unknown timezone: Nowhere/City" in capsys.readouterr().err


class TestCacheCommand:
    def _seed(self, cache_dir):
        cache = ResponseCache(cache_dir=str(cache_dir), default_ttl=60)
        with patch("utils.cache.time.time", return_value=1000.0):
            cache.set("stale", [1], ttl=1)
        cache.set("live", [2])
        return cache

    async def test_removes_only_expired(self, tmp_path, capsys):
        cache_dir = tmp_path / "cache"
        cache = self._seed(cache_dir)
        config_path = tmp_path / "config.yaml"
        config_path.write_text(f"cache:\n  dir: {cache_dir}\n", encoding="utf-8")
        args = build_parser().parse_args(["--config", str(config_path), "cache"])

        with patch("main.build_tools") as build:
            assert await async_main(args) == 0
        build.assert_not_called()

        assert cache.get("live") == [2]
        assert len(list(cache_dir.glob("*.json"))) == 1
        assert "Removed 1 cache file(s)" in capsys.readouterr().out

    def test_clear_all(self, tmp_path, capsys):
        cache_dir = tmp_path / "cache"
        self._seed(cache_dir)
        assert prune_cache({"cache": {"dir": str(cache_dir)}}, clear_all=True) == 2
        assert list(cache_dir.glob("*.json")) == []
        assert "Removed 2 cache file(s)" in capsys.readouterr().out
