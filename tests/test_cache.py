"""Tests for the file-based response cache."""

from unittest.mock import patch

from utils.cache import ResponseCache


class TestResponseCache:
    def test_round_trip(self, tmp_path):
        cache = ResponseCache(cache_dir=str(tmp_path))
        cache.set("k", [{"name": "Alpha"}])
        assert cache.get("k") == [{"name": "Alpha"}]

    def test_missing_key(self, tmp_path):
        assert ResponseCache(cache_dir=str(tmp_path)).get("nope") is None

    def test_expired_entry_is_removed(self, tmp_path):
        cache = ResponseCache(cache_dir=str(tmp_path), default_ttl=10)
        with patch("utils.cache.time.time", return_value=1000.0):
            cache.set("k", "v")
        with patch("utils.cache.time.time", return_value=1011.0):
            assert cache.get("k") is None
        assert list(tmp_path.glob("*.json")) == []

    def test_corrupt_file_is_a_miss(self, tmp_path):
        cache = ResponseCache(cache_dir=str(tmp_path))
        cache.set("k", "v")
        cache._path_for("k").write_text("{not json", encoding="utf-8")
        assert cache.get("k") is None

    def test_make_key_ignores_param_order(self):
        a = ResponseCache.make_key("posts", {"first": 3, "order": "VOTES"})
        b = ResponseCache.make_key("posts", {"order": "VOTES", "first": 3})
        assert a == b
        assert a.startswith("posts:")

    def test_clear(self, tmp_path):
        cache = ResponseCache(cache_dir=str(tmp_path))
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.clear() == 2
        assert cache.get("a") is None

    def test_clear_expired_keeps_live_entries(self, tmp_path):
        cache = ResponseCache(cache_dir=str(tmp_path), default_ttl=60)
        with patch("utils.cache.time.time", return_value=1000.0):
            cache.set("old", 1, ttl=10)
            cache.set("live", 2)
        (tmp_path / "broken.json").write_text("{oops", encoding="utf-8")

        with patch("utils.cache.time.time", return_value=1030.0):
            assert cache.clear_expired() == 2
            assert cache.get("live") == 2
        assert len(list(tmp_path.glob("*.json"))) == 1

    def test_set_sweeps_expired_entries(self, tmp_path):
        with patch("utils.cache.time.time", return_value=1000.0):
            cache = ResponseCache(cache_dir=str(tmp_path), default_ttl=60)
            cache.set("a", 1)
            cache.set("b", 2)
        with patch("utils.cache.time.time", return_value=2000.0):
            cache.set("c", 3)
        assert len(list(tmp_path.glob("*.json"))) == 1
        with patch("utils.cache.time.time", return_value=2001.0):
            assert cache.get("c") == 3

    def test_no_sweep_within_interval(self, tmp_path):
        with patch("utils.cache.time.time", return_value=1000.0):
            cache = ResponseCache(cache_dir=str(tmp_path), default_ttl=60, sweep_interval=600)
            cache.set("a", 1, ttl=1)
        with patch("utils.cache.time.time", return_value=1100.0):
            cache.set("b", 2)
        assert len(list(tmp_path.glob("*.json"))) == 2
