"""Tests for src.utils -- file cache, rate limiter, logger."""

import logging
from unittest.mock import patch

import pytest

from src.utils.cache import DataCache
from src.utils.logger import setup_logger
from src.utils.rate_limiter import RateLimiter


class TestDataCache:

    def test_set_then_get(self, tmp_path):
        cache = DataCache("unit", enabled=True, cache_root=tmp_path)
        cache.set("KO", {"price": 62.5})
        assert cache.get("KO") == {"price": 62.5}
        assert cache.get("PG") is None

    def test_expired_entry_removed(self, tmp_path):
        cache = DataCache("unit", enabled=True, cache_root=tmp_path)
        cache.set("KO", [1, 2, 3])
        cache.ttl_seconds = -1
        assert cache.get("KO") is None
        assert list((tmp_path / "unit").iterdir()) == []

    def test_disabled_cache_touches_nothing(self, tmp_path):
        cache = DataCache("unit", enabled=False, cache_root=tmp_path)
        cache.set("KO", {"price": 62.5})
        assert cache.get("KO") is None
        assert not (tmp_path / "unit").exists()

    def test_ttl_from_settings(self, tmp_path):
        cache = DataCache("company_profile", enabled=True, cache_root=tmp_path)
        assert cache.ttl_seconds == 24 * 3600

    def test_corrupt_entry_is_a_miss_and_removed(self, tmp_path):
        cache = DataCache("unit", enabled=True, cache_root=tmp_path)
        path = cache._key_path("KO")
        path.write_text('{"symbol": "KO", "na')
        assert cache.get("KO") is None
        assert not path.exists()

    def test_failed_write_keeps_previous_entry(self, tmp_path):
        cache = DataCache("unit", enabled=True, cache_root=tmp_path)
        cache.set("KO", {"price": 62.5})
        with pytest.raises(TypeError):
            cache.set("KO", {"price": object()})
        assert cache.get("KO") == {"price": 62.5}
        assert list((tmp_path / "unit").iterdir()) == [cache._key_path("KO")]


class TestRateLimiter:

    def test_under_limit_does_not_sleep(self):
        limiter = RateLimiter(calls_per_minute=5)
        with patch("src.utils.rate_limiter.time.sleep") as mock_sleep:
            for _ in range(5):
                assert limiter.wait() == 0.0
        mock_sleep.assert_not_called()

    def test_over_limit_sleeps(self):
        limiter = RateLimiter(calls_per_minute=2, window_seconds=30.0)
        with patch("src.utils.rate_limiter.time.sleep") as mock_sleep:
            limiter.wait()
            limiter.wait()
            slept = limiter.wait()
        assert slept > 0
        mock_sleep.assert_called_once()

    def test_invalid_rate(self):
        with pytest.raises(ValueError):
            RateLimiter(calls_per_minute=0)


class TestLogger:

    def test_single_handler_per_name(self):
        first = setup_logger("test_logger_unit")
        second = setup_logger("test_logger_unit", "DEBUG")
        assert first is second
        assert len(second.handlers) == 1
        assert second.level == logging.DEBUG
