"""Tests for the loading cache."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from typed_records.cache import LoadingCache


class Interrupted(BaseException):
    pass


class TestLoadingCache:
    """Tests for LoadingCache."""

    def test_loads_once_per_key(self):
        """Test that each key is loaded once."""
        calls = []

        def loader(key):
            calls.append(key)
            return key * 2

        cache = LoadingCache(loader)
        assert cache.get(2) == 4
        assert cache.get(2) == 4
        assert cache.get(3) == 6
        assert calls == [2, 3]
        assert len(cache) == 2
        assert 2 in cache
        assert 5 not in cache

    def test_failure_is_remembered(self):
        """Test that a failed load is raised again without reloading."""
        calls = []

        def loader(key):
            calls.append(key)
            raise LookupError(key)

        cache = LoadingCache(loader)
        with pytest.raises(LookupError):
            cache.get("a")
        with pytest.raises(LookupError):
            cache.get("a")
        assert calls == ["a"]

    def test_interrupt_is_not_remembered(self):
        """Test that an interrupted load is retried."""
        attempts = []

        def loader(key):
            attempts.append(key)
            if len(attempts) == 1:
                raise Interrupted()
            return "ok"

        cache = LoadingCache(loader)
        with pytest.raises(Interrupted):
            cache.get("a")
        assert "a" not in cache
        assert cache.get("a") == "ok"

    def test_single_flight(self):
        """Test that concurrent callers share one load."""
        calls = []
        lock = threading.Lock()

        def loader(key):
            with lock:
                calls.append(key)
            time.sleep(0.05)
            return object()

        cache = LoadingCache(loader)
        barrier = threading.Barrier(6)

        def get(_):
            barrier.wait()
            return cache.get("key")

        with ThreadPoolExecutor(max_workers=6) as pool:
            results = list(pool.map(get, range(6)))

        assert calls == ["key"]
        assert all(r is results[0] for r in results)

    def test_waiters_see_failure(self):
        """Test that callers waiting on a failed load all see the error."""
        def loader(key):
            time.sleep(0.05)
            raise LookupError(key)

        cache = LoadingCache(loader)
        barrier = threading.Barrier(4)

        def get(_):
            barrier.wait()
            try:
                cache.get("key")
            except LookupError as e:
                return e
            return None

        with ThreadPoolExecutor(max_workers=4) as pool:
            errors = list(pool.map(get, range(4)))

        assert all(isinstance(e, LookupError) for e in errors)
