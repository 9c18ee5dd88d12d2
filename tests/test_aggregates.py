import threading
import time
from datetime import timedelta
from unittest import mock

import pytest
from django.core.cache.backends.locmem import LocMemCache
from freezegun import freeze_time

from Profile.aggregates import AggregateCache, AggregateKey, FOLLOWERS, POSTS


@pytest.fixture
def backend():
    local = LocMemCache("aggregate-tests", {})
    yield local
    local.clear()


@pytest.fixture
def key():
    return AggregateKey(FOLLOWERS, 42)


def test_cache_key_format():
    assert AggregateKey(POSTS, 7).cache_key == "count.posts.7"
    assert AggregateKey(FOLLOWERS, 42).cache_key == "count.followers.42"


def test_remember_computes_once_within_ttl(backend, key):
    aggregates = AggregateCache(backend=backend)
    compute = mock.Mock(return_value=3)

    with freeze_time("2026-03-01 12:00:00") as frozen:
        assert aggregates.remember(key, 30, compute) == 3
        frozen.tick(timedelta(seconds=29))
        assert aggregates.remember(key, 30, compute) == 3
        assert compute.call_count == 1

        frozen.tick(timedelta(seconds=2))
        compute.return_value = 4
        assert aggregates.remember(key, 30, compute) == 4
        assert compute.call_count == 2


def test_ttl_may_be_a_timedelta(backend, key):
    aggregates = AggregateCache(backend=backend)
    compute = mock.Mock(return_value=1)

    with freeze_time("2026-03-01 12:00:00") as frozen:
        aggregates.remember(key, timedelta(seconds=10), compute)
        frozen.tick(timedelta(seconds=11))
        aggregates.remember(key, timedelta(seconds=10), compute)

    assert compute.call_count == 2


def test_zero_is_a_cacheable_value(backend, key):
    aggregates = AggregateCache(backend=backend)
    compute = mock.Mock(return_value=0)

    aggregates.remember(key, 30, compute)
    aggregates.remember(key, 30, compute)

    assert compute.call_count == 1


def test_invalidate_forces_recompute(backend, key):
    aggregates = AggregateCache(backend=backend)
    compute = mock.Mock(side_effect=[5, 6])

    assert aggregates.remember(key, 30, compute) == 5
    aggregates.invalidate(key)
    assert aggregates.remember(key, 30, compute) == 6


def test_invalidate_many_only_touches_given_keys(backend):
    aggregates = AggregateCache(backend=backend)
    a, b, c = AggregateKey(FOLLOWERS, 1), AggregateKey(FOLLOWERS, 2), AggregateKey(POSTS, 1)
    for k in (a, b, c):
        aggregates.remember(k, 30, lambda: 9)

    aggregates.invalidate_many([a, c])

    assert backend.get(a.cache_key) is None
    assert backend.get(c.cache_key) is None
    assert backend.get(b.cache_key) == 9


class TestBackendFailures:
    def test_read_failure_falls_back_to_compute(self, key):
        broken = mock.Mock()
        broken.get.side_effect = ConnectionError("cache down")
        aggregates = AggregateCache(backend=broken)

        assert aggregates.remember(key, 30, lambda: 11) == 11

    def test_write_failure_still_returns_value(self, key):
        broken = mock.Mock()
        broken.get.return_value = None
        broken.set.side_effect = ConnectionError("cache down")
        aggregates = AggregateCache(backend=broken)

        assert aggregates.remember(key, 30, lambda: 12) == 12
        broken.set.assert_called_once_with(key.cache_key, 12, timeout=30)

    def test_delete_failure_is_not_raised(self, key):
        broken = mock.Mock()
        broken.delete.side_effect = ConnectionError("cache down")

        AggregateCache(backend=broken).invalidate(key)

        broken.delete.assert_called_once_with(key.cache_key)


def _hammer(aggregates, key, compute, n=8):
    barrier = threading.Barrier(n)
    results = []

    def worker():
        barrier.wait()
        results.append(aggregates.remember(key, 30, compute))

    threads = [threading.Thread(target=worker) for _ in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


def _slow_counter():
    calls = []
    lock = threading.Lock()

    def compute():
        with lock:
            calls.append(1)
        time.sleep(0.05)
        return 7

    return compute, calls


def test_single_flight_shares_one_computation(backend, key):
    compute, calls = _slow_counter()

    results = _hammer(AggregateCache(backend=backend, single_flight=True), key, compute)

    assert results == [7] * 8
    assert len(calls) == 1


def test_default_mode_tolerates_duplicate_computation(backend, key):
    compute, calls = _slow_counter()

    results = _hammer(AggregateCache(backend=backend), key, compute)

    assert results == [7] * 8
    assert 1 <= len(calls) <= 8


def test_single_flight_follows_setting_across_instances(settings, backend, key):
    settings.AGGREGATE_SINGLE_FLIGHT = True
    compute, calls = _slow_counter()
    first, second = AggregateCache(backend=backend), AggregateCache(backend=backend)
    barrier = threading.Barrier(8)
    results = []

    def worker(aggregates):
        barrier.wait()
        results.append(aggregates.remember(key, 30, compute))

    threads = [threading.Thread(target=worker, args=(first if i % 2 else second,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results == [7] * 8
    assert len(calls) == 1


def test_explicit_argument_overrides_setting(settings, backend):
    settings.AGGREGATE_SINGLE_FLIGHT = True
    assert AggregateCache(backend=backend, single_flight=False).single_flight is False
