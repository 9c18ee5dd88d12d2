import logging
import threading
from collections import namedtuple
from datetime import timedelta

from django.conf import settings
from django.core.cache import caches

logger = logging.getLogger(__name__)

POSTS = "posts"
FOLLOWERS = "followers"
FOLLOWING = "following"
METRICS = (POSTS, FOLLOWERS, FOLLOWING)


class AggregateKey(namedtuple("AggregateKey", ["metric", "subject_id"])):
    __slots__ = ()

    @property
    def cache_key(self):
        return f"count.{self.metric}.{self.subject_id}"


class AggregateCache:
    """
    Short-lived memoization of derived counts on top of a Django cache backend.

    The backend is injected (defaults to settings.AGGREGATE_CACHE_ALIAS) so tests can
    hand in their own. A failing backend never fails the caller: reads fall through to
    compute() and failed writes or deletes are only logged.

    With single_flight=True (default: settings.AGGREGATE_SINGLE_FLIGHT), concurrent
    misses for one key inside this process wait for a single compute() instead of
    each running their own. The lock stripes belong to the class, so instances built
    per request still share them.
    """

    lock_stripes = 64
    _locks = [threading.Lock() for _ in range(lock_stripes)]

    def __init__(self, backend=None, single_flight=None):
        self.backend = backend if backend is not None else caches[settings.AGGREGATE_CACHE_ALIAS]
        if single_flight is None:
            single_flight = settings.AGGREGATE_SINGLE_FLIGHT
        self.single_flight = single_flight

    def remember(self, key, ttl, compute):
        value = self._read(key)
        if value is not None:
            return value
        if not self.single_flight:
            return self._compute_and_store(key, ttl, compute)

        with self._locks[hash(key) % self.lock_stripes]:
            # Another caller may have filled the entry while we waited
            value = self._read(key)
            if value is not None:
                return value
            return self._compute_and_store(key, ttl, compute)

    def invalidate(self, key):
        try:
            self.backend.delete(key.cache_key)
        except Exception as e:
            logger.warning(f"Cache delete failed for {key.cache_key}: {e}")

    def invalidate_many(self, keys):
        for key in keys:
            self.invalidate(key)

    def _read(self, key):
        try:
            return self.backend.get(key.cache_key)
        except Exception as e:
            logger.warning(f"Cache read failed for {key.cache_key}, computing directly: {e}")
            return None

    def _compute_and_store(self, key, ttl, compute):
        value = compute()
        timeout = ttl.total_seconds() if isinstance(ttl, timedelta) else ttl
        try:
            self.backend.set(key.cache_key, value, timeout=timeout)
        except Exception as e:
            logger.warning(f"Cache write failed for {key.cache_key}: {e}")
        logger.debug(f"Computed {key.cache_key}={value} (ttl={timeout}s)")
        return value
