"""
Cache backends.

Backends are plain key/value stores; expiry policy belongs to the
caller. The Redis backend additionally sets a server-side TTL so
abandoned keys do not accumulate.
"""

import logging
import pickle
import threading
from typing import Any, Dict, Optional

import redis

logger = logging.getLogger(__name__)


class CacheBackend:
    """Abstract cache backend interface"""

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any, expire: Optional[int] = None) -> bool:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def incr(self, key: str) -> Optional[int]:
        """Atomically increment an integer counter, starting from 0."""
        raise NotImplementedError

    def get_counter(self, key: str) -> Optional[int]:
        """Current counter value, 0 when unset, None when it cannot be read."""
        raise NotImplementedError

    def close(self) -> None:
        pass


class MemoryBackend(CacheBackend):
    """
    In-process backend holding live objects.

    Values are returned as stored, so repeated reads hand back the
    same object.
    """

    def __init__(self) -> None:
        self._store: Dict[str, Any] = {}
        self._counters: Dict[str, int] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._store.get(key)

    def set(self, key: str, value: Any, expire: Optional[int] = None) -> bool:
        with self._lock:
            self._store[key] = value
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    def incr(self, key: str) -> Optional[int]:
        with self._lock:
            value = self._counters.get(key, 0) + 1
            self._counters[key] = value
        return value

    def get_counter(self, key: str) -> Optional[int]:
        with self._lock:
            return self._counters.get(key, 0)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


class RedisBackend(CacheBackend):
    """Redis cache backend; values are pickled."""

    def __init__(self, client: "redis.Redis") -> None:
        self.redis = client

    @classmethod
    def from_url(cls, url: str) -> "RedisBackend":
        return cls(redis.Redis.from_url(url))

    def get(self, key: str) -> Optional[Any]:
        try:
            value = self.redis.get(key)
        except redis.RedisError as e:
            logger.error(f"Cache get failed for key '{key}': {str(e)}")
            return None
        if value is None:
            return None
        try:
            return pickle.loads(value)
        except Exception as e:
            # Entries written by an incompatible release
            logger.warning(f"Discarding unreadable cache entry '{key}': {e!r}")
            self.delete(key)
            return None

    def set(self, key: str, value: Any, expire: Optional[int] = None) -> bool:
        try:
            serialized_value = pickle.dumps(value)
            if expire:
                self.redis.setex(key, expire, serialized_value)
            else:
                self.redis.set(key, serialized_value)
            return True
        except redis.RedisError as e:
            logger.error(f"Cache set failed for key '{key}': {str(e)}")
            return False

    def delete(self, key: str) -> bool:
        try:
            return self.redis.delete(key) > 0
        except redis.RedisError as e:
            logger.error(f"Cache delete failed for key '{key}': {str(e)}")
            return False

    def incr(self, key: str) -> Optional[int]:
        try:
            return int(self.redis.incr(key))
        except redis.RedisError as e:
            logger.error(f"Cache incr failed for key '{key}': {str(e)}")
            return None

    def get_counter(self, key: str) -> Optional[int]:
        try:
            value = self.redis.get(key)
        except redis.RedisError as e:
            logger.error(f"Cache counter read failed for key '{key}': {str(e)}")
            return None
        return int(value) if value is not None else 0

    def close(self) -> None:
        self.redis.close()
