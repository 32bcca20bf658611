"""
Per-client rate limiting for the public product feed.

The limiter counts requests per client key in fixed windows. Counters live in
a store: ``InMemoryRateLimitStore`` keeps them in process memory (the limit
then applies per instance), ``RedisRateLimitStore`` shares them across
instances.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import redis
from fastapi import Depends, Request

from . import config
from .errors import RateLimitError

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class RateLimitRecord:
    """Request count for one key and the epoch-ms time its window ends."""
    count: int
    reset_time: int


class InMemoryRateLimitStore:
    """
    Process-local counters keyed by client.

    Once more than ``max_keys`` keys are held, records whose window has
    ended are dropped so the map does not grow for the life of the process.
    """

    def __init__(self, max_keys: int = 10000):
        self.max_keys = max_keys
        self._records: Dict[str, RateLimitRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def get(self, key: str) -> Optional[RateLimitRecord]:
        return self._records.get(key)

    def hit(self, key: str, limit: int, window_ms: int, now: int) -> bool:
        with self._lock:
            record = self._records.get(key)
            if record is None or now > record.reset_time:
                if record is None and len(self._records) >= self.max_keys:
                    self.purge_expired(now)
                self._records[key] = RateLimitRecord(count=1, reset_time=now + window_ms)
                return True
            if record.count >= limit:
                return False
            record.count += 1
            return True

    def purge_expired(self, now: int) -> int:
        """Drop records whose window has ended. Returns how many were removed."""
        expired = [key for key, record in self._records.items() if now > record.reset_time]
        for key in expired:
            del self._records[key]
        if expired:
            logger.info(f"Purged {len(expired)} expired rate limit records")
        return len(expired)


class RedisRateLimitStore:
    """
    Fixed-window counters in Redis, shared by every API instance.

    The first hit in a window creates the counter with a TTL equal to the
    window; the key disappears when the window ends.
    """

    def __init__(self, client: "redis.Redis", prefix: str = "ratelimit"):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str) -> "RedisRateLimitStore":
        return cls(redis.from_url(url, decode_responses=True))

    def hit(self, key: str, limit: int, window_ms: int, now: int) -> bool:
        redis_key = f"{self.prefix}:{key}"
        try:
            # Counter and TTL are created in one transaction so no key outlives its window
            with self.client.pipeline(transaction=True) as pipe:
                pipe.set(redis_key, 0, px=window_ms, nx=True)
                pipe.incr(redis_key)
                _, count = pipe.execute()
        except redis.RedisError as e:
            # Counters unavailable: let the request through rather than block the feed
            logger.warning(f"Rate limit store error for {key}: {e}")
            return True
        return count <= limit


class RateLimiter:
    """
    Allow at most ``limit`` requests per key in each ``window_ms`` window.

    Args:
        store: Counter store (in-memory or Redis)
        limit: Requests allowed per window
        window_ms: Window length in milliseconds
        clock: Returns the current time in epoch milliseconds
    """

    def __init__(
        self,
        store=None,
        limit: int = 100,
        window_ms: int = 60000,
        clock: Callable[[], int] = _now_ms,
    ):
        self.store = store if store is not None else InMemoryRateLimitStore()
        self.limit = limit
        self.window_ms = window_ms
        self.clock = clock

    def allow(self, key: str) -> bool:
        return self.store.hit(key, self.limit, self.window_ms, self.clock())


def build_rate_limiter() -> RateLimiter:
    """
    Create the limiter described by the configuration.

    Returns:
        RateLimiter backed by Redis when RATE_LIMIT_BACKEND is "redis",
        otherwise by process memory
    """
    if config.RATE_LIMIT_BACKEND == "redis":
        logger.info("Using Redis rate limit store")
        store = RedisRateLimitStore.from_url(config.REDIS_URL)
    else:
        store = InMemoryRateLimitStore(max_keys=config.RATE_LIMIT_MAX_KEYS)
    return RateLimiter(store, limit=config.RATE_LIMIT_REQUESTS, window_ms=config.RATE_LIMIT_WINDOW_MS)


def client_key(request: Request) -> str:
    """
    Derive the rate limit key for a request.

    Uses the first address in X-Forwarded-For, then the connection address.
    Clients with neither share the "unknown" bucket.
    """
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def get_rate_limiter(request: Request) -> RateLimiter:
    """FastAPI dependency returning the limiter built for this application."""
    return request.app.state.rate_limiter


def enforce_rate_limit(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
    """
    FastAPI dependency rejecting callers over their request budget.

    Raises:
        RateLimitError: 429 when the caller's window is exhausted
    """
    key = client_key(request)
    if not limiter.allow(key):
        logger.warning(f"Rate limit exceeded for {key}")
        raise RateLimitError()
