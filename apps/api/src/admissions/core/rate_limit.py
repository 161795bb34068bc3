"""
Rate Limiting Module

Admission control for write endpoints, keyed by an arbitrary string such as
"application:<phone>" or "admin:enroll:<user_id>".

Two pluggable backends:
- MemoryRateLimitBackend: fixed window per key, guarded by an asyncio.Lock.
  Per process only; counters are NOT shared between server instances.
- RedisRateLimitBackend: INCR + EXPIRE in one pipeline, shared by every
  instance pointing at the same Redis.

This is an abuse heuristic, not a security boundary: counters are not
persisted across restarts.
"""

import asyncio
import logging
import math
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from apscheduler.triggers.interval import IntervalTrigger
from redis.asyncio import Redis

from admissions.core.config import settings
from admissions.core.exceptions import RateLimitedError
from admissions.core.scheduler import register_job

logger = logging.getLogger(__name__)

JOB_ID_PURGE_RATE_LIMITS = "rate_limit_purge_expired"
PURGE_INTERVAL_MINUTES = 5


@dataclass(frozen=True)
class RateLimitPolicy:
    """Maximum attempts allowed per key inside one window."""

    max_attempts: int
    window_seconds: int

    def __post_init__(self) -> None:
        if self.max_attempts < 1 or self.window_seconds < 1:
            raise ValueError("max_attempts and window_seconds must be positive")


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    retry_after_seconds: int
    remaining: int


# Application: 2 submissions per 15 minutes per phone
APPLICATION_LIMIT = RateLimitPolicy(
    max_attempts=settings.application_rate_limit_max,
    window_seconds=settings.application_rate_limit_window_seconds,
)

# Admin writes: 30 per minute per admin and action
ADMIN_WRITE_LIMIT = RateLimitPolicy(
    max_attempts=settings.admin_rate_limit_max,
    window_seconds=settings.admin_rate_limit_window_seconds,
)


class RateLimitBackend(ABC):
    """Storage strategy for rate-limit counters."""

    @abstractmethod
    async def hit(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        """Count one attempt for key and report whether it is allowed."""


class MemoryRateLimitBackend(RateLimitBackend):
    """
    In-process fixed-window counters.

    The first hit for a key opens a window of policy.window_seconds. Hits
    beyond max_attempts inside that window are denied until it expires,
    then the counter starts over.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        # key -> (count, reset_at)
        self._windows: dict[str, tuple[int, float]] = {}
        self._lock = asyncio.Lock()

    async def hit(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        async with self._lock:
            now = self._clock()
            entry = self._windows.get(key)

            if entry is None or now >= entry[1]:
                self._windows[key] = (1, now + policy.window_seconds)
                return RateLimitResult(
                    allowed=True,
                    retry_after_seconds=0,
                    remaining=policy.max_attempts - 1,
                )

            count, reset_at = entry
            if count >= policy.max_attempts:
                return RateLimitResult(
                    allowed=False,
                    retry_after_seconds=max(1, math.ceil(reset_at - now)),
                    remaining=0,
                )

            self._windows[key] = (count + 1, reset_at)
            return RateLimitResult(
                allowed=True,
                retry_after_seconds=0,
                remaining=policy.max_attempts - count - 1,
            )

    async def purge_expired(self) -> int:
        """Drop windows that have already expired. Returns how many were removed."""
        async with self._lock:
            now = self._clock()
            expired = [key for key, (_, reset_at) in self._windows.items() if now >= reset_at]
            for key in expired:
                del self._windows[key]
            return len(expired)

    def __len__(self) -> int:
        return len(self._windows)


class RedisRateLimitBackend(RateLimitBackend):
    """Fixed-window counters stored in Redis, shared across instances."""

    KEY_PREFIX = "rate_limit:"

    def __init__(self, client: Redis):
        self._client = client

    async def hit(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        redis_key = f"{self.KEY_PREFIX}{key}"

        pipe = self._client.pipeline(transaction=True)
        pipe.incr(redis_key)
        # Only the first hit of a window sets the expiry
        pipe.expire(redis_key, policy.window_seconds, nx=True)
        pipe.ttl(redis_key)
        count, _, ttl = await pipe.execute()

        count = int(count)
        ttl = int(ttl)
        if ttl < 0:
            # Key lost its expiry somehow; never let it block forever
            await self._client.expire(redis_key, policy.window_seconds)
            ttl = policy.window_seconds

        if count > policy.max_attempts:
            return RateLimitResult(allowed=False, retry_after_seconds=max(1, ttl), remaining=0)

        return RateLimitResult(
            allowed=True,
            retry_after_seconds=0,
            remaining=policy.max_attempts - count,
        )


class RateLimiter:
    """Rate-limit service used by the workflow; wraps a backend."""

    def __init__(self, backend: RateLimitBackend):
        self.backend = backend

    async def check(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        """Count an attempt for key under policy."""
        result = await self.backend.hit(key, policy)
        if not result.allowed:
            logger.warning(
                f"Rate limit exceeded for {key}: "
                f"{policy.max_attempts}/{policy.window_seconds}s, "
                f"retry in {result.retry_after_seconds}s"
            )
        return result

    async def enforce(self, key: str, policy: RateLimitPolicy) -> None:
        """
        Like check(), but raises when the attempt is not allowed.

        Raises:
            RateLimitedError: carrying the retry-after duration
        """
        result = await self.check(key, policy)
        if not result.allowed:
            raise RateLimitedError(result.retry_after_seconds)


_rate_limiter = RateLimiter(MemoryRateLimitBackend())


def get_rate_limiter() -> RateLimiter:
    """
    Return the process-wide rate limiter.

    Usable directly or as a FastAPI dependency so tests can override it.
    """
    return _rate_limiter


def set_rate_limiter(limiter: RateLimiter) -> None:
    """Swap the process-wide rate limiter (e.g. to the Redis backend at startup)."""
    global _rate_limiter
    _rate_limiter = limiter
    logger.info(f"Rate limiter backend set to {type(limiter.backend).__name__}")


def admin_action_key(action: str, admin_id: object) -> str:
    """Rate-limit key for an admin write action."""
    return f"admin:{action}:{admin_id}"


def application_key(phone: str) -> str:
    """Rate-limit key for public application submissions."""
    return f"application:{phone}"


async def check_admin_write_limit(limiter: RateLimiter, actor_id: object | None, action: str) -> None:
    """
    Enforce ADMIN_WRITE_LIMIT for one admin action.

    Anonymous callers are skipped here; the service rejects them.

    Raises:
        RateLimitedError: If the admin exceeded the limit for this action
    """
    if actor_id is None:
        return
    await limiter.enforce(admin_action_key(action, actor_id), ADMIN_WRITE_LIMIT)


async def purge_expired_rate_limits() -> None:
    """Scheduled job: drop expired in-memory windows."""
    backend = get_rate_limiter().backend
    if not isinstance(backend, MemoryRateLimitBackend):
        return
    removed = await backend.purge_expired()
    if removed:
        logger.info(f"Purged {removed} expired rate-limit window(s)")


def register_rate_limit_jobs() -> None:
    """Register the periodic purge with the scheduler."""
    register_job(
        job_id=JOB_ID_PURGE_RATE_LIMITS,
        func=purge_expired_rate_limits,
        trigger=IntervalTrigger(minutes=PURGE_INTERVAL_MINUTES),
    )


__all__ = [
    "ADMIN_WRITE_LIMIT",
    "APPLICATION_LIMIT",
    "MemoryRateLimitBackend",
    "RateLimitBackend",
    "RateLimitPolicy",
    "RateLimitResult",
    "RateLimiter",
    "RedisRateLimitBackend",
    "admin_action_key",
    "application_key",
    "check_admin_write_limit",
    "get_rate_limiter",
    "purge_expired_rate_limits",
    "register_rate_limit_jobs",
    "set_rate_limiter",
]
