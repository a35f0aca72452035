"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers or instances multiplies the
  effective limit by the number of processes.
- Thread-safe: the whole check-and-increment runs under one lock.
- State is lost on restart.
"""

from __future__ import annotations

import math
import threading
import time
from typing import Callable, Iterator

from app.adapters.rate_limit.base import (
    AbstractRateLimiter,
    AbstractRateLimitStore,
    RateLimitEntry,
    RateLimitPolicy,
    RateLimitResult,
)


class InMemoryRateLimitStore(AbstractRateLimitStore):
    """Dictionary-backed store scoped to the current process."""

    def __init__(self) -> None:
        self._entries: dict[str, RateLimitEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> RateLimitEntry | None:
        return self._entries.get(key)

    def set(self, key: str, entry: RateLimitEntry) -> None:
        self._entries[key] = entry

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def items(self) -> Iterator[tuple[str, RateLimitEntry]]:
        # Snapshot so callers can delete while iterating
        return iter(list(self._entries.items()))


class FixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed window that starts with a key's first request.

    The first request for a key opens a window of ``policy.window_ms``; the
    key is admitted until ``policy.max_requests`` is reached, then rejected
    until the window expires. Expired entries are swept opportunistically
    during checks, at most once per ``cleanup_interval_seconds``, so no
    background task is needed.
    """

    def __init__(
        self,
        *,
        store: AbstractRateLimitStore | None = None,
        clock: Callable[[], float] = time.time,
        cleanup_interval_seconds: float = 60,
    ) -> None:
        """Initialize the limiter.

        Args:
            store: Entry storage; defaults to a fresh in-memory store.
            clock: Time source returning UNIX time in seconds.
            cleanup_interval_seconds: Minimum delay between expired-entry sweeps.

        Raises:
            ValueError: If cleanup_interval_seconds is negative.
        """
        if cleanup_interval_seconds < 0:
            raise ValueError("cleanup_interval_seconds must be >= 0")

        self._store = store if store is not None else InMemoryRateLimitStore()
        self._clock = clock
        self._cleanup_interval_ms = int(cleanup_interval_seconds * 1000)
        self._lock = threading.RLock()
        self._last_cleanup_ms = self._now_ms()

    @property
    def store(self) -> AbstractRateLimitStore:
        return self._store

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _cleanup_locked(self, now_ms: int) -> None:
        """Drop entries whose window has expired, if the sweep interval elapsed."""
        if now_ms - self._last_cleanup_ms < self._cleanup_interval_ms:
            return

        self._last_cleanup_ms = now_ms
        for key, entry in self._store.items():
            if entry.reset_at < now_ms:
                self._store.delete(key)

    def check_and_admit(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        """Check the window for ``key`` and record the request if admitted.

        Args:
            key: Rate limit key.
            policy: Quota to enforce for this key.

        Returns:
            RateLimitResult with the admission decision and window metadata.
        """
        with self._lock:
            now_ms = self._now_ms()
            self._cleanup_locked(now_ms)

            entry = self._store.get(key)

            if entry is None or entry.reset_at < now_ms:
                reset_at = now_ms + policy.window_ms
                self._store.set(key, RateLimitEntry(key=key, count=1, reset_at=reset_at))
                return RateLimitResult(
                    allowed=True,
                    remaining=policy.max_requests - 1,
                    reset_at=reset_at,
                )

            if entry.count >= policy.max_requests:
                retry_after = max(1, math.ceil((entry.reset_at - now_ms) / 1000))
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    reset_at=entry.reset_at,
                    retry_after=retry_after,
                )

            entry.count += 1
            self._store.set(key, entry)
            return RateLimitResult(
                allowed=True,
                remaining=max(0, policy.max_requests - entry.count),
                reset_at=entry.reset_at,
            )
