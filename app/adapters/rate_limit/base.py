"""Rate limiter interfaces.

The HTTP layer depends on these abstractions (not the concrete implementation)
so the per-process store can later be swapped for a shared one (e.g., Redis)
without touching the routes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class RateLimitPolicy:
    """Quota applied to one key.

    Attributes:
        max_requests: Requests admitted per window.
        window_ms: Window length in milliseconds.
    """

    max_requests: int
    window_ms: int

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if self.window_ms < 1:
            raise ValueError("window_ms must be >= 1")


@dataclass
class RateLimitEntry:
    """Consumption state of one key within its current window.

    Attributes:
        key: Rate limit key (policy prefix + caller identity).
        count: Requests admitted in the current window.
        reset_at: Epoch milliseconds when the window expires.
    """

    key: str
    count: int
    reset_at: int


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a check-and-admit call.

    Attributes:
        allowed: Whether the request may proceed.
        remaining: Requests left in the current window (0 when blocked).
        reset_at: Epoch milliseconds when the current window resets.
        retry_after: Seconds to wait before retrying, set only when blocked.
    """

    allowed: bool
    remaining: int
    reset_at: int
    retry_after: int | None = None


class AbstractRateLimitStore(ABC):
    """Key-value storage for rate limit entries."""

    @abstractmethod
    def get(self, key: str) -> RateLimitEntry | None:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, entry: RateLimitEntry) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def items(self) -> Iterator[tuple[str, RateLimitEntry]]:
        """Iterate over stored entries.

        Implementations must tolerate ``delete`` being called while the
        iteration is in progress.
        """
        raise NotImplementedError


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check_and_admit(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        """Admit or reject one request for ``key`` under ``policy``.

        Args:
            key: Unique identifier (policy prefix + client IP).
            policy: Quota to enforce.

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError
