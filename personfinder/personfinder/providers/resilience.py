"""Circuit breaker and retry-with-backoff for provider adapters.

Each adapter owns exactly one :class:`CircuitBreaker`; nothing here is
shared between adapters or guarded by locks, since all mutation happens
on the event loop from the owning adapter's own success/failure hooks.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from personfinder.errors import ProviderTransientError

T = TypeVar("T")


class CircuitBreaker:
    """Per-provider failure counter.

    States:
    - CLOSED: fewer than ``max_failures`` consecutive failures, calls pass.
    - OPEN: threshold reached and the last failure is younger than
      ``open_duration``; calls are skipped.
    - HALF_OPEN: the open window elapsed; one probe call is admitted and
      concurrent calls are skipped until it settles.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(
        self,
        max_failures: int = 5,
        open_duration: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_failures = max_failures
        self.open_duration = open_duration
        self._clock = clock

        self.failure_count = 0
        self.last_failure_at: float | None = None
        self._probing = False

    @property
    def state(self) -> str:
        if self.failure_count < self.max_failures:
            return self.CLOSED
        if self._probing or self._time_until_reset() <= 0:
            return self.HALF_OPEN
        return self.OPEN

    def allow_request(self) -> bool:
        """Return False while the circuit is open (or a probe is in flight)."""
        if self.failure_count < self.max_failures:
            return True
        if self._probing:
            return False
        if self._time_until_reset() > 0:
            return False
        self._probing = True
        return True

    def record_success(self) -> None:
        self.failure_count = 0
        self._probing = False

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_at = self._clock()
        self._probing = False

    def release(self) -> None:
        """End a call that neither succeeded nor failed (404, 429, bad payload)."""
        self._probing = False

    def _time_until_reset(self) -> float:
        if self.last_failure_at is None:
            return 0.0
        elapsed = self._clock() - self.last_failure_at
        return max(0.0, self.open_duration - elapsed)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry *max_retries* times, waiting ``base_delay * exponential_base ** attempt``."""

    max_retries: int = 3
    base_delay: float = 1.0
    exponential_base: float = 2.0
    max_delay: float = 60.0

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * self.exponential_base**attempt, self.max_delay)


async def retry_async(
    func: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    retry_on: tuple[type[BaseException], ...] = (ProviderTransientError,),
    on_retry: Callable[[int, BaseException, float], None] | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``func()`` and retry on *retry_on*; the last error is re-raised."""
    attempt = 0
    while True:
        try:
            return await func()
        except retry_on as exc:
            if attempt >= policy.max_retries:
                raise
            attempt += 1
            delay = policy.delay_for(attempt)
            if on_retry:
                on_retry(attempt, exc, delay)
            await sleep(delay)
