"""
retry.py - Retry policy and retry loop for tool execution.

Attempts are sequential and separated by a backoff delay. Only the
exception types listed in ``retry_on`` (TransportError by default) are
retried; anything else propagates from the attempt that raised it.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Type, TypeVar

from ..errors import ToolflowError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Backoff = Callable[[int], float]


def no_backoff(attempt: int) -> float:
    return 0.0


def constant_backoff(seconds: float) -> Backoff:
    """Wait the same delay after every failed attempt."""

    def backoff(attempt: int) -> float:
        return seconds

    return backoff


def exponential_backoff(
    base_seconds: float = 0.5,
    factor: float = 2.0,
    max_seconds: float = 30.0,
) -> Backoff:
    """Delay base * factor**(attempt - 1), capped at max_seconds.

    Example:
        >>> backoff = exponential_backoff(0.5, 2.0, 3.0)
        >>> [backoff(n) for n in (1, 2, 3, 4)]
        [0.5, 1.0, 2.0, 3.0]
    """

    def backoff(attempt: int) -> float:
        return min(max_seconds, base_seconds * factor ** max(attempt - 1, 0))

    return backoff


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to attempt a call and how long to wait between attempts.

    Attributes:
        max_attempts: Total attempts allowed, including the first (>= 1).
        backoff: Maps the number of the attempt that just failed (1-based)
            to the delay in seconds before the next attempt.
    """

    max_attempts: int = 3
    backoff: Backoff = no_backoff

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    def delay_after(self, attempt: int) -> float:
        return max(0.0, float(self.backoff(attempt)))


class RetriesExhaustedError(ToolflowError):
    """Every allowed attempt failed with a retryable error."""

    def __init__(self, attempts: int, last_error: Exception):
        super().__init__(f"execution failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


def call_with_retry(
    fn: Callable[[], T],
    policy: RetryPolicy,
    retry_on: Tuple[Type[BaseException], ...] = (TransportError,),
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Optional[Callable[[int, Exception, float], None]] = None,
) -> T:
    """Call fn until it succeeds or the policy's attempts are used up.

    Args:
        fn: Zero-argument callable to attempt.
        policy: Attempt limit and backoff.
        retry_on: Exception types that trigger another attempt.
        sleep: Sleep function (injected by tests).
        on_retry: Called with (failed_attempt, error, delay) before sleeping.

    Returns:
        The first successful return value of fn.

    Raises:
        RetriesExhaustedError: If every attempt raised a retryable error.
            The last error is chained as ``__cause__``.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return fn()
        except retry_on as exc:
            if attempt >= policy.max_attempts:
                raise RetriesExhaustedError(attempt, exc) from exc
            delay = policy.delay_after(attempt)
            if on_retry is not None:
                on_retry(attempt, exc, delay)
            if delay > 0:
                sleep(delay)
