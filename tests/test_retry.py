"""Tests for retry policies and the retry loop."""

from __future__ import annotations

import pytest

from toolflow.runtime import TransportError, ValidationError
from toolflow.runtime.stepwise.retry import (
    RetriesExhaustedError,
    RetryPolicy,
    call_with_retry,
    constant_backoff,
    exponential_backoff,
    no_backoff,
)


class FlakyCall:
    """Raises the given errors in order, then returns 'ok'."""

    def __init__(self, *errors):
        self.errors = list(errors)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


class TestBackoff:
    def test_no_backoff(self):
        assert no_backoff(1) == 0.0

    def test_constant_backoff(self):
        backoff = constant_backoff(1.5)

        assert [backoff(n) for n in (1, 2, 5)] == [1.5, 1.5, 1.5]

    def test_exponential_backoff_is_capped(self):
        backoff = exponential_backoff(base_seconds=0.5, factor=2.0, max_seconds=3.0)

        assert [backoff(n) for n in (1, 2, 3, 4, 5)] == [0.5, 1.0, 2.0, 3.0, 3.0]


class TestRetryPolicy:
    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_negative_delay_is_clamped(self):
        assert RetryPolicy(backoff=lambda attempt: -1.0).delay_after(1) == 0.0


class TestCallWithRetry:
    def test_first_attempt_success(self):
        call = FlakyCall()

        assert call_with_retry(call, RetryPolicy(max_attempts=3)) == "ok"
        assert call.calls == 1

    def test_retries_transport_errors(self):
        call = FlakyCall(TransportError("reset"), TransportError("timeout"))
        delays = []

        result = call_with_retry(call, RetryPolicy(max_attempts=3, backoff=constant_backoff(0.1)), sleep=delays.append)

        assert result == "ok"
        assert call.calls == 3
        assert delays == [0.1, 0.1]

    def test_exhaustion_chains_last_error(self):
        last = TransportError("third")
        call = FlakyCall(TransportError("first"), TransportError("second"), last)

        with pytest.raises(RetriesExhaustedError) as exc_info:
            call_with_retry(call, RetryPolicy(max_attempts=3), sleep=lambda s: None)

        assert exc_info.value.attempts == 3
        assert exc_info.value.last_error is last
        assert exc_info.value.__cause__ is last
        assert call.calls == 3

    def test_non_retryable_error_propagates_immediately(self):
        call = FlakyCall(ValidationError("bad input"))

        with pytest.raises(ValidationError):
            call_with_retry(call, RetryPolicy(max_attempts=5))

        assert call.calls == 1

    def test_on_retry_callback(self):
        seen = []
        call = FlakyCall(TransportError("reset"))

        call_with_retry(
            call,
            RetryPolicy(max_attempts=2, backoff=constant_backoff(0.2)),
            sleep=lambda s: None,
            on_retry=lambda attempt, error, delay: seen.append((attempt, str(error), delay)),
        )

        assert seen == [(1, "reset", 0.2)]

    def test_custom_retry_on(self):
        call = FlakyCall(ConnectionError("refused"))

        assert call_with_retry(call, RetryPolicy(max_attempts=2), retry_on=(ConnectionError,)) == "ok"
