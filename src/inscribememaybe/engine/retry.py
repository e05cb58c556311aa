"""Retry policies for failed or unconfirmed submissions."""

from __future__ import annotations

from inscribememaybe.models.records import SubmissionResult


class RetryForever:
    """Resubmit immediately, forever. The default policy."""

    def next_delay(self, nonce: int, attempt: int, result: SubmissionResult) -> float | None:
        return 0.0


class BoundedRetry:
    """Resubmit immediately until a nonce has had `max_attempts` attempts."""

    def __init__(self, max_attempts: int) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts

    def next_delay(self, nonce: int, attempt: int, result: SubmissionResult) -> float | None:
        if attempt >= self.max_attempts:
            return None
        return 0.0


class ExponentialBackoff:
    """Wait base_delay * 2**(attempt-1), capped at max_delay, between attempts.

    With `max_attempts` unset the policy never gives up.
    """

    def __init__(
        self,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        max_attempts: int | None = None,
    ) -> None:
        if base_delay < 0 or max_delay < 0:
            raise ValueError("delays must not be negative")
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.max_attempts = max_attempts

    def next_delay(self, nonce: int, attempt: int, result: SubmissionResult) -> float | None:
        if self.max_attempts is not None and attempt >= self.max_attempts:
            return None
        exponent = min(attempt - 1, 62)
        return min(self.base_delay * (2 ** exponent), self.max_delay)
