"""RetryPolicy protocol - decides whether and when a nonce is resubmitted."""

from __future__ import annotations

from typing import Protocol

from inscribememaybe.models.records import SubmissionResult


class RetryPolicy(Protocol):
    """Routes failed or unconfirmed attempts back into the engine."""

    def next_delay(self, nonce: int, attempt: int, result: SubmissionResult) -> float | None:
        """Seconds to wait before resubmitting `nonce`, or None to give up.

        `attempt` is the number of attempts already made for this nonce.
        """
        ...
