"""Exception types raised by inscribememaybe components."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from inscribememaybe.models.records import SubmissionResult


class InscriberError(Exception):
    """Base class for all inscribememaybe errors."""


class ConfigurationError(InscriberError):
    """Fatal setup problem. Raised before any nonce is allocated."""


class InscriptionError(InscriberError, ValueError):
    """Malformed inscription payload (bad JSON, wrong op, bad field)."""


class RetriesExhaustedError(InscriberError):
    """The retry policy gave up on a nonce."""

    def __init__(self, nonce: int, attempts: int, last_result: SubmissionResult) -> None:
        self.nonce = nonce
        self.attempts = attempts
        self.last_result = last_result
        reason = last_result.error or last_result.status.value
        super().__init__(
            f"giving up on nonce {nonce} after {attempts} attempts: {reason}"
        )
