"""Submission engine: builder, submission task, retry policies and dispatch loop."""

from inscribememaybe.engine.builder import build_transaction
from inscribememaybe.engine.inscriber import EngineState, Inscriber
from inscribememaybe.engine.retry import BoundedRetry, ExponentialBackoff, RetryForever
from inscribememaybe.engine.task import submit_transaction

__all__ = [
    "build_transaction",
    "EngineState", "Inscriber",
    "BoundedRetry", "ExponentialBackoff", "RetryForever",
    "submit_transaction",
]
