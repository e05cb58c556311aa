"""Retry policies and how the engine consults them."""

from __future__ import annotations

import pytest

from inscribememaybe.engine.inscriber import Inscriber
from inscribememaybe.engine.retry import BoundedRetry, ExponentialBackoff, RetryForever
from inscribememaybe.errors import RetriesExhaustedError
from inscribememaybe.models.config import RetryConfig, RetryStrategy
from inscribememaybe.models.records import SubmissionResult, SubmissionStatus

from tests.conftest import MINT_CALLDATA
from tests.mocks import CONFIRM, FAIL_BROADCAST, NO_RECEIPT, MockSender, always, fail_first

NO_RECEIPT_RESULT = SubmissionResult(nonce=0, status=SubmissionStatus.NO_RECEIPT)


class RecordingPolicy:
    """Retries immediately and records each consultation."""

    def __init__(self) -> None:
        self.calls: list[tuple[int, int, SubmissionStatus]] = []

    def next_delay(self, nonce, attempt, result):
        self.calls.append((nonce, attempt, result.status))
        return 0.0


def make_engine(sender: MockSender, policy, **overrides) -> Inscriber:
    kwargs = dict(
        sender=sender,
        sender_address=sender.address,
        chain_id=sender.chain_id,
        payload=MINT_CALLDATA,
        initial_nonce=sender.nonce,
        transactions=1,
        concurrency=1,
        retry_policy=policy,
    )
    kwargs.update(overrides)
    return Inscriber(**kwargs)


# ── Policies ──────────────────────────────────────────────────────


def test_retry_forever_never_gives_up():
    policy = RetryForever()
    assert policy.next_delay(0, 1, NO_RECEIPT_RESULT) == 0.0
    assert policy.next_delay(0, 10_000, NO_RECEIPT_RESULT) == 0.0


def test_bounded_retry_stops_at_max_attempts():
    policy = BoundedRetry(3)
    assert policy.next_delay(0, 1, NO_RECEIPT_RESULT) == 0.0
    assert policy.next_delay(0, 2, NO_RECEIPT_RESULT) == 0.0
    assert policy.next_delay(0, 3, NO_RECEIPT_RESULT) is None


def test_bounded_retry_rejects_zero():
    with pytest.raises(ValueError):
        BoundedRetry(0)


def test_exponential_backoff_doubles_and_caps():
    policy = ExponentialBackoff(base_delay=1.0, max_delay=5.0)
    delays = [policy.next_delay(0, n, NO_RECEIPT_RESULT) for n in range(1, 6)]
    assert delays == [1.0, 2.0, 4.0, 5.0, 5.0]


def test_exponential_backoff_huge_attempt_count():
    policy = ExponentialBackoff(base_delay=0.5, max_delay=30.0)
    assert policy.next_delay(0, 100_000, NO_RECEIPT_RESULT) == 30.0


def test_exponential_backoff_with_cap():
    policy = ExponentialBackoff(base_delay=1.0, max_attempts=2)
    assert policy.next_delay(0, 1, NO_RECEIPT_RESULT) == 1.0
    assert policy.next_delay(0, 2, NO_RECEIPT_RESULT) is None


@pytest.mark.parametrize(
    "kwargs",
    [{"base_delay": -1.0}, {"max_delay": -1.0}, {"max_attempts": 0}],
)
def test_exponential_backoff_rejects_bad_arguments(kwargs):
    with pytest.raises(ValueError):
        ExponentialBackoff(**kwargs)


def test_retry_config_builds_policies():
    assert isinstance(RetryConfig().build_policy(), RetryForever)

    bounded = RetryConfig(strategy=RetryStrategy.BOUNDED, max_attempts=4).build_policy()
    assert isinstance(bounded, BoundedRetry)
    assert bounded.max_attempts == 4

    backoff = RetryConfig(
        strategy=RetryStrategy.BACKOFF, base_delay=0.5, max_delay=8.0,
    ).build_policy()
    assert isinstance(backoff, ExponentialBackoff)
    assert backoff.base_delay == 0.5
    assert backoff.max_delay == 8.0
    assert backoff.max_attempts is None


# ── Engine integration ────────────────────────────────────────────


async def test_engine_consults_policy_with_attempt_count():
    sender = MockSender(nonce=5, script=fail_first(2, NO_RECEIPT))
    policy = RecordingPolicy()
    engine = make_engine(sender, policy)

    events = [e async for e in engine]

    assert [e.nonce for e in events] == [5]
    assert policy.calls == [
        (5, 1, SubmissionStatus.NO_RECEIPT),
        (5, 2, SubmissionStatus.NO_RECEIPT),
    ]


async def test_engine_raises_when_policy_gives_up():
    sender = MockSender(nonce=9, script=always(FAIL_BROADCAST))
    engine = make_engine(sender, BoundedRetry(2))

    with pytest.raises(RetriesExhaustedError) as exc_info:
        async for _ in engine:
            pass

    err = exc_info.value
    assert err.nonce == 9
    assert err.attempts == 2
    assert err.last_result.status is SubmissionStatus.FAILED
    assert "broadcast_failed" in str(err)
    assert sender.attempts == {9: 2}
    assert engine.in_flight == 0


async def test_backoff_delay_keeps_the_slot():
    """A nonce waiting out its backoff still occupies its slot."""
    sender = MockSender(nonce=0, script=lambda n, a: FAIL_BROADCAST if (n, a) == (0, 1) else CONFIRM)
    engine = make_engine(
        sender,
        ExponentialBackoff(base_delay=0.01, max_delay=0.01),
        transactions=2,
        concurrency=1,
    )

    events = [e async for e in engine]

    assert [e.nonce for e in events] == [0, 1]
    assert [r.nonce for r in sender.requests] == [0, 0, 1]
    assert sender.max_active == 1


async def test_confirmed_sibling_is_emitted_before_giving_up():
    """Nonce 1 confirms in the same wake-up that nonce 0 runs out of attempts."""
    sender = MockSender(
        nonce=0,
        script=lambda n, a: FAIL_BROADCAST if n == 0 else CONFIRM,
        latency={1: 0},
    )
    engine = make_engine(sender, BoundedRetry(1), transactions=2, concurrency=2)

    seen = []
    with pytest.raises(RetriesExhaustedError) as exc_info:
        async for event in engine:
            seen.append(event.nonce)

    assert seen == [1]
    assert len(sender.receipts) == 1
    assert engine.confirmed == 1
    assert exc_info.value.nonce == 0
    assert engine.in_flight == 0
