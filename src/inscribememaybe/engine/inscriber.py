"""Submission engine - sends N copies of a payload with bounded concurrency."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import AsyncIterator

from inscribememaybe.engine.builder import build_transaction
from inscribememaybe.engine.retry import RetryForever
from inscribememaybe.engine.task import submit_transaction
from inscribememaybe.errors import ConfigurationError, RetriesExhaustedError
from inscribememaybe.interfaces.retry import RetryPolicy
from inscribememaybe.interfaces.sender import TransactionSender
from inscribememaybe.models.records import (
    DEFAULT_GAS_LIMIT,
    InscriptionEvent,
    SubmissionResult,
    TransactionRequest,
)

log = logging.getLogger(__name__)


class EngineState(str, Enum):
    """Where the dispatch loop is."""

    FILLING = "filling"  # below target, allocating new nonces as slots free up
    DRAINING = "draining"  # target allocated, waiting for in-flight attempts
    DONE = "done"  # every allocated nonce confirmed


class Inscriber:
    """Drives the inscription submission loop.

    Each pass of the loop:
    1. Allocates new nonces (strictly increasing) and starts a submission
       task for each while there is a free slot and the target is not reached
    2. Ends the stream once the target is allocated and nothing is in flight
    3. Waits for the next attempt to resolve
    4. Yields an InscriptionEvent for a confirmed nonce, or resubmits the
       same request for a failed/unconfirmed one as the retry policy allows

    Engine bookkeeping never awaits, so it is atomic with respect to the
    submission tasks running on the same event loop.
    """

    def __init__(
        self,
        sender: TransactionSender,
        sender_address: str,
        chain_id: int,
        payload: bytes,
        initial_nonce: int,
        transactions: int = 1,
        concurrency: int = 16,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        if transactions < 1:
            raise ConfigurationError(f"transactions must be at least 1, got {transactions}")
        if concurrency < 1:
            raise ConfigurationError(f"concurrency must be at least 1, got {concurrency}")
        if initial_nonce < 0:
            raise ConfigurationError(f"initial nonce must not be negative, got {initial_nonce}")

        self._sender = sender
        self._address = sender_address
        self._chain_id = chain_id
        self._payload = bytes(payload)
        self._gas_limit = gas_limit
        self._retry = retry_policy or RetryForever()

        self._initial_nonce = initial_nonce
        self._next_nonce = initial_nonce
        self._sent = 0
        self._target = transactions
        self._concurrency = concurrency

        self._in_flight: dict[asyncio.Task, TransactionRequest] = {}
        self._attempts: dict[int, int] = {}
        self._confirmed = 0
        self._started = False
        self._done = False

    # ── Introspection ──────────────────────────────────────

    @property
    def state(self) -> EngineState:
        if self._done:
            return EngineState.DONE
        if self._sent >= self._target:
            return EngineState.DRAINING
        return EngineState.FILLING

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    @property
    def next_nonce(self) -> int:
        return self._next_nonce

    @property
    def sent(self) -> int:
        """Distinct nonces allocated so far (not attempts)."""
        return self._sent

    @property
    def confirmed(self) -> int:
        return self._confirmed

    def attempts(self, nonce: int) -> int:
        return self._attempts.get(nonce, 0)

    # ── Event stream ───────────────────────────────────────

    def __aiter__(self) -> AsyncIterator[InscriptionEvent]:
        return self.events()

    async def events(self) -> AsyncIterator[InscriptionEvent]:
        """Yield one InscriptionEvent per confirmed nonce, in resolution order.

        Single pass: the stream can be consumed once. Closing it early
        cancels the attempts still in flight.
        """
        if self._started:
            raise RuntimeError("Inscriber event stream can only be consumed once")
        self._started = True

        log.debug(
            "start minting: from=%s chain=%d nonce=%d transactions=%d concurrency=%d",
            self._address, self._chain_id, self._initial_nonce,
            self._target, self._concurrency,
        )

        try:
            while True:
                self._fill()

                if not self._in_flight:
                    self._done = True
                    log.debug("all %d transactions confirmed", self._confirmed)
                    return

                done, _ = await asyncio.wait(
                    self._in_flight, return_when=asyncio.FIRST_COMPLETED,
                )

                # Confirmations go out before the retry policy can give up
                # on a sibling from the same wake-up.
                finished = sorted(
                    ((self._in_flight.pop(task), task.result()) for task in done),
                    key=lambda item: (not item[1].confirmed, item[0].nonce),
                )
                for request, result in finished:
                    if result.confirmed:
                        self._confirmed += 1
                        yield InscriptionEvent(
                            sender=self._address,
                            chain_id=self._chain_id,
                            nonce=request.nonce,
                            tx_hash=result.tx_hash or "",
                            receipt=result.receipt,  # type: ignore[arg-type]
                            calldata=self._payload,
                        )
                    else:
                        self._resubmit(request, result)
        finally:
            await self._cancel_in_flight()

    # ── Internals ──────────────────────────────────────────

    def _fill(self) -> None:
        """Allocate new nonces while a slot is free and the target isn't reached."""
        while len(self._in_flight) < self._concurrency and self._sent < self._target:
            nonce = self._next_nonce
            self._next_nonce += 1
            self._sent += 1
            request = build_transaction(
                nonce, self._payload, self._address, self._chain_id, self._gas_limit,
            )
            self._start(request)

    def _start(self, request: TransactionRequest, delay: float = 0.0) -> None:
        attempt = self._attempts.get(request.nonce, 0) + 1
        self._attempts[request.nonce] = attempt
        task = asyncio.ensure_future(self._attempt(request, attempt, delay))
        self._in_flight[task] = request

    async def _attempt(
        self, request: TransactionRequest, attempt: int, delay: float,
    ) -> SubmissionResult:
        # The delay runs inside the task so a backing-off nonce keeps its slot.
        if delay > 0:
            await asyncio.sleep(delay)
        return await submit_transaction(request, self._sender, attempt)

    def _resubmit(self, request: TransactionRequest, result: SubmissionResult) -> None:
        attempts = self._attempts[request.nonce]
        delay = self._retry.next_delay(request.nonce, attempts, result)
        if delay is None:
            log.error(
                "retry policy gave up on nonce %d after %d attempts (%s)",
                request.nonce, attempts, result.error or result.status.value,
            )
            raise RetriesExhaustedError(request.nonce, attempts, result)

        log.info(
            "resubmitting nonce %d (attempt %d, %s)%s",
            request.nonce, attempts + 1, result.status.value,
            f" in {delay:.1f}s" if delay else "",
        )
        self._start(request, delay)

    async def _cancel_in_flight(self) -> None:
        tasks = list(self._in_flight)
        self._in_flight.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
