"""Submission task - one sign/broadcast/await attempt for a single nonce."""

from __future__ import annotations

import logging

from inscribememaybe.interfaces.sender import TransactionSender
from inscribememaybe.models.records import (
    SubmissionResult,
    SubmissionStatus,
    TransactionRequest,
)

log = logging.getLogger(__name__)


async def submit_transaction(
    request: TransactionRequest,
    sender: TransactionSender,
    attempt: int = 1,
) -> SubmissionResult:
    """Broadcast `request` once and wait for its receipt.

    Never raises for network or signing problems: those come back as a
    FAILED result so the engine can route the nonce to a retry.
    """
    nonce = request.nonce
    try:
        tx_hash = await sender.sign_and_broadcast(request)
    except Exception as exc:
        log.warning("broadcast failed for nonce %d (attempt %d): %s", nonce, attempt, exc)
        return SubmissionResult(
            nonce=nonce,
            status=SubmissionStatus.FAILED,
            error=f"broadcast_failed:{exc}",
            attempt=attempt,
        )

    log.debug("broadcast nonce %d (attempt %d) tx=%s", nonce, attempt, tx_hash)

    try:
        receipt = await sender.await_receipt(tx_hash)
    except Exception as exc:
        log.warning(
            "receipt lookup failed for nonce %d tx=%s: %s", nonce, tx_hash, exc,
        )
        return SubmissionResult(
            nonce=nonce,
            status=SubmissionStatus.FAILED,
            tx_hash=tx_hash,
            error=f"receipt_failed:{exc}",
            attempt=attempt,
        )

    if receipt is None:
        log.info("no receipt for nonce %d tx=%s (attempt %d)", nonce, tx_hash, attempt)
        return SubmissionResult(
            nonce=nonce,
            status=SubmissionStatus.NO_RECEIPT,
            tx_hash=tx_hash,
            attempt=attempt,
        )

    if receipt.status != 1:
        # The nonce is consumed either way.
        log.warning("nonce %d mined but reverted tx=%s", nonce, receipt.tx_hash)

    return SubmissionResult(
        nonce=nonce,
        status=SubmissionStatus.CONFIRMED,
        tx_hash=receipt.tx_hash or tx_hash,
        receipt=receipt,
        attempt=attempt,
    )
