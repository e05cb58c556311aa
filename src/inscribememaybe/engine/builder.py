"""Transaction builder - one ready-to-sign request per nonce."""

from __future__ import annotations

from inscribememaybe.models.records import DEFAULT_GAS_LIMIT, TransactionRequest


def build_transaction(
    nonce: int,
    payload: bytes,
    recipient: str,
    chain_id: int,
    gas: int = DEFAULT_GAS_LIMIT,
) -> TransactionRequest:
    """Build the self-transfer carrying `payload` for `nonce`.

    Zero value, fixed gas limit. Identical inputs always produce an equal
    request, which is what makes resubmitting a nonce idempotent.
    """
    if nonce < 0:
        raise ValueError(f"nonce must not be negative, got {nonce}")
    return TransactionRequest(
        nonce=nonce,
        to=recipient,
        data=bytes(payload),
        chain_id=chain_id,
        value=0,
        gas=gas,
    )
