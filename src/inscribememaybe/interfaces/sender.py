"""TransactionSender and ChainReader protocols - signing, broadcast and receipts."""

from __future__ import annotations

from typing import Protocol

from inscribememaybe.models.records import TransactionReceipt, TransactionRequest


class TransactionSender(Protocol):
    """Signs, broadcasts and confirms transactions for the engine.

    Must be safe to call repeatedly with requests that share a nonce:
    resubmitting the same request is how the engine retries.
    """

    async def sign_and_broadcast(self, request: TransactionRequest) -> str:
        """Sign the request and broadcast it. Returns the transaction hash."""
        ...

    async def await_receipt(self, tx_hash: str) -> TransactionReceipt | None:
        """Wait for the receipt. None means no receipt was obtainable."""
        ...


class ChainReader(Protocol):
    """Read-only chain queries used once before the engine starts."""

    async def get_chain_id(self) -> int:
        ...

    async def get_transaction_count(self, address: str) -> int:
        """The next nonce for `address`."""
        ...
