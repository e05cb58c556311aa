"""web3.py transaction sender - signs locally, broadcasts, waits for receipts."""

from __future__ import annotations

import logging
from typing import Any

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3, WebSocketProvider
from web3.exceptions import TimeExhausted, TransactionNotFound

from inscribememaybe.errors import ConfigurationError
from inscribememaybe.models.records import TransactionReceipt, TransactionRequest

log = logging.getLogger(__name__)

# Node error substrings for a nonce whose transaction we may already have sent
_ERROR_ALREADY_KNOWN = ("already known", "known transaction", "already imported")
_ERROR_NONCE_TOO_LOW = ("nonce too low",)
_ERROR_UNDERPRICED = ("replacement transaction underpriced",)


def _classify_error(exc: Exception) -> str:
    """Map a broadcast error message onto how it relates to earlier attempts."""
    msg = str(exc).lower()
    if any(s in msg for s in _ERROR_ALREADY_KNOWN):
        return "already_known"
    if any(s in msg for s in _ERROR_NONCE_TOO_LOW):
        return "nonce_too_low"
    if any(s in msg for s in _ERROR_UNDERPRICED):
        return "underpriced"
    return "unknown"


def _to_receipt(raw: Any) -> TransactionReceipt:
    return TransactionReceipt(
        tx_hash=AsyncWeb3.to_hex(raw["transactionHash"]),
        block_number=int(raw["blockNumber"]),
        status=int(raw.get("status", 1)),
        gas_used=int(raw.get("gasUsed", 0)),
    )


def load_account(private_key: str) -> LocalAccount:
    """Parse a hex private key. Raises ConfigurationError if it is invalid."""
    if not private_key:
        raise ConfigurationError("no private key configured")
    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError) as exc:
        raise ConfigurationError(f"invalid private key: {exc}") from exc


class Web3TransactionSender:
    """Implements TransactionSender and ChainReader on top of AsyncWeb3.

    Fees are filled at signing time (EIP-1559 when the chain reports a base
    fee, legacy gas price otherwise), so the engine's request stays the same
    across retries while each broadcast uses current prices.

    Every hash broadcast for a nonce is remembered. When a resubmission is
    rejected because the node already has the transaction, or because the
    nonce is already used, the sender resolves to the earlier broadcast so
    a late confirmation of a previous attempt still completes the nonce.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        account: LocalAccount,
        receipt_timeout: float = 120.0,
        poll_interval: float = 2.0,
    ) -> None:
        self._w3 = w3
        self._account = account
        self._receipt_timeout = receipt_timeout
        self._poll_interval = poll_interval
        self._broadcasts: dict[int, list[str]] = {}  # nonce -> hashes, oldest first
        self._nonce_of: dict[str, int] = {}

    @classmethod
    async def connect(
        cls,
        rpc_url: str,
        private_key: str,
        receipt_timeout: float = 120.0,
        poll_interval: float = 2.0,
    ) -> Web3TransactionSender:
        """Connect to `rpc_url` (http(s) or ws(s)) and load the signing key."""
        account = load_account(private_key)

        if rpc_url.startswith("ws"):
            w3 = AsyncWeb3(WebSocketProvider(rpc_url))
            try:
                await w3.provider.connect()
            except Exception as exc:
                raise ConfigurationError(f"cannot connect to {rpc_url}: {exc}") from exc
        else:
            w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))

        if not await w3.is_connected():
            raise ConfigurationError(f"RPC endpoint unreachable: {rpc_url}")

        log.debug("connected to %s as %s", rpc_url, account.address)
        return cls(w3, account, receipt_timeout, poll_interval)

    @property
    def address(self) -> str:
        return self._account.address

    async def close(self) -> None:
        disconnect = getattr(self._w3.provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()

    # ── ChainReader ────────────────────────────────────────

    async def get_chain_id(self) -> int:
        return int(await self._w3.eth.chain_id)

    async def get_transaction_count(self, address: str) -> int:
        # Pending, so transactions still in the mempool from an earlier run count too.
        return int(await self._w3.eth.get_transaction_count(address, "pending"))

    # ── TransactionSender ──────────────────────────────────

    async def sign_and_broadcast(self, request: TransactionRequest) -> str:
        tx = request.to_dict()
        tx.update(await self._fees())
        signed = self._account.sign_transaction(tx)
        tx_hash = AsyncWeb3.to_hex(signed.hash)

        try:
            await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as exc:
            kind = _classify_error(exc)
            if kind == "already_known":
                log.debug("nonce %d tx %s already known to node", request.nonce, tx_hash)
            else:
                earlier = await self._earlier_broadcast(request.nonce, kind)
                if earlier is None:
                    raise
                log.info(
                    "nonce %d rejected (%s), following earlier broadcast %s",
                    request.nonce, kind, earlier,
                )
                return earlier

        self._remember(request.nonce, tx_hash)
        return tx_hash

    async def await_receipt(self, tx_hash: str) -> TransactionReceipt | None:
        try:
            raw = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self._receipt_timeout,
                poll_latency=self._poll_interval,
            )
        except TimeExhausted:
            return None
        self._forget(tx_hash)
        return _to_receipt(raw)

    # ── Internals ──────────────────────────────────────────

    def _remember(self, nonce: int, tx_hash: str) -> None:
        hashes = self._broadcasts.setdefault(nonce, [])
        if tx_hash not in hashes:
            hashes.append(tx_hash)
            self._nonce_of[tx_hash] = nonce

    def _forget(self, tx_hash: str) -> None:
        """Drop every hash of a nonce once one of them has a receipt."""
        nonce = self._nonce_of.get(tx_hash)
        if nonce is None:
            return
        for h in self._broadcasts.pop(nonce, []):
            self._nonce_of.pop(h, None)

    async def _fees(self) -> dict[str, int]:
        block = await self._w3.eth.get_block("latest")
        base_fee = block.get("baseFeePerGas")
        if base_fee is None:
            return {"gasPrice": int(await self._w3.eth.gas_price)}
        priority = int(await self._w3.eth.max_priority_fee)
        return {
            "maxFeePerGas": int(base_fee) * 2 + priority,
            "maxPriorityFeePerGas": priority,
        }

    async def _earlier_broadcast(self, nonce: int, kind: str) -> str | None:
        """Find the earlier broadcast a rejected resubmission should follow."""
        hashes = self._broadcasts.get(nonce, [])
        if not hashes:
            return None
        if kind == "underpriced":
            # An earlier attempt is still pending in the mempool.
            return hashes[-1]
        if kind == "nonce_too_low":
            for tx_hash in reversed(hashes):
                try:
                    await self._w3.eth.get_transaction_receipt(tx_hash)
                except TransactionNotFound:
                    continue
                return tx_hash
        return None
