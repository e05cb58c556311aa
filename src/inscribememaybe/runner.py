"""Mint runner - wires sender, engine and store together for one run."""

from __future__ import annotations

import logging
from typing import Callable

from inscribememaybe.engine.inscriber import Inscriber
from inscribememaybe.errors import ConfigurationError
from inscribememaybe.ethereum.chains import MAINNET_CHAIN_ID, chain_name, tx_url
from inscribememaybe.ethereum.sender import Web3TransactionSender
from inscribememaybe.interfaces.store import InscriptionStore
from inscribememaybe.models.config import InscriberConfig
from inscribememaybe.models.records import InscriptionEvent, MintSummary
from inscribememaybe.storage.sqlite import SQLiteInscriptionStore

log = logging.getLogger(__name__)


class MintRunner:
    """Sends `cfg.transactions` copies of `payload` and records each confirmation.

    Startup checks (signing key, RPC reachability, expected chain id,
    mainnet acknowledgement) all happen before the first nonce is
    allocated. `sender` and `store` may be injected; otherwise a
    Web3TransactionSender and a SQLiteInscriptionStore are built from `cfg`.
    """

    def __init__(
        self,
        cfg: InscriberConfig,
        payload: bytes,
        confirm_mainnet: Callable[[], bool] | None = None,
        sender=None,
        store: InscriptionStore | None = None,
    ) -> None:
        self._cfg = cfg
        self._payload = bytes(payload)
        self._confirm_mainnet = confirm_mainnet or (lambda: False)
        self.sender = sender
        self.store = store or SQLiteInscriptionStore(cfg.db_path)
        self.engine: Inscriber | None = None

    async def run(self) -> MintSummary:
        owns_sender = self.sender is None
        if owns_sender:
            self.sender = await Web3TransactionSender.connect(
                self._cfg.rpc_url,
                self._cfg.private_key,
                receipt_timeout=self._cfg.receipt_timeout,
                poll_interval=self._cfg.poll_interval,
            )

        try:
            await self.store.initialize()
            try:
                return await self._run()
            finally:
                await self.store.close()
        finally:
            if owns_sender:
                await self.sender.close()

    async def _run(self) -> MintSummary:
        address = self.sender.address
        chain_id = await self.sender.get_chain_id()

        if self._cfg.chain_id is not None and chain_id != self._cfg.chain_id:
            raise ConfigurationError(
                f"chain id mismatch: RPC reports {chain_id}, expected {self._cfg.chain_id}"
            )

        summary = MintSummary(sender=address, chain_id=chain_id)

        if chain_id == MAINNET_CHAIN_ID and not self._confirm_mainnet():
            log.warning("mainnet run not acknowledged, nothing sent")
            summary.aborted = True
            return summary

        nonce = await self.sender.get_transaction_count(address)
        summary.first_nonce = nonce

        log.info("Starting mint on %s", chain_name(chain_id))
        log.info("  From:         %s", address)
        log.info("  Inscription:  %s", self._payload.decode("utf-8", errors="replace"))
        log.info("  Transactions: %d", self._cfg.transactions)
        log.info("  Concurrency:  %d", self._cfg.concurrency)
        log.info("  First nonce:  %d", nonce)

        self.engine = Inscriber(
            sender=self.sender,
            sender_address=address,
            chain_id=chain_id,
            payload=self._payload,
            initial_nonce=nonce,
            transactions=self._cfg.transactions,
            concurrency=self._cfg.concurrency,
            gas_limit=self._cfg.gas_limit,
            retry_policy=self._cfg.retry.build_policy(),
        )

        async for event in self.engine.events():
            summary.minted += 1
            await self._handle_event(event)

        log.info("Minted %d inscriptions", summary.minted)
        return summary

    async def _handle_event(self, event: InscriptionEvent) -> None:
        """Log and persist one confirmed inscription."""
        url = tx_url(event.chain_id, event.tx_hash)
        if url:
            log.info("minted nonce=%d tx_url=%s", event.nonce, url)
        else:
            log.info("minted nonce=%d tx=%s", event.nonce, event.tx_hash)

        # A storage failure must not stop the run; the transaction is on chain.
        try:
            await self.store.insert_one(event)
        except Exception as exc:
            log.error("failed to record inscription nonce=%d: %s", event.nonce, exc)


async def run_mint(
    cfg: InscriberConfig,
    payload: bytes,
    confirm_mainnet: Callable[[], bool] | None = None,
) -> MintSummary:
    """Entry point for a mint run."""
    runner = MintRunner(cfg, payload, confirm_mainnet)
    return await runner.run()
