"""Mint runner: startup checks, engine wiring, persistence."""

from __future__ import annotations

import pytest

from inscribememaybe.errors import ConfigurationError, RetriesExhaustedError
from inscribememaybe.ethereum.chains import chain_name, tx_url
from inscribememaybe.models.config import RetryConfig, RetryStrategy
from inscribememaybe.runner import MintRunner
from inscribememaybe.storage.sqlite import SQLiteInscriptionStore

from tests.conftest import MINT_CALLDATA, make_test_config
from tests.mocks import FAIL_BROADCAST, MockSender, always, fail_first


class FailingStore(SQLiteInscriptionStore):
    async def insert_one(self, event):
        raise RuntimeError("disk full")


async def read_back(db_path: str):
    store = SQLiteInscriptionStore(db_path)
    await store.initialize()
    try:
        return await store.get_inscriptions()
    finally:
        await store.close()


# ── Happy path ────────────────────────────────────────────────────


async def test_run_records_every_inscription(tmp_path, mock_sender):
    db_path = str(tmp_path / "mints.sqlite")
    cfg = make_test_config(transactions=4, concurrency=2, db_path=db_path)
    runner = MintRunner(cfg, MINT_CALLDATA, sender=mock_sender, store=SQLiteInscriptionStore(db_path))

    summary = await runner.run()

    assert summary.minted == 4
    assert summary.first_nonce == 7
    assert summary.sender == mock_sender.address
    assert summary.chain_id == 31337
    assert not summary.aborted
    assert runner.engine.confirmed == 4

    records = await read_back(db_path)
    assert sorted(r.nonce for r in records) == [7, 8, 9, 10]
    assert all(r.calldata == MINT_CALLDATA for r in records)

    # Injected sender is left open for its owner
    assert not mock_sender.closed


async def test_run_retries_until_confirmed(tmp_path):
    sender = MockSender(nonce=0, script=fail_first(2))
    cfg = make_test_config(transactions=2, concurrency=2, db_path=str(tmp_path / "m.sqlite"))

    summary = await MintRunner(cfg, MINT_CALLDATA, sender=sender).run()

    assert summary.minted == 2
    assert sender.attempts == {0: 3, 1: 3}


async def test_store_failure_does_not_stop_run(tmp_path, mock_sender, caplog):
    db_path = str(tmp_path / "m.sqlite")
    cfg = make_test_config(transactions=3, db_path=db_path)
    runner = MintRunner(cfg, MINT_CALLDATA, sender=mock_sender, store=FailingStore(db_path))

    summary = await runner.run()

    assert summary.minted == 3
    assert "failed to record inscription" in caplog.text


# ── Startup checks ────────────────────────────────────────────────


async def test_chain_id_mismatch(tmp_path, mock_sender):
    cfg = make_test_config(chain_id=10, db_path=str(tmp_path / "m.sqlite"))

    with pytest.raises(ConfigurationError, match="chain id mismatch"):
        await MintRunner(cfg, MINT_CALLDATA, sender=mock_sender).run()

    assert mock_sender.requests == []


async def test_matching_chain_id_runs(tmp_path, mock_sender):
    cfg = make_test_config(chain_id=31337, transactions=1, db_path=str(tmp_path / "m.sqlite"))

    summary = await MintRunner(cfg, MINT_CALLDATA, sender=mock_sender).run()

    assert summary.minted == 1


async def test_mainnet_requires_acknowledgement(tmp_path):
    sender = MockSender(chain_id=1)
    cfg = make_test_config(db_path=str(tmp_path / "m.sqlite"))

    summary = await MintRunner(cfg, MINT_CALLDATA, confirm_mainnet=lambda: False, sender=sender).run()

    assert summary.aborted
    assert summary.minted == 0
    assert summary.first_nonce is None
    assert sender.requests == []


async def test_mainnet_acknowledged(tmp_path):
    sender = MockSender(chain_id=1)
    cfg = make_test_config(transactions=2, db_path=str(tmp_path / "m.sqlite"))

    summary = await MintRunner(cfg, MINT_CALLDATA, confirm_mainnet=lambda: True, sender=sender).run()

    assert not summary.aborted
    assert summary.minted == 2


async def test_bounded_retry_gives_up(tmp_path):
    sender = MockSender(nonce=0, script=always(FAIL_BROADCAST))
    cfg = make_test_config(
        transactions=1,
        retry=RetryConfig(strategy=RetryStrategy.BOUNDED, max_attempts=3),
        db_path=str(tmp_path / "m.sqlite"),
    )

    with pytest.raises(RetriesExhaustedError):
        await MintRunner(cfg, MINT_CALLDATA, sender=sender).run()

    assert sender.attempts == {0: 3}


# ── Chains ────────────────────────────────────────────────────────


def test_chain_names_and_explorer_links():
    assert chain_name(1) == "mainnet"
    assert chain_name(31337) == "anvil"
    assert chain_name(999_999) == "chain-999999"

    assert tx_url(1, "0xabc") == "https://etherscan.io/tx/0xabc"
    assert tx_url(8453, "0xabc") == "https://basescan.org/tx/0xabc"
    assert tx_url(31337, "0xabc") is None
    assert tx_url(999_999, "0xabc") is None
