"""Shared fixtures for inscribememaybe tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key

from inscribememaybe.models.config import InscriberConfig, RetryConfig
from inscribememaybe.storage.sqlite import SQLiteInscriptionStore

from tests.mocks import MockSender

# anvil / hardhat dev account #0
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

DEVNODE_RPC_URL = "http://127.0.0.1:8545"
DEVNODE_CHAIN_ID = 31337

MINT_JSON = '{"p":"fair-20","op":"mint","tick":"brr","amt":"1000"}'
MINT_CALLDATA = b'data:,{"p":"fair-20","op":"mint","tick":"brr","amt":"1000"}'


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add dev node info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Dev node"] = DEVNODE_RPC_URL
    meta["Dev chain id"] = str(DEVNODE_CHAIN_ID)
    meta["Sender"] = TEST_ADDRESS


def make_test_config(**overrides) -> InscriberConfig:
    """Build an InscriberConfig suitable for testing."""
    defaults = dict(
        rpc_url=DEVNODE_RPC_URL,
        chain_id=None,
        private_key=TEST_PRIVATE_KEY,
        transactions=3,
        concurrency=2,
        receipt_timeout=5.0,
        poll_interval=0.1,
        retry=RetryConfig(),
        db_path=":memory:",
    )
    defaults.update(overrides)
    return InscriberConfig(**defaults)


@pytest.fixture
def test_config():
    """Default InscriberConfig for tests."""
    return make_test_config()


@pytest.fixture
async def store():
    """Initialized in-memory SQLiteInscriptionStore."""
    s = SQLiteInscriptionStore(":memory:")
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def mock_sender():
    return MockSender(nonce=7)
