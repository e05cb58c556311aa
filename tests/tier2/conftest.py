"""Tier 2 fixtures: a real local dev node (anvil or hardhat)."""

from __future__ import annotations

import httpx
import pytest

from tests.conftest import DEVNODE_CHAIN_ID, DEVNODE_RPC_URL, make_test_config


@pytest.fixture(scope="session")
def devnode_available():
    """Check if a dev node is listening. Skip tier2 tests if not."""
    try:
        r = httpx.post(
            DEVNODE_RPC_URL,
            json={"jsonrpc": "2.0", "id": 1, "method": "eth_chainId", "params": []},
            timeout=3,
        )
        if r.status_code == 200 and int(r.json()["result"], 16) == DEVNODE_CHAIN_ID:
            return True
        pytest.skip(f"Dev node at {DEVNODE_RPC_URL} is not chain {DEVNODE_CHAIN_ID}")
    except (httpx.ConnectError, httpx.TimeoutException):
        pytest.skip(f"Dev node not available at {DEVNODE_RPC_URL}")


@pytest.fixture
def devnode_config(devnode_available, tmp_path):
    """Config pointed at the dev node with a throwaway database."""
    return make_test_config(
        rpc_url=DEVNODE_RPC_URL,
        chain_id=DEVNODE_CHAIN_ID,
        receipt_timeout=30.0,
        poll_interval=0.1,
        db_path=str(tmp_path / "devnode.sqlite"),
    )
