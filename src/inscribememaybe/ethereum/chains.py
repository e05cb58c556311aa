"""Known EVM chains and their block explorers."""

from __future__ import annotations

from dataclasses import dataclass

MAINNET_CHAIN_ID = 1


@dataclass(frozen=True)
class ChainInfo:
    chain_id: int
    name: str
    explorer_url: str | None = None  # base url, e.g. https://etherscan.io


CHAINS: dict[int, ChainInfo] = {
    info.chain_id: info
    for info in (
        ChainInfo(1, "mainnet", "https://etherscan.io"),
        ChainInfo(10, "optimism", "https://optimistic.etherscan.io"),
        ChainInfo(56, "bsc", "https://bscscan.com"),
        ChainInfo(100, "gnosis", "https://gnosisscan.io"),
        ChainInfo(137, "polygon", "https://polygonscan.com"),
        ChainInfo(250, "fantom", "https://ftmscan.com"),
        ChainInfo(324, "zksync", "https://explorer.zksync.io"),
        ChainInfo(8453, "base", "https://basescan.org"),
        ChainInfo(17000, "holesky", "https://holesky.etherscan.io"),
        ChainInfo(42161, "arbitrum", "https://arbiscan.io"),
        ChainInfo(43114, "avalanche", "https://snowtrace.io"),
        ChainInfo(59144, "linea", "https://lineascan.build"),
        ChainInfo(534352, "scroll", "https://scrollscan.com"),
        ChainInfo(11155111, "sepolia", "https://sepolia.etherscan.io"),
        ChainInfo(31337, "anvil"),
    )
}


def chain_name(chain_id: int) -> str:
    info = CHAINS.get(chain_id)
    return info.name if info else f"chain-{chain_id}"


def tx_url(chain_id: int, tx_hash: str) -> str | None:
    """Explorer link for a transaction, or None if the chain has no known explorer."""
    info = CHAINS.get(chain_id)
    if info is None or not info.explorer_url:
        return None
    base = info.explorer_url
    if not base.endswith("/"):
        base += "/"
    return f"{base}tx/{tx_hash}"
