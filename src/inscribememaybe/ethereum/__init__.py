"""EVM integration components."""

from inscribememaybe.ethereum.chains import MAINNET_CHAIN_ID, chain_name, tx_url
from inscribememaybe.ethereum.sender import Web3TransactionSender, load_account

__all__ = [
    "MAINNET_CHAIN_ID", "chain_name", "tx_url",
    "Web3TransactionSender", "load_account",
]
