"""Protocol interfaces for all inscribememaybe components."""

from inscribememaybe.interfaces.sender import ChainReader, TransactionSender
from inscribememaybe.interfaces.retry import RetryPolicy
from inscribememaybe.interfaces.store import InscriptionStore

__all__ = [
    "ChainReader", "TransactionSender",
    "RetryPolicy",
    "InscriptionStore",
]
