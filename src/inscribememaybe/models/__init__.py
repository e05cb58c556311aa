"""Data models for inscribememaybe."""

from inscribememaybe.models.records import (
    DEFAULT_GAS_LIMIT,
    InscriptionEvent,
    InscriptionRecord,
    MintSummary,
    SubmissionResult,
    SubmissionStatus,
    TransactionReceipt,
    TransactionRequest,
)
from inscribememaybe.models.config import InscriberConfig, RetryConfig, RetryStrategy
from inscribememaybe.models.inscription import (
    CALL_DATA_PREFIX,
    Deploy,
    Inscription,
    Mint,
    NamedProtocol,
    Op,
    Transfer,
    TransferItem,
    is_known_protocol,
    parse_inscription,
)

__all__ = [
    "DEFAULT_GAS_LIMIT",
    "InscriptionEvent", "InscriptionRecord", "MintSummary",
    "SubmissionResult", "SubmissionStatus", "TransactionReceipt", "TransactionRequest",
    "InscriberConfig", "RetryConfig", "RetryStrategy",
    "CALL_DATA_PREFIX", "Deploy", "Inscription", "Mint", "NamedProtocol", "Op",
    "Transfer", "TransferItem", "is_known_protocol", "parse_inscription",
]
