"""Transaction, receipt and event records passed between engine components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

DEFAULT_GAS_LIMIT = 100_000


@dataclass(frozen=True)
class TransactionRequest:
    """Ready-to-sign transaction for one nonce.

    Fee fields are not part of the request; the sender fills them in at
    signing time, so a retry of the same nonce reuses this object as-is.
    """

    nonce: int
    to: str
    data: bytes
    chain_id: int
    value: int = 0
    gas: int = DEFAULT_GAS_LIMIT

    def to_dict(self) -> dict[str, Any]:
        """Render as a web3 transaction dict (without fees)."""
        return {
            "nonce": self.nonce,
            "to": self.to,
            "value": self.value,
            "gas": self.gas,
            "data": "0x" + self.data.hex(),
            "chainId": self.chain_id,
        }


@dataclass(frozen=True)
class TransactionReceipt:
    """The subset of a mined transaction receipt we keep."""

    tx_hash: str
    block_number: int
    status: int = 1  # 1 = success, 0 = reverted
    gas_used: int = 0


class SubmissionStatus(str, Enum):
    """How a single submission attempt resolved."""

    CONFIRMED = "confirmed"
    NO_RECEIPT = "no_receipt"
    FAILED = "failed"


@dataclass
class SubmissionResult:
    """Outcome of one sign-broadcast-await attempt, tagged with its nonce."""

    nonce: int
    status: SubmissionStatus
    tx_hash: str | None = None
    receipt: TransactionReceipt | None = None
    error: str | None = None
    attempt: int = 1

    @property
    def confirmed(self) -> bool:
        return self.status is SubmissionStatus.CONFIRMED


@dataclass(frozen=True)
class InscriptionEvent:
    """Emitted once for every nonce that confirms."""

    sender: str
    chain_id: int
    nonce: int
    tx_hash: str
    receipt: TransactionReceipt
    calldata: bytes


@dataclass
class InscriptionRecord:
    """An inscription as persisted in the store."""

    id: int
    sender: str
    chain_id: int
    nonce: int
    tx_hash: str
    calldata: bytes
    block_number: int | None = None
    created_at: str = ""

    @property
    def calldata_text(self) -> str:
        return self.calldata.decode("utf-8", errors="replace")


@dataclass
class MintSummary:
    """What a mint run did."""

    sender: str
    chain_id: int
    first_nonce: int | None = None
    minted: int = 0
    aborted: bool = False
