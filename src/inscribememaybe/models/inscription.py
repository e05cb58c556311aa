"""Inscription operations and their `data:,{json}` calldata encoding."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from web3 import Web3

from inscribememaybe.errors import InscriptionError

# The prefix for json calldata
CALL_DATA_PREFIX = "data:,"


class Op(str, Enum):
    """Inscription operation."""

    DEPLOY = "deploy"
    MINT = "mint"
    TRANSFER = "transfer"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> Op:
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InscriptionError(f"invalid operation: {value}") from None


class NamedProtocol(str, Enum):
    """Well-known inscription protocols. Other protocol names are accepted too."""

    BSC_20 = "bsc-20"
    ASC_20 = "asc-20"
    PRC_20 = "prc-20"
    ZRC_20 = "zrc-20"
    ERC_20 = "erc-20"
    GRC_20 = "grc-20"
    FAIR_20 = "fair-20"
    OPRC_20 = "oprc-20"
    OSC_20 = "osc-20"
    BRC_20 = "brc-20"
    FRC_20 = "frc-20"
    NIRC_20 = "nirc-20"
    ZSC_20 = "zsc-20"
    VIMS_20 = "vims-20"
    ERA_20 = "era-20"
    BNB_48 = "bnb-48"
    GNO_20 = "gno-20"
    TERC_20 = "terc-20"
    NRC_20 = "nrc-20"
    BEP_20 = "bep-20"
    BNB_20 = "bnb-20"
    CLS_20 = "cls-20"
    BASE_20 = "base-20"
    ERC_CASH = "erc-cash"
    BNBS_20 = "bnbs-20"
    FTM_20 = "ftm-20"

    def __str__(self) -> str:
        return self.value


def is_known_protocol(p: str) -> bool:
    return p in {member.value for member in NamedProtocol}


def _strip_prefix(text: str) -> str:
    text = text.strip()
    if text.startswith(CALL_DATA_PREFIX):
        return text[len(CALL_DATA_PREFIX):]
    return text


def _load(text: str) -> dict[str, Any]:
    try:
        raw = json.loads(_strip_prefix(text))
    except json.JSONDecodeError as exc:
        raise InscriptionError(f"invalid inscription json: {exc}") from exc
    if not isinstance(raw, dict):
        raise InscriptionError("inscription must be a json object")
    return raw


def _require(raw: dict[str, Any], key: str) -> Any:
    if key not in raw:
        raise InscriptionError(f"missing field: {key}")
    return raw[key]


def _expect_op(raw: dict[str, Any], expected: Op) -> None:
    op = Op.parse(_require(raw, "op"))
    if op is not expected:
        raise InscriptionError(f"Invalid operation: {op}, expected {expected}")


def _uint(raw: dict[str, Any], key: str) -> int:
    """Parse an unsigned amount given either as a decimal string or an int."""
    value = _require(raw, key)
    if isinstance(value, bool):
        raise InscriptionError(f"{key} must be a number, got {value!r}")
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise InscriptionError(f"{key} must be a number, got {value!r}") from None
    if n < 0:
        raise InscriptionError(f"{key} must not be negative")
    return n


def _dumps(obj: dict[str, Any]) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


class _Calldata:
    """Shared calldata helpers. Subclasses implement `to_json_dict()`."""

    def to_json_dict(self) -> dict[str, Any]:
        raise NotImplementedError

    def to_json(self) -> str:
        return _dumps(self.to_json_dict())

    def calldata(self) -> bytes:
        """Calldata bytes: `data:,` followed by the compact json."""
        return (CALL_DATA_PREFIX + self.to_json()).encode("utf-8")

    def calldata_string(self) -> str:
        return self.calldata().decode("utf-8")

    def __str__(self) -> str:
        return self.calldata_string()


@dataclass(frozen=True)
class Deploy(_Calldata):
    """Deploy a new token: `max` total supply, `lim` per mint."""

    p: str
    tick: str
    max: int
    lim: int

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "p": str(self.p),
            "op": Op.DEPLOY.value,
            "tick": self.tick,
            "max": str(self.max),
            "lim": str(self.lim),
        }

    @classmethod
    def from_json(cls, text: str) -> Deploy:
        raw = _load(text)
        _expect_op(raw, Op.DEPLOY)
        return cls(
            p=str(_require(raw, "p")),
            tick=str(_require(raw, "tick")),
            max=_uint(raw, "max"),
            lim=_uint(raw, "lim"),
        )


@dataclass(frozen=True)
class Mint(_Calldata):
    """Mint `amt` of a token. `id` is an optional unique id some protocols use."""

    p: str
    tick: str
    amt: int
    id: str | None = None

    def to_json_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"p": str(self.p), "op": Op.MINT.value, "tick": self.tick}
        if self.id is not None:
            out["id"] = self.id
        out["amt"] = str(self.amt)
        return out

    @classmethod
    def from_json(cls, text: str) -> Mint:
        raw = _load(text)
        _expect_op(raw, Op.MINT)
        mint_id = raw.get("id")
        return cls(
            p=str(_require(raw, "p")),
            tick=str(_require(raw, "tick")),
            amt=_uint(raw, "amt"),
            id=str(mint_id) if mint_id is not None else None,
        )


@dataclass(frozen=True)
class TransferItem:
    """How much to transfer to whom."""

    recv: str
    amt: int

    def __post_init__(self) -> None:
        # Addresses compare and serialize as lowercase hex.
        object.__setattr__(self, "recv", self.recv.lower())

    def to_json_dict(self) -> dict[str, Any]:
        return {"recv": self.recv, "amt": self.amt}

    @classmethod
    def from_raw(cls, raw: Any) -> TransferItem:
        if not isinstance(raw, dict):
            raise InscriptionError("transfer item must be a json object")
        recv = str(_require(raw, "recv"))
        # Mixed-case addresses are not checksum-verified.
        if not Web3.is_address(recv.lower()):
            raise InscriptionError(f"invalid recipient address: {recv}")
        amt = _require(raw, "amt")
        if isinstance(amt, bool) or not isinstance(amt, int):
            raise InscriptionError(f"transfer amt must be an integer, got {amt!r}")
        return cls(recv=recv, amt=amt)


@dataclass(frozen=True)
class Transfer(_Calldata):
    """Transfer a token to one or more recipients."""

    p: str
    tick: str
    to: tuple[TransferItem, ...] = field(default_factory=tuple)

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "p": str(self.p),
            "op": Op.TRANSFER.value,
            "tick": self.tick,
            "to": [item.to_json_dict() for item in self.to],
        }

    @classmethod
    def from_json(cls, text: str) -> Transfer:
        raw = _load(text)
        _expect_op(raw, Op.TRANSFER)
        items = _require(raw, "to")
        if not isinstance(items, list):
            raise InscriptionError("transfer 'to' must be a list")
        return cls(
            p=str(_require(raw, "p")),
            tick=str(_require(raw, "tick")),
            to=tuple(TransferItem.from_raw(item) for item in items),
        )


Inscription = Union[Deploy, Mint, Transfer]

_BY_OP = {Op.DEPLOY: Deploy, Op.MINT: Mint, Op.TRANSFER: Transfer}


def parse_inscription(text: str) -> Inscription:
    """Parse any inscription operation, dispatching on its `op` field."""
    raw = _load(text)
    op = Op.parse(_require(raw, "op"))
    return _BY_OP[op].from_json(text)
