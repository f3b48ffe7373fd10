"""Datamodels describing records served by the remote ledger node."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, Sequence, TypeVar

Address = str
TxHash = str

ZERO_ADDRESS: Address = "0x" + "0" * 40

T = TypeVar("T")


class TransferType(str, Enum):
    TRANSFER = "TRANSFER"
    BLOCK_FEES = "BLOCK_FEES"
    BLOCK_REWARD = "BLOCK_REWARD"
    MINT = "MINT"
    BURN = "BURN"
    BIP_CREATE = "BIP_CREATE"
    BIP_VOTE = "BIP_VOTE"


@dataclass(frozen=True, slots=True)
class AccountBalance:
    """Balance row as computed by the node; never mutated locally."""

    address: Address
    token_address: Address
    amount: int
    updated_at_block_height: int | None = None
    updated_at_timestamp: datetime | None = None

    @property
    def is_native(self) -> bool:
        return self.token_address == ZERO_ADDRESS


@dataclass(frozen=True, slots=True)
class PendingTransfer:
    """Transfer observed in the node mempool."""

    hash: TxHash
    transfer_type: TransferType | None
    from_address: Address | None
    to_address: Address | None
    token_address: Address
    amount: int | None
    fee: int | None
    nonce: int | None
    message: str | None
    added_at: datetime | None


@dataclass(frozen=True, slots=True)
class ConfirmedTransfer:
    """Transfer included in a finalized block."""

    tx_hash: TxHash
    transfer_type: TransferType | None
    from_address: Address | None
    to_address: Address | None
    token_address: Address
    amount: int | None
    fee: int | None
    nonce: int | None
    message: str | None
    timestamp: datetime | None
    block_height: int | None
    block_hash: TxHash | None


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    """Paging envelope returned by every bulk endpoint of the node."""

    items: Sequence[T] = field(default_factory=tuple)
    page_number: int = 0
    page_size: int = 0
    total_elements: int = 0

    @classmethod
    def empty(cls, page_number: int = 0, page_size: int = 0) -> "Page[T]":
        return cls(items=(), page_number=page_number, page_size=page_size, total_elements=0)


@dataclass(frozen=True, slots=True)
class Token:
    address: Address
    name: str | None
    smallest_unit_name: str | None
    number_of_decimals: int | None
    website_url: str | None
    logo_url: str | None
    max_supply: int | None
    user_burnable: bool | None
    origin_tx_hash: TxHash | None
    total_supply: int | None


@dataclass(frozen=True, slots=True)
class FeeLevel:
    base_fee: int | None
    fee_per_byte: int | None
    total_for_average_tx: int | None


@dataclass(frozen=True, slots=True)
class RecommendedFees:
    slow: FeeLevel | None
    standard: FeeLevel | None
    fast: FeeLevel | None
    mempool_size: int | None


@dataclass(frozen=True, slots=True)
class AccountSummary:
    address: Address
    next_nonce: int | None
    balance: int | None = None


class MempoolAddResult(str, Enum):
    SUCCESS = "SUCCESS"
    QUEUED = "QUEUED"
    STALE = "STALE"
    REJECTED_FEE = "REJECTED_FEE"
    REJECTED_RBF = "REJECTED_RBF"
    REJECTED_STATE = "REJECTED_STATE"
    REJECTED_DUPLICATE = "REJECTED_DUPLICATE"
    REJECTED_NONCE_TOO_FAR_FUTURE = "REJECTED_NONCE_TOO_FAR_FUTURE"
    REJECTED_MEMPOOL_FULL = "REJECTED_MEMPOOL_FULL"
    REJECTED_OTHER = "REJECTED_OTHER"

    @property
    def is_success(self) -> bool:
        # QUEUED means accepted with a future nonce
        return self in {MempoolAddResult.SUCCESS, MempoolAddResult.QUEUED}


@dataclass(frozen=True, slots=True)
class MempoolResult:
    """Outcome of a raw transaction submission."""

    status: MempoolAddResult
    tx_hash: TxHash | None = None
    message: str | None = None


@dataclass(frozen=True, slots=True)
class NodeInfo:
    version: str | None
    network: str | None
    synced: bool
    latest_block_height: int | None


__all__ = [
    "Address",
    "TxHash",
    "ZERO_ADDRESS",
    "TransferType",
    "AccountBalance",
    "PendingTransfer",
    "ConfirmedTransfer",
    "Page",
    "Token",
    "FeeLevel",
    "RecommendedFees",
    "AccountSummary",
    "MempoolAddResult",
    "MempoolResult",
    "NodeInfo",
]
