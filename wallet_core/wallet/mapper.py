"""Unified transfer records: one tagged shape for pending and confirmed transfers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal, Union

from ..node.models import Address, ConfirmedTransfer, PendingTransfer, TransferType, TxHash


class TransferStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"


@dataclass(frozen=True, slots=True)
class PendingTransferRecord:
    tx_hash: TxHash
    transfer_type: TransferType | None
    from_address: Address | None
    to_address: Address | None
    token_address: Address
    amount: int | None
    fee: int | None
    nonce: int | None
    message: str | None
    timestamp: datetime | None  # when the node added it to the mempool

    status: Literal[TransferStatus.PENDING] = field(default=TransferStatus.PENDING, init=False)


@dataclass(frozen=True, slots=True)
class ConfirmedTransferRecord:
    tx_hash: TxHash
    transfer_type: TransferType | None
    from_address: Address | None
    to_address: Address | None
    token_address: Address
    amount: int | None
    fee: int | None
    nonce: int | None
    message: str | None
    timestamp: datetime | None  # block timestamp
    block_height: int | None
    block_hash: TxHash | None
    confirmations: int | None

    status: Literal[TransferStatus.CONFIRMED] = field(default=TransferStatus.CONFIRMED, init=False)


UnifiedTransferRecord = Union[PendingTransferRecord, ConfirmedTransferRecord]


def confirmations_for(block_height: int | None, current_height: int | None) -> int | None:
    """``current - block + 1``; unknown when either height is missing."""

    if block_height is None or current_height is None:
        return None
    return current_height - block_height + 1


def from_pending(source: PendingTransfer) -> PendingTransferRecord:
    return PendingTransferRecord(
        tx_hash=source.hash,
        transfer_type=source.transfer_type,
        from_address=source.from_address,
        to_address=source.to_address,
        token_address=source.token_address,
        amount=source.amount,
        fee=source.fee,
        nonce=source.nonce,
        message=source.message,
        timestamp=source.added_at,
    )


def from_confirmed(source: ConfirmedTransfer, current_height: int | None) -> ConfirmedTransferRecord:
    return ConfirmedTransferRecord(
        tx_hash=source.tx_hash,
        transfer_type=source.transfer_type,
        from_address=source.from_address,
        to_address=source.to_address,
        token_address=source.token_address,
        amount=source.amount,
        fee=source.fee,
        nonce=source.nonce,
        message=source.message,
        timestamp=source.timestamp,
        block_height=source.block_height,
        block_hash=source.block_hash,
        confirmations=confirmations_for(source.block_height, current_height),
    )


__all__ = [
    "TransferStatus",
    "PendingTransferRecord",
    "ConfirmedTransferRecord",
    "UnifiedTransferRecord",
    "confirmations_for",
    "from_pending",
    "from_confirmed",
]
