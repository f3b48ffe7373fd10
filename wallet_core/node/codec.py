"""Explicit conversions between node JSON payloads and :mod:`wallet_core.node.models`.

Every field is converted by a named helper so malformed upstream values fail
with a :class:`ValueError` naming the field rather than deep inside a mapper.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, TypeVar

from .models import (
    ZERO_ADDRESS,
    AccountBalance,
    AccountSummary,
    Address,
    ConfirmedTransfer,
    FeeLevel,
    MempoolAddResult,
    MempoolResult,
    NodeInfo,
    Page,
    PendingTransfer,
    RecommendedFees,
    Token,
    TransferType,
    TxHash,
)

T = TypeVar("T")

_ADDRESS_RE = re.compile(r"^(0x)?[0-9a-fA-F]{40}$")
_HASH_RE = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")


def normalize_address(value: str) -> Address:
    """Return ``value`` as a lowercase ``0x``-prefixed 20-byte hex address."""

    text = str(value).strip()
    if not _ADDRESS_RE.match(text):
        raise ValueError(f"invalid address: {value!r}")
    if text[:2] in {"0x", "0X"}:
        text = text[2:]
    return "0x" + text.lower()


def normalize_hash(value: str) -> TxHash:
    text = str(value).strip()
    if not _HASH_RE.match(text):
        raise ValueError(f"invalid hash: {value!r}")
    if text[:2] in {"0x", "0X"}:
        text = text[2:]
    return "0x" + text.lower()


def to_address(value: Any) -> Address | None:
    if value is None or value == "":
        return None
    return normalize_address(value)


def to_token_address(value: Any) -> Address:
    """Token addresses default to the native-asset sentinel when absent."""

    if value is None or value == "":
        return ZERO_ADDRESS
    return normalize_address(value)


def to_hash(value: Any) -> TxHash | None:
    if value is None or value == "":
        return None
    return normalize_hash(value)


def to_amount(value: Any) -> int | None:
    """Parse a base-10 integer amount. Node amounts travel as decimal strings."""

    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"invalid amount: {value!r}")
    if isinstance(value, int):
        amount = value
    else:
        text = str(value).strip()
        if not text:
            return None
        amount = int(text, 10)
    if amount < 0:
        raise ValueError(f"negative amount: {value!r}")
    return amount


def to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def to_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(float(value), tz=timezone.utc)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_transfer_type(value: Any) -> TransferType | None:
    if value is None or value == "":
        return None
    return TransferType(str(value).upper())


def _page(
    payload: Mapping[str, Any] | None,
    convert: Callable[[Mapping[str, Any]], T],
    page_number: int,
    page_size: int,
) -> Page[T]:
    # a null body or a null list is an empty page, not an error
    if not payload or payload.get("list") is None:
        return Page.empty(page_number, page_size)
    items = tuple(convert(item) for item in payload["list"])
    reported_number = to_int(payload.get("pageNumber"))
    reported_size = to_int(payload.get("pageSize"))
    return Page(
        items=items,
        page_number=page_number if reported_number is None else reported_number,
        page_size=page_size if reported_size is None else reported_size,
        total_elements=to_int(payload.get("totalElements")) or 0,
    )


def balance_from_payload(payload: Mapping[str, Any]) -> AccountBalance:
    return AccountBalance(
        address=normalize_address(payload["address"]),
        token_address=to_token_address(payload.get("tokenAddress")),
        amount=to_amount(payload.get("balance")) or 0,
        updated_at_block_height=to_int(payload.get("updatedAtBlockHeight")),
        updated_at_timestamp=to_datetime(payload.get("updatedAtTimestamp")),
    )


def pending_from_payload(payload: Mapping[str, Any]) -> PendingTransfer:
    return PendingTransfer(
        hash=normalize_hash(payload["hash"]),
        transfer_type=to_transfer_type(payload.get("transferType")),
        from_address=to_address(payload.get("from")),
        to_address=to_address(payload.get("to")),
        token_address=to_token_address(payload.get("tokenAddress")),
        amount=to_amount(payload.get("amount")),
        fee=to_amount(payload.get("fee")),
        nonce=to_int(payload.get("nonce")),
        message=payload.get("message"),
        added_at=to_datetime(payload.get("addedAt")),
    )


def confirmed_from_payload(payload: Mapping[str, Any]) -> ConfirmedTransfer:
    return ConfirmedTransfer(
        tx_hash=normalize_hash(payload["txHash"]),
        transfer_type=to_transfer_type(payload.get("type")),
        from_address=to_address(payload.get("from")),
        to_address=to_address(payload.get("to")),
        token_address=to_token_address(payload.get("tokenAddress")),
        amount=to_amount(payload.get("amount")),
        fee=to_amount(payload.get("fee")),
        nonce=to_int(payload.get("nonce")),
        message=payload.get("message"),
        timestamp=to_datetime(payload.get("timestamp")),
        block_height=to_int(payload.get("blockHeight")),
        block_hash=to_hash(payload.get("blockHash")),
    )


def balance_page(payload: Mapping[str, Any] | None, page_number: int, page_size: int) -> Page[AccountBalance]:
    return _page(payload, balance_from_payload, page_number, page_size)


def pending_page(payload: Mapping[str, Any] | None, page_number: int, page_size: int) -> Page[PendingTransfer]:
    return _page(payload, pending_from_payload, page_number, page_size)


def confirmed_page(
    payload: Mapping[str, Any] | None, page_number: int, page_size: int
) -> Page[ConfirmedTransfer]:
    return _page(payload, confirmed_from_payload, page_number, page_size)


def token_from_payload(payload: Mapping[str, Any], address: Any = None) -> Token:
    return Token(
        address=normalize_address(address if address is not None else payload["address"]),
        name=payload.get("name"),
        smallest_unit_name=payload.get("smallestUnitName"),
        number_of_decimals=to_int(payload.get("numberOfDecimals")),
        website_url=payload.get("websiteUrl"),
        logo_url=payload.get("logoUrl"),
        max_supply=to_amount(payload.get("maxSupply")),
        user_burnable=payload.get("userBurnable"),
        origin_tx_hash=to_hash(payload.get("originTxHash")),
        total_supply=to_amount(payload.get("totalSupply")),
    )


def tokens_from_state_map(payload: Mapping[str, Any] | None) -> list[Token]:
    """The node keys its token state map by token address."""

    if not payload:
        return []
    return [token_from_payload(state or {}, address=address) for address, state in payload.items()]


def _fee_level(payload: Mapping[str, Any] | None) -> FeeLevel | None:
    if payload is None:
        return None
    return FeeLevel(
        base_fee=to_amount(payload.get("baseFee")),
        fee_per_byte=to_amount(payload.get("feePerByte")),
        total_for_average_tx=to_amount(payload.get("totalForAverageTx")),
    )


def recommended_fees_from_payload(payload: Mapping[str, Any] | None) -> RecommendedFees | None:
    if payload is None:
        return None
    return RecommendedFees(
        slow=_fee_level(payload.get("slow")),
        standard=_fee_level(payload.get("standard")),
        fast=_fee_level(payload.get("fast")),
        mempool_size=to_int(payload.get("mempoolSize")),
    )


def account_summary_from_payload(payload: Mapping[str, Any], address: Address) -> AccountSummary:
    return AccountSummary(
        address=address,
        next_nonce=to_int(payload.get("nextNonce")),
        balance=to_amount(payload.get("balance")),
    )


def mempool_result_from_payload(payload: Any) -> MempoolResult:
    # older nodes answer with the bare enum name
    if isinstance(payload, str):
        return MempoolResult(status=MempoolAddResult(payload.upper()))
    payload = payload or {}
    status = payload.get("status") or payload.get("result")
    if not status:
        raise ValueError("mempool result carries no status")
    return MempoolResult(
        status=MempoolAddResult(str(status).upper()),
        tx_hash=to_hash(payload.get("txHash")),
        message=payload.get("message"),
    )


def node_info_from_payload(payload: Mapping[str, Any] | None) -> NodeInfo:
    payload = payload or {}
    return NodeInfo(
        version=payload.get("version"),
        network=payload.get("network"),
        synced=bool(payload.get("synced", False)),
        latest_block_height=to_int(payload.get("latestBlockHeight")),
    )


def addresses_to_payload(addresses: Iterable[Address]) -> list[str]:
    # sorted for stable request bodies (and stable cache keys upstream)
    return sorted({normalize_address(address) for address in addresses})


__all__ = [
    "normalize_address",
    "normalize_hash",
    "to_address",
    "to_token_address",
    "to_hash",
    "to_amount",
    "to_int",
    "to_datetime",
    "to_transfer_type",
    "balance_from_payload",
    "pending_from_payload",
    "confirmed_from_payload",
    "balance_page",
    "pending_page",
    "confirmed_page",
    "token_from_payload",
    "tokens_from_state_map",
    "recommended_fees_from_payload",
    "account_summary_from_payload",
    "mempool_result_from_payload",
    "node_info_from_payload",
    "addresses_to_payload",
]
