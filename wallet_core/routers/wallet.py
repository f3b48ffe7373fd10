from __future__ import annotations

import logging
from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..node.models import AccountBalance, FeeLevel, MempoolResult, RecommendedFees, Token
from ..wallet.mapper import ConfirmedTransferRecord, UnifiedTransferRecord
from ..wallet.service import WalletService
from ..wallet.stitcher import UnifiedTransferPage
from ..wallet.validation import parse_address, parse_addresses, parse_transfer_type

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/core/v1/wallet", tags=["wallet"])


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _amount(value: int | None) -> str | None:
    # amounts exceed JS number precision, so they travel as decimal strings
    return None if value is None else str(value)


class WalletBalanceOut(_CamelModel):
    address: str
    token_address: str
    balance: str
    updated_at_block_height: int | None = None
    updated_at_timestamp: datetime | None = None

    @classmethod
    def from_balance(cls, balance: AccountBalance) -> "WalletBalanceOut":
        return cls(
            address=balance.address,
            token_address=balance.token_address,
            balance=str(balance.amount),
            updated_at_block_height=balance.updated_at_block_height,
            updated_at_timestamp=balance.updated_at_timestamp,
        )


class UnifiedTransferOut(_CamelModel):
    status: Literal["PENDING", "CONFIRMED"]
    tx_hash: str
    transfer_type: str | None = None
    from_: str | None = None
    to: str | None = None
    token_address: str
    amount: str | None = None
    fee: str | None = None
    nonce: int | None = None
    message: str | None = None
    timestamp: datetime | None = None
    block_height: int | None = None
    block_hash: str | None = None
    confirmations: int | None = None

    model_config = ConfigDict(
        alias_generator=lambda name: "from" if name == "from_" else to_camel(name),
        populate_by_name=True,
    )

    @classmethod
    def from_record(cls, record: UnifiedTransferRecord) -> "UnifiedTransferOut":
        payload = dict(
            status=record.status.value,
            tx_hash=record.tx_hash,
            transfer_type=record.transfer_type.value if record.transfer_type else None,
            from_=record.from_address,
            to=record.to_address,
            token_address=record.token_address,
            amount=_amount(record.amount),
            fee=_amount(record.fee),
            nonce=record.nonce,
            message=record.message,
            timestamp=record.timestamp,
        )
        if isinstance(record, ConfirmedTransferRecord):
            payload.update(
                block_height=record.block_height,
                block_hash=record.block_hash,
                confirmations=record.confirmations,
            )
        return cls(**payload)


class UnifiedTransferPageOut(_CamelModel):
    content: list[UnifiedTransferOut]
    page_number: int
    page_size: int
    total_elements: int
    total_pages: int
    pending_count: int
    confirmed_count: int
    first: bool
    last: bool

    @classmethod
    def from_page(cls, page: UnifiedTransferPage) -> "UnifiedTransferPageOut":
        return cls(
            content=[UnifiedTransferOut.from_record(record) for record in page.items],
            page_number=page.page_number,
            page_size=page.page_size,
            total_elements=page.total_elements,
            total_pages=page.total_pages,
            pending_count=page.pending_count,
            confirmed_count=page.confirmed_count,
            first=page.is_first,
            last=page.is_last,
        )


class TokenOut(_CamelModel):
    address: str
    name: str | None = None
    smallest_unit_name: str | None = None
    number_of_decimals: int | None = None
    website_url: str | None = None
    logo_url: str | None = None
    max_supply: str | None = None
    user_burnable: bool | None = None
    origin_tx_hash: str | None = None
    total_supply: str | None = None

    @classmethod
    def from_token(cls, token: Token) -> "TokenOut":
        return cls(
            address=token.address,
            name=token.name,
            smallest_unit_name=token.smallest_unit_name,
            number_of_decimals=token.number_of_decimals,
            website_url=token.website_url,
            logo_url=token.logo_url,
            max_supply=_amount(token.max_supply),
            user_burnable=token.user_burnable,
            origin_tx_hash=token.origin_tx_hash,
            total_supply=_amount(token.total_supply),
        )


class FeeLevelOut(_CamelModel):
    base_fee: str | None = None
    fee_per_byte: str | None = None
    total_for_average_tx: str | None = None

    @classmethod
    def from_level(cls, level: FeeLevel | None) -> "FeeLevelOut | None":
        if level is None:
            return None
        return cls(
            base_fee=_amount(level.base_fee),
            fee_per_byte=_amount(level.fee_per_byte),
            total_for_average_tx=_amount(level.total_for_average_tx),
        )


class RecommendedFeesOut(_CamelModel):
    slow: FeeLevelOut | None = None
    standard: FeeLevelOut | None = None
    fast: FeeLevelOut | None = None
    mempool_size: int | None = None

    @classmethod
    def from_fees(cls, fees: RecommendedFees) -> "RecommendedFeesOut":
        return cls(
            slow=FeeLevelOut.from_level(fees.slow),
            standard=FeeLevelOut.from_level(fees.standard),
            fast=FeeLevelOut.from_level(fees.fast),
            mempool_size=fees.mempool_size,
        )


class TxSubmitIn(_CamelModel):
    hex_data: str


class MempoolResultOut(_CamelModel):
    status: str
    success: bool
    tx_hash: str | None = None
    message: str | None = None

    @classmethod
    def from_result(cls, result: MempoolResult) -> "MempoolResultOut":
        return cls(
            status=result.status.value,
            success=result.status.is_success,
            tx_hash=result.tx_hash,
            message=result.message,
        )


def get_wallet_service(request: Request) -> WalletService:
    return request.app.state.wallet_service


@router.get("/balances", response_model=list[WalletBalanceOut])
def get_balances(
    addresses: list[str] = Query(..., description="Wallet addresses"),
    token_addresses: list[str] | None = Query(
        None, alias="tokenAddresses", description="Token addresses; omitted means native only"
    ),
    service: WalletService = Depends(get_wallet_service),
) -> list[WalletBalanceOut]:
    """Balances with pending outgoing transfers (and their fees) already deducted."""

    parsed = parse_addresses(addresses)
    tokens = parse_addresses(token_addresses, field="tokenAddresses", required=False)
    LOGGER.debug("api.wallet.balances", extra={"addresses": len(parsed)})
    return [WalletBalanceOut.from_balance(balance) for balance in service.get_balances(parsed, tokens)]


@router.get(
    "/transfers",
    response_model=UnifiedTransferPageOut,
    response_model_exclude_none=True,
)
def get_transfers(
    addresses: list[str] = Query(..., description="Wallet addresses"),
    token_addresses: list[str] | None = Query(
        None, alias="tokenAddresses", description="Token addresses; omitted means all tokens"
    ),
    transfer_type: str | None = Query(None, alias="transferType"),
    page_number: int = Query(0, alias="pageNumber"),
    page_size: int | None = Query(None, alias="pageSize"),
    service: WalletService = Depends(get_wallet_service),
) -> UnifiedTransferPageOut:
    """Unified transfer history: pending first, then confirmed, newest first."""

    parsed = parse_addresses(addresses)
    tokens = parse_addresses(token_addresses, field="tokenAddresses", required=False)
    kind = parse_transfer_type(transfer_type)
    LOGGER.debug(
        "api.wallet.transfers",
        extra={"addresses": len(parsed), "page_number": page_number, "page_size": page_size},
    )
    page = service.get_transfers(parsed, tokens, kind, page_number, page_size)
    return UnifiedTransferPageOut.from_page(page)


@router.get("/tokens", response_model=list[TokenOut], response_model_exclude_none=True)
def get_tokens(service: WalletService = Depends(get_wallet_service)) -> list[TokenOut]:
    return [TokenOut.from_token(token) for token in service.get_tokens()]


@router.get("/token", response_model=TokenOut, response_model_exclude_none=True)
def get_token(
    address: str = Query(..., description="Token contract address"),
    service: WalletService = Depends(get_wallet_service),
) -> TokenOut:
    return TokenOut.from_token(service.get_token(parse_address(address)))


@router.get("/next-nonce")
def get_next_nonce(
    address: str = Query(...),
    service: WalletService = Depends(get_wallet_service),
) -> str:
    return str(service.get_next_nonce(parse_address(address)))


@router.get("/mempool-recommended-fees", response_model=RecommendedFeesOut | None)
def get_mempool_recommended_fees(
    service: WalletService = Depends(get_wallet_service),
) -> RecommendedFeesOut | None:
    fees = service.get_recommended_fees()
    return RecommendedFeesOut.from_fees(fees) if fees is not None else None


@router.post("/submit-tx", response_model=MempoolResultOut, response_model_exclude_none=True)
def submit_transaction(
    payload: TxSubmitIn,
    service: WalletService = Depends(get_wallet_service),
) -> MempoolResultOut:
    LOGGER.debug("api.wallet.submit_tx", extra={"size": len(payload.hex_data)})
    return MempoolResultOut.from_result(service.submit_transaction(payload.hex_data))


__all__ = ["router", "get_wallet_service"]
